import importlib.util
import logging
import time
from logging.config import dictConfig
from typing import Any, Dict

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from starlette.middleware.base import BaseHTTPMiddleware

from string_analyzer.config import settings

COLORLOG_AVAILABLE = importlib.util.find_spec("colorlog") is not None

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"

# Per-component levels under the "string_analyzer" logger. Components not
# listed here inherit LOG_LEVEL.
COMPONENT_LEVELS: Dict[str, str] = {
    "analyzer": LOG_LEVEL,
    "nlp": LOG_LEVEL,
    "services": LOG_LEVEL,
    "store": "INFO",
    "limiter": "INFO",
    "request": "INFO",
    "db": "DEBUG",
}


def _formatters() -> Dict[str, Any]:
    formatters: Dict[str, Any] = {"plain": {"format": LOG_FORMAT}}
    if COLORLOG_AVAILABLE:
        formatters["color"] = {
            "()": "colorlog.ColoredFormatter",
            "format": "%(log_color)s" + LOG_FORMAT,
            "log_colors": {
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        }
    return formatters


def build_logging_config() -> Dict[str, Any]:
    """dictConfig payload: one console handler on the package logger, components propagate to it."""
    loggers: Dict[str, Any] = {
        "uvicorn": {"level": "WARNING"},
        "uvicorn.error": {"level": "WARNING"},
        "uvicorn.access": {"level": "WARNING"},
        # slow queries are reported by string_analyzer.db instead
        "sqlalchemy.engine": {"level": "WARNING"},
        "string_analyzer": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
    }
    for component, level in COMPONENT_LEVELS.items():
        loggers[f"string_analyzer.{component}"] = {"level": level}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _formatters(),
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "color" if COLORLOG_AVAILABLE else "plain",
                "level": settings.CONSOLE_LOG_LEVEL.upper(),
            },
        },
        "loggers": loggers,
        "root": {"level": "WARNING", "handlers": ["console"]},
    }


LOGGING_CONFIG = build_logging_config()


def init_logging() -> None:
    dictConfig(LOGGING_CONFIG)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request; server errors are logged at WARNING."""

    async def dispatch(self, request: Request, call_next):
        logger = logging.getLogger("string_analyzer.request")
        client = request.client.host if request.client else "-"
        start = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %s -> %s (%.2f ms)",
            client,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _one_line(statement: str, limit: int = 300) -> str:
    flat = " ".join(statement.split())
    return flat if len(flat) <= limit else flat[:limit] + "..."


def setup_query_logging(engine: Engine, threshold_ms: int = settings.SLOW_QUERY_THRESHOLD_MS) -> None:
    """Time every statement on ``engine``; those above ``threshold_ms`` are logged as slow."""
    logger = logging.getLogger("string_analyzer.db")

    @event.listens_for(engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        context._query_start_time = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _report(conn, cursor, statement, parameters, context, executemany):
        elapsed_ms = (time.perf_counter() - context._query_start_time) * 1000
        if elapsed_ms > threshold_ms:
            logger.warning("Slow query (%.2f ms > %d ms): %s", elapsed_ms, threshold_ms, _one_line(statement))
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("Query (%.2f ms): %s", elapsed_ms, _one_line(statement))
