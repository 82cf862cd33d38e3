import json
import logging
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from string_analyzer import __version__
from string_analyzer import limiter as limiter_module
from string_analyzer.config import settings
from string_analyzer.database import engine, init_db
from string_analyzer.logging import RequestLoggingMiddleware, init_logging, setup_query_logging
from string_analyzer.routes import router

logger = logging.getLogger("string_analyzer")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.STORE_BACKEND == "sql":
        init_db()
    else:
        logger.info("Using in-memory store; records will not survive a restart")
    yield


app = FastAPI(
    title="String Analyzer Service",
    version=__version__,
    description=(
        "Analyze strings into reproducible properties and retrieve them later.\n\n"
        "Features:\n"
        "- SHA-256 content identifiers with duplicate detection\n"
        "- Filtering by palindrome, length, word count and character\n"
        "- Natural language filters compiled into the same criteria"
    ),
    lifespan=lifespan,
)

# Initialize logging and middleware
init_logging()
app.add_middleware(RequestLoggingMiddleware)
setup_query_logging(engine)

app.state.limiter = limiter_module.limiter
app.add_exception_handler(RateLimitExceeded, cast(Any, _rate_limit_exceeded_handler))
app.add_middleware(cast(Any, limiter_module.get_middleware()))

app.include_router(router)


def _utf8_safe(value: Any) -> bool:
    try:
        json.dumps(value, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError):
        return False
    return True


def _jsonable_errors(errors: Any) -> Any:
    """Drop the non-serializable ``ctx`` entries pydantic attaches to some errors.

    The offending ``input`` is echoed back only when it survives UTF-8 encoding.
    """
    details = jsonable_encoder(
        [{k: v for k, v in err.items() if k in {"type", "loc", "msg", "input"}} for err in errors]
    )
    for err in details:
        if "input" in err and not _utf8_safe(err["input"]):
            del err["input"]
    return details


# -------------------------------
# Unified error response handlers
# -------------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "HTTPException: %s %s -> %s | detail=%s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.detail,
    )
    body = {"error": exc.detail if isinstance(exc.detail, str) else "Error"}
    if isinstance(exc.detail, dict):
        body = {
            "error": exc.detail.get("error") or "Error",
            "details": exc.detail.get("details"),
        }
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    is_post_strings = request.method == "POST" and request.url.path.endswith("/strings")

    status = 400
    if is_post_strings:
        # Missing field or malformed JSON -> 400, wrong type -> 422
        missing = any(err.get("type") in {"missing", "json_invalid"} for err in errors)
        status = 400 if missing else 422

    logger.warning(
        "ValidationError: %s %s -> %s | errors=%s",
        request.method,
        request.url.path,
        status,
        errors,
    )
    return JSONResponse(
        status_code=status,
        content={"error": "Validation failed", "details": _jsonable_errors(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception: %s %s",
        request.method,
        request.url.path,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

