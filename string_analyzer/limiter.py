import logging
from typing import Any

from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import settings

logger = logging.getLogger("string_analyzer.limiter")


def default_limit() -> str:
    return f"{settings.RATE_LIMIT} per {settings.RATE_LIMIT_WINDOW} seconds"


def create_limiter() -> Limiter:
    try:
        return Limiter(
            key_func=get_remote_address,
            default_limits=[default_limit()],
            enabled=settings.RATE_LIMIT_ENABLED,
        )
    except Exception:
        logger.exception("Failed to create slowapi Limiter")
        raise


limiter = create_limiter()


def get_middleware() -> Any:
    return SlowAPIMiddleware
