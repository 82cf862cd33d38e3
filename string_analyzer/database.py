import logging
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from string_analyzer.config import settings

logger = logging.getLogger("string_analyzer.db")

FALLBACK_DATABASE_URL = "sqlite:///./strings.db"


def _engine_kwargs(url: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"pool_pre_ping": True}
    if make_url(url).drivername.startswith("sqlite"):
        # Sync routes run in a threadpool; a session may cross threads.
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


try:
    engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
except ModuleNotFoundError as e:
    logger.warning(
        "Failed to load DB driver for %s: %s. Falling back to %s",
        settings.DATABASE_URL,
        e,
        FALLBACK_DATABASE_URL,
    )
    engine = create_engine(FALLBACK_DATABASE_URL, **_engine_kwargs(FALLBACK_DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db() -> None:
    """Create tables on startup."""
    from string_analyzer import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized at %s", engine.url.render_as_string(hide_password=True))


def get_db() -> Iterator[Session]:
    """Yield a session that is closed once the caller is done with it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
