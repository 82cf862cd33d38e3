from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"extra": "ignore", "env_file": ".env", "env_file_encoding": "utf-8"}

    DATABASE_URL: str = "sqlite:///./strings.db"

    # "sql" persists through SQLAlchemy; "memory" keeps records in-process only.
    STORE_BACKEND: Literal["sql", "memory"] = "sql"

    # Logging configuration used by string_analyzer.logging
    LOG_LEVEL: str = "INFO"
    CONSOLE_LOG_LEVEL: str = "INFO"
    SLOW_QUERY_THRESHOLD_MS: int = 200

    # Rate limiting (slowapi, in-process counters)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT: int = 120
    RATE_LIMIT_WINDOW: int = 60


settings = Settings()
