"""Application configuration and environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process settings loaded from environment variables.

    Library policy (borrowing period, fine rates) is not configured here; it
    lives in the document store and is read through ``SettingsProvider``.
    """

    # Application
    app_name: str = "Library Circulation"
    debug: bool = False
    log_level: str = "INFO"

    # Document store
    store_backend: str = "memory"  # Options: memory, sql
    database_url: str = "sqlite+aiosqlite:///./circulation.db"
    store_max_retries: int = 3
    store_retry_backoff: float = 0.05

    # Requests
    max_request_window_days: int = 15

    model_config = {
        "env_prefix": "CIRCULATION_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
