"""
Application settings for Pitcrew.

Values come from the environment (prefix ``PITCREW_``) or a local ``.env`` file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PITCREW_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "Pitcrew"
    debug: bool = False

    # Persistence: Firestore when enabled and configured, SQL otherwise
    database_url: str = "sqlite+aiosqlite:///./pitcrew.db"
    use_firestore: bool = False
    firebase_credentials: str | None = None  # Path to a service account key
    firebase_project_id: str | None = None

    auth_enabled: bool = False

    # Background writes
    redis_url: str = "redis://localhost:6379/0"
    write_backend: Literal["inline", "queue"] = "inline"

    # Timeline interaction
    suppression_window_seconds: float = 1.0
    suppression_scope: Literal["record", "global"] = "record"
    refresh_interval_seconds: float = 30.0  # 0 disables polling
    session_idle_timeout_seconds: float = 600.0  # 0 disables expiry

    # Logging
    log_level: str | None = None
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
