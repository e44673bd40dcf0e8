# src/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # Slack Integration
    slack_bot_token: str = ""
    slack_app_token: str = ""
    slash_command: str = "/okr"

    # Storage
    storage_backend: Literal["sqlite", "memory"] = "sqlite"
    database_path: str = "data/okr_notifier.db"
    catalog_path: str = ""  # JSON catalog export loaded at startup

    # Logging & Observability
    log_level: str = "INFO"
    structured_logging: bool = True
    logfire_token: str = ""

    # HTTP API
    api_rate_limit: int = 60  # Requests per minute

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


# Singleton instance - import this in your code
settings = Settings()
