"""Application configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow extra env vars without error
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_prefix: str = Field(default="/api", description="API prefix")
    cors_allow_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed to call the API (the dashboard is served separately)",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./sleep_log.db",
        description="Async SQLAlchemy database URL",
    )
    database_create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup instead of requiring Alembic migrations",
    )

    # Statistics
    stats_lookback_days: int = Field(
        default=7,
        ge=1,
        description="Trailing window (days) used for daily sleep statistics",
    )

    # Advice provider (Gemini)
    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the Gemini text generation API",
    )
    advice_model: str = Field(default="gemini-2.0-flash", description="Gemini model name")
    advice_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API",
    )
    advice_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for a single advice request (seconds)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )


# Global settings instance
settings = Settings()
