"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    resend_api_key: str

    database_url: str = Field(
        default="sqlite:///./data/incidents.db",
        description="SQLAlchemy-compatible database URL.",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)

    debug: bool = Field(default=False)

    resend_api_url: str = Field(default="https://api.resend.com/emails")
    email_sender: str = Field(
        default="Incident Snapper <notifications@reppans.xyz>",
        description="Fixed From identity for locality alerts.",
    )
    email_timeout_seconds: float = Field(default=10.0, gt=0)
    notifications_enabled: bool = Field(
        default=True,
        description="Start the notification worker and enqueue approved incidents.",
    )
    notification_drain_seconds: float = Field(
        default=10.0,
        ge=0,
        description="How long shutdown waits for queued dispatches to finish.",
    )

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("resend_api_key")
    @classmethod
    def validate_resend_api_key(cls, value: str) -> str:
        """Ensure the email provider key is not left as a placeholder."""

        if value.strip().lower() in {"", "change-me", "changeme"}:
            raise ValueError(
                "RESEND_API_KEY is required. Update your .env file with a real key before running the app."
            )
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
