"""Central logging configuration for the incident service."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from app.config import get_settings

NOTIFICATION_LOGGERS = (
    "app.services.notification_service",
    "app.services.notification_queue",
    "app.services.email_client",
)

_configured = False


def _default_config(log_dir: Path, level: str) -> dict:
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / "app.log"),
                "encoding": "utf-8",
                "formatter": "standard",
                "level": level,
            },
            # Dispatch outcomes are only surfaced here, admins read this file.
            "notifications": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / "notifications.log"),
                "encoding": "utf-8",
                "formatter": "standard",
                "level": "INFO",
            },
        },
        "loggers": {
            name: {"handlers": ["notifications"], "propagate": True}
            for name in NOTIFICATION_LOGGERS
        },
        "root": {
            "level": level,
            "handlers": ["console", "file"],
        },
    }


def configure_logging() -> None:
    """Configure application logging once per process."""

    global _configured
    if _configured:
        return

    try:
        settings = get_settings()
        log_dir = settings.log_dir
        level = settings.log_level
    except ValidationError:
        # Tests may set RESEND_API_KEY after the first import.
        log_dir = Path("logs")
        level = "INFO"
    log_dir.mkdir(parents=True, exist_ok=True)

    dictConfig(_default_config(log_dir, level))
    logging.getLogger(__name__).debug("Logging configured | level=%s | dir=%s", level, log_dir)
    _configured = True
