"""FastAPI dependencies shared by the routers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import SessionLocal, get_db
from app.models.database_models import Profile
from app.services.backend_client import BackendClient
from app.services.email_client import ResendEmailClient
from app.services.notification_queue import NotificationEnqueuer
from app.services.notification_service import NotificationService


def build_notification_service() -> NotificationService:
    """Wire a dispatcher against the application database and Resend."""

    return NotificationService(BackendClient(SessionLocal), ResendEmailClient())


def get_notification_service() -> NotificationService:
    return build_notification_service()


def get_notification_queue(request: Request) -> NotificationEnqueuer | None:
    """Return the running queue, or None when notifications are disabled."""

    return getattr(request.app.state, "notification_queue", None)


def get_current_profile(
    db: Annotated[Session, Depends(get_db)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> Profile:
    """Resolve the caller from the ``X-User-Id`` identity header."""

    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    profile = db.get(Profile, x_user_id)
    if profile is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return profile


def require_admin(profile: Annotated[Profile, Depends(get_current_profile)]) -> Profile:
    if not profile.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return profile


CurrentProfile = Annotated[Profile, Depends(get_current_profile)]
AdminProfile = Annotated[Profile, Depends(require_admin)]
