"""Profile directory operations."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import ProfileNotFoundError
from app.models.database_models import Profile


logger = logging.getLogger(__name__)


class ProfileService:
    """Create, read and edit rows in the profile directory."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, profile_id: str) -> Profile:
        profile = self.db.get(Profile, profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def register(self, profile_id: str, email: str, name: str | None, locality: str) -> Profile:
        """Create the profile row that accompanies a newly registered identity."""

        if self.db.get(Profile, profile_id) is not None:
            raise ValueError(f"Profile already exists: {profile_id}")

        profile = Profile(id=profile_id, email=email, name=name, locality=locality, is_admin=False)
        self.db.add(profile)
        self.db.flush()
        logger.info("Registered profile | id=%s | locality=%s", profile_id, locality)
        return profile

    def update(self, profile_id: str, name: str | None = None, locality: str | None = None) -> Profile:
        """
        Apply a self-service edit.

        Incidents already submitted keep the locality they were filed under.
        """
        profile = self.get(profile_id)
        if name is not None:
            profile.name = name
        if locality is not None:
            profile.locality = locality
        self.db.flush()
        logger.info("Updated profile | id=%s", profile_id)
        return profile

    def list_all(self) -> list[Profile]:
        return list(self.db.scalars(select(Profile).order_by(Profile.created_at.desc())))

    def set_admin(self, profile_id: str, is_admin: bool) -> Profile:
        profile = self.get(profile_id)
        profile.is_admin = is_admin
        self.db.flush()
        logger.info("Admin flag changed | id=%s | is_admin=%s", profile_id, is_admin)
        return profile
