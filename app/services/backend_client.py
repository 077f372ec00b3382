"""Read-side handle on the profile directory and incident store.

The dispatcher receives one of these explicitly instead of reaching for a
module-level session, so tests can hand it an in-memory fake with the same
two methods.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import DirectoryReadError, IncidentNotFoundError, IncidentStoreReadError
from app.models.database_models import Incident, Profile


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncidentRecord:
    """Detached snapshot of an incident row."""

    id: str
    title: str
    description: str
    location: str
    locality: str
    image_url: str | None
    status: str

    @classmethod
    def from_model(cls, incident: Incident) -> "IncidentRecord":
        return cls(
            id=incident.id,
            title=incident.title,
            description=incident.description,
            location=incident.location,
            locality=incident.locality,
            image_url=incident.image_url,
            status=incident.status,
        )


@dataclass(frozen=True)
class Recipient:
    email: str | None
    name: str | None


class IncidentDirectory(Protocol):
    def get_approved_incident(self, incident_id: str) -> IncidentRecord: ...

    def list_locality_recipients(self, locality: str) -> list[Recipient]: ...


class BackendClient:
    """SQLAlchemy-backed implementation of :class:`IncidentDirectory`."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get_approved_incident(self, incident_id: str) -> IncidentRecord:
        """
        Re-fetch an incident, requiring it to be approved right now.

        Raises:
            IncidentNotFoundError: unknown id or status other than approved
            IncidentStoreReadError: the incident query failed
        """
        try:
            with self._session_factory() as db:
                incident = db.execute(
                    select(Incident).where(
                        Incident.id == incident_id,
                        Incident.status == "approved",
                    )
                ).scalar_one_or_none()
                record = IncidentRecord.from_model(incident) if incident is not None else None
        except SQLAlchemyError as exc:
            logger.exception("Incident store query failed | incident=%s", incident_id)
            raise IncidentStoreReadError("Error fetching incident") from exc

        if record is None:
            raise IncidentNotFoundError(incident_id, "Incident not found or not approved")
        return record

    def list_locality_recipients(self, locality: str) -> list[Recipient]:
        """
        Return email and display name of every profile in ``locality``.

        Matching is exact on the stored label. Rows without an email are
        returned too; the caller decides whether to skip them.

        Raises:
            DirectoryReadError: the profile query failed
        """
        try:
            with self._session_factory() as db:
                rows = db.execute(
                    select(Profile.email, Profile.name).where(Profile.locality == locality)
                ).all()
        except SQLAlchemyError as exc:
            logger.exception("Profile directory query failed | locality=%s", locality)
            raise DirectoryReadError("Error fetching users in locality") from exc

        return [Recipient(email=row.email, name=row.name) for row in rows]
