"""Incident report submission, listing and review."""
from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.errors import IncidentNotFoundError, InvalidStatusTransitionError
from app.models.database_models import Incident
from app.services.notification_queue import NotificationEnqueuer
from app.services.profile_service import ProfileService


logger = logging.getLogger(__name__)


class IncidentService:
    """Service-layer access to the incident store."""

    def __init__(self, db: Session, notifier: NotificationEnqueuer | None = None) -> None:
        self.db = db
        self.notifier = notifier

    def report_incident(
        self,
        reporter_id: str,
        title: str,
        description: str,
        location: str,
        image_url: str | None = None,
        user_name: str | None = None,
    ) -> Incident:
        """
        Store a new pending incident for ``reporter_id``.

        The locality comes from the reporter's profile as it is right now and
        is not updated if the profile changes later. A blank ``user_name`` is
        resolved from the profile.

        Raises:
            ProfileNotFoundError: reporter has no profile
        """
        reporter = ProfileService(self.db).get(reporter_id)
        if not reporter.locality:
            raise ValueError("Set a locality on your profile before reporting incidents")

        display_name = (user_name or "").strip() or reporter.name or reporter.email

        incident = Incident(
            title=title,
            description=description,
            location=location,
            locality=reporter.locality,
            image_url=image_url,
            status="pending",
            user_id=reporter.id,
            user_name=display_name,
        )
        self.db.add(incident)
        self.db.flush()

        logger.info(
            "Incident reported | id=%s | locality=%s | reporter=%s",
            incident.id,
            incident.locality,
            reporter.id,
        )
        return incident

    def get(self, incident_id: str) -> Incident:
        incident = self.db.get(Incident, incident_id)
        if incident is None:
            raise IncidentNotFoundError(incident_id)
        return incident

    def list_for_user(self, user_id: str) -> list[Incident]:
        stmt = (
            select(Incident)
            .where(Incident.user_id == user_id)
            .order_by(Incident.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def list_approved_in_locality(self, locality: str) -> list[Incident]:
        stmt = (
            select(Incident)
            .where(Incident.locality == locality, Incident.status == "approved")
            .order_by(Incident.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def list_pending(self) -> list[Incident]:
        stmt = (
            select(Incident)
            .where(Incident.status == "pending")
            .order_by(Incident.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def update_status(self, incident_id: str, status: str) -> Incident:
        """
        Approve or reject a pending incident.

        The pending check and the write are a single conditional UPDATE, so
        of two overlapping reviews only one changes the row and only that one
        queues a notification. The change is committed before an approved
        incident is handed to the notification queue. Failing to enqueue is
        logged and leaves the incident approved.

        Raises:
            IncidentNotFoundError: unknown id
            InvalidStatusTransitionError: incident is no longer pending
        """
        if status not in {"approved", "rejected"}:
            raise ValueError(f"Unsupported status: {status}")

        result = self.db.execute(
            update(Incident)
            .where(Incident.id == incident_id, Incident.status == "pending")
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            current = self.db.execute(
                select(Incident.status).where(Incident.id == incident_id)
            ).scalar_one_or_none()
            if current is None:
                raise IncidentNotFoundError(incident_id)
            raise InvalidStatusTransitionError(incident_id, current, status)

        self.db.commit()
        logger.info("Incident status updated | id=%s | status=%s", incident_id, status)

        if status == "approved":
            self._queue_notification(incident_id)
        return self.db.get(Incident, incident_id, populate_existing=True)

    def _queue_notification(self, incident_id: str) -> None:
        if self.notifier is None:
            logger.warning("Notifications disabled; not notifying locality for incident %s", incident_id)
            return
        try:
            self.notifier.enqueue(incident_id)
        except Exception:
            logger.exception("Failed to queue locality notification for incident %s", incident_id)
