"""Locality notification dispatch for approved incidents."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.errors import EmailSendError
from app.services.backend_client import IncidentDirectory, IncidentRecord, Recipient
from app.services.email_client import EmailSender


logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_templates = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


@dataclass
class NotificationOutcome:
    email: str
    success: bool
    error: str | None = None


@dataclass
class DispatchSummary:
    """Aggregated result of one dispatch run."""

    locality: str
    matched: int = 0
    outcomes: list[NotificationOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def successful(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    @property
    def failures(self) -> list[NotificationOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def message(self) -> str:
        if self.matched == 0:
            return "No users found in locality"
        return f"Email sending attempted for {self.matched} users in {self.locality}"

    def to_response(self) -> dict[str, Any]:
        """Render the JSON shape returned by the notify-locality endpoint."""

        results: dict[str, Any] = {
            "successful": self.successful,
            "failed": self.failed,
        }
        if self.failures:
            results["details"] = [{"email": o.email, "error": o.error} for o in self.failures]
        return {"success": True, "message": self.message, "results": results}


def render_subject(incident: IncidentRecord) -> str:
    return f"Alert: New Incident in {incident.locality}"


def render_body(incident: IncidentRecord, recipient_name: str | None) -> str:
    template = _templates.get_template("emails/incident_alert.html")
    return template.render(incident=incident, recipient_name=recipient_name)


class NotificationService:
    """Notify every profile sharing an approved incident's locality."""

    def __init__(self, directory: IncidentDirectory, mailer: EmailSender) -> None:
        self.directory = directory
        self.mailer = mailer

    def dispatch(self, incident_id: str) -> DispatchSummary:
        """
        Send the locality alert for one incident.

        The incident is re-read and must be approved at this moment. Each
        recipient is attempted independently; a failed send is recorded in
        the summary and never aborts the loop. Calling this twice sends
        twice.

        Raises:
            IncidentNotFoundError: incident missing or not approved
            DirectoryReadError: the locality profile query failed
            IncidentStoreReadError: the incident re-fetch query failed
        """
        logger.info("Received request to notify for incident: %s", incident_id)

        incident = self.directory.get_approved_incident(incident_id)
        logger.info("Found incident %r in locality %r", incident.title, incident.locality)

        recipients = self.directory.list_locality_recipients(incident.locality)
        summary = DispatchSummary(locality=incident.locality, matched=len(recipients))
        logger.info("Found %d users in locality %s", len(recipients), incident.locality)

        if not recipients:
            return summary

        subject = render_subject(incident)
        for recipient in recipients:
            if not recipient.email:
                logger.info("Skipping user with no email")
                continue
            summary.outcomes.append(self._send_one(incident, recipient, subject))

        logger.info(
            "Email sending complete | incident=%s | successes=%d | errors=%d",
            incident_id,
            summary.successful,
            summary.failed,
        )
        if summary.failures:
            logger.warning(
                "Email errors: %s",
                [(o.email, o.error) for o in summary.failures],
            )
        return summary

    def _send_one(self, incident: IncidentRecord, recipient: Recipient, subject: str) -> NotificationOutcome:
        email = recipient.email or ""
        try:
            logger.debug("Attempting to send email to %s", email)
            result = self.mailer.send(
                to=email,
                subject=subject,
                html=render_body(incident, recipient.name),
            )
        except EmailSendError as exc:
            logger.error("Failed to send email to %s: %s", email, exc)
            if "domain" in str(exc).lower():
                logger.error(
                    "DOMAIN VERIFICATION ISSUE: verify the sending domain with the email provider "
                    "or use a verified address for testing"
                )
            return NotificationOutcome(email=email, success=False, error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected error sending email to %s", email)
            return NotificationOutcome(email=email, success=False, error=str(exc))

        logger.info("Email sent successfully to %s | id=%s", email, (result or {}).get("id"))
        return NotificationOutcome(email=email, success=True)
