"""Domain exceptions raised by the service layer."""
from __future__ import annotations


class IncidentNotFoundError(LookupError):
    """Incident does not exist, or is not in the state the caller requires."""

    def __init__(self, incident_id: str, message: str = "Incident not found") -> None:
        super().__init__(f"{message}: {incident_id}")
        self.incident_id = incident_id
        self.message = message


class ProfileNotFoundError(LookupError):
    def __init__(self, profile_id: str) -> None:
        super().__init__(f"Profile not found: {profile_id}")
        self.profile_id = profile_id


class BackendReadError(RuntimeError):
    """A read from the incident store or profile directory failed."""


class IncidentStoreReadError(BackendReadError):
    """The incident re-fetch query failed."""


class DirectoryReadError(BackendReadError):
    """The profile directory query failed."""


class EmailSendError(RuntimeError):
    """A single email could not be delivered to the provider."""

    def __init__(self, recipient: str, message: str) -> None:
        super().__init__(message)
        self.recipient = recipient


class InvalidStatusTransitionError(ValueError):
    def __init__(self, incident_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Incident {incident_id} is {current}; cannot change status to {requested}"
        )
        self.incident_id = incident_id
        self.current = current
        self.requested = requested
