"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest
from fastapi.testclient import TestClient

_TMP_DIR = Path(tempfile.mkdtemp(prefix="incident-snapper-tests-"))

os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["LOG_DIR"] = str(_TMP_DIR / "logs")
os.environ["RESEND_API_KEY"] = os.environ.get("RESEND_API_KEY") or "re_test_key"
os.environ["NOTIFICATIONS_ENABLED"] = "false"

from app.logging_config import configure_logging

configure_logging()

from app.database import Base, SessionLocal, engine
from app.errors import EmailSendError
from app.main import app
from app.models.database_models import Incident, Profile

Base.metadata.create_all(engine)


class FakeMailer:
    """Records every send; addresses in ``fail_for`` raise EmailSendError."""

    def __init__(self, fail_for: dict[str, str] | None = None) -> None:
        self.fail_for = fail_for or {}
        self.sent: list[dict[str, str]] = []

    def send(self, *, to: str, subject: str, html: str) -> dict[str, Any]:
        if to in self.fail_for:
            raise EmailSendError(to, self.fail_for[to])
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"msg-{len(self.sent)}"}

    @property
    def recipients(self) -> list[str]:
        return [message["to"] for message in self.sent]


class RecordingQueue:
    """Stands in for the notification queue and remembers what was enqueued."""

    def __init__(self) -> None:
        self.enqueued: list[str] = []

    def enqueue(self, incident_id: str) -> None:
        self.enqueued.append(incident_id)


@pytest.fixture(autouse=True)
def clean_database() -> Iterator[None]:
    """Empty every table after each test."""

    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(autouse=True)
def reset_dependency_overrides() -> Iterator[None]:
    yield
    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def test_client() -> TestClient:
    """Provide a FastAPI test client."""

    return TestClient(app)


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def make_profile() -> Callable[..., Profile]:
    """Insert a profile row and return it detached."""

    counter = {"n": 0}

    def _make(
        email: str | None = None,
        locality: str | None = "Riverside",
        name: str | None = None,
        is_admin: bool = False,
        profile_id: str | None = None,
    ) -> Profile:
        counter["n"] += 1
        profile = Profile(
            id=profile_id or f"user-{counter['n']}",
            email=email,
            name=name,
            locality=locality,
            is_admin=is_admin,
        )
        with SessionLocal() as db:
            db.add(profile)
            db.commit()
            db.refresh(profile)
            db.expunge(profile)
        return profile

    return _make


@pytest.fixture
def make_incident(make_profile) -> Callable[..., Incident]:
    """Insert an incident row (creating a reporter if needed)."""

    base_time = datetime(2025, 3, 1, 12, 0, 0)
    counter = {"n": 0}

    def _make(
        locality: str = "Riverside",
        status: str = "approved",
        title: str = "Pothole",
        location: str = "5th & Main",
        description: str = "Large pothole",
        image_url: str | None = None,
        user_id: str | None = None,
        incident_id: str | None = None,
    ) -> Incident:
        counter["n"] += 1
        if user_id is None:
            user_id = make_profile(email=None, locality="Reporters", profile_id=f"reporter-{counter['n']}").id
        incident = Incident(
            title=title,
            description=description,
            location=location,
            locality=locality,
            image_url=image_url,
            status=status,
            user_id=user_id,
            user_name="Reporter",
            created_at=base_time + timedelta(minutes=counter["n"]),
        )
        if incident_id:
            incident.id = incident_id
        with SessionLocal() as db:
            db.add(incident)
            db.commit()
            db.refresh(incident)
            db.expunge(incident)
        return incident

    return _make


@pytest.fixture
def admin(make_profile) -> Profile:
    return make_profile(email="admin@x.com", locality="Downtown", name="Admin", is_admin=True, profile_id="admin-1")


@pytest.fixture
def admin_headers(admin: Profile) -> dict[str, str]:
    """Identity header for requests made as the administrator."""

    return {"X-User-Id": admin.id}


@pytest.fixture
def mailer_factory() -> Callable[..., FakeMailer]:
    return FakeMailer


@pytest.fixture
def recording_queue() -> RecordingQueue:
    return RecordingQueue()
