"""Unit tests for the locality notification dispatcher."""
from __future__ import annotations

import logging

import pytest

from app.errors import DirectoryReadError, IncidentNotFoundError
from app.services.backend_client import IncidentRecord, Recipient
from app.services.notification_service import NotificationService, render_body, render_subject


RIVERSIDE_POTHOLE = IncidentRecord(
    id="abc",
    title="Pothole",
    description="Large pothole",
    location="5th & Main",
    locality="Riverside",
    image_url=None,
    status="approved",
)


class FakeDirectory:
    """In-memory incident store and profile directory."""

    def __init__(self, incidents=(), profiles=(), fail_profiles: bool = False) -> None:
        self.incidents = {i.id: i for i in incidents}
        self.profiles = list(profiles)
        self.fail_profiles = fail_profiles
        self.profile_queries: list[str] = []

    def get_approved_incident(self, incident_id: str) -> IncidentRecord:
        incident = self.incidents.get(incident_id)
        if incident is None or incident.status != "approved":
            raise IncidentNotFoundError(incident_id, "Incident not found or not approved")
        return incident

    def list_locality_recipients(self, locality: str) -> list[Recipient]:
        self.profile_queries.append(locality)
        if self.fail_profiles:
            raise DirectoryReadError("connection reset")
        return [Recipient(email=email, name=name) for email, name, loc in self.profiles if loc == locality]


def test_riverside_example_sends_two_emails(fake_mailer):
    directory = FakeDirectory(
        incidents=[RIVERSIDE_POTHOLE],
        profiles=[
            ("a@x.com", "Ana", "Riverside"),
            ("b@x.com", "Ben", "Riverside"),
            ("c@x.com", "Cy", "Downtown"),
        ],
    )

    summary = NotificationService(directory, fake_mailer).dispatch("abc")

    assert sorted(fake_mailer.recipients) == ["a@x.com", "b@x.com"]
    assert summary.successful == 2
    assert summary.failed == 0
    assert summary.to_response() == {
        "success": True,
        "message": "Email sending attempted for 2 users in Riverside",
        "results": {"successful": 2, "failed": 0},
    }


@pytest.mark.parametrize("status", ["pending", "rejected"])
def test_unapproved_incident_is_not_found_and_sends_nothing(fake_mailer, status):
    incident = IncidentRecord(**{**RIVERSIDE_POTHOLE.__dict__, "status": status})
    directory = FakeDirectory(incidents=[incident], profiles=[("a@x.com", None, "Riverside")])

    with pytest.raises(IncidentNotFoundError):
        NotificationService(directory, fake_mailer).dispatch("abc")

    assert fake_mailer.sent == []
    assert directory.profile_queries == []


def test_unknown_incident_is_not_found(fake_mailer):
    with pytest.raises(IncidentNotFoundError):
        NotificationService(FakeDirectory(), fake_mailer).dispatch("missing")
    assert fake_mailer.sent == []


def test_no_profiles_in_locality_is_a_success(fake_mailer):
    directory = FakeDirectory(incidents=[RIVERSIDE_POTHOLE], profiles=[("c@x.com", None, "Downtown")])

    summary = NotificationService(directory, fake_mailer).dispatch("abc")

    assert fake_mailer.sent == []
    assert summary.attempted == 0
    assert summary.to_response() == {
        "success": True,
        "message": "No users found in locality",
        "results": {"successful": 0, "failed": 0},
    }


def test_locality_match_is_exact(fake_mailer):
    directory = FakeDirectory(
        incidents=[RIVERSIDE_POTHOLE],
        profiles=[
            ("lower@x.com", None, "riverside"),
            ("space@x.com", None, "Riverside "),
            ("exact@x.com", None, "Riverside"),
        ],
    )

    NotificationService(directory, fake_mailer).dispatch("abc")

    assert fake_mailer.recipients == ["exact@x.com"]


def test_profiles_without_email_are_skipped_not_failed(fake_mailer):
    directory = FakeDirectory(
        incidents=[RIVERSIDE_POTHOLE],
        profiles=[
            ("a@x.com", None, "Riverside"),
            (None, "No Mail", "Riverside"),
            ("", "Blank", "Riverside"),
            ("d@x.com", None, "Riverside"),
        ],
    )

    summary = NotificationService(directory, fake_mailer).dispatch("abc")

    assert fake_mailer.recipients == ["a@x.com", "d@x.com"]
    assert summary.attempted == 2
    assert summary.successful == 2
    assert summary.failed == 0
    # The message still counts every matched profile.
    assert summary.message == "Email sending attempted for 4 users in Riverside"


def test_one_failed_send_does_not_stop_the_rest(mailer_factory):
    mailer = mailer_factory(fail_for={"c@x.com": "The x.com domain is not verified"})
    directory = FakeDirectory(
        incidents=[RIVERSIDE_POTHOLE],
        profiles=[(f"{n}@x.com", None, "Riverside") for n in "abcd"],
    )

    summary = NotificationService(directory, mailer).dispatch("abc")

    assert mailer.recipients == ["a@x.com", "b@x.com", "d@x.com"]
    response = summary.to_response()
    assert response["success"] is True
    assert response["results"] == {
        "successful": 3,
        "failed": 1,
        "details": [{"email": "c@x.com", "error": "The x.com domain is not verified"}],
    }


def test_unexpected_mailer_error_is_recorded_per_recipient():
    class ExplodingMailer:
        def __init__(self) -> None:
            self.calls = 0

        def send(self, *, to, subject, html):
            self.calls += 1
            if to == "a@x.com":
                raise RuntimeError("socket closed")
            return {"id": "ok"}

    mailer = ExplodingMailer()
    directory = FakeDirectory(
        incidents=[RIVERSIDE_POTHOLE],
        profiles=[("a@x.com", None, "Riverside"), ("b@x.com", None, "Riverside")],
    )

    summary = NotificationService(directory, mailer).dispatch("abc")

    assert mailer.calls == 2
    assert summary.successful == 1
    assert summary.failures[0].email == "a@x.com"
    assert summary.failures[0].error == "socket closed"


def test_domain_failure_logs_verification_hint(mailer_factory, caplog):
    mailer = mailer_factory(fail_for={"a@x.com": "You can only send from a verified domain"})
    directory = FakeDirectory(incidents=[RIVERSIDE_POTHOLE], profiles=[("a@x.com", None, "Riverside")])

    with caplog.at_level(logging.ERROR, logger="app.services.notification_service"):
        NotificationService(directory, mailer).dispatch("abc")

    assert any("DOMAIN VERIFICATION ISSUE" in record.getMessage() for record in caplog.records)


def test_directory_failure_aborts_before_sending(fake_mailer):
    directory = FakeDirectory(
        incidents=[RIVERSIDE_POTHOLE],
        profiles=[("a@x.com", None, "Riverside")],
        fail_profiles=True,
    )

    with pytest.raises(DirectoryReadError):
        NotificationService(directory, fake_mailer).dispatch("abc")

    assert fake_mailer.sent == []


def test_dispatching_twice_sends_twice(fake_mailer):
    """No send log exists, so a repeat call emails everyone again."""

    directory = FakeDirectory(
        incidents=[RIVERSIDE_POTHOLE],
        profiles=[("a@x.com", None, "Riverside"), ("b@x.com", None, "Riverside")],
    )
    service = NotificationService(directory, fake_mailer)

    service.dispatch("abc")
    service.dispatch("abc")

    assert sorted(fake_mailer.recipients) == ["a@x.com", "a@x.com", "b@x.com", "b@x.com"]


def test_email_content(fake_mailer):
    incident = IncidentRecord(
        **{**RIVERSIDE_POTHOLE.__dict__, "image_url": "https://cdn.example.com/pothole.jpg"}
    )
    directory = FakeDirectory(incidents=[incident], profiles=[("a@x.com", "Ana", "Riverside")])

    NotificationService(directory, fake_mailer).dispatch("abc")

    message = fake_mailer.sent[0]
    assert message["subject"] == "Alert: New Incident in Riverside"
    assert "Hello Ana," in message["html"]
    assert "<h2>Pothole</h2>" in message["html"]
    assert "5th &amp; Main" in message["html"]
    assert "Large pothole" in message["html"]
    assert 'src="https://cdn.example.com/pothole.jpg"' in message["html"]


def test_body_without_image_or_name():
    html = render_body(RIVERSIDE_POTHOLE, None)

    assert "Hello there," in html
    assert "<img" not in html
    assert render_subject(RIVERSIDE_POTHOLE) == "Alert: New Incident in Riverside"


def test_body_escapes_user_supplied_text():
    incident = IncidentRecord(**{**RIVERSIDE_POTHOLE.__dict__, "title": "<script>alert(1)</script>"})

    html = render_body(incident, "Ana")

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
