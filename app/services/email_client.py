"""Transactional email delivery through the Resend HTTP API."""
from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from app.config import Settings, get_settings
from app.errors import EmailSendError


logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, *, to: str, subject: str, html: str) -> dict[str, Any]: ...


class ResendEmailClient:
    """Minimal Resend client: one POST per message, no retries."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport

    def send(self, *, to: str, subject: str, html: str) -> dict[str, Any]:
        """
        Send one HTML email from the configured sender.

        Returns:
            dict: provider response body (contains the message ``id``)

        Raises:
            EmailSendError: transport failure or non-2xx provider response
        """
        payload = {
            "from": self.settings.email_sender,
            "to": to,
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {self.settings.resend_api_key}"}

        try:
            with httpx.Client(
                timeout=self.settings.email_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = client.post(self.settings.resend_api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise EmailSendError(to, f"Email provider request failed: {exc}") from exc

        if response.is_error:
            raise EmailSendError(to, _error_message(response))

        logger.debug("Resend accepted message | to=%s | status=%s", to, response.status_code)
        return response.json()


def _error_message(response: httpx.Response) -> str:
    """Pull the provider's error text out of a failed response."""

    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text or response.reason_phrase}"

    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}: {body}"
