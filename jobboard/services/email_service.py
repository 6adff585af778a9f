"""Transactional email through the Resend HTTP API."""

from __future__ import annotations

import html
import logging
from typing import Protocol

import httpx

from jobboard.config import settings


logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailDeliveryError(RuntimeError):
    pass


class EmailSender(Protocol):
    def send(self, to: str, subject: str, html: str) -> None: ...


class ResendEmailSender:
    def __init__(self, api_key: str, sender: str, timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key:
            logger.warning("Email sending is disabled (RESEND_API_KEY not set); dropped message to %s", to)
            return

        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(RESEND_API_URL, headers=headers, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise EmailDeliveryError(f"Email provider returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"Email provider unreachable: {exc}") from exc
        logger.info("email.sent to=%s subject=%s", to, subject)


def render_otp_email(name: str, otp: str, expires_minutes: int) -> str:
    return (
        f"<p>Hi {html.escape(name)},</p>"
        f"<p>Your password reset code is <strong>{otp}</strong>.</p>"
        f"<p>The code expires in {expires_minutes} minutes. "
        "If you did not request a reset you can ignore this email.</p>"
    )


_sender: EmailSender | None = None


def get_email_sender() -> EmailSender:
    global _sender
    if _sender is None:
        _sender = ResendEmailSender(settings.resend_api_key, settings.email_from, settings.email_timeout)
    return _sender
