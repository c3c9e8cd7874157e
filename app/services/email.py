"""Outbound email over SMTP. Callers only learn whether delivery raised."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

from app.core.config import get_settings

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the SMTP server cannot be reached or rejects the message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def build_message(sender: str, recipient: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = recipient
    msg.set_content(body)
    return msg


def send_email(
    recipient: str,
    subject: str,
    body: str,
    settings: Settings | None = None,
) -> None:
    """Send a plain-text email. Raises EmailDeliveryError on any SMTP or network failure."""
    settings = settings or get_settings()
    msg = build_message(settings.MAIL_USERNAME, recipient, subject, body)
    try:
        with smtplib.SMTP(
            settings.MAIL_HOST,
            settings.MAIL_PORT,
            timeout=settings.MAIL_TIMEOUT_SEC,
        ) as server:
            if settings.MAIL_USE_TLS:
                server.starttls()
            server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD.get_secret_value())
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise EmailDeliveryError(f"Email delivery failed: {type(e).__name__}") from e
    logger.info("Email sent", extra={"subject": subject})
