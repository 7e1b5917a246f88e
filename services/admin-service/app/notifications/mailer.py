"""Outbound email delivery for account confirmation codes."""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from ..config import Settings
from ..domain.errors import DeliveryError

logger = logging.getLogger(__name__)

CONFIRM_SUBJECT = "Confirm Account"


def confirm_account_body(otp: str) -> str:
    return f"<p>Please Confirm your Account.</p><p>OTP: {otp}</p>"


def login_account_body(otp: str) -> str:
    return f"<p>Please Login your Account.</p><p>OTP: {otp}</p>"


class NotificationSender(Protocol):
    def send(self, sender: str, recipient: str, subject: str, html_body: str) -> None: ...


class SmtpMailer:
    """Deliver HTML email through an SMTP relay."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )

    def send(self, sender: str, recipient: str, subject: str, html_body: str) -> None:
        """Send one message, raising :class:`DeliveryError` on any transport failure."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = recipient
        msg.attach(MIMEText(html_body, "html"))

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("email delivery to %s failed: %s", recipient, exc)
            raise DeliveryError(str(exc)) from exc
        logger.info("email '%s' delivered to %s", subject, recipient)
