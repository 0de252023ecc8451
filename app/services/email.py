"""Outbound email: SMTP delivery of verification codes, log-only when SMTP is not configured."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.mime.text import MIMEText
from typing import TYPE_CHECKING, Protocol

from fastapi import BackgroundTasks

from app.core.logging import redact_email

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Your Whiskers verification code"


class Mailer(Protocol):
    """Email delivery as seen by the session service."""

    def send(self, to_address: str, subject: str, body: str) -> None: ...


def verification_email_body(name: str, code: str, ttl_minutes: int) -> str:
    return (
        f"Hello, {name}!\n\n"
        f"Your verification code is {code}.\n"
        f"It expires in {ttl_minutes} minutes.\n\n"
        "If you did not sign up for Whiskers, ignore this email."
    )


class SmtpMailer:
    """
    Send plain-text email over SMTP (STARTTLS or implicit TLS).

    Delivery failures are logged and swallowed: the caller has already
    answered the request and a lost email can be re-requested by logging in.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return self.settings.smtp_configured

    def _message(self, to_address: str, subject: str, body: str) -> MIMEText:
        s = self.settings
        from_address = s.EMAIL_FROM or s.SMTP_USER or ""
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = f"{s.EMAIL_FROM_NAME} <{from_address}>"
        msg["To"] = to_address
        return msg

    def send(self, to_address: str, subject: str, body: str) -> None:
        if not self.is_configured:
            logger.info(
                "SMTP not configured; email not sent: to=%s subject=%s",
                redact_email(to_address),
                subject,
            )
            return

        s = self.settings
        msg = self._message(to_address, subject, body)
        password = s.SMTP_PASSWORD.get_secret_value() if s.SMTP_PASSWORD else None
        context = ssl.create_default_context()
        try:
            if s.SMTP_USE_TLS:
                with smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC) as server:
                    server.starttls(context=context)
                    if s.SMTP_USER and password:
                        server.login(s.SMTP_USER, password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP_SSL(
                    s.SMTP_HOST, s.SMTP_PORT, context=context, timeout=s.SMTP_TIMEOUT_SEC
                ) as server:
                    if s.SMTP_USER and password:
                        server.login(s.SMTP_USER, password)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Email delivery failed: to=%s error=%s",
                redact_email(to_address),
                type(e).__name__,
            )
            return
        logger.info("Email sent: to=%s subject=%s", redact_email(to_address), subject)


class BackgroundMailer:
    """Defer delivery until after the response has been sent."""

    def __init__(self, background_tasks: BackgroundTasks, mailer: Mailer) -> None:
        self.background_tasks = background_tasks
        self.mailer = mailer

    def send(self, to_address: str, subject: str, body: str) -> None:
        self.background_tasks.add_task(self.mailer.send, to_address, subject, body)
