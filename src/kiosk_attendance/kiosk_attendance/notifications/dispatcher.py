"""Notification dispatchers.

A dispatcher receives one flat payload per guardian and delivers it out of
band. Delivery errors are raised as ``NotificationError``; the caller decides
whether they matter.
"""
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from ..core.exceptions import NotificationError

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    def dispatch(self, payload: dict) -> None:
        raise NotImplementedError


class LoggingNotificationDispatcher:
    """Writes the payload to the log. Default when no mail server is configured."""

    def dispatch(self, payload: dict) -> None:
        logger.info(
            "Attendance notification -> recipient=%s student=%s status=%s at %s",
            payload.get("recipient_id"),
            payload.get("student_name"),
            payload.get("status"),
            payload.get("timestamp"),
        )


@dataclass
class SmtpSettings:
    host: str
    port: int = 587
    username: str = ""
    password: str = ""
    sender: str = "noreply@example.com"
    use_tls: bool = True
    timeout: int = 10


class SmtpNotificationDispatcher:
    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    @staticmethod
    def _render(payload: dict) -> tuple[str, str]:
        subject = f"[{payload.get('school_name', '')}] {payload['student_name']} {payload['status_ja']} / {payload['status']}"
        body = (
            f"{payload.get('guardian_name') or 'Guardian'},\n\n"
            f"{payload['student_name']}: {payload['status']} ({payload['status_ja']})\n"
            f"{payload['timestamp']} JST\n"
        )
        return subject, body

    def dispatch(self, payload: dict) -> None:
        recipient = payload.get("recipient_email")
        if not recipient:
            raise NotificationError(f"Guardian {payload.get('recipient_id')} has no email address")

        subject, body = self._render(payload)
        msg = EmailMessage()
        msg["From"] = self._settings.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)

        s = self._settings
        try:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as smtp:
                if s.use_tls:
                    smtp.starttls()
                if s.username:
                    smtp.login(s.username, s.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"SMTP delivery to {recipient} failed: {exc}") from exc
