"""Notification dispatcher boundary.

The engine hands a fully resolved ``ViewingNotification`` to a dispatcher
after a transition commits. Dispatchers raise ``NotificationError`` on
failure; the engine logs it and never lets it touch reservation state.
"""

import asyncio
import enum
import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Protocol
from zoneinfo import ZoneInfo

from app.reservations.config import SmtpConfig
from app.reservations.errors import NotificationError

logger = logging.getLogger(__name__)


class NotificationIntent(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


TEMPLATES = {
    NotificationIntent.CONFIRMED: {
        "subject": "Viewing confirmed: {property_label}",
        "body": (
            "Dear {recipient_name},\n\n"
            "Your property viewing has been booked.\n\n"
            "- Property: {property_label}\n"
            "- Date and time: {slot_time}\n\n"
            "If you have any questions before then, just reply to this email.\n"
            "We look forward to seeing you!"
        ),
    },
    NotificationIntent.CANCELLED: {
        "subject": "Viewing cancelled: {property_label}",
        "body": (
            "Dear {recipient_name},\n\n"
            "Your property viewing has been cancelled.\n\n"
            "- Property: {property_label}\n"
            "- Original time: {slot_time}\n\n"
            "To pick another time, please use your booking link again or contact your agent."
        ),
    },
}


def format_slot_time(start_at: datetime, tz_name: str, fmt: str) -> str:
    """Render a stored (naive UTC) slot start in the viewing timezone."""
    if start_at.tzinfo is None:
        start_at = start_at.replace(tzinfo=timezone.utc)
    return start_at.astimezone(ZoneInfo(tz_name)).strftime(fmt)


@dataclass(frozen=True)
class ViewingNotification:
    """Everything a transport needs to tell an applicant about a transition."""

    intent: NotificationIntent
    recipient_name: str
    recipient_email: str
    property_code: str
    property_label: str
    slot_time: str

    def _vars(self) -> dict[str, str]:
        return {
            "recipient_name": self.recipient_name,
            "property_label": self.property_label,
            "slot_time": self.slot_time,
        }

    @property
    def subject(self) -> str:
        return TEMPLATES[self.intent]["subject"].format(**self._vars())

    @property
    def body(self) -> str:
        return TEMPLATES[self.intent]["body"].format(**self._vars())

    @property
    def html_body(self) -> str:
        safe = {key: escape(value) for key, value in self._vars().items()}
        text = TEMPLATES[self.intent]["body"].format(**safe)
        paragraphs = "".join(f"<p>{chunk.replace(chr(10), '<br/>')}</p>" for chunk in text.split("\n\n"))
        return f"<div style='font-family:sans-serif'>{paragraphs}</div>"


class NotificationDispatcher(Protocol):
    async def dispatch(self, notification: ViewingNotification) -> None: ...


class LoggingNotificationDispatcher:
    """Simulated transport: records the composed message in the log only."""

    async def dispatch(self, notification: ViewingNotification) -> None:
        logger.info(
            "Notification [%s] (simulated) to %s <%s>: %s",
            notification.intent.value,
            notification.recipient_name,
            notification.recipient_email,
            notification.subject,
        )


class SmtpNotificationDispatcher:
    """Deliver notifications over SMTP with STARTTLS."""

    def __init__(self, config: SmtpConfig) -> None:
        self.config = config

    def build_message(self, notification: ViewingNotification) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = notification.subject
        msg["From"] = self.config.sender
        msg["To"] = notification.recipient_email
        msg.attach(MIMEText(notification.body, "plain", "utf-8"))
        msg.attach(MIMEText(notification.html_body, "html", "utf-8"))
        return msg

    def _send(self, msg: MIMEMultipart, recipient: str) -> None:
        with smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout) as server:
            if self.config.starttls:
                server.starttls()
            if self.config.user:
                server.login(self.config.user, self.config.password)
            # Envelope sender is the SMTP login so SPF/DKIM align.
            server.sendmail(self.config.user or self.config.sender, [recipient], msg.as_string())

    async def dispatch(self, notification: ViewingNotification) -> None:
        msg = self.build_message(notification)
        try:
            await asyncio.to_thread(self._send, msg, notification.recipient_email)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(
                f"SMTP delivery to {notification.recipient_email} failed: {exc}"
            ) from exc
        logger.info(
            "Notification [%s] sent to %s: %s",
            notification.intent.value,
            notification.recipient_email,
            notification.subject,
        )


def build_dispatcher(smtp: SmtpConfig | None) -> NotificationDispatcher:
    if smtp is None:
        logger.debug("SMTP not configured; notifications will only be logged")
        return LoggingNotificationDispatcher()
    return SmtpNotificationDispatcher(smtp)
