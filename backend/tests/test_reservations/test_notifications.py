"""Tests for notification composition and the SMTP transport."""

import smtplib
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from app.reservations.config import SmtpConfig
from app.reservations.errors import NotificationError
from app.reservations.notifications import (
    LoggingNotificationDispatcher,
    NotificationIntent,
    SmtpNotificationDispatcher,
    ViewingNotification,
    build_dispatcher,
    format_slot_time,
)


def _notification(intent: NotificationIntent = NotificationIntent.CONFIRMED, **overrides) -> ViewingNotification:
    fields = {
        "intent": intent,
        "recipient_name": "Jana Nováková",
        "recipient_email": "jana@example.com",
        "property_code": "077-NP09999",
        "property_label": "3+kk Vinohradská 12, Praha 2",
        "slot_time": "14/05/2030 09:00",
    }
    fields.update(overrides)
    return ViewingNotification(**fields)


def _smtp_config(**overrides) -> SmtpConfig:
    fields = {
        "host": "smtp.example.com",
        "port": 587,
        "user": "bookings@example.com",
        "password": "secret",
        "sender": "Viewings <bookings@example.com>",
    }
    fields.update(overrides)
    return SmtpConfig(**fields)


class TestFormatSlotTime:
    def test_summer_time(self) -> None:
        assert format_slot_time(datetime(2030, 5, 14, 7, 0), "Europe/Prague", "%d/%m/%Y %H:%M") == "14/05/2030 09:00"

    def test_winter_time(self) -> None:
        assert format_slot_time(datetime(2030, 1, 8, 7, 30), "Europe/Prague", "%d/%m/%Y %H:%M") == "08/01/2030 08:30"

    def test_crosses_midnight(self) -> None:
        assert format_slot_time(datetime(2030, 5, 14, 23, 0), "Europe/Prague", "%d/%m/%Y %H:%M") == "15/05/2030 01:00"


class TestViewingNotification:
    def test_confirmation_text(self) -> None:
        notification = _notification()

        assert notification.subject == "Viewing confirmed: 3+kk Vinohradská 12, Praha 2"
        assert "Dear Jana Nováková" in notification.body
        assert "14/05/2030 09:00" in notification.body
        assert "booked" in notification.body

    def test_cancellation_text(self) -> None:
        notification = _notification(NotificationIntent.CANCELLED)

        assert notification.subject.startswith("Viewing cancelled:")
        assert "cancelled" in notification.body
        assert "14/05/2030 09:00" in notification.body

    def test_html_escapes_values(self) -> None:
        notification = _notification(recipient_name="<script>")

        assert "&lt;script&gt;" in notification.html_body
        assert "<script>" not in notification.html_body


class TestSmtpDispatcher:
    def test_message_headers(self) -> None:
        dispatcher = SmtpNotificationDispatcher(_smtp_config())
        msg = dispatcher.build_message(_notification())

        assert msg["To"] == "jana@example.com"
        assert msg["From"] == "Viewings <bookings@example.com>"
        assert msg["Subject"] == "Viewing confirmed: 3+kk Vinohradská 12, Praha 2"
        assert [part.get_content_type() for part in msg.get_payload()] == ["text/plain", "text/html"]

    @pytest.mark.asyncio(loop_scope="session")
    async def test_sends_over_starttls(self) -> None:
        dispatcher = SmtpNotificationDispatcher(_smtp_config())

        with patch("app.reservations.notifications.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            await dispatcher.dispatch(_notification())

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=10.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bookings@example.com", "secret")
        envelope_from, recipients, _ = server.sendmail.call_args.args
        assert envelope_from == "bookings@example.com"
        assert recipients == ["jana@example.com"]

    @pytest.mark.asyncio(loop_scope="session")
    async def test_skips_login_without_user(self) -> None:
        dispatcher = SmtpNotificationDispatcher(_smtp_config(user="", password="", starttls=False))

        with patch("app.reservations.notifications.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            await dispatcher.dispatch(_notification())

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.sendmail.assert_called_once()

    @pytest.mark.asyncio(loop_scope="session")
    async def test_smtp_failure_raises_notification_error(self) -> None:
        dispatcher = SmtpNotificationDispatcher(_smtp_config())

        with patch("app.reservations.notifications.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
            with pytest.raises(NotificationError):
                await dispatcher.dispatch(_notification())

    @pytest.mark.asyncio(loop_scope="session")
    async def test_connection_failure_raises_notification_error(self) -> None:
        dispatcher = SmtpNotificationDispatcher(_smtp_config())

        with patch(
            "app.reservations.notifications.smtplib.SMTP",
            MagicMock(side_effect=ConnectionRefusedError("refused")),
        ):
            with pytest.raises(NotificationError):
                await dispatcher.dispatch(_notification())


class TestBuildDispatcher:
    def test_without_smtp_only_logs(self) -> None:
        assert isinstance(build_dispatcher(None), LoggingNotificationDispatcher)

    def test_with_smtp(self) -> None:
        dispatcher = build_dispatcher(_smtp_config())
        assert isinstance(dispatcher, SmtpNotificationDispatcher)
        assert dispatcher.config.host == "smtp.example.com"
