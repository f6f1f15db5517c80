"""Tests for email rendering and delivery."""

import asyncio
import smtplib
from datetime import datetime
from decimal import Decimal

import pytest

from booking_api.core.exceptions import ExternalServiceError, ValidationError
from booking_api.models import Booking
from booking_api.services.email_service import EmailService, format_inr, long_date, short_date


def _booking(**overrides) -> Booking:
    data = dict(
        booking_id="IMT-TRIP-12345678042",
        tour_id="101",
        tour_name="Ladakh Bike Expedition",
        tour_slug="ladakh-bike-expedition",
        customer_name="Asha Rao",
        customer_email="asha@example.com",
        customer_phone="+91 98450 00000",
        departure_date=datetime(2025, 7, 1),
        adults=2,
        children_with_bed=1,
        children_without_bed=0,
        total_price=Decimal("82000.00"),
        base_price=Decimal("64000.00"),
        payment_status="confirmed",
        special_requests="Vegetarian meals",
    )
    data.update(overrides)
    return Booking(**data)


class RecordingEmailService(EmailService):
    """EmailService that keeps messages instead of talking to SMTP"""

    def __init__(self, *args, fail=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.sent = []
        self.fail = fail

    def _deliver(self, message, recipients):
        if self.fail:
            raise smtplib.SMTPServerDisconnected("connection closed")
        self.sent.append((message, recipients))


class TestFormatting:
    @pytest.mark.parametrize(
        "amount, expected",
        [(0, "0"), (999, "999"), (32000, "32,000"), (100000, "1,00,000"),
         (1234567.5, "12,34,567.5"), (Decimal("82000.00"), "82,000"), (-150000, "-1,50,000"), (None, "0")],
    )
    def test_format_inr(self, amount, expected) -> None:
        assert format_inr(amount) == expected

    def test_dates(self) -> None:
        assert long_date(datetime(2025, 5, 15, 10, 30)) == "15 May 2025"
        assert long_date("2025-07-01") == "1 July 2025"
        assert short_date(datetime(2025, 7, 1)) == "1/7/2025"


class TestRendering:
    def test_confirmation_contains_booking_details(self, settings) -> None:
        html = EmailService(settings).render(
            "booking_confirmation.html", booking=_booking(), tour={"duration": "8 Days / 7 Nights"}
        )

        assert "IMT-TRIP-12345678042" in html
        assert "Asha Rao" in html
        assert "1 July 2025" in html
        assert "82,000" in html
        assert "8 Days / 7 Nights" in html
        assert "Vegetarian meals" in html

    def test_user_text_is_escaped(self, settings) -> None:
        html = EmailService(settings).render(
            "booking_confirmation.html",
            booking=_booking(special_requests="<script>alert(1)</script>"),
            tour={},
        )

        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestDelivery:
    def test_confirmation_copies_admin(self, settings) -> None:
        service = RecordingEmailService(settings)

        result = asyncio.run(service.send_booking_confirmation(_booking(), {"duration": "8 Days"}))

        message, recipients = service.sent[0]
        assert recipients == ["asha@example.com", "ops@immersivetrips.in"]
        assert message["Subject"] == "Booking Confirmed - IMT-TRIP-12345678042 - Ladakh Bike Expedition"
        assert message["Cc"] == "ops@immersivetrips.in"
        assert result["success"] is True

    def test_admin_notification_skipped_without_admin_email(self, settings) -> None:
        settings.ADMIN_EMAIL = ""
        service = RecordingEmailService(settings)

        result = asyncio.run(service.send_admin_notification(_booking(), {}))

        assert result["success"] is False
        assert service.sent == []

    def test_unconfigured_smtp(self, settings) -> None:
        settings.SMTP_HOST = ""

        with pytest.raises(ExternalServiceError):
            asyncio.run(RecordingEmailService(settings).send("a@example.com", "Hi", "<p>Hi</p>"))

    def test_smtp_failure_is_external_error(self, settings) -> None:
        with pytest.raises(ExternalServiceError) as exc_info:
            asyncio.run(RecordingEmailService(settings, fail=True).send("a@example.com", "Hi", "<p>Hi</p>"))

        assert exc_info.value.details == {"service": "smtp"}

    def test_test_email_defaults_to_admin(self, settings) -> None:
        service = RecordingEmailService(settings)

        asyncio.run(service.send_test_email())

        assert service.sent[0][1] == ["ops@immersivetrips.in"]

    def test_test_email_needs_a_recipient(self, settings) -> None:
        settings.ADMIN_EMAIL = ""

        with pytest.raises(ValidationError):
            asyncio.run(RecordingEmailService(settings).send_test_email())


class FakeSMTP:
    """Stands in for ``smtplib.SMTP``/``SMTP_SSL`` and records the session."""

    connections = []
    fail_on = None

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.calls = []
        self.closed = False
        FakeSMTP.connections.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def _step(self, name):
        self.calls.append(name)
        if name == self.fail_on:
            raise smtplib.SMTPNotSupportedError("STARTTLS extension not supported by server.")

    def starttls(self, context=None):
        self._step("starttls")

    def login(self, user, password):
        self._step("login")

    def sendmail(self, sender, recipients, body):
        self._step("sendmail")


class FakeSMTPSSL(FakeSMTP):
    pass


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.connections = []
    FakeSMTP.fail_on = None
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTPSSL)
    return FakeSMTP


class TestSMTPSession:
    def test_plain_connection_upgrades_with_starttls(self, settings, smtp) -> None:
        settings.SMTP_SECURE = False
        settings.SMTP_USER = "bookings"

        asyncio.run(EmailService(settings).send("a@example.com", "Hi", "<p>Hi</p>"))

        (connection,) = smtp.connections
        assert type(connection) is FakeSMTP
        assert connection.calls == ["starttls", "login", "sendmail"]
        assert connection.closed is True

    def test_secure_connection_skips_starttls(self, settings, smtp) -> None:
        settings.SMTP_SECURE = True
        settings.SMTP_USER = ""

        asyncio.run(EmailService(settings).send("a@example.com", "Hi", "<p>Hi</p>"))

        (connection,) = smtp.connections
        assert type(connection) is FakeSMTPSSL
        assert connection.calls == ["sendmail"]
        assert connection.closed is True

    @pytest.mark.parametrize("step", ["starttls", "sendmail"])
    def test_connection_is_closed_when_a_step_fails(self, settings, smtp, step) -> None:
        settings.SMTP_SECURE = False
        smtp.fail_on = step

        with pytest.raises(ExternalServiceError):
            asyncio.run(EmailService(settings).send("a@example.com", "Hi", "<p>Hi</p>"))

        (connection,) = smtp.connections
        assert connection.calls[-1] == step
        assert connection.closed is True
