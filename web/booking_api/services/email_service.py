"""Transactional booking emails rendered with Jinja2 and delivered over SMTP."""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from datetime import date, datetime
from decimal import Decimal
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.config import Settings, get_settings
from ..core.exceptions import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


def format_inr(amount: Union[int, float, Decimal, None]) -> str:
    """Group digits the Indian way: 1234567.5 -> ``12,34,567.5``."""
    value = Decimal(str(amount or 0))
    sign = "-" if value < 0 else ""
    integer, _, fraction = f"{abs(value).normalize():f}".partition(".")

    head, tail = integer[:-3], integer[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail]) if groups else tail
    return f"{sign}{grouped}.{fraction}" if fraction else f"{sign}{grouped}"


def _as_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


def long_date(value) -> str:
    d = _as_date(value)
    return f"{d.day} {d:%B} {d.year}"


def short_date(value) -> str:
    d = _as_date(value)
    return f"{d.day}/{d.month}/{d.year}"


def build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["inr"] = format_inr
    env.filters["long_date"] = long_date
    env.filters["short_date"] = short_date
    return env


class EmailService:
    """Booking confirmation and admin notification emails."""

    def __init__(self, settings: Optional[Settings] = None, environment: Optional[Environment] = None):
        self.settings = settings or get_settings()
        self.env = environment or build_environment()

    def render(self, template: str, **context: Any) -> str:
        s = self.settings
        base = {
            "company_name": s.COMPANY_NAME,
            "site_url": s.SITE_URL,
            "support_email": s.SUPPORT_EMAIL,
            "support_phone": s.SUPPORT_PHONE,
            "year": datetime.utcnow().year,
        }
        return self.env.get_template(template).render(**base, **context)

    def _deliver(self, message: MIMEMultipart, recipients: list[str]) -> None:
        s = self.settings
        context = ssl.create_default_context()
        if s.SMTP_SECURE:
            connection = smtplib.SMTP_SSL(s.SMTP_HOST, s.SMTP_PORT, context=context, timeout=30)
        else:
            connection = smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=30)

        with connection as server:
            if not s.SMTP_SECURE:
                server.starttls(context=context)
            if s.SMTP_USER:
                server.login(s.SMTP_USER, s.SMTP_PASS)
            server.sendmail(s.EMAIL_FROM, recipients, message.as_string())

    async def send(self, to: str, subject: str, html: str, cc: Optional[str] = None) -> Dict[str, Any]:
        """Send an HTML email; raises ExternalServiceError on failure."""
        if not self.settings.smtp_configured:
            raise ExternalServiceError("smtp", "Email service not configured")

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.settings.EMAIL_FROM
        message["To"] = to
        if cc:
            message["Cc"] = cc
        message.attach(MIMEText(html, "html", "utf-8"))

        recipients = [to] + ([cc] if cc else [])
        try:
            await asyncio.to_thread(self._deliver, message, recipients)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Email send error to %s: %s", recipients, exc)
            raise ExternalServiceError("smtp", f"Failed to send email: {exc}") from exc

        logger.info("Email '%s' sent to %s", subject, recipients)
        return {"success": True, "recipients": recipients}

    async def send_booking_confirmation(self, booking, tour: Dict[str, Any]) -> Dict[str, Any]:
        html = self.render("booking_confirmation.html", booking=booking, tour=tour)
        return await self.send(
            to=booking.customer_email,
            subject=f"Booking Confirmed - {booking.booking_id} - {booking.tour_name}",
            html=html,
            cc=self.settings.ADMIN_EMAIL or None,
        )

    async def send_admin_notification(self, booking, tour: Dict[str, Any]) -> Dict[str, Any]:
        if not self.settings.ADMIN_EMAIL:
            logger.info("ADMIN_EMAIL not set; skipping admin notification for %s", booking.booking_id)
            return {"success": False, "recipients": []}
        html = self.render("admin_notification.html", booking=booking, tour=tour)
        return await self.send(
            to=self.settings.ADMIN_EMAIL,
            subject=f"New Booking: {booking.booking_id} - {booking.tour_name}",
            html=html,
        )

    async def send_test_email(self, to: Optional[str] = None) -> Dict[str, Any]:
        s = self.settings
        recipient = to or s.ADMIN_EMAIL
        if not recipient:
            raise ValidationError("No recipient given and ADMIN_EMAIL is not set", field="email")
        html = self.render("smtp_test.html", host=s.SMTP_HOST, port=s.SMTP_PORT, user=s.SMTP_USER)
        return await self.send(
            to=recipient,
            subject=f"Test Email - {s.COMPANY_NAME} Booking System",
            html=html,
        )
