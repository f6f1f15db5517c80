from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService, NotFoundError, ValidationError, BusinessLogicError, ExternalServiceError
from ..core.config import get_settings
from ..infrastructure.repositories import BookingRepository, BookingFilters
from ..models import Booking, BOOKING_STATUSES, PAYMENT_STATUSES, PAYMENT_METHODS
from .email_service import EmailService
from .schedule_resolver import TourAvailability
from .wordpress_service import WordPressService

logger = logging.getLogger(__name__)

EXPORT_FIELDS = [
    ("bookingId", "booking_id"),
    ("tourName", "tour_name"),
    ("customerName", "customer_name"),
    ("customerEmail", "customer_email"),
    ("customerPhone", "customer_phone"),
    ("departureDate", "departure_date"),
    ("adults", "adults"),
    ("childrenWithBed", "children_with_bed"),
    ("childrenWithoutBed", "children_without_bed"),
    ("totalPrice", "total_price"),
    ("paymentStatus", "payment_status"),
    ("bookingStatus", "booking_status"),
    ("bookingDate", "booking_date"),
]
EXPORT_LIMIT = 10000


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def check_availability(availability: TourAvailability, departure_date: datetime, guests: int) -> Optional[str]:
    """Return why *guests* cannot travel on *departure_date*, or ``None`` if they can."""
    day = departure_date.date().isoformat()
    departure = availability.find_departure(day)
    if departure is None:
        return f"Departure on {day} is not available for booking"
    if guests < availability.min_travelers:
        return f"At least {availability.min_travelers} travelers are required"
    if guests > availability.max_travelers:
        return f"At most {availability.max_travelers} travelers can be booked"
    # Schedules without any seat counts leave capacity unmanaged
    seats_tracked = departure.available_seats > 0 or departure.total_seats > 0
    if seats_tracked and guests > departure.available_seats:
        return f"Only {departure.available_seats} seats left on {day}"
    return None


class BookingService(BaseService):
    """Booking lifecycle: creation against live tour data, admin updates, reporting"""

    def __init__(
        self,
        session: AsyncSession,
        repository: Optional[BookingRepository] = None,
        wordpress: Optional[WordPressService] = None,
        email: Optional[EmailService] = None,
        settings=None,
    ):
        super().__init__(session)
        self.settings = settings or get_settings()
        self.repository = repository or BookingRepository(session)
        self.wordpress = wordpress or WordPressService(self.settings)
        self.email = email or EmailService(self.settings)

    # ------------------------------------------------------------------
    #  Creation
    # ------------------------------------------------------------------
    def _check_payment(self, payload: Dict[str, Any]) -> None:
        if payload.get("payment_status") != "confirmed":
            return

        details = payload.get("payment_details") or {}
        test_mode = details.get("testMode") is True and self.settings.ENABLE_TEST_MODE
        if test_mode:
            return

        payment_id = payload.get("payment_id")
        if not payment_id or payment_id.startswith("test_"):
            logger.error("Invalid payment: no valid paymentId provided")
            raise ValidationError(
                "Payment verification required. Invalid or missing payment ID.", field="paymentId"
            )
        if not details:
            logger.error("Invalid payment: no payment details provided")
            raise ValidationError(
                "Payment verification required. Missing payment details.", field="paymentDetails"
            )

    async def create_booking(self, payload: Dict[str, Any]) -> Booking:
        """Create a booking for a WordPress tour"""
        tour = await self.wordpress.get_tour(payload["tour_id"])
        self._check_payment(payload)

        payment_confirmed = payload.get("payment_status") == "confirmed"
        departure_date = _naive_utc(payload["departure_date"])
        adults = payload.get("adults") or 1
        children_with_bed = payload.get("children_with_bed") or 0
        children_without_bed = payload.get("children_without_bed") or 0
        admin_notes = None

        # Seats are sold per calendar day as the customer picked it, before UTC conversion
        problem = check_availability(
            tour["availability"], payload["departure_date"], adults + children_with_bed + children_without_bed
        )
        if problem and not payment_confirmed:
            raise BusinessLogicError(problem, rule="departure_availability")
        if problem:
            # Money has already been taken; keep the booking and flag it for the team
            logger.warning("Paid booking for tour %s failed availability check: %s", tour["id"], problem)
            admin_notes = f"Availability check failed: {problem}"

        payment_method = payload.get("payment_method") or "other"
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"Invalid payment method '{payment_method}'", field="paymentMethod")

        booking_data = {
            "tour_id": tour["id"],
            "tour_name": tour["name"],
            "tour_slug": tour.get("slug") or payload.get("tour_slug") or "",
            "customer_name": payload["customer_name"],
            "customer_email": payload["customer_email"],
            "customer_phone": payload["customer_phone"],
            "departure_date": departure_date,
            "adults": adults,
            "children_with_bed": children_with_bed,
            "children_without_bed": children_without_bed,
            "room_configuration": payload.get("room_configuration") or {},
            "addons": payload.get("addons") or [],
            "base_price": payload.get("base_price") or 0,
            "children_price": payload.get("children_price") or 0,
            "room_price": payload.get("room_price") or 0,
            "addons_price": payload.get("addons_price") or 0,
            "total_price": payload["total_price"],
            "special_requests": payload.get("special_requests"),
            "admin_notes": admin_notes,
            "payment_id": payload.get("payment_id"),
            "payment_method": payment_method,
            "payment_details": payload.get("payment_details"),
            "payment_status": payload.get("payment_status") or "pending",
            "booking_status": "confirmed" if payment_confirmed else "pending",
        }
        if payment_confirmed:
            booking_data["confirmed_at"] = datetime.utcnow()

        booking = await self.repository.create(obj_in=booking_data)
        await self.session.commit()
        logger.info(
            "Booking saved: %s (payment=%s, status=%s)",
            booking.booking_id, booking.payment_status, booking.booking_status,
        )

        if payment_confirmed:
            await self._after_confirmed(booking, tour, payload["departure_date"].date().isoformat())
        else:
            logger.info("Skipping email and seat update - payment status is %s", booking.payment_status)

        return booking

    async def _after_confirmed(self, booking: Booking, tour: Dict[str, Any], day: str) -> None:
        """Side effects of a paid booking; none of them may fail the booking."""
        try:
            await self.email.send_booking_confirmation(booking, tour)
            booking.confirmation_email_sent = True
            booking.confirmation_email_sent_at = datetime.utcnow()
            await self.session.commit()
        except ExternalServiceError as exc:
            logger.error("Failed to send confirmation email for %s: %s", booking.booking_id, exc.message)

        try:
            await self.email.send_admin_notification(booking, tour)
        except ExternalServiceError as exc:
            logger.error("Failed to send admin notification for %s: %s", booking.booking_id, exc.message)

        try:
            await self.wordpress.update_seats(
                tour_id=booking.tour_id,
                departure_date=day,
                guests=booking.total_guests,
            )
            logger.info("Seat availability updated in WordPress for %s", booking.booking_id)
        except httpx.HTTPError as exc:
            logger.warning("Failed to update seat availability in WordPress: %s", exc)

    # ------------------------------------------------------------------
    #  Queries
    # ------------------------------------------------------------------
    async def get_booking(self, reference: str) -> Booking:
        booking = await self.repository.get_by_reference(reference)
        if not booking:
            raise NotFoundError("Booking", reference)
        return booking

    async def list_bookings(
        self,
        filters: Optional[BookingFilters] = None,
        *,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "bookingDate",
        sort_order: str = "desc"
    ) -> Dict[str, Any]:
        bookings, total = await self.repository.find(
            filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
        )
        return {
            "bookings": bookings,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": -(-total // limit) if limit else 0,
            },
        }

    # ------------------------------------------------------------------
    #  Updates
    # ------------------------------------------------------------------
    async def update_booking(
        self,
        reference: str,
        *,
        booking_status: Optional[str] = None,
        payment_status: Optional[str] = None,
        admin_notes: Optional[str] = None,
        notes_provided: bool = False
    ) -> Booking:
        """Update statuses/notes, stamping confirmation and cancellation times once"""
        booking = await self.get_booking(reference)
        update_data: Dict[str, Any] = {}

        if booking_status:
            if booking_status not in BOOKING_STATUSES:
                raise ValidationError(f"Invalid booking status '{booking_status}'", field="bookingStatus")
            update_data["booking_status"] = booking_status
            if booking_status == "confirmed" and not booking.confirmed_at:
                update_data["confirmed_at"] = datetime.utcnow()
            elif booking_status == "cancelled" and not booking.cancelled_at:
                update_data["cancelled_at"] = datetime.utcnow()

        if payment_status:
            if payment_status not in PAYMENT_STATUSES:
                raise ValidationError(f"Invalid payment status '{payment_status}'", field="paymentStatus")
            update_data["payment_status"] = payment_status

        if notes_provided or admin_notes is not None:
            update_data["admin_notes"] = admin_notes

        if update_data:
            booking = await self.repository.apply(booking, update_data)
            await self.session.commit()
        return booking

    async def cancel_booking(self, reference: str) -> Booking:
        """Soft delete: the row is kept with status ``cancelled``"""
        return await self.update_booking(reference, booking_status="cancelled")

    # ------------------------------------------------------------------
    #  Reporting
    # ------------------------------------------------------------------
    async def booking_stats(self) -> Dict[str, Any]:
        revenue = await self.repository.revenue_stats()
        return {
            "total_bookings": await self.repository.count(),
            "total_revenue": revenue["total"],
            "confirmed_bookings": await self.repository.count(BookingFilters(booking_status="confirmed")),
            "pending_bookings": await self.repository.count(BookingFilters(booking_status="pending")),
            "cancelled_bookings": await self.repository.count(BookingFilters(booking_status="cancelled")),
        }

    async def dashboard_stats(self) -> Dict[str, Any]:
        thirty_days_ago = datetime.utcnow() - timedelta(days=30)
        revenue = await self.repository.revenue_stats()
        return {
            "total_bookings": await self.repository.count(),
            "confirmed_bookings": await self.repository.count(BookingFilters(booking_status="confirmed")),
            "pending_bookings": await self.repository.count(BookingFilters(booking_status="pending")),
            "recent_bookings": await self.repository.count(booked_since=thirty_days_ago),
            "total_revenue": revenue["total"],
            "average_booking_value": revenue["average"],
            "upcoming_departures": await self.repository.upcoming_departures(10),
        }

    async def export_rows(self, filters: Optional[BookingFilters] = None) -> List[Dict[str, Any]]:
        """Flat rows for CSV export"""
        bookings, _ = await self.repository.find(filters, page=1, limit=EXPORT_LIMIT)
        rows = []
        for booking in bookings:
            row = {}
            for header, attr in EXPORT_FIELDS:
                value = getattr(booking, attr)
                row[header] = value.isoformat() if isinstance(value, datetime) else value
            rows.append(row)
        return rows
