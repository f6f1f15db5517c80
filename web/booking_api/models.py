import random
import time
import uuid

from sqlalchemy import (
    String, Integer, Numeric, DateTime, Boolean, Text, JSON, Uuid,
    func, Index, CheckConstraint
)
from sqlalchemy.orm import mapped_column, DeclarativeBase

PAYMENT_STATUSES = ("pending", "confirmed", "failed", "refunded")
PAYMENT_METHODS = ("razorpay", "hdfc", "bank_transfer", "other")
BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")


def generate_booking_id() -> str:
    """Return a human-friendly booking reference like ``IMT-TRIP-12345678042``."""
    timestamp = str(int(time.time() * 1000))
    suffix = f"{random.randint(0, 999):03d}"
    return f"IMT-TRIP-{timestamp[-8:]}{suffix}"


def _in(column: str, values) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


class Base(DeclarativeBase): ...


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint(_in("payment_status", PAYMENT_STATUSES), name="ck_bookings_payment_status"),
        CheckConstraint(_in("payment_method", PAYMENT_METHODS), name="ck_bookings_payment_method"),
        CheckConstraint(_in("booking_status", BOOKING_STATUSES), name="ck_bookings_booking_status"),
        Index("idx_bookings_customer_email", "customer_email"),
        Index("idx_bookings_booking_date", "booking_date"),
        Index("idx_bookings_departure_date", "departure_date"),
        Index("idx_bookings_payment_status", "payment_status"),
        Index("idx_bookings_booking_status", "booking_status"),
        Index("idx_bookings_tour_id", "tour_id"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id          = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id  = mapped_column(String(50), unique=True, nullable=False, default=generate_booking_id)

    # Tour (WordPress itinerary) snapshot
    tour_id     = mapped_column(String(50), nullable=False)
    tour_name   = mapped_column(String(255), nullable=False)
    tour_slug   = mapped_column(String(255), nullable=False)

    # Customer
    customer_name  = mapped_column(String(255), nullable=False)
    customer_email = mapped_column(String(255), nullable=False)
    customer_phone = mapped_column(String(50), nullable=False)

    # Travel party
    departure_date       = mapped_column(DateTime, nullable=False)
    adults               = mapped_column(Integer, nullable=False, default=1)
    children_with_bed    = mapped_column(Integer, default=0)
    children_without_bed = mapped_column(Integer, default=0)
    room_configuration   = mapped_column(JSON, default=dict)
    addons               = mapped_column(JSON, default=list)

    # Pricing
    base_price     = mapped_column(Numeric(10, 2), nullable=False)
    children_price = mapped_column(Numeric(10, 2), default=0)
    room_price     = mapped_column(Numeric(10, 2), default=0)
    addons_price   = mapped_column(Numeric(10, 2), default=0)
    total_price    = mapped_column(Numeric(10, 2), nullable=False)

    # Payment
    payment_status  = mapped_column(String(20), default="pending")
    payment_id      = mapped_column(String(255))
    payment_method  = mapped_column(String(50), default="razorpay")
    payment_details = mapped_column(JSON)

    booking_status   = mapped_column(String(20), default="pending")
    special_requests = mapped_column(Text)
    admin_notes      = mapped_column(Text)

    booking_date = mapped_column(DateTime, server_default=func.now())
    confirmed_at = mapped_column(DateTime)
    cancelled_at = mapped_column(DateTime)

    confirmation_email_sent    = mapped_column(Boolean, default=False)
    confirmation_email_sent_at = mapped_column(DateTime)

    created_at = mapped_column(DateTime, server_default=func.now())
    updated_at = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def total_guests(self) -> int:
        return (self.adults or 0) + (self.children_with_bed or 0) + (self.children_without_bed or 0)

    @property
    def total_children(self) -> int:
        return (self.children_with_bed or 0) + (self.children_without_bed or 0)
