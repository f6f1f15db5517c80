import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any, Literal

from pydantic import EmailStr, Field, field_validator

from .base_schemas import CamelModel

PaymentStatus = Literal["pending", "confirmed", "failed", "refunded"]
PaymentMethod = Literal["razorpay", "hdfc", "bank_transfer", "other"]
BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]


class BookingIn(CamelModel):
    """Booking submitted by the checkout page"""
    tour_id: str = Field(..., min_length=1)
    tour_slug: Optional[str] = None
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=1)
    departure_date: datetime
    adults: int = Field(1, ge=1)
    children_with_bed: int = Field(0, ge=0)
    children_without_bed: int = Field(0, ge=0)
    room_configuration: Dict[str, Any] = {}
    addons: List[Any] = []
    base_price: float = Field(0, ge=0)
    children_price: float = Field(0, ge=0)
    room_price: float = Field(0, ge=0)
    addons_price: float = Field(0, ge=0)
    total_price: float = Field(..., ge=0)
    special_requests: Optional[str] = None
    payment_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    payment_details: Optional[Dict[str, Any]] = None
    payment_status: PaymentStatus = "pending"

    @field_validator("tour_id", mode="before")
    @classmethod
    def _tour_id_as_text(cls, v):
        # WordPress post ids arrive as numbers from some clients
        return str(v) if isinstance(v, int) else v

    @field_validator("customer_name", "customer_phone")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class BookingSummary(CamelModel):
    """Short booking view returned right after checkout"""
    id: uuid.UUID
    booking_id: str
    tour_name: str
    customer_name: str
    customer_email: str
    departure_date: datetime
    adults: int
    children: int
    total_price: float
    payment_status: str
    booking_status: str
    booking_date: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking) -> "BookingSummary":
        return cls(
            id=booking.id,
            booking_id=booking.booking_id,
            tour_name=booking.tour_name,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            departure_date=booking.departure_date,
            adults=booking.adults,
            children=booking.total_children,
            total_price=booking.total_price,
            payment_status=booking.payment_status,
            booking_status=booking.booking_status,
            booking_date=booking.booking_date,
        )


class BookingOut(CamelModel):
    """Full booking record"""
    id: uuid.UUID
    booking_id: str
    tour_id: str
    tour_name: str
    tour_slug: str
    customer_name: str
    customer_email: str
    customer_phone: str
    departure_date: datetime
    adults: int
    children_with_bed: int = 0
    children_without_bed: int = 0
    room_configuration: Optional[Dict[str, Any]] = None
    addons: Optional[List[Any]] = None
    base_price: float
    children_price: float = 0
    room_price: float = 0
    addons_price: float = 0
    total_price: float
    payment_status: str
    payment_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_details: Optional[Dict[str, Any]] = None
    booking_status: str
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = None
    booking_date: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    confirmation_email_sent: bool = False
    confirmation_email_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingCreatedOut(CamelModel):
    success: bool = True
    booking: BookingSummary


class BookingDetailOut(CamelModel):
    success: bool = True
    booking: BookingOut


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class BookingListOut(CamelModel):
    success: bool = True
    bookings: List[BookingOut]
    pagination: Pagination


class BookingUpdate(CamelModel):
    """Status change by staff; omitted fields stay untouched"""
    booking_status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    admin_notes: Optional[str] = None


class MessageOut(CamelModel):
    success: bool = True
    message: str
