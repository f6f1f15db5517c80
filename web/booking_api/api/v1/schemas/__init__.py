from .base_schemas import CamelModel
from .tour_schemas import TourOut, TourListOut, TourDetailOut
from .booking_schemas import (
    BookingIn, BookingOut, BookingSummary, BookingCreatedOut, BookingDetailOut,
    BookingListOut, BookingUpdate, Pagination, MessageOut
)
from .payment_schemas import CreateOrderIn, PaymentOrderOut, VerificationOut, RefundIn, OrderStatusOut
from .admin_schemas import BookingStats, AdminBookingListOut, DashboardStats, DashboardStatsOut

__all__ = [
    "CamelModel",

    # Tour schemas
    "TourOut",
    "TourListOut",
    "TourDetailOut",

    # Booking schemas
    "BookingIn",
    "BookingOut",
    "BookingSummary",
    "BookingCreatedOut",
    "BookingDetailOut",
    "BookingListOut",
    "BookingUpdate",
    "Pagination",
    "MessageOut",

    # Payment schemas
    "CreateOrderIn",
    "PaymentOrderOut",
    "VerificationOut",
    "RefundIn",
    "OrderStatusOut",

    # Admin schemas
    "BookingStats",
    "AdminBookingListOut",
    "DashboardStats",
    "DashboardStatsOut",
]
