from .schedule_resolver import ScheduleResolver, ScheduleDefaults, TourAvailability, Departure
from .wordpress_service import WordPressService, format_tour
from .booking_service import BookingService
from .email_service import EmailService
from .payment_service import PaymentService

__all__ = [
    "ScheduleResolver",
    "ScheduleDefaults",
    "TourAvailability",
    "Departure",
    "WordPressService",
    "format_tour",
    "BookingService",
    "EmailService",
    "PaymentService",
]
