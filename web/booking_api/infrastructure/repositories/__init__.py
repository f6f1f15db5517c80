from .booking_repository import BookingRepository, BookingFilters

__all__ = [
    "BookingRepository",
    "BookingFilters",
]
