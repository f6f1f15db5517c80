"""Admin dashboard schemas."""

from __future__ import annotations

from typing import List

from .base_schemas import CamelModel
from .booking_schemas import BookingOut, Pagination


class BookingStats(CamelModel):
    total_bookings: int
    total_revenue: float
    confirmed_bookings: int
    pending_bookings: int
    cancelled_bookings: int


class AdminBookingListOut(CamelModel):
    success: bool = True
    bookings: List[BookingOut]
    pagination: Pagination
    stats: BookingStats


class UpcomingDeparture(CamelModel):
    date: str
    count: int


class DashboardStats(CamelModel):
    total_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    recent_bookings: int
    total_revenue: float
    average_booking_value: float
    upcoming_departures: List[UpcomingDeparture]


class DashboardStatsOut(CamelModel):
    success: bool = True
    stats: DashboardStats
