import csv
import io
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from booking_api.api.v1.schemas.admin_schemas import (
    AdminBookingListOut, BookingStats, DashboardStats, DashboardStatsOut
)
from booking_api.api.v1.schemas.booking_schemas import BookingOut, BookingDetailOut, BookingUpdate
from booking_api.deps import BookingServiceDep
from booking_api.infrastructure.repositories import BookingFilters
from booking_api.services.booking_service import EXPORT_FIELDS


router = APIRouter()


@router.get("/bookings", response_model=AdminBookingListOut)
async def admin_bookings(
    service: BookingServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    status: Optional[str] = Query(None, description="Booking status"),
    payment_status: Optional[str] = Query(None, alias="paymentStatus"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
    sort_by: str = Query("bookingDate", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
):
    """Bookings with filters plus headline numbers for the dashboard"""
    filters = BookingFilters(
        booking_status=status,
        payment_status=payment_status,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    result = await service.list_bookings(
        filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )
    stats = await service.booking_stats()
    return AdminBookingListOut(
        bookings=[BookingOut.model_validate(b) for b in result["bookings"]],
        pagination=result["pagination"],
        stats=BookingStats(**stats),
    )


@router.get("/bookings/export")
async def export_bookings(
    service: BookingServiceDep,
    status: Optional[str] = Query(None, description="Booking status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
):
    """Download bookings as CSV"""
    filters = BookingFilters(booking_status=status, start_date=start_date, end_date=end_date)
    rows = await service.export_rows(filters)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=[header for header, _ in EXPORT_FIELDS])
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    output.seek(0)
    filename = f"bookings_{int(time.time() * 1000)}.csv"
    return StreamingResponse(
        io.BytesIO(output.getvalue().encode()),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/dashboard/stats", response_model=DashboardStatsOut)
async def dashboard_stats(service: BookingServiceDep):
    stats = await service.dashboard_stats()
    return DashboardStatsOut(stats=DashboardStats(**stats))


@router.patch("/bookings/{booking_id}/status", response_model=BookingDetailOut)
async def update_booking_status(booking_id: str, payload: BookingUpdate, service: BookingServiceDep):
    """Change booking/payment status or notes"""
    booking = await service.update_booking(
        booking_id,
        booking_status=payload.booking_status,
        payment_status=payload.payment_status,
        admin_notes=payload.admin_notes,
        notes_provided="admin_notes" in payload.model_fields_set,
    )
    return BookingDetailOut(booking=BookingOut.model_validate(booking))
