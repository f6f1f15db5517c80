import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, status

from booking_api.api.v1.schemas.booking_schemas import (
    BookingIn, BookingOut, BookingCreatedOut, BookingSummary, BookingDetailOut,
    BookingListOut, BookingUpdate, MessageOut
)
from booking_api.deps import BookingServiceDep
from booking_api.infrastructure.repositories import BookingFilters

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=BookingCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_booking(payload: BookingIn, service: BookingServiceDep):
    """Create a booking for a tour"""
    logger.info(
        "Booking request received: tour=%s email=%s payment=%s",
        payload.tour_id, payload.customer_email, payload.payment_status,
    )
    booking = await service.create_booking(payload.model_dump())
    return BookingCreatedOut(booking=BookingSummary.from_booking(booking))


@router.get("", response_model=BookingListOut)
async def list_bookings(
    service: BookingServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None, description="Booking status"),
    email: Optional[str] = Query(None, description="Customer email"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
):
    """List bookings, newest first"""
    filters = BookingFilters(
        booking_status=status,
        customer_email=email,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    result = await service.list_bookings(filters, page=page, limit=limit)
    return BookingListOut(
        bookings=[BookingOut.model_validate(b) for b in result["bookings"]],
        pagination=result["pagination"],
    )


@router.get("/{booking_id}", response_model=BookingDetailOut)
async def get_booking(booking_id: str, service: BookingServiceDep):
    """Get a booking by UUID or booking reference"""
    booking = await service.get_booking(booking_id)
    return BookingDetailOut(booking=BookingOut.model_validate(booking))


@router.put("/{booking_id}", response_model=BookingDetailOut)
async def update_booking(booking_id: str, payload: BookingUpdate, service: BookingServiceDep):
    """Update booking and payment status"""
    booking = await service.update_booking(
        booking_id,
        booking_status=payload.booking_status,
        payment_status=payload.payment_status,
        admin_notes=payload.admin_notes,
        notes_provided="admin_notes" in payload.model_fields_set,
    )
    return BookingDetailOut(booking=BookingOut.model_validate(booking))


@router.delete("/{booking_id}", response_model=MessageOut)
async def cancel_booking(booking_id: str, service: BookingServiceDep):
    """Cancel a booking; the record is kept"""
    await service.cancel_booking(booking_id)
    return MessageOut(message="Booking cancelled successfully")
