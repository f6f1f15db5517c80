import re
import uuid
from dataclasses import dataclass
from datetime import datetime, date
from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from booking_api.core import BaseRepository
from booking_api.models import Booking

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

SORTABLE_COLUMNS = {
    "bookingDate": "booking_date",
    "departureDate": "departure_date",
    "totalPrice": "total_price",
    "customerName": "customer_name",
    "createdAt": "created_at",
}


@dataclass
class BookingFilters:
    """Optional filters for booking listings"""
    customer_email: Optional[str] = None
    booking_status: Optional[str] = None
    payment_status: Optional[str] = None
    tour_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None


def is_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(str(value)))


class BookingRepository(BaseRepository[Booking]):
    """Booking repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Booking, session)

    async def get_by_reference(self, reference: str) -> Optional[Booking]:
        """Get booking by UUID primary key or by public ``booking_id``"""
        if is_uuid(reference):
            return await self.get(uuid.UUID(str(reference)))

        query = select(Booking).where(Booking.booking_id == reference)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def _apply_filters(self, query, filters: Optional[BookingFilters]):
        if not filters:
            return query

        if filters.customer_email:
            query = query.where(Booking.customer_email == filters.customer_email)
        if filters.booking_status:
            query = query.where(Booking.booking_status == filters.booking_status)
        if filters.payment_status:
            query = query.where(Booking.payment_status == filters.payment_status)
        if filters.tour_id:
            query = query.where(Booking.tour_id == filters.tour_id)
        if filters.start_date:
            query = query.where(Booking.departure_date >= filters.start_date)
        if filters.end_date:
            query = query.where(Booking.departure_date <= filters.end_date)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.where(
                or_(
                    Booking.customer_name.ilike(pattern),
                    Booking.customer_email.ilike(pattern),
                    Booking.booking_id.ilike(pattern),
                )
            )
        return query

    async def find(
        self,
        filters: Optional[BookingFilters] = None,
        *,
        page: int = 1,
        limit: int = 50,
        sort_by: str = "bookingDate",
        sort_order: str = "desc"
    ) -> Tuple[List[Booking], int]:
        """Get a page of bookings and the total number of matches"""
        page = max(page, 1)
        column = getattr(Booking, SORTABLE_COLUMNS.get(sort_by, "booking_date"))
        order = column.asc() if sort_order == "asc" else column.desc()

        query = self._apply_filters(select(Booking), filters)
        query = query.order_by(order).offset((page - 1) * limit).limit(limit)
        result = await self.session.execute(query)
        rows = list(result.scalars().all())

        total = await self.count(filters)
        return rows, total

    async def count(
        self,
        filters: Optional[BookingFilters] = None,
        *,
        booked_since: Optional[datetime] = None
    ) -> int:
        """Count bookings matching *filters*"""
        query = self._apply_filters(select(func.count()).select_from(Booking), filters)
        if booked_since:
            query = query.where(Booking.booking_date >= booked_since)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def revenue_stats(
        self,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Revenue over payment-confirmed bookings"""
        query = select(
            func.coalesce(func.sum(Booking.total_price), 0),
            func.count(Booking.id),
        ).where(Booking.payment_status == "confirmed")

        if start_date:
            query = query.where(Booking.booking_date >= start_date)
        if end_date:
            query = query.where(Booking.booking_date <= end_date)

        total, count = (await self.session.execute(query)).one()
        total = float(total or 0)
        return {
            "total": total,
            "count": count,
            "average": total / count if count else 0,
        }

    async def upcoming_departures(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Confirmed future bookings grouped by departure day"""
        query = (
            select(Booking.departure_date)
            .where(
                Booking.booking_status == "confirmed",
                Booking.departure_date >= datetime.utcnow(),
            )
            .order_by(Booking.departure_date.asc())
            .limit(limit)
        )
        result = await self.session.execute(query)

        grouped: Dict[date, int] = {}
        for departure_date in result.scalars().all():
            day = departure_date.date()
            grouped[day] = grouped.get(day, 0) + 1

        return [{"date": day.isoformat(), "count": count} for day, count in grouped.items()]
