from fastapi import APIRouter, Depends

from booking_api.security import require_admin_key
from booking_api.api.v1.endpoints import tours, bookings, payments, admin


# Create main API router
api_router = APIRouter()

# Tour content proxied from WordPress (public access)
api_router.include_router(
    tours.router,
    prefix="/tours",
    tags=["tours"]
)

# Booking endpoints (public access)
api_router.include_router(
    bookings.router,
    prefix="/bookings",
    tags=["bookings"]
)

# Payment gateway endpoints (public access)
api_router.include_router(
    payments.router,
    prefix="/payments",
    tags=["payments"]
)

# Admin dashboard endpoints (API key access)
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_key)]
)
