from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from booking_api.infrastructure import get_session
from booking_api.services.booking_service import BookingService
from booking_api.services.email_service import EmailService
from booking_api.services.payment_service import PaymentService
from booking_api.services.wordpress_service import WordPressService

# Type alias for dependency injection
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_wordpress_service() -> WordPressService:
    return WordPressService()


def get_email_service() -> EmailService:
    return EmailService()


def get_payment_service() -> PaymentService:
    return PaymentService()


WordPressDep = Annotated[WordPressService, Depends(get_wordpress_service)]
EmailDep = Annotated[EmailService, Depends(get_email_service)]
PaymentDep = Annotated[PaymentService, Depends(get_payment_service)]


def get_booking_service(sess: SessionDep, wordpress: WordPressDep, email: EmailDep) -> BookingService:
    return BookingService(sess, wordpress=wordpress, email=email)


BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
