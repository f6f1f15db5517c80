from .base import BaseRepository, BaseService
from .config import Settings, get_settings
from .exceptions import (
    BaseError,
    BusinessLogicError,
    ExternalServiceError,
    NotFoundError,
    PaymentError,
    ValidationError,
)

__all__ = [
    "BaseRepository",
    "BaseService",
    "Settings",
    "get_settings",
    "BaseError",
    "BusinessLogicError",
    "ExternalServiceError",
    "NotFoundError",
    "PaymentError",
    "ValidationError",
]
