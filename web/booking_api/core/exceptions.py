from typing import Any, Optional, Dict


class BaseError(Exception):
    """Application error rendered as ``{"success": false, "error": ...}``"""

    status_code = 500

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """A booking or tour does not exist"""

    status_code = 404

    def __init__(self, entity: str, id: Any = None):
        message = f"{entity} with id {id} not found" if id is not None else f"{entity} not found"
        super().__init__(message, details={"entity": entity, "id": id})


class ValidationError(BaseError):
    """Input that passed schema validation but breaks a booking rule"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class BusinessLogicError(BaseError):
    status_code = 422

    def __init__(self, message: str, rule: Optional[str] = None):
        super().__init__(message, details={"rule": rule} if rule else None)


class PaymentError(BaseError):
    """A payment cannot be created or verified"""

    status_code = 400

    def __init__(
        self,
        message: str,
        payment_mode: Optional[str] = None,
        status_code: int = 400,
        reason: Optional[str] = None
    ):
        details: Dict[str, Any] = {"paymentMode": payment_mode} if payment_mode else {}
        if reason:
            details["reason"] = reason
        super().__init__(message, status_code, details)


class ExternalServiceError(BaseError):
    """WordPress or SMTP failed"""

    status_code = 503

    def __init__(self, service: str, message: str):
        super().__init__(f"External service error: {message}", details={"service": service})
