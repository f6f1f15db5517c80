from typing import Optional, Dict, Any

from pydantic import Field

from .base_schemas import CamelModel


class CreateOrderIn(CamelModel):
    amount: float = Field(..., ge=1)
    currency: str = "INR"
    receipt: Optional[str] = None
    notes: Optional[Dict[str, Any]] = None
    booking_id: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class PaymentOrderOut(CamelModel):
    success: bool = True
    payment_mode: str
    order: Dict[str, Any]
    payment_link: Optional[str] = None
    redirect_url: Optional[str] = None
    merchant_id: Optional[str] = None
    payment_page_client_id: Optional[str] = None
    bank_details: Optional[Dict[str, Any]] = None


class VerificationOut(CamelModel):
    success: bool
    message: str
    payment_mode: str
    status: str
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_status: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    note: Optional[str] = None


class RefundIn(CamelModel):
    payment_id: str = Field(..., min_length=1)
    amount: Optional[float] = Field(None, ge=1)
    notes: Optional[Dict[str, Any]] = None


class OrderStatusOut(CamelModel):
    success: bool = True
    order_id: str
    status: Optional[str] = None
    details: Dict[str, Any]
