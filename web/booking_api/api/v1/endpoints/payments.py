import logging
from typing import Any, Dict

from fastapi import APIRouter, Body

from booking_api.api.v1.schemas.payment_schemas import (
    CreateOrderIn, PaymentOrderOut, VerificationOut, RefundIn, OrderStatusOut
)
from booking_api.deps import PaymentDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-order", response_model=PaymentOrderOut, response_model_exclude_none=True)
async def create_order(payload: CreateOrderIn, payments: PaymentDep):
    """Create a payment order with the configured gateway"""
    logger.info("Creating %s order for %s %s", payments.mode, payload.amount, payload.currency)
    order = await payments.create_order(
        amount=payload.amount,
        currency=payload.currency,
        receipt=payload.receipt,
        notes=payload.notes,
        customer_email=payload.customer_email,
        customer_phone=payload.customer_phone,
    )
    return PaymentOrderOut(**order)


@router.post("/verify", response_model=VerificationOut, response_model_exclude_none=True)
async def verify_payment(payments: PaymentDep, payload: Dict[str, Any] = Body(...)):
    """Verify a gateway callback or record a bank transfer"""
    result = await payments.verify(payload)
    return VerificationOut(**result)


@router.post("/refund")
async def refund_payment(payload: RefundIn, payments: PaymentDep):
    """Refund a Razorpay payment, fully or partially"""
    refund = await payments.refund(payload.payment_id, amount=payload.amount, notes=payload.notes)
    return {"success": True, "refund": refund}


@router.get("/status/{order_id}", response_model=OrderStatusOut)
async def order_status(order_id: str, payments: PaymentDep):
    """Current gateway status of an HDFC order"""
    details = await payments.order_status(order_id)
    return OrderStatusOut(order_id=order_id, status=details.get("status"), details=details)


@router.get("/{payment_id}")
async def get_payment(payment_id: str, payments: PaymentDep):
    """Razorpay payment details"""
    payment = await payments.fetch_payment(payment_id)
    return {"success": True, "payment": payment}
