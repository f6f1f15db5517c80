"""Payment gateway dispatch: HDFC SmartGateway, Razorpay or manual bank transfer."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import random
import string
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, unquote

import httpx

from ..core.config import Settings, get_settings
from ..core.exceptions import PaymentError

logger = logging.getLogger(__name__)

HDFC = "HDFC"
RAZORPAY = "RAZORPAY"
BANK_TRANSFER = "BANK_TRANSFER"

RAZORPAY_API_URL = "https://api.razorpay.com/v1"

# SmartGateway order status -> our normalized status
HDFC_STATUS_MAP = {
    "CHARGED": ("SUCCESS", "Payment completed successfully"),
    "PENDING": ("PENDING", "Payment is pending"),
    "PENDING_VBV": ("PENDING", "Payment is pending"),
    "AUTHORIZATION_FAILED": ("FAILED", "Payment failed"),
    "AUTHENTICATION_FAILED": ("FAILED", "Payment failed"),
    "JUSPAY_DECLINED": ("FAILED", "Payment failed"),
}

_BASE36 = string.digits + string.ascii_lowercase


def generate_order_id() -> str:
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"order_{int(time.time() * 1000)}_{suffix}"


def _uri_component(value: Any) -> str:
    """Percent-encode like JavaScript's encodeURIComponent."""
    return quote(str(value), safe="-_.!~*'()")


def hdfc_signature(params: Mapping[str, Any], response_key: str) -> str:
    """Signature SmartGateway attaches to the return-url callback."""
    pairs = sorted(
        (k, v) for k, v in params.items()
        if k not in ("signature", "signature_algorithm")
    )
    joined = "&".join(f"{_uri_component(k)}={_uri_component(v)}" for k, v in pairs)
    digest = hmac.new(response_key.encode(), _uri_component(joined).encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def validate_hdfc_signature(params: Mapping[str, Any], response_key: str) -> bool:
    signature = params.get("signature")
    if not signature or not response_key:
        return False
    expected = hdfc_signature(params, response_key)
    return hmac.compare_digest(unquote(str(signature)), expected)


def razorpay_signature(order_id: str, payment_id: str, secret: str) -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


class PaymentService:
    """Creates and verifies payments with whichever gateway is configured."""

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def hdfc_configured(self) -> bool:
        return bool(self.settings.HDFC_API_KEY and self.settings.HDFC_MERCHANT_ID)

    @property
    def razorpay_configured(self) -> bool:
        return bool(self.settings.RAZORPAY_KEY_ID and self.settings.RAZORPAY_KEY_SECRET)

    @property
    def mode(self) -> str:
        """Gateway actually in use; falls back to bank transfer when unconfigured."""
        requested = self.settings.PAYMENT_MODE
        if requested == HDFC and self.hdfc_configured:
            return HDFC
        if requested == RAZORPAY and self.razorpay_configured:
            return RAZORPAY
        return BANK_TRANSFER

    # ------------------------------------------------------------------
    #  HTTP clients
    # ------------------------------------------------------------------
    def _hdfc_client(self, customer_id: Optional[str] = None) -> httpx.AsyncClient:
        token = base64.b64encode(f"{self.settings.HDFC_API_KEY}:".encode()).decode()
        headers = {
            "Authorization": f"Basic {token}",
            "x-merchantid": self.settings.HDFC_MERCHANT_ID,
            "Content-Type": "application/json",
        }
        if customer_id:
            headers["x-customerid"] = customer_id
        return httpx.AsyncClient(
            base_url=self.settings.HDFC_BASE_URL, headers=headers, timeout=30.0, transport=self._transport
        )

    def _razorpay_client(self) -> httpx.AsyncClient:
        if not self.razorpay_configured:
            raise PaymentError("Razorpay not configured", RAZORPAY)
        return httpx.AsyncClient(
            base_url=RAZORPAY_API_URL,
            auth=(self.settings.RAZORPAY_KEY_ID, self.settings.RAZORPAY_KEY_SECRET),
            timeout=30.0,
            transport=self._transport,
        )

    # ------------------------------------------------------------------
    #  Orders
    # ------------------------------------------------------------------
    async def create_order(
        self,
        amount: float,
        currency: str = "INR",
        receipt: Optional[str] = None,
        notes: Optional[Dict[str, Any]] = None,
        customer_email: Optional[str] = None,
        customer_phone: Optional[str] = None,
    ) -> Dict[str, Any]:
        order_id = generate_order_id()
        receipt = receipt or f"receipt_{int(time.time() * 1000)}"
        mode = self.mode

        if mode == HDFC:
            return await self._create_hdfc_order(order_id, amount, currency, receipt, customer_email, customer_phone)
        if mode == RAZORPAY:
            return await self._create_razorpay_order(amount, currency, receipt, notes)

        logger.warning("Using bank transfer mode (PAYMENT_MODE=%s)", self.settings.PAYMENT_MODE)
        return {
            "payment_mode": BANK_TRANSFER,
            "order": {"id": order_id, "amount": amount, "currency": currency, "receipt": receipt},
            "bank_details": {
                "accountName": self.settings.BANK_ACCOUNT_NAME,
                "accountNumber": "Complete the bank transfer and share payment proof",
                "message": "Please complete the bank transfer and share payment proof with us.",
            },
        }

    async def _create_hdfc_order(self, order_id, amount, currency, receipt, customer_email, customer_phone):
        customer_id = customer_email or f"customer_{int(time.time() * 1000)}"
        body = {
            "order_id": order_id,
            "amount": float(amount),
            "currency": currency,
            "customer_id": customer_id,
            "customer_email": customer_email,
            "customer_phone": customer_phone,
            "payment_page_client_id": self.settings.HDFC_PAYMENT_PAGE_CLIENT_ID,
            "action": "paymentPage",
            "return_url": f"{self.settings.FRONTEND_URL}/payment-response",
        }
        try:
            async with self._hdfc_client(customer_id) as client:
                response = await client.post("/session", json=body)
                response.raise_for_status()
                session = response.json()
        except httpx.HTTPError as exc:
            logger.error("HDFC payment session error: %s", exc)
            raise PaymentError(
                "Failed to create HDFC payment session", HDFC, status_code=500, reason=str(exc)
            ) from exc

        payment_link = (session.get("payment_links") or {}).get("web")
        logger.info("HDFC order session created: %s", order_id)
        return {
            "payment_mode": HDFC,
            "order": {"id": order_id, "amount": amount, "currency": currency, "receipt": receipt},
            "payment_link": payment_link,
            "redirect_url": payment_link,
            "merchant_id": self.settings.HDFC_MERCHANT_ID,
            "payment_page_client_id": self.settings.HDFC_PAYMENT_PAGE_CLIENT_ID,
        }

    async def _create_razorpay_order(self, amount, currency, receipt, notes):
        body = {
            "amount": int(round(amount * 100)),  # paise
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            async with self._razorpay_client() as client:
                response = await client.post("/orders", json=body)
                response.raise_for_status()
                order = response.json()
        except httpx.HTTPError as exc:
            logger.error("Razorpay order error: %s", exc)
            raise PaymentError(
                "Failed to create Razorpay order", RAZORPAY, status_code=500, reason=str(exc)
            ) from exc

        logger.info("Razorpay order created: %s", order.get("id"))
        return {"payment_mode": RAZORPAY, "order": order}

    # ------------------------------------------------------------------
    #  Verification
    # ------------------------------------------------------------------
    async def order_status(self, order_id: str) -> Dict[str, Any]:
        if self.mode != HDFC:
            raise PaymentError("Payment mode not supported for status check")
        try:
            async with self._hdfc_client() as client:
                response = await client.get(f"/orders/{order_id}")
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as exc:
            logger.error("HDFC order status error for %s: %s", order_id, exc)
            raise PaymentError(
                "Failed to fetch HDFC order status", HDFC, status_code=500, reason=str(exc)
            ) from exc

    async def verify(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Verify a payment callback from the frontend."""
        mode = self.mode
        order_id = payload.get("order_id") or payload.get("orderId")

        if mode == HDFC and order_id:
            return await self._verify_hdfc(order_id, payload)

        rzp_order = payload.get("razorpay_order_id")
        rzp_payment = payload.get("razorpay_payment_id")
        rzp_signature = payload.get("razorpay_signature")
        if mode == RAZORPAY and rzp_order and rzp_payment and rzp_signature:
            expected = razorpay_signature(rzp_order, rzp_payment, self.settings.RAZORPAY_KEY_SECRET)
            if not hmac.compare_digest(expected, str(rzp_signature)):
                raise PaymentError("Invalid payment signature", RAZORPAY)
            return {
                "success": True,
                "message": "Payment verified successfully",
                "payment_id": rzp_payment,
                "order_id": rzp_order,
                "payment_mode": RAZORPAY,
                "status": "SUCCESS",
            }

        bank_order_id = payload.get("bank_order_id")
        if bank_order_id:
            return {
                "success": True,
                "message": "Payment details received. Verification pending.",
                "order_id": bank_order_id,
                "transaction_id": payload.get("transaction_id"),
                "payment_mode": BANK_TRANSFER,
                "status": "PENDING_VERIFICATION",
                "note": "Your booking is confirmed. Payment will be verified by admin within 24 hours.",
            }

        raise PaymentError("Invalid payment signature")

    async def _verify_hdfc(self, order_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        status_response = await self.order_status(order_id)

        if not validate_hdfc_signature(payload, self.settings.HDFC_RESPONSE_KEY):
            logger.warning("HDFC HMAC validation failed for order %s", order_id)
            raise PaymentError("Invalid payment signature", HDFC)

        gateway_status = status_response.get("status")
        status, message = HDFC_STATUS_MAP.get(
            gateway_status, ("UNKNOWN", f"Payment status: {gateway_status}")
        )
        logger.info("HDFC payment verified: %s - %s", order_id, status)
        return {
            "success": status == "SUCCESS",
            "message": message,
            "order_id": order_id,
            "payment_mode": HDFC,
            "status": status,
            "payment_status": gateway_status,
            "details": status_response,
        }

    # ------------------------------------------------------------------
    #  Razorpay payment management
    # ------------------------------------------------------------------
    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        try:
            async with self._razorpay_client() as client:
                response = await client.get(f"/payments/{payment_id}")
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as exc:
            logger.error("Error fetching payment %s: %s", payment_id, exc)
            raise PaymentError("Failed to fetch payment", RAZORPAY, status_code=500, reason=str(exc)) from exc

    async def refund(
        self,
        payment_id: str,
        amount: Optional[float] = None,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if amount:
            body["amount"] = int(round(amount * 100))
        if notes:
            body["notes"] = notes
        try:
            async with self._razorpay_client() as client:
                response = await client.post(f"/payments/{payment_id}/refund", json=body)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as exc:
            logger.error("Error creating refund for %s: %s", payment_id, exc)
            raise PaymentError("Failed to create refund", RAZORPAY, status_code=500, reason=str(exc)) from exc
