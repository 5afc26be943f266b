"""
Razorpay API client for hosted checkout.

Provides:
- Creating gateway orders (amounts sent in paise)
- Verifying checkout signatures
- Fetching payment details
- Refunding payments
"""

import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

RAZORPAY_BASE_URL = "https://api.razorpay.com"


@dataclass
class GatewayOrder:
    order_id: str
    amount: int  # in paise
    currency: str


@dataclass
class RefundResult:
    refund_id: str
    status: str
    amount: float  # in rupees


class PaymentGatewayError(Exception):
    """Razorpay rejected a request or could not be reached."""

    def __init__(
        self, message: str, status_code: int = None, response_data: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


class PaymentConfigurationError(Exception):
    """Razorpay credentials are not configured."""


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


def verify_signature(
    order_id: str, payment_id: str, signature: str, secret: Optional[str] = None
) -> bool:
    """
    Check a checkout signature: hex HMAC-SHA256 of ``"order_id|payment_id"``.

    Any mismatch, empty input or missing secret yields False.
    """
    if secret is None:
        secret = get_settings().RAZORPAY_KEY_SECRET
    if not secret or not order_id or not payment_id or not signature:
        return False

    expected = hmac.new(
        secret.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


class RazorpayClient:
    """Async client for the Razorpay Orders, Payments and Refunds APIs."""

    def __init__(
        self,
        key_id: str = None,
        key_secret: str = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        if not self.key_id or not self.key_secret:
            raise PaymentConfigurationError(
                "Razorpay not initialized. Check your credentials."
            )
        self.currency = settings.RAZORPAY_CURRENCY
        self._transport = transport

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: dict = None,
    ) -> dict:
        """Make an authenticated request to the Razorpay API."""
        url = f"{RAZORPAY_BASE_URL}{endpoint}"

        try:
            async with httpx.AsyncClient(
                timeout=30.0,
                auth=(self.key_id, self.key_secret),
                transport=self._transport,
            ) as client:
                response = await client.request(method=method, url=url, json=json_data)
        except httpx.HTTPError as e:
            logger.error(f"Razorpay request failed: {type(e).__name__}: {e}")
            raise PaymentGatewayError("Payment gateway unreachable") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code == 401:
            logger.error("Razorpay rejected credentials")
            raise PaymentGatewayError(
                "Invalid Razorpay credentials", status_code=401, response_data=data
            )

        if not response.is_success:
            logger.error(f"Razorpay API error: {response.status_code} - {data}")
            description = (data.get("error") or {}).get("description")
            raise PaymentGatewayError(
                message=description or "Razorpay request failed",
                status_code=response.status_code,
                response_data=data,
            )

        return data

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(self, amount: float, receipt: str) -> GatewayOrder:
        """
        Create an order for hosted checkout.

        Args:
            amount: Amount in rupees
            receipt: Merchant reference shown on the gateway dashboard

        Returns:
            GatewayOrder with the amount in paise
        """
        data = await self._request(
            "POST",
            "/v1/orders",
            json_data={
                "amount": to_paise(amount),
                "currency": self.currency,
                "receipt": receipt,
                "payment_capture": 1,
            },
        )
        logger.info(f"Created Razorpay order {data.get('id')} for {receipt}")
        return GatewayOrder(
            order_id=data["id"],
            amount=data["amount"],
            currency=data.get("currency", self.currency),
        )

    # =========================================================================
    # Payments
    # =========================================================================

    async def fetch_payment(self, payment_id: str) -> dict:
        return await self._request("GET", f"/v1/payments/{payment_id}")

    async def refund(
        self, payment_id: str, amount: Optional[float] = None
    ) -> RefundResult:
        """
        Refund a captured payment.

        With no amount the full payment is refunded.
        """
        payload = {"amount": to_paise(amount)} if amount is not None else {}
        data = await self._request(
            "POST", f"/v1/payments/{payment_id}/refund", json_data=payload
        )
        logger.info(f"Refund {data.get('id')} issued for payment {payment_id}")
        return RefundResult(
            refund_id=data["id"],
            status=data.get("status", "processed"),
            amount=data.get("amount", 0) / 100,
        )


def get_razorpay_client() -> RazorpayClient:
    """Build a client from settings. Raises PaymentConfigurationError if unset."""
    return RazorpayClient()
