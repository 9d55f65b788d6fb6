"""
Square Payments gateway
Captures late-cancellation fees against the card stored on a booking
"""

import logging
from typing import Optional

import httpx

from ...config import SQUARE_ACCESS_TOKEN, SQUARE_ENVIRONMENT, SQUARE_LOCATION_ID

logger = logging.getLogger(__name__)

SQUARE_API_VERSION = "2024-12-18"


def square_api_url(environment: Optional[str]) -> str:
    if (environment or "").lower() == "production":
        return "https://connect.squareup.com/v2"
    return "https://connect.squareupsandbox.com/v2"


class PaymentCaptureError(RuntimeError):
    """Raised when the payment provider does not complete a capture"""


class SquarePaymentGateway:
    """Card-on-file capture through the Square Payments API"""

    def __init__(
        self,
        access_token: Optional[str] = SQUARE_ACCESS_TOKEN,
        location_id: Optional[str] = SQUARE_LOCATION_ID,
        environment: Optional[str] = SQUARE_ENVIRONMENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.location_id = location_id
        self.api_url = square_api_url(environment)
        self._transport = transport

        if not self.access_token:
            logger.warning("SQUARE_ACCESS_TOKEN not set; cancellation fee charges will fail until configured")

    def is_available(self) -> bool:
        return bool(self.access_token)

    async def charge(
        self,
        payment_method_id: str,
        amount_cents: int,
        currency: str,
        idempotency_key: str,
        reference_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> str:
        """
        Capture amount_cents against a stored card.

        The idempotency key makes a retried request for the same booking
        return the original payment instead of charging again.

        Returns:
            Square payment id

        Raises:
            PaymentCaptureError: If Square is not configured, unreachable, or declines
        """
        if not self.is_available():
            raise PaymentCaptureError("Square is not configured")

        payload = {
            "source_id": payment_method_id,
            "idempotency_key": idempotency_key,
            "amount_money": {"amount": amount_cents, "currency": currency},
            "autocomplete": True,
        }
        if self.location_id:
            payload["location_id"] = self.location_id
        if reference_id:
            payload["reference_id"] = reference_id
        if note:
            payload["note"] = note

        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as http_client:
                response = await http_client.post(
                    f"{self.api_url}/payments",
                    json=payload,
                    headers={
                        "Square-Version": SQUARE_API_VERSION,
                        "Authorization": f"Bearer {self.access_token}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Square payment request failed: {e}")
            raise PaymentCaptureError("Payment provider unreachable") from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            # Proxies and load balancers answer with HTML error pages
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code != 200:
            errors = data.get("errors") or []
            detail = errors[0].get("detail") if errors else response.text
            logger.error(f"❌ Square payment declined ({response.status_code}): {detail}")
            raise PaymentCaptureError(f"Payment failed: {detail}")

        payment = data.get("payment") or {}
        if payment.get("status") != "COMPLETED":
            raise PaymentCaptureError(f"Payment failed with status: {payment.get('status')}")

        logger.info(f"✅ Square payment {payment.get('id')} completed ({amount_cents} {currency})")
        return payment.get("id")
