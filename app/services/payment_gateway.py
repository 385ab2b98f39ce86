"""Payment gateways.

The booking flow charges through whichever gateway is configured at startup.
Both gateways make exactly one attempt per charge and report the outcome as a
PaymentResult instead of raising, so a flaky provider ends a booking attempt
rather than leaving it half finished.
"""
import asyncio
import logging
import random
import string
import time
from typing import Optional

import httpx
from pydantic import BaseModel

from app.core.config import Settings

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


class PaymentRequest(BaseModel):
    """A charge for one booking."""

    booking_id: int
    total_price: float


class PaymentResult(BaseModel):
    """Outcome of a charge."""

    success: bool
    transaction_id: Optional[str] = None
    message: str


class PaymentGateway:
    """Interface for charging a booking."""

    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        raise NotImplementedError


class SimulatedPaymentGateway(PaymentGateway):
    """Stand-in gateway: waits, then succeeds with a fixed probability."""

    def __init__(
        self,
        delay_seconds: float = 1.5,
        success_rate: float = 0.9,
        rng: Optional[random.Random] = None,
    ):
        self.delay_seconds = delay_seconds
        self.success_rate = success_rate
        self.rng = rng or random.Random()

    def _transaction_id(self) -> str:
        suffix = "".join(self.rng.choice(_BASE36) for _ in range(9))
        return f"txn_{int(time.time() * 1000)}_{suffix}"

    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        logger.info(
            f"Simulating payment for booking {request.booking_id}: amount {request.total_price}"
        )

        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        if self.rng.random() < self.success_rate:
            logger.info(f"Payment simulation successful for booking {request.booking_id}")
            return PaymentResult(
                success=True,
                transaction_id=self._transaction_id(),
                message="Payment was successful.",
            )

        logger.info(f"Payment simulation failed for booking {request.booking_id}")
        return PaymentResult(success=False, message="Payment failed due to an error.")


class HttpPaymentGateway(PaymentGateway):
    """Gateway that charges through an external payment API over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        """
        Create a charge for the booking.

        A charge is never retried: a failed or ambiguous response is reported
        as a failed payment.

        Args:
            request: Booking id and amount to charge

        Returns:
            PaymentResult with the provider's charge id on success
        """
        url = f"{self.base_url}/charges"
        payload = {
            "amount": request.total_price,
            "reference": f"booking-{request.booking_id}",
        }

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                logger.info(f"Charging booking {request.booking_id} via {url}")
                response = await client.post(url, json=payload, headers=self._headers())
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Payment request failed for booking {request.booking_id}: {e}")
            return PaymentResult(
                success=False,
                message="An unexpected error occurred during payment processing.",
            )
        except ValueError as e:
            logger.warning(f"Unreadable payment response for booking {request.booking_id}: {e}")
            return PaymentResult(
                success=False,
                message="An unexpected error occurred during payment processing.",
            )

        if data.get("status") == "succeeded":
            return PaymentResult(
                success=True,
                transaction_id=data.get("id"),
                message="Payment was successful.",
            )

        logger.info(
            f"Payment declined for booking {request.booking_id}: status={data.get('status')}"
        )
        return PaymentResult(
            success=False,
            message=data.get("message") or "Payment failed due to an error.",
        )


def build_payment_gateway(settings: Settings) -> PaymentGateway:
    """Pick the gateway named by PAYMENT_PROVIDER."""
    provider = settings.PAYMENT_PROVIDER.lower()

    if provider == "simulated":
        return SimulatedPaymentGateway(
            delay_seconds=settings.PAYMENT_DELAY_SECONDS,
            success_rate=settings.PAYMENT_SUCCESS_RATE,
        )

    if provider == "http":
        if not settings.PAYMENT_API_BASE_URL:
            raise ValueError("PAYMENT_API_BASE_URL is required when PAYMENT_PROVIDER=http")
        return HttpPaymentGateway(
            base_url=settings.PAYMENT_API_BASE_URL,
            api_key=settings.PAYMENT_API_KEY,
            timeout=settings.PAYMENT_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown PAYMENT_PROVIDER '{settings.PAYMENT_PROVIDER}'")
