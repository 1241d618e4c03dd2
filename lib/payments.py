# =============================================================================
# lib/payments.py - Payment Gateway Client
# =============================================================================
# Opaque wrapper over the Paystack transaction API. Only two calls are used:
#
#   initialize_payment(...)  -> checkout URL the donor is sent to
#   verify_payment(reference) -> what the gateway says about a reference
#
# Amounts cross this boundary in minor units (kobo/cents). Callbacks only
# carry a reference; callers must match it against their own pending
# donation record before trusting it.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from app.config import settings
from app.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    """Convert a major-unit amount (e.g. 12.50) to minor units (1250)."""
    return int(round(float(amount) * 100))


@dataclass
class CheckoutSession:
    """Result of initializing a payment."""
    reference: str
    authorization_url: str | None = None
    access_code: str | None = None


@dataclass
class PaymentVerification:
    """Gateway view of a transaction."""
    reference: str
    successful: bool
    amount_minor_units: int = 0
    status: str = "unknown"
    raw: dict[str, Any] = field(default_factory=dict)


class PaymentGateway:
    """
    Paystack REST client.

    Example:
        gateway = PaymentGateway()
        checkout = gateway.initialize_payment(
            email="donor@example.com",
            amount_minor_units=150000,
            reference="PAY_...",
            callback_url=settings.PAYMENT_CALLBACK_URL,
            metadata={"meal_request_id": "...", "donor_id": "..."},
        )
    """

    def __init__(
        self,
        secret_key: str | None = None,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.PAYSTACK_SECRET_KEY
        self.base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip("/")
        self.http = http_client or httpx.Client(timeout=settings.PAYMENT_TIMEOUT_SECONDS)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def initialize_payment(
        self,
        email: str,
        amount_minor_units: int,
        reference: str,
        callback_url: str,
        metadata: dict[str, Any] | None = None,
    ) -> CheckoutSession:
        """
        Open a checkout for the donor.

        Raises:
            PaymentGatewayError: If the gateway is unreachable or refuses
        """
        payload = {
            "email": email,
            "amount": amount_minor_units,
            "reference": reference,
            "callback_url": callback_url,
            "currency": settings.PAYMENT_CURRENCY,
            "metadata": metadata or {},
        }

        try:
            response = self.http.post(
                f"{self.base_url}/transaction/initialize",
                json=payload,
                headers=self._headers(),
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Payment initialization failed for {reference}: {e}")
            raise PaymentGatewayError(f"Failed to initialize payment: {e}")

        if not body.get("status"):
            raise PaymentGatewayError(
                f"Payment gateway refused initialization: {body.get('message', 'unknown error')}"
            )

        data = body.get("data") or {}
        logger.info(f"Initialized payment {reference} for {amount_minor_units} minor units")
        return CheckoutSession(
            reference=data.get("reference", reference),
            authorization_url=data.get("authorization_url"),
            access_code=data.get("access_code"),
        )

    def verify_payment(self, reference: str) -> PaymentVerification:
        """
        Ask the gateway whether a transaction succeeded.

        Raises:
            PaymentGatewayError: If the gateway is unreachable
        """
        try:
            response = self.http.get(
                f"{self.base_url}/transaction/verify/{reference}",
                headers=self._headers(),
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Payment verification failed for {reference}: {e}")
            raise PaymentGatewayError(f"Failed to verify payment: {e}")

        data = body.get("data") or {}
        status = data.get("status", "unknown")
        return PaymentVerification(
            reference=reference,
            successful=bool(body.get("status")) and status == "success",
            amount_minor_units=int(data.get("amount") or 0),
            status=status,
            raw=data,
        )
