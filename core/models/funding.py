# =============================================================================
# core/models/funding.py - Donation and Funding Schemas
# =============================================================================
# A Donation records a donor's payment intent against one meal request.
# Top-ups reuse the donations table with no meal request attached.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class DonationStatus(str, Enum):
    """
    Donation payment status.

    - pending: Checkout opened, gateway has not confirmed
    - completed: Gateway confirmed the payment
    - failed: Gateway refused, or the amount didn't match
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Donation(BaseModel):
    """A row from the donations table, optionally joined with donor and request."""

    id: str
    donor_id: str
    meal_request_id: str | None = None
    amount: float = Field(..., gt=0)
    status: DonationStatus = DonationStatus.PENDING
    payment_reference: str
    message: str | None = None
    created_at: datetime | None = None
    donor: dict[str, Any] | None = None
    meal_request: dict[str, Any] | None = None


class DonationCreate(BaseModel):
    """Request body for funding an approved meal request."""

    meal_request_id: str
    message: str | None = None


class TopUpCreate(BaseModel):
    """Request body for adding funds to a donor balance."""

    amount: float = Field(..., gt=0)


class DonationCheckout(BaseModel):
    """What a donor needs to complete payment."""

    donation: Donation
    reference: str
    authorization_url: str | None = None
    access_code: str | None = None


class BalanceResponse(BaseModel):
    """A donor's prepaid balance."""

    donor_id: str
    balance: float


class AdminStats(BaseModel):
    """Platform totals for the admin dashboard."""

    total_users: int = 0
    total_requests: int = 0
    total_donations: int = 0
    pending_requests: int = 0
    total_donated: float = 0
