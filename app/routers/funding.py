# =============================================================================
# app/routers/funding.py - Approval, Donation and Balance Endpoints
# =============================================================================
# Meal request lifecycle as seen by admins and donors:
#
#   pending --admin approves--> approved --donor pays--> funded
#   pending --admin rejects---> rejected
#
# Donors pay through the payment gateway's checkout page. The gateway then
# redirects to /payments/callback with the reference, which is verified
# server-side before anything is marked completed or funded.
# =============================================================================

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from app.auth.dependencies import get_current_profile, require_role
from app.auth.models import CurrentUser
from app.dependencies import FundingServiceDep
from app.websocket.broadcast import publish_change
from core.models.funding import (
    AdminStats,
    BalanceResponse,
    Donation,
    DonationCheckout,
    DonationCreate,
    TopUpCreate,
)
from core.models.meal import MealRequest, MealRequestStatus
from core.models.profile import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class PaymentConfirmation(BaseModel):
    """Outcome of a verified payment callback."""
    reference: str
    kind: Literal["donation", "top_up"]
    meal_request: MealRequest | None = None
    balance: float | None = None


# =============================================================================
# Meal Requests
# =============================================================================

@router.get("/requests", response_model=list[MealRequest])
async def list_meal_requests(
    funding: FundingServiceDep,
    current: CurrentUser = Depends(get_current_profile),
    request_status: MealRequestStatus | None = Query(default=None, alias="status"),
):
    """
    Meal requests joined with their students, newest first.

    - Students only see their own requests
    - Donors see approved requests unless they ask for another status
    - Admins see everything
    """
    if current.role == UserRole.STUDENT:
        return funding.list_meal_requests(status=request_status, student_id=current.id)

    if current.role == UserRole.DONOR and request_status is None:
        request_status = MealRequestStatus.APPROVED

    return funding.list_meal_requests(status=request_status)


@router.post("/requests/{request_id}/approve", response_model=MealRequest)
async def approve_meal_request(
    request_id: str,
    funding: FundingServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.ADMIN)),
):
    """
    Approve a pending request so donors can fund it.

    Raises:
        404: Unknown request
        409: Request isn't pending (or changed concurrently)
    """
    approved = funding.approve(request_id, current.profile)
    await publish_change("meal_requests", "update", approved.id)
    return approved


@router.post("/requests/{request_id}/reject", response_model=MealRequest)
async def reject_meal_request(
    request_id: str,
    funding: FundingServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.ADMIN)),
):
    rejected = funding.reject(request_id, current.profile)
    await publish_change("meal_requests", "update", rejected.id)
    return rejected


# =============================================================================
# Donations
# =============================================================================

@router.post("/donations", response_model=DonationCheckout, status_code=status.HTTP_201_CREATED)
async def create_donation(
    request: DonationCreate,
    funding: FundingServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.DONOR)),
):
    """
    Start funding an approved meal request.

    Returns the checkout URL to send the donor to. The donation stays
    pending until the payment callback is verified.

    Raises:
        409: Request isn't approved
        502: Payment gateway unavailable
    """
    checkout = funding.initiate_donation(request.meal_request_id, current.profile, request.message)
    await publish_change("donations", "insert", checkout.donation.id)
    return checkout


@router.get("/donations", response_model=list[Donation])
async def list_donations(
    funding: FundingServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.DONOR, UserRole.ADMIN)),
    meal_request_id: str | None = Query(default=None),
):
    """Donors see their own donations; admins see all."""
    donor_id = current.id if current.role == UserRole.DONOR else None
    return funding.list_donations(donor_id=donor_id, meal_request_id=meal_request_id)


@router.get("/payments/callback", response_model=PaymentConfirmation)
async def payment_callback(
    funding: FundingServiceDep,
    reference: str = Query(..., min_length=1),
):
    """
    Confirm a payment after the gateway redirect.

    Unauthenticated: the reference is only trusted after it matches a pending
    donation and the gateway confirms the full amount.

    Raises:
        402: Gateway didn't confirm the payment
        404: Unknown reference
        409: Already confirmed, or the request was already funded (refund needed)
        500: Donation completed but the meal request couldn't be marked funded
    """
    donation = funding.get_donation_by_reference(reference)

    if donation.meal_request_id is None:
        balance = funding.confirm_top_up(reference)
        await publish_change("donations", "update", donation.id)
        return PaymentConfirmation(reference=reference, kind="top_up", balance=balance)

    funded = funding.confirm_payment(reference)
    await publish_change("donations", "update", donation.id)
    await publish_change("meal_requests", "update", funded.id)
    return PaymentConfirmation(reference=reference, kind="donation", meal_request=funded)


# =============================================================================
# Donor Balance
# =============================================================================

@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    funding: FundingServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.DONOR)),
):
    return BalanceResponse(donor_id=current.id, balance=funding.get_donor_balance(current.id))


@router.post("/balance/top-up", response_model=DonationCheckout, status_code=status.HTTP_201_CREATED)
async def top_up_balance(
    request: TopUpCreate,
    funding: FundingServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.DONOR)),
):
    """Start a payment that adds funds to the donor's balance once verified."""
    checkout = funding.initiate_top_up(current.profile, request.amount)
    await publish_change("donations", "insert", checkout.donation.id)
    return checkout


# =============================================================================
# Admin
# =============================================================================

@router.get("/stats", response_model=AdminStats)
async def admin_stats(
    funding: FundingServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.ADMIN)),
):
    return funding.get_admin_stats(current.profile)
