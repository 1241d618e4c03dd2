# =============================================================================
# app/routers/hooks.py - Database Webhooks
# =============================================================================
# Supabase calls /hooks/create-profile when a row is inserted into
# auth.users. The body is the standard database-webhook payload:
#
#   {"type": "INSERT", "table": "users", "record": {...}, "old_record": null}
#
# Outside development the caller must send X-Webhook-Secret.
# =============================================================================

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Body, Header, HTTPException, status

from app.config import settings
from app.dependencies import ProfileServiceDep
from core.models.profile import Profile

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_webhook_secret(provided: str | None) -> None:
    """
    Raises:
        HTTPException: 401 if the secret is missing or wrong
    """
    expected = settings.WEBHOOK_SECRET
    if not expected:
        if settings.is_development:
            return
        logger.error("WEBHOOK_SECRET is not configured; rejecting webhook")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Webhook secret not configured")

    if not provided or not hmac.compare_digest(provided, expected):
        logger.warning("Webhook called with an invalid secret")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook secret")


@router.post("/create-profile")
async def create_profile(
    profiles: ProfileServiceDep,
    payload: dict[str, Any] = Body(...),
    x_webhook_secret: str | None = Header(default=None),
) -> dict:
    """
    Create the profile row for a new auth user.

    Events other than a user INSERT are acknowledged and ignored.
    """
    verify_webhook_secret(x_webhook_secret)

    profile: Profile | None = profiles.create_profile_from_auth_event(payload)
    if profile is None:
        return {"created": False, "message": "Event ignored"}

    return {"created": True, "profile": profile.model_dump(mode="json")}
