# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-up / sign-in go through Supabase Auth on the server so the client
# only ever deals with the returned session. Profile rows are created by the
# create-profile hook (app/routers/hooks.py), not here.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, status

from app.auth.dependencies import get_current_profile, get_current_user, get_profile_service
from app.auth.models import AuthSession, AuthUser, CurrentUser, SignInRequest, SignUpRequest
from core.models.profile import Profile, ProfileUpdate
from core.services.auth_service import AuthService
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_auth_service() -> AuthService:
    return AuthService()


@router.post("/signup", response_model=AuthSession, status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: SignUpRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthSession:
    """
    Create an account.

    `confirmation_required` is true when the project requires email
    confirmation; no tokens are returned in that case.

    Raises:
        400: If Supabase rejects the sign-up
    """
    return auth.sign_up(request.email, request.password, request.profile_fields())


@router.post("/signin", response_model=AuthSession)
async def sign_in(
    request: SignInRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthSession:
    """
    Exchange email and password for a session.

    Raises:
        400: On wrong credentials
    """
    return auth.sign_in(request.email, request.password)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    user: AuthUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> None:
    auth.sign_out()
    logger.info(f"User {user.id} signed out")


@router.get("/me", response_model=Profile)
async def get_current_user_info(
    current: CurrentUser = Depends(get_current_profile),
) -> Profile:
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
        404: If the profile hasn't been created yet
    """
    return current.profile


@router.patch("/me", response_model=Profile)
async def update_current_user_info(
    updates: ProfileUpdate,
    user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> Profile:
    """Update name, school, grade, phone or avatar."""
    return profiles.update_profile(user.id, updates)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": user.id,
        "email": user.email
    }
