# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth, plus role checks
# based on the caller's profile.
#
# Usage:
#   from app.auth import get_current_profile, require_role, CurrentUser
#
#   @router.get("/protected")
#   async def protected(current: CurrentUser = Depends(get_current_profile)):
#       return {"user_id": current.id, "role": current.role}
# =============================================================================

from app.auth.dependencies import (
    decode_access_token,
    get_current_profile,
    get_current_user,
    require_role,
)
from app.auth.models import AuthSession, AuthUser, CurrentUser

__all__ = [
    "decode_access_token",
    "get_current_profile",
    "get_current_user",
    "require_role",
    "AuthSession",
    "AuthUser",
    "CurrentUser",
]
