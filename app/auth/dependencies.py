# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and roles.
#
# Token verification supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret), only when SUPABASE_JWT_SECRET is set
#
# Tokens whose key cannot be resolved are rejected; there is no fallback.
#
# The token only proves WHO the caller is. The platform role (student,
# donor, admin) comes from the caller's profile row.
#
# Usage:
#   from app.auth import get_current_user, require_role, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
#
#   @router.post("/admin-only")
#   async def admin_only(current: CurrentUser = Depends(require_role(UserRole.ADMIN))):
#       ...
# =============================================================================

import logging
import time
from typing import Callable

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser, CurrentUser
from app.config import settings
from app.exceptions import PermissionDeniedError, ProfileNotFoundError
from core.models.profile import UserRole
from core.services.profile_service import ProfileService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url() -> str:
    """JWKS endpoint of the Supabase project."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    # Return cached if valid
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys are better than none
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _hs256_secret() -> str:
    """
    Raises:
        JWTError: If no HS256 secret is configured
    """
    if not settings.SUPABASE_JWT_SECRET:
        raise JWTError("HS256 tokens are not accepted: SUPABASE_JWT_SECRET is not set")
    return settings.SUPABASE_JWT_SECRET


def _get_signing_key(token: str) -> tuple:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification

    Raises:
        JWTError: If the header is unreadable, HS256 is used without a
            configured secret, or no JWKS key matches
    """
    unverified_header = jwt.get_unverified_header(token)

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return _hs256_secret(), "HS256"

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}")
    raise JWTError(f"No signing key found for alg={alg}")


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token.

    Raises:
        ExpiredSignatureError: If the token has expired
        JWTError: If the token is invalid or has no subject
    """
    signing_key, algorithm = _get_signing_key(token)

    payload = jwt.decode(
        token,
        signing_key,
        algorithms=[algorithm],
        audience="authenticated"
    )

    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Invalid token: missing user ID")

    return AuthUser(id=str(user_id), email=payload.get("email"))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    try:
        user = decode_access_token(credentials.credentials)
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    logger.debug(f"Authenticated user: {user.id}")
    return user


def get_profile_service() -> ProfileService:
    return ProfileService(SupabaseClient.default())


async def get_current_profile(
    user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
) -> CurrentUser:
    """
    The authenticated user together with their profile.

    Raises:
        ProfileNotFoundError: If the create-profile hook hasn't run yet
    """
    profile = profiles.get_profile(user.id)
    return CurrentUser(user=user, profile=profile)


def require_role(*roles: UserRole) -> Callable:
    """
    Dependency factory that only lets the given roles through.

    Usage:
        @router.post("/{request_id}/approve")
        async def approve(current: CurrentUser = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    allowed = list(roles)

    async def dependency(current: CurrentUser = Depends(get_current_profile)) -> CurrentUser:
        if current.role not in allowed:
            logger.warning(f"User {current.id} with role {current.role.value} denied")
            raise PermissionDeniedError(
                action="access this endpoint",
                required_roles=[role.value for role in allowed],
                actual_role=current.role.value,
            )
        return current

    return dependency


__all__ = [
    "decode_access_token",
    "get_current_user",
    "get_current_profile",
    "get_profile_service",
    "require_role",
    "ProfileNotFoundError",
]
