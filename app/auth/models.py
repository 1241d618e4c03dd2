# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from core.models.profile import Profile, UserRole


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a Supabase JWT or the Auth API.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None


class SignUpRequest(BaseModel):
    """
    New account details.

    profile fields travel as Supabase user metadata and are copied into
    the profile row by the create-profile hook.
    """
    email: str
    password: str = Field(..., min_length=6)
    full_name: str
    role: UserRole = UserRole.STUDENT
    school: Optional[str] = None
    grade: Optional[str] = None
    phone: Optional[str] = None

    def profile_fields(self) -> dict:
        return self.model_dump(exclude={"email", "password"}, mode="json", exclude_none=True)


class SignInRequest(BaseModel):
    email: str
    password: str


class AuthSession(BaseModel):
    """Result of a sign-up or sign-in."""
    user: AuthUser
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    confirmation_required: bool = Field(
        default=False,
        description="True when the account exists but the email must be confirmed first"
    )


class CurrentUser(BaseModel):
    """An authenticated user together with their profile (and so their role)."""
    user: AuthUser
    profile: Profile

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.profile.role


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    role: Optional[str] = None  # Postgres role, not the platform role
