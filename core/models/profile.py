# =============================================================================
# core/models/profile.py - User Profile Schemas
# =============================================================================
# A profile row exists for every Supabase Auth user. The role is a closed
# set and decides which operations the user may perform.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """
    Platform roles.

    - student: requests meals, uses the assistant
    - donor: funds approved meal requests, holds a prepaid balance
    - admin: approves or rejects meal requests
    """
    STUDENT = "student"
    DONOR = "donor"
    ADMIN = "admin"


class Profile(BaseModel):
    """A row from the profiles table."""

    id: str
    email: str | None = None
    full_name: str | None = None
    role: UserRole = UserRole.STUDENT
    school: str | None = None
    grade: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    balance: float = Field(default=0, ge=0)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    full_name: str | None = None
    school: str | None = None
    grade: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
