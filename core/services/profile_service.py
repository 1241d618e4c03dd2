# =============================================================================
# core/services/profile_service.py - User Profiles
# =============================================================================
# Handles profile reads/updates and the create-profile hook that runs when
# Supabase Auth inserts a new user.
#
# Roles come from the user's sign-up metadata but are limited to the
# self-service roles (student, donor). Admin accounts are provisioned out of
# band, never through sign-up.
# =============================================================================

import logging
from typing import Any

from app.exceptions import ProfileNotFoundError
from core.models.profile import Profile, ProfileUpdate, UserRole
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = (UserRole.STUDENT, UserRole.DONOR)

# Metadata keys copied onto the profile row as-is
_METADATA_FIELDS = ("full_name", "avatar_url", "school", "grade", "phone")


def role_from_metadata(metadata: dict[str, Any] | None) -> UserRole:
    """
    Role requested at sign-up, defaulting to student.

    Unknown roles and attempts to self-assign admin fall back to student.
    """
    requested = (metadata or {}).get("role") or UserRole.STUDENT.value
    try:
        role = UserRole(str(requested).lower())
    except ValueError:
        logger.warning(f"Unknown role '{requested}' in sign-up metadata; using student")
        return UserRole.STUDENT

    if role not in SELF_SERVICE_ROLES:
        logger.warning(f"Role '{role.value}' can't be self-assigned; using student")
        return UserRole.STUDENT

    return role


class ProfileService:
    """
    Example:
        profiles = ProfileService(db)
        profile = profiles.get_profile(user.id)
    """

    def __init__(self, db: SupabaseClient):
        self.db = db

    def get_profile(self, user_id: str) -> Profile:
        """
        Raises:
            ProfileNotFoundError: If the user has no profile row
        """
        row = self.db.fetch_by_id("profiles", user_id)
        if not row:
            raise ProfileNotFoundError(str(user_id))
        return Profile.model_validate(row)

    def update_profile(self, user_id: str, updates: ProfileUpdate) -> Profile:
        """Apply the fields that were set; role and balance can't change here."""
        values = updates.model_dump(exclude_unset=True)
        if not values:
            return self.get_profile(user_id)

        values["updated_at"] = utc_now().isoformat()
        rows = self.db.update_where("profiles", values, {"id": str(user_id)})
        if not rows:
            raise ProfileNotFoundError(str(user_id))

        logger.info(f"Updated profile {user_id}: {sorted(values)}")
        return Profile.model_validate(rows[0])

    def create_profile_from_auth_event(self, payload: dict[str, Any]) -> Profile | None:
        """
        Create the profile row for a newly inserted auth user.

        Args:
            payload: Database webhook body: {"type": "INSERT", "record": {...}}

        Returns:
            The new profile, or None if the event isn't a user insert
        """
        record = payload.get("record") or {}
        if payload.get("type") != "INSERT" or not record.get("id"):
            logger.debug(f"Ignoring auth event of type {payload.get('type')}")
            return None

        metadata = record.get("user_metadata") or record.get("raw_user_meta_data") or {}
        values = {
            "id": str(record["id"]),
            "email": record.get("email"),
            "role": role_from_metadata(metadata).value,
            "updated_at": utc_now().isoformat(),
        }
        for field in _METADATA_FIELDS:
            values[field] = metadata.get(field)

        try:
            row = self.db.insert("profiles", values)
        except Exception as e:
            logger.error(f"Profile insert failed for user {record['id']}: {e}")
            raise

        logger.info(f"Created {values['role']} profile for user {record['id']}")
        return Profile.model_validate(row)
