# =============================================================================
# core/services/auth_service.py - Supabase Auth Operations
# =============================================================================
# Thin wrapper over the Supabase Auth API (sign up, sign in, sign out,
# current user). Each AuthService gets its own anon-key client because the
# Auth client keeps session state.
#
# Profile rows are NOT written here: the create-profile hook builds them
# from the new user's metadata (see profile_service.py).
# =============================================================================

import logging
from datetime import datetime, timezone

from supabase import Client

from app.auth.models import AuthSession, AuthUser
from app.exceptions import AuthError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class AuthService:
    """
    Example:
        auth = AuthService()
        session = auth.sign_in("ada@example.com", "secret123")
        user = auth.get_current_user(session.access_token)
    """

    def __init__(self, client: Client | None = None):
        self.client = client or SupabaseClient.create_auth_client()

    def sign_up(self, email: str, password: str, profile_fields: dict | None = None) -> AuthSession:
        """
        Create an account. Profile fields are stored as user metadata.

        Raises:
            AuthError: If Supabase rejects the sign-up
        """
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": profile_fields or {}},
            })
        except Exception as e:
            logger.warning(f"Sign-up failed for {email}: {e}")
            raise AuthError(f"Failed to create account: {e}") from e

        if response.user is None:
            raise AuthError("Failed to create account")

        logger.info(f"Signed up user {response.user.id}")
        return self._to_session(response.user, response.session)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Raises:
            AuthError: On wrong credentials or unconfirmed email
        """
        try:
            response = self.client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            raise AuthError(f"Failed to sign in: {e}") from e

        if response.user is None:
            raise AuthError("Failed to sign in")

        return self._to_session(response.user, response.session)

    def sign_out(self) -> None:
        self.client.auth.sign_out()

    def get_current_user(self, access_token: str | None = None) -> AuthUser | None:
        """
        The user behind `access_token` (or the client's own session).

        Returns None when nobody is signed in or the token is rejected.
        """
        try:
            response = self.client.auth.get_user(access_token) if access_token else self.client.auth.get_user()
        except Exception as e:
            logger.debug(f"No current user: {e}")
            return None

        if response is None or response.user is None:
            return None

        return AuthUser(id=str(response.user.id), email=response.user.email)

    @staticmethod
    def _to_session(user, session) -> AuthSession:
        expires_at = None
        if session is not None and getattr(session, "expires_at", None):
            expires_at = datetime.fromtimestamp(session.expires_at, tz=timezone.utc)

        return AuthSession(
            user=AuthUser(id=str(user.id), email=user.email),
            access_token=session.access_token if session else None,
            refresh_token=session.refresh_token if session else None,
            expires_at=expires_at,
            confirmation_required=session is None,
        )
