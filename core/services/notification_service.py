# =============================================================================
# core/services/notification_service.py - Inbox Notifications
# =============================================================================
# Notifications are fire-and-forget: a failed insert is logged and never
# blocks the state transition that triggered it.
# =============================================================================

import logging

from core.models.notification import Notification
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class NotificationService:
    """Writes to and reads from the notifications table."""

    def __init__(self, db: SupabaseClient):
        self.db = db

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type: str = "info",
    ) -> Notification | None:
        """
        Best-effort insert of an inbox notification.

        Returns:
            The stored notification, or None if the insert failed
        """
        try:
            row = self.db.insert("notifications", {
                "user_id": str(user_id),
                "title": title,
                "message": message,
                "type": type,
                "read": False,
            })
        except Exception as e:
            logger.warning(f"Failed to notify user {user_id} ({title}): {e}")
            return None

        logger.debug(f"Notified user {user_id}: {title}")
        return Notification.model_validate(row)

    def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> list[Notification]:
        """Newest first."""
        query = (
            self.db.table("notifications")
            .select("*")
            .eq("user_id", str(user_id))
        )
        if unread_only:
            query = query.eq("read", False)

        response = query.order("created_at", desc=True).limit(limit).execute()
        return [Notification.model_validate(row) for row in response.data or []]

    def mark_as_read(self, notification_id: str, user_id: str) -> bool:
        """
        Mark one of the user's notifications read.

        Returns:
            False if no notification with that id belongs to the user
        """
        rows = self.db.update_where(
            "notifications",
            {"read": True},
            {"id": str(notification_id), "user_id": str(user_id)},
        )
        return bool(rows)
