# =============================================================================
# core/services/chat_history_service.py - Persisted Assistant Conversations
# =============================================================================
# The assistant keeps its working history in memory. This service keeps a
# durable copy of each exchange in ai_chat_history so students and admins
# can review past conversations.
#
# Recording is best-effort: a failed insert never hides the reply from the
# student.
# =============================================================================

import logging
from datetime import timedelta

from core.models.chat import ChatTurn, InteractionType
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now

logger = logging.getLogger(__name__)

# Admin oversight shows the last week, capped
REVIEW_WINDOW_DAYS = 7
REVIEW_LIMIT = 50


class ChatHistoryService:
    """Reads and writes the ai_chat_history table."""

    def __init__(self, db: SupabaseClient):
        self.db = db

    def record_turn(
        self,
        user_id: str,
        message: str,
        response: str,
        interaction_type: InteractionType = InteractionType.GENERAL,
    ) -> ChatTurn | None:
        """
        Store one exchange.

        Returns:
            The stored turn, or None if the insert failed
        """
        try:
            row = self.db.insert("ai_chat_history", {
                "user_id": str(user_id),
                "message": message,
                "response": response,
                "interaction_type": InteractionType(interaction_type).value,
            })
        except Exception as e:
            logger.warning(f"Failed to record chat turn for {user_id}: {e}")
            return None

        return ChatTurn.model_validate(row)

    def list_recent(self, user_id: str, limit: int = 20) -> list[ChatTurn]:
        """Most recent exchanges first."""
        response = (
            self.db.table("ai_chat_history")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [ChatTurn.model_validate(row) for row in response.data or []]

    def list_for_review(
        self,
        days: int = REVIEW_WINDOW_DAYS,
        limit: int = REVIEW_LIMIT,
    ) -> list[ChatTurn]:
        """
        Recent exchanges across all students, for admin oversight.

        Newest first, limited to the last `days` days, each joined with the
        student's profile.
        """
        since = utc_now() - timedelta(days=days)
        response = (
            self.db.table("ai_chat_history")
            .select("*")
            .gte("created_at", since.isoformat())
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        rows = response.data or []

        students = self.db.find_by_ids("profiles", (row.get("user_id") for row in rows))
        rows = SupabaseClient.attach_related(rows, students, "user_id", "student")

        return [ChatTurn.model_validate(row) for row in rows]
