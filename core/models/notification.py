# =============================================================================
# core/models/notification.py - Inbox Notification Schemas
# =============================================================================

from datetime import datetime

from pydantic import BaseModel


class Notification(BaseModel):
    """A row from the notifications table."""

    id: str | None = None
    user_id: str
    title: str
    message: str
    type: str = "info"
    read: bool = False
    created_at: datetime | None = None
