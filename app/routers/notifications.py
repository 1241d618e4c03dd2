# =============================================================================
# app/routers/notifications.py - Inbox Endpoints
# =============================================================================

from fastapi import APIRouter, Depends, HTTPException, Query

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser
from app.dependencies import NotificationServiceDep
from core.models.notification import Notification

router = APIRouter()


@router.get("", response_model=list[Notification])
async def list_notifications(
    notifications: NotificationServiceDep,
    user: AuthUser = Depends(get_current_user),
    unread_only: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
):
    """The caller's notifications, newest first."""
    return notifications.list_for_user(user.id, unread_only=unread_only, limit=limit)


@router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    notifications: NotificationServiceDep,
    user: AuthUser = Depends(get_current_user),
) -> dict:
    """
    Raises:
        404: If the notification doesn't exist or isn't the caller's
    """
    if not notifications.mark_as_read(notification_id, user.id):
        raise HTTPException(status_code=404, detail=f"Notification not found: {notification_id}")
    return {"id": notification_id, "read": True}
