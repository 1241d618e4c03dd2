# =============================================================================
# app/websocket/broadcast.py - Change Events
# =============================================================================
# Routers call publish_change() after a successful write to meal_requests
# or donations. Subscribers get a small event and refetch; the event is a
# hint, never a source of truth.
#
# Event shape:
#   {"type": "meal_requests_changed", "event": "update", "id": "..."}
# =============================================================================

import logging
from typing import Literal

from app.websocket.manager import CHANNELS, websocket_manager

logger = logging.getLogger(__name__)

ChangeEvent = Literal["insert", "update"]


def change_message(channel: str, event: ChangeEvent, row_id: str | None) -> dict:
    return {
        "type": f"{channel}_changed",
        "event": event,
        "id": str(row_id) if row_id is not None else None,
    }


async def publish_change(channel: str, event: ChangeEvent, row_id: str | None) -> int:
    """
    Tell subscribers that a row changed.

    A failed broadcast never fails the write that triggered it.

    Returns:
        int: Number of clients notified
    """
    if channel not in CHANNELS:
        raise ValueError(f"Unknown change-feed channel: {channel}")

    try:
        return await websocket_manager.broadcast(channel, change_message(channel, event, row_id))
    except Exception as e:
        logger.warning(f"Failed to publish {event} on {channel} for {row_id}: {e}")
        return 0
