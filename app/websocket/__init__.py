# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Provides the realtime change feed for meal requests and donations.
#
# Usage:
#   from app.websocket import publish_change
#
#   await publish_change("meal_requests", "update", request.id)
# =============================================================================

from app.websocket.broadcast import change_message, publish_change
from app.websocket.manager import CHANNELS, websocket_manager

__all__ = [
    "CHANNELS",
    "change_message",
    "publish_change",
    "websocket_manager",
]
