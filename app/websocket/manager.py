# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Manages WebSocket connections per change-feed channel and handles
# broadcasting.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   # Connect a client
#   await websocket_manager.connect("meal_requests", websocket)
#
#   # Broadcast to all clients subscribed to a channel
#   await websocket_manager.broadcast("meal_requests", {"type": "meal_requests_changed", ...})
#
#   # Disconnect a client
#   websocket_manager.disconnect("meal_requests", websocket)
# =============================================================================

import logging
from typing import Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# Tables whose changes are pushed to subscribers
CHANNELS = ("meal_requests", "donations")


class ConnectionManager:
    """
    Manages WebSocket connections organized by channel.

    Each channel can have many connected clients (dashboards, browser tabs).
    When a row in the channel's table changes, a small event is broadcast to
    all of them and they refetch.
    """

    def __init__(self):
        # channel -> set of WebSocket connections
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._total_connections = 0

    async def connect(self, channel: str, websocket: WebSocket) -> None:
        """
        Accept a new WebSocket connection and track it.

        Args:
            channel: The channel this connection subscribes to
            websocket: The WebSocket connection
        """
        await websocket.accept()

        if channel not in self.connections:
            self.connections[channel] = set()

        self.connections[channel].add(websocket)
        self._total_connections += 1

        logger.info(
            f"WebSocket subscribed to {channel}. "
            f"Total connections: {self._total_connections}"
        )

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        """
        Remove a WebSocket connection from tracking.

        Args:
            channel: The channel this connection was subscribed to
            websocket: The WebSocket connection to remove
        """
        subscribers = self.connections.get(channel)
        if subscribers and websocket in subscribers:
            subscribers.discard(websocket)
            self._total_connections -= 1

            if not subscribers:
                del self.connections[channel]

        logger.info(
            f"WebSocket unsubscribed from {channel}. "
            f"Total connections: {self._total_connections}"
        )

    async def broadcast(self, channel: str, message: dict) -> int:
        """
        Broadcast a message to all connections on a channel.

        Args:
            channel: The channel to broadcast to
            message: The message dict to send (will be JSON encoded)

        Returns:
            int: Number of clients the message was sent to
        """
        if channel not in self.connections:
            logger.debug(f"No subscribers on {channel}, skipping broadcast")
            return 0

        dead_connections: Set[WebSocket] = set()
        sent_count = 0

        for websocket in list(self.connections[channel]):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send to WebSocket: {e}")
                dead_connections.add(websocket)

        for ws in dead_connections:
            self.connections[channel].discard(ws)
            self._total_connections -= 1

        if dead_connections:
            logger.info(f"Cleaned up {len(dead_connections)} dead connections")

        if channel in self.connections and not self.connections[channel]:
            del self.connections[channel]

        logger.debug(
            f"Broadcast to {channel}: "
            f"type={message.get('type')}, sent to {sent_count} clients"
        )

        return sent_count

    def get_connection_count(self, channel: str | None = None) -> int:
        """
        Get the number of active connections.

        Args:
            channel: If provided, count for that channel. Otherwise total.
        """
        if channel:
            return len(self.connections.get(channel, set()))
        return self._total_connections

    def get_active_channels(self) -> list[str]:
        """Channels with at least one subscriber."""
        return list(self.connections.keys())


# Global singleton instance
websocket_manager = ConnectionManager()
