# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# WebSocket endpoint for the meal request / donation change feed.
#
# Connect: ws://host/ws/{channel}?token={jwt}
#   channel is one of: meal_requests, donations
#
# Events:
#   - {"type": "meal_requests_changed", "event": "insert", "id": "..."}
#   - {"type": "donations_changed", "event": "update", "id": "..."}
# =============================================================================

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from jose import JWTError

from app.auth.dependencies import decode_access_token
from app.websocket.manager import CHANNELS, websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/{channel}")
async def change_feed_websocket(
    websocket: WebSocket,
    channel: str,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    Subscribe to change events for a table.

    Authentication is required via the `token` query parameter.

    Connection URL:
        ws://localhost:8000/ws/meal_requests?token={jwt}
    """
    # 1. Verify JWT token
    try:
        user = decode_access_token(token)
    except JWTError as e:
        logger.warning(f"WebSocket auth failed: {e}")
        await websocket.close(code=4001, reason="Invalid token")
        return

    # 2. Only known channels
    if channel not in CHANNELS:
        logger.warning(f"WebSocket: user {user.id} asked for unknown channel {channel}")
        await websocket.close(code=4004, reason="Unknown channel")
        return

    # 3. Accept connection and add to manager
    await websocket_manager.connect(channel, websocket)

    try:
        await websocket.send_json({
            "type": "connected",
            "channel": channel,
            "message": f"Subscribed to {channel} changes"
        })

        while True:
            try:
                data = await websocket.receive_text()

                # Handle ping/pong for keepalive
                if data == "ping":
                    await websocket.send_text("pong")
                else:
                    logger.debug(f"WebSocket received: {data[:100]}")

            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.warning(f"WebSocket receive error: {e}")
                break

    except WebSocketDisconnect:
        logger.info(f"WebSocket client {user.id} left {channel}")
    finally:
        websocket_manager.disconnect(channel, websocket)


@router.get("/ws/status")
async def websocket_status():
    """
    Get WebSocket connection statistics.

    Returns:
        dict: Connection counts and active channels
    """
    return {
        "total_connections": websocket_manager.get_connection_count(),
        "active_channels": websocket_manager.get_active_channels(),
        "channel_count": len(websocket_manager.get_active_channels())
    }
