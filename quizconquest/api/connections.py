"""
WebSocket connection registry with per-connection and broadcast delivery.
Delivery is fire-and-forget: a dead socket is logged and skipped, never raised
into game logic.
"""

import logging
import uuid
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self._sockets: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Accept the socket and assign it a session handle (also the player id)."""
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self._sockets[connection_id] = websocket
        logger.info("New user connected: %s", connection_id)
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        if self._sockets.pop(connection_id, None) is not None:
            logger.info("User disconnected: %s", connection_id)

    async def send(self, connection_id: str, message: dict[str, Any]) -> None:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            logger.debug("Dropping %s for absent connection %s", message.get("event"), connection_id)
            return
        try:
            await websocket.send_json(message)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning("Send to %s failed: %s", connection_id, e)

    async def broadcast(self, message: dict[str, Any]) -> None:
        for connection_id in list(self._sockets):
            await self.send(connection_id, message)
