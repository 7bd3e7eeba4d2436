"""Display connection manager - pushes kiosk state to local renderer sockets."""

import asyncio
from typing import Any
from uuid import uuid4

from fastapi import WebSocket

from checkin_kiosk.core.logging import get_logger

logger = get_logger(__name__)


class DisplayManager:
    """
    Manages WebSocket connections from the on-device renderer.

    Architecture:
    - Usually one display (the touchscreen); extra ones are allowed for
      diagnostics
    - Every connection receives every state revision
    - Dead connections are dropped on the first failed send
    """

    def __init__(self) -> None:
        # display_id -> WebSocket
        self._connections: dict[str, WebSocket] = {}

        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept and register a display connection.

        Returns:
            display_id: Unique identifier for this connection
        """
        await websocket.accept()
        display_id = str(uuid4())[:8]

        async with self._lock:
            self._connections[display_id] = websocket

        logger.info("Display connected", display_id=display_id)
        return display_id

    async def disconnect(self, display_id: str) -> None:
        async with self._lock:
            if self._connections.pop(display_id, None) is not None:
                logger.info("Display disconnected", display_id=display_id)

    async def send(self, display_id: str, message: dict[str, Any]) -> bool:
        """Send a message to one display."""
        async with self._lock:
            websocket = self._connections.get(display_id)
            if websocket is None:
                return False
            try:
                await websocket.send_json(message)
                return True
            except Exception as e:
                logger.error("Failed to send to display", display_id=display_id, error=str(e))
                del self._connections[display_id]
                return False

    async def broadcast(self, message: dict[str, Any]) -> int:
        """
        Send a message to every connected display.

        Returns:
            Number of displays that received the message
        """
        async with self._lock:
            sent_count = 0
            for display_id, websocket in list(self._connections.items()):
                try:
                    await websocket.send_json(message)
                    sent_count += 1
                except Exception as e:
                    logger.error("Failed to send to display", display_id=display_id, error=str(e))
                    # Remove dead connection
                    del self._connections[display_id]
            return sent_count

    async def close_all(self) -> None:
        async with self._lock:
            for websocket in self._connections.values():
                try:
                    await websocket.close()
                except Exception as e:
                    logger.debug("Display close failed", error=str(e))
            self._connections.clear()

    @property
    def connection_count(self) -> int:
        return len(self._connections)
