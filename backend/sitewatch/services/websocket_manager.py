"""WebSocket connection manager for live target status updates."""
import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks dashboard WebSocket connections per owner and pushes reconciled state to them."""

    def __init__(self):
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, owner_id: str, websocket: WebSocket):
        """Accept a new WebSocket connection for ``owner_id``."""
        await websocket.accept()
        async with self._lock:
            self.connections.setdefault(owner_id, set()).add(websocket)
        logger.info(f"WebSocket connected for owner {owner_id}. Total connections: {self.connection_count}")

    async def disconnect(self, owner_id: str, websocket: WebSocket):
        """Forget a disconnected WebSocket."""
        async with self._lock:
            sockets = self.connections.get(owner_id)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    del self.connections[owner_id]
        logger.info(f"WebSocket disconnected for owner {owner_id}. Total connections: {self.connection_count}")

    async def send_to_owner(self, owner_id: str, message: Dict[str, Any]):
        """Send a message to every connection of one owner."""
        async with self._lock:
            sockets = list(self.connections.get(owner_id, ()))
        if not sockets:
            return

        message_json = json.dumps(message, default=str)

        disconnected = []
        for websocket in sockets:
            try:
                await websocket.send_text(message_json)
            except Exception as e:
                logger.debug(f"Failed to send to WebSocket: {e}")
                disconnected.append(websocket)

        for websocket in disconnected:
            await self.disconnect(owner_id, websocket)

    async def broadcast_status_update(
        self,
        owner_id: str,
        target_id: int,
        url: str,
        status: str,
        latency_ms: Optional[int],
        checked_at: datetime,
        location: Optional[str] = None,
    ):
        """Push a target's freshly reconciled state to its owner's dashboards."""
        await self.send_to_owner(owner_id, {
            "type": "status_update",
            "target_id": target_id,
            "url": url,
            "status": status,
            "latency_ms": latency_ms,
            "checked_at": checked_at.isoformat(),
            "location": location,
        })

    @property
    def connection_count(self) -> int:
        """Return the number of active connections across owners."""
        return sum(len(sockets) for sockets in self.connections.values())


# Global instance
websocket_manager = ConnectionManager()
