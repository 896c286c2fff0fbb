"""WebSocket endpoint pushing reconciled target status to dashboards."""
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from ..dependencies import OWNER_HEADER, parse_owner_id
from ..services.websocket_manager import websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ws", tags=["live"])


@router.websocket("/status")
async def status_updates(websocket: WebSocket):
    """Stream ``status_update`` messages for the owner's targets.

    The owner comes from the X-Owner-Id header, like every HTTP route.
    A ``subscribed`` message confirms registration; messages from the
    client are ignored.
    """
    owner_id = parse_owner_id(websocket.headers.get(OWNER_HEADER))
    if owner_id is None:
        logger.warning("Rejected status websocket without X-Owner-Id")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket_manager.connect(owner_id, websocket)
    try:
        await websocket.send_json({"type": "subscribed", "owner_id": owner_id})
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await websocket_manager.disconnect(owner_id, websocket)
