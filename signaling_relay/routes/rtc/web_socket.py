import logging
import uuid
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from typing import Any, Dict
from signaling_relay.routes.rtc.room import Rooms
from signaling_relay.routes.rtc.signaling import SignalingRouter
from signaling_relay.config import WS_PATH

logger = logging.getLogger(__name__)

websocket_router = APIRouter()

class ConnectionManager:
    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self.active_connections[connection_id] = websocket
        logger.info(f"Connection {connection_id} opened")
        return connection_id

    def disconnect(self, connection_id: str):
        if connection_id in self.active_connections:
            del self.active_connections[connection_id]
            logger.info(f"Connection {connection_id} closed")

    async def send(self, connection_id: str, event: str, data: Dict[str, Any]) -> bool:
        """Send one event to one connection, reporting failure instead of raising"""
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            logger.debug(f"Connection {connection_id} is gone, dropping {event}")
            return False
        try:
            await websocket.send_json({"event": event, "data": data})
        except Exception as e:
            logger.warning(f"Error sending {event} to connection {connection_id}: {e}")
            return False
        return True

# Global instances shared by every connection
rooms = Rooms()
manager = ConnectionManager()
signaling_router = SignalingRouter(rooms, manager)

@websocket_router.websocket(WS_PATH)
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint relaying signaling messages between room members"""
    connection_id = await manager.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE), message.get("reason"))
            logger.debug(f"Received frame from connection {connection_id}")
            # Binary frames carry no "text" and are dropped as malformed
            await signaling_router.handle_frame(connection_id, message.get("text"))

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for connection: {connection_id}")
    except Exception as e:
        logger.error(f"Error in WebSocket connection {connection_id}: {e}", exc_info=True)
        try:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        except Exception as close_error:
            logger.debug(f"Error closing WebSocket {connection_id}: {close_error}")
    finally:
        signaling_router.disconnect(connection_id)
        manager.disconnect(connection_id)

@websocket_router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "active_connections": len(manager.active_connections),
        **rooms.stats(),
    }
