import logging
from typing import Any, Dict, Optional, Protocol

from .messages import (
    IceCandidate,
    IceCandidateReply,
    Join,
    LocalDescription,
    Malformed,
    RemoteDescription,
    SignalMessage,
    Unknown,
    decode_frame,
    decode_message,
)
from .room import Rooms

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, connection_id: str, event: str, data: Dict[str, Any]) -> bool:
        ...


class SignalingRouter:
    """Routes decoded signaling messages between members of the same room"""

    def __init__(self, rooms: Rooms, transport: Transport):
        self.rooms = rooms
        self.transport = transport

    async def handle_frame(self, connection_id: str, text: Optional[str]):
        await self.dispatch(connection_id, decode_frame(text))

    async def handle_message(self, connection_id: str, message: Any):
        await self.dispatch(connection_id, decode_message(message))

    async def dispatch(self, connection_id: str, message: SignalMessage):
        if isinstance(message, Join):
            self.rooms.join(connection_id, message.room_id)
            logger.info(f"Connection {connection_id} joined room {message.room_id}")

        elif isinstance(message, (LocalDescription, RemoteDescription, IceCandidate, IceCandidateReply)):
            await self.broadcast(connection_id, message.event, message.payload())

        elif isinstance(message, Unknown):
            logger.debug(f"Ignoring unknown event '{message.event}' from connection {connection_id}")

        elif isinstance(message, Malformed):
            # Dropped; the connection stays open
            logger.warning(f"Dropping malformed message from connection {connection_id}: {message.reason}")

    async def broadcast(self, sender_id: str, event: str, data: Dict[str, Any]) -> int:
        """Deliver to every other member of the sender's room.

        The target list is a snapshot taken under the registry lock; sending
        happens afterwards. Returns the number of successful deliveries.
        """
        targets = self.rooms.broadcast_targets(sender_id)
        logger.debug(f"Broadcasting {event} from {sender_id} to {len(targets)} peers")

        delivered = 0
        # One target at a time; a slow peer holds up the sender until its send returns
        for target in targets:
            try:
                ok = await self.transport.send(target, event, data)
            except Exception as e:
                logger.warning(f"Error delivering {event} to connection {target}: {e}")
                continue
            if ok:
                delivered += 1
            else:
                logger.warning(f"Could not deliver {event} to connection {target}")
        return delivered

    def disconnect(self, connection_id: str):
        room_id = self.rooms.leave(connection_id)
        if room_id is not None:
            logger.info(f"Connection {connection_id} left room {room_id}")
