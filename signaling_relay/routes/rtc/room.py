import threading
from typing import Dict, List, Optional


class Rooms:
    """Room membership registry.

    Tracks which room every connection belongs to and the members of every
    room. Both tables are always updated together under one lock, so callers
    only ever see a consistent view.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._peers: Dict[str, Dict[str, None]] = {}  # room_id -> ordered set(connection_id)
        self._peer_rooms: Dict[str, str] = {}  # connection_id -> room_id

    def join(self, connection_id: str, room_id: str):
        with self._lock:
            current = self._peer_rooms.get(connection_id)
            if current == room_id:
                return
            # A connection lives in exactly one room
            if current is not None:
                self._discard(current, connection_id)

            self._peers.setdefault(room_id, {})[connection_id] = None
            self._peer_rooms[connection_id] = room_id

    def leave(self, connection_id: str) -> Optional[str]:
        """Remove a connection from its current room, returning that room"""
        with self._lock:
            room_id = self._peer_rooms.pop(connection_id, None)
            if room_id is not None:
                self._discard(room_id, connection_id)
            return room_id

    def broadcast_targets(self, connection_id: str) -> List[str]:
        """Everyone in the connection's room except the connection itself"""
        with self._lock:
            room_id = self._peer_rooms.get(connection_id)
            if room_id is None:
                return []
            return [p for p in self._peers.get(room_id, ()) if p != connection_id]

    def get_peers_in_room(self, room_id: str) -> List[str]:
        with self._lock:
            return list(self._peers.get(room_id, ()))

    def get_peer_room(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._peer_rooms.get(connection_id)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "active_rooms": len(self._peers),
                "joined_connections": len(self._peer_rooms),
            }

    def _discard(self, room_id: str, connection_id: str):
        # caller holds the lock
        members = self._peers.get(room_id)
        if members is None:
            return
        members.pop(connection_id, None)
        if not members:
            self._peers.pop(room_id, None)
