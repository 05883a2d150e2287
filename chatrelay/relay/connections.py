import asyncio
import logging
import uuid
from typing import Any, Dict, Optional, Set

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)

ADMIN_ROOM = "admin"


def session_room(session_id: str) -> str:
    """Room key for a session. Prefixed so no session id can alias the admin room."""
    return f"session:{session_id}"


class Connection:
    """State owned by one live socket.

    Room membership lives here and goes away with the connection, so a
    disconnect only has to hand the object back to the hub.
    """

    def __init__(self, websocket):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self.is_admin = False
        self.session_id: Optional[str] = None
        self.rooms: Set[str] = set()

    async def emit(self, event: str, data: Any = None):
        await self.websocket.send_json({"event": event, "data": jsonable_encoder(data)})

    def __repr__(self):
        return f"<Connection {self.id} admin={self.is_admin} session={self.session_id}>"


class RoomHub:
    """In-process broadcast authority: room name -> subscribed connections."""

    def __init__(self):
        self._rooms: Dict[str, Set[Connection]] = {}
        self._connections: Dict[str, Connection] = {}

    def register(self, conn: Connection):
        self._connections[conn.id] = conn

    def unregister(self, conn: Connection):
        for room in list(conn.rooms):
            self.leave(conn, room)
        self._connections.pop(conn.id, None)

    def join(self, conn: Connection, room: str):
        self._rooms.setdefault(room, set()).add(conn)
        conn.rooms.add(room)

    def leave(self, conn: Connection, room: str):
        members = self._rooms.get(room)
        if members is not None:
            members.discard(conn)
            if not members:
                del self._rooms[room]
        conn.rooms.discard(room)

    def members(self, room: str) -> Set[Connection]:
        return set(self._rooms.get(room, ()))

    async def emit(self, room: str, event: str, data: Any = None, skip: Optional[Connection] = None) -> int:
        """Send an event to every member of ``room`` except ``skip``.

        A socket that fails to take the frame is logged and skipped; the
        rest of the room still receives it. Returns the delivered count.
        """
        targets = [conn for conn in self.members(room) if conn is not skip]
        if not targets:
            return 0

        frame = {"event": event, "data": jsonable_encoder(data)}
        results = await asyncio.gather(
            *(conn.websocket.send_json(frame) for conn in targets),
            return_exceptions=True,
        )

        delivered = 0
        for conn, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning("Dropped %s for %r: %s", event, conn, result)
            else:
                delivered += 1
        return delivered

    def stats(self) -> dict:
        return {
            "connections": len(self._connections),
            "admins": len(self._rooms.get(ADMIN_ROOM, ())),
            "rooms": len(self._rooms),
        }
