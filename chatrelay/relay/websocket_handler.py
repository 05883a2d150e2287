import json
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from chatrelay.relay import events, greeting, presence
from chatrelay.relay.connections import ADMIN_ROOM, Connection, RoomHub, session_room
from chatrelay.relay.notifications import NotificationDispatcher
from chatrelay.relay.router import send_message

logger = logging.getLogger(__name__)


async def handle_join(hub: RoomHub, notifications: NotificationDispatcher, conn: Connection, data: Any):
    payload = events.JoinPayload.model_validate(events.session_payload(data))
    if conn.session_id == payload.session_id:
        return

    # A user connection follows one session at a time.
    if conn.session_id is not None:
        hub.leave(conn, session_room(conn.session_id))
    room = session_room(payload.session_id)
    hub.join(conn, room)
    conn.session_id = None

    try:
        await greeting.on_join(conn, payload.session_id, payload.display_name)
    except SQLAlchemyError:
        # Not joined: a retried join starts over, greeting check included.
        hub.leave(conn, room)
        logger.exception("Error checking/creating session %s", payload.session_id)
        await conn.emit(events.ERROR, {"message": "Failed to join session"})
        return
    except Exception:
        hub.leave(conn, room)
        raise

    conn.session_id = payload.session_id
    logger.info("User joined session: %s", payload.session_id)


async def handle_admin_join(hub: RoomHub, notifications: NotificationDispatcher, conn: Connection, data: Any):
    conn.is_admin = True
    hub.join(conn, ADMIN_ROOM)
    logger.info("Admin connected: %s", conn.id)


async def handle_admin_select_session(hub: RoomHub, notifications: NotificationDispatcher, conn: Connection, data: Any):
    payload = events.SelectSessionPayload.model_validate(events.session_payload(data))
    if not conn.is_admin:
        logger.warning("Ignoring admin-select-session from non-admin %s", conn.id)
        return
    hub.join(conn, session_room(payload.session_id))
    logger.info("Admin joined session: %s", payload.session_id)


async def handle_admin_typing(hub: RoomHub, notifications: NotificationDispatcher, conn: Connection, data: Any):
    payload = events.AdminTypingPayload.model_validate(data)
    await presence.relay_admin_typing(hub, conn, payload)


async def handle_user_typing(hub: RoomHub, notifications: NotificationDispatcher, conn: Connection, data: Any):
    payload = events.UserTypingPayload.model_validate(data)
    await presence.relay_user_typing(hub, conn, payload)


async def handle_send_message(hub: RoomHub, notifications: NotificationDispatcher, conn: Connection, data: Any):
    payload = events.SendMessagePayload.model_validate(data)
    await send_message(hub, notifications, conn, payload)


EVENT_HANDLERS = {
    events.JOIN: handle_join,
    events.ADMIN_JOIN: handle_admin_join,
    events.ADMIN_SELECT_SESSION: handle_admin_select_session,
    events.ADMIN_TYPING: handle_admin_typing,
    events.USER_TYPING: handle_user_typing,
    events.SEND_MESSAGE: handle_send_message,
}


async def dispatch_frame(hub: RoomHub, notifications: NotificationDispatcher, conn: Connection, raw: str):
    """Decode one ``{"event", "data"}`` frame and run its handler.

    Bad frames and invalid payloads are answered with an ``error`` event
    and never reach the store. Any other failure is logged and reported the
    same way; the connection stays open.
    """
    try:
        frame = json.loads(raw)
    except ValueError:
        await conn.emit(events.ERROR, {"message": "Malformed frame"})
        return

    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        await conn.emit(events.ERROR, {"message": "Malformed frame"})
        return

    event = frame["event"]
    handler = EVENT_HANDLERS.get(event)
    if handler is None:
        await conn.emit(events.ERROR, {"message": f"Unknown event: {event}"})
        return

    try:
        await handler(hub, notifications, conn, frame.get("data"))
    except ValidationError as e:
        logger.info("Rejected %s from %s: %s", event, conn.id, e.errors())
        await conn.emit(events.ERROR, {"message": f"Invalid {event} payload"})
    except WebSocketDisconnect:
        raise
    except Exception:
        logger.exception("Error handling %s from %s", event, conn.id)
        await conn.emit(events.ERROR, {"message": f"Failed to handle {event}"})


async def websocket_endpoint(websocket: WebSocket):
    """Serve one relay connection until the client goes away."""
    hub: RoomHub = websocket.app.state.hub
    notifications: NotificationDispatcher = websocket.app.state.notifications

    await websocket.accept()
    conn = Connection(websocket)
    hub.register(conn)
    logger.info("New client connected: %s", conn.id)

    try:
        while True:
            raw = await websocket.receive_text()
            await dispatch_frame(hub, notifications, conn, raw)
    except WebSocketDisconnect:
        logger.info("Client disconnected: %s", conn.id)
    finally:
        hub.unregister(conn)
