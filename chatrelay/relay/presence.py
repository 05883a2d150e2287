from chatrelay.relay import events
from chatrelay.relay.connections import ADMIN_ROOM, Connection, RoomHub, session_room


async def relay_user_typing(hub: RoomHub, conn: Connection, payload: events.UserTypingPayload) -> int:
    return await hub.emit(ADMIN_ROOM, events.USER_TYPING, {
        "sessionId": payload.session_id,
        "isTyping": payload.is_typing,
    })


async def relay_admin_typing(hub: RoomHub, conn: Connection, payload: events.AdminTypingPayload) -> int:
    # Sent as a bare boolean; the user side only ever watches one session.
    return await hub.emit(
        session_room(payload.target_session_id),
        events.ADMIN_TYPING,
        payload.is_typing,
        skip=conn,
    )
