import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chatrelay.api.messages import services
from chatrelay.api.messages.schemas import MessageCreate, MessageResponse
from chatrelay.db.models.message import SenderRole
from chatrelay.db.session import run_db
from chatrelay.relay import events
from chatrelay.relay.connections import ADMIN_ROOM, Connection, RoomHub, session_room
from chatrelay.relay.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


def store_message(db: Session, message_data: MessageCreate) -> MessageResponse:
    return MessageResponse.model_validate(services.create_message(db, message_data))


async def send_message(
    hub: RoomHub,
    notifications: NotificationDispatcher,
    conn: Connection,
    payload: events.SendMessagePayload,
) -> Optional[MessageResponse]:
    """Persist a message, then fan it out.

    Nothing is broadcast until the store has returned the row, so whatever a
    client receives is already durable. Store failures go back to the sender
    as an ``error`` event. Admin replies schedule a push notification whose
    outcome never reaches the sender.
    """
    message_data = MessageCreate(
        session_id=payload.session_id,
        sender_role=payload.sender_role,
        text=payload.text,
        image_data=payload.image_data,
        display_name=payload.display_name,
        reply_to_text=payload.reply_to_text,
    )
    try:
        message = await run_db(store_message, message_data)
    except SQLAlchemyError:
        logger.exception("Error saving message for session %s", payload.session_id)
        await conn.emit(events.ERROR, {"message": "Failed to send message"})
        return None

    await hub.emit(session_room(message.session_id), events.MESSAGE, message)

    role = payload.sender_role
    if role is SenderRole.USER:
        await hub.emit(ADMIN_ROOM, events.NEW_USER_MESSAGE, {
            "sessionId": message.session_id,
            "message": message,
        })
    elif role is SenderRole.ADMIN:
        notifications.schedule(message.session_id, message.text)
    else:
        raise ValueError(f"Unhandled sender role: {role!r}")

    return message
