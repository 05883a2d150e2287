import logging
from typing import Optional

from sqlalchemy.orm import Session

from chatrelay.api.messages import services
from chatrelay.api.messages.schemas import MessageCreate, MessageResponse
from chatrelay.config import settings
from chatrelay.db.models.message import SenderRole
from chatrelay.db.session import run_db
from chatrelay.relay import events
from chatrelay.relay.connections import Connection

logger = logging.getLogger(__name__)


def greet_if_new(db: Session, session_id: str, display_name: Optional[str], greeting_text: str) -> Optional[MessageResponse]:
    """Persist the greeting when the session has no messages yet.

    Count and insert are separate statements. Two joins racing on a brand
    new session can both see zero and both insert; the result is a second
    admin greeting in the transcript, which is accepted.
    """
    if services.count_messages(db, session_id) > 0:
        return None

    row = services.create_message(db, MessageCreate(
        session_id=session_id,
        sender_role=SenderRole.ADMIN,
        text=greeting_text,
        display_name=display_name,
    ))
    return MessageResponse.model_validate(row)


async def on_join(conn: Connection, session_id: str, display_name: Optional[str] = None) -> Optional[MessageResponse]:
    """Greet a first-time session. The greeting goes to the joining connection only.

    Store errors propagate so the caller can undo the subscription.
    """
    greeting = await run_db(greet_if_new, session_id, display_name, settings.GREETING_TEXT)

    if greeting is not None:
        logger.info("Greeting sent to new session %s", session_id)
        await conn.emit(events.MESSAGE, greeting)
    return greeting
