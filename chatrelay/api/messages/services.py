# chatrelay/api/messages/services.py

from sqlalchemy import func
from sqlalchemy.orm import Session

from chatrelay.db.models.message import Message
from chatrelay.api.messages import schemas


# ---------------------------------------------------
# 🗄️ Transcript Store
# ---------------------------------------------------

def count_messages(db: Session, session_id: str) -> int:
    """Number of persisted messages for a session."""
    return db.query(func.count(Message.id))\
             .filter(Message.session_id == session_id)\
             .scalar() or 0


def create_message(db: Session, message_data: schemas.MessageCreate) -> Message:
    """Append a message and return the stored row with its id and timestamp."""
    message = Message(
        session_id=message_data.session_id,
        sender_role=message_data.sender_role.value,
        text=message_data.text,
        image_data=message_data.image_data,
        display_name=message_data.display_name,
        reply_to_text=message_data.reply_to_text,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def list_messages(db: Session, session_id: str) -> list[Message]:
    """Transcript of a session, oldest first."""
    return db.query(Message)\
             .filter(Message.session_id == session_id)\
             .order_by(Message.created_at.asc(), Message.id.asc())\
             .all()


def delete_messages(db: Session, session_id: str) -> int:
    """Remove a session's whole transcript. The caller commits."""
    return db.query(Message)\
             .filter(Message.session_id == session_id)\
             .delete(synchronize_session=False)
