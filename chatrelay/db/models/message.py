# chatrelay/db/models/message.py
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Index

from chatrelay.db.session import Base


class SenderRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


def _utcnow():
    return datetime.now(timezone.utc)


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(255), nullable=False)
    sender_role = Column(String(10), nullable=False)  # 'user' or 'admin'
    text = Column(Text, nullable=False, default="")
    image_data = Column(Text, nullable=True)
    display_name = Column(String(255), nullable=True)
    reply_to_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_messages_session_id_created_at", "session_id", "created_at"),
    )
