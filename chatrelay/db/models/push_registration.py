# chatrelay/db/models/push_registration.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime

from chatrelay.db.session import Base


class PushRegistration(Base):
    """Latest device token per session. Last write wins."""

    __tablename__ = "push_registrations"

    session_id = Column(String(255), primary_key=True)
    token = Column(String(512), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
