from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from chatrelay.db.models.push_registration import PushRegistration


def register_push_token(db: Session, session_id: str, token: str) -> PushRegistration:
    """Store the device token for a session, replacing any earlier one."""
    registration = db.get(PushRegistration, session_id)
    if registration:
        registration.token = token
        registration.updated_at = datetime.now(timezone.utc)
    else:
        registration = PushRegistration(session_id=session_id, token=token)
        db.add(registration)
    db.commit()
    db.refresh(registration)
    return registration


def get_push_token(db: Session, session_id: str) -> Optional[str]:
    registration = db.get(PushRegistration, session_id)
    return registration.token if registration else None


def clear_push_token(db: Session, session_id: str) -> int:
    """Drop a session's registration. The caller commits."""
    return db.query(PushRegistration)\
             .filter(PushRegistration.session_id == session_id)\
             .delete(synchronize_session=False)
