# chatrelay/api/admin/services.py

import secrets

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from chatrelay.api.messages import services as message_services
from chatrelay.api.push import services as push_services
from chatrelay.config import settings
from chatrelay.db.models.message import Message, SenderRole


def verify_admin_password(password: str) -> bool:
    return secrets.compare_digest(
        password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8")
    )


def _session_name(db: Session, role: SenderRole, latest: bool):
    """Correlated lookup of one display name a role attached to each session."""
    named = aliased(Message)
    order = (named.created_at.desc(), named.id.desc()) if latest else (named.created_at.asc(), named.id.asc())
    return db.query(named.display_name)\
             .filter(
                 named.session_id == Message.session_id,
                 named.sender_role == role.value,
                 named.display_name.isnot(None),
                 named.display_name != "",
             )\
             .order_by(*order)\
             .limit(1)\
             .correlate(Message)\
             .scalar_subquery()


def list_sessions(db: Session) -> list[dict]:
    """Every session with its latest activity and display name, newest first.

    The display name is the latest one the user sent. Sessions where the user
    never sent one fall back to the earliest admin-side name, the one the
    greeting was addressed to, so later admin replies never rename a session.
    """
    last_message = func.max(Message.created_at).label("last_message")
    display_name = func.coalesce(
        _session_name(db, SenderRole.USER, latest=True),
        _session_name(db, SenderRole.ADMIN, latest=False),
    ).label("display_name")

    rows = db.query(Message.session_id, last_message, display_name)\
             .group_by(Message.session_id)\
             .order_by(last_message.desc())\
             .all()

    return [
        {
            "session_id": session_id,
            "last_message": last_at,
            "display_name": name,
        }
        for session_id, last_at, name in rows
    ]


def delete_session(db: Session, session_id: str) -> int:
    """Delete a session's transcript and push registration together."""
    deleted = message_services.delete_messages(db, session_id)
    push_services.clear_push_token(db, session_id)
    db.commit()
    return deleted
