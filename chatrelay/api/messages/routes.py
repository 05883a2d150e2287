import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chatrelay.api.messages import schemas, services
from chatrelay.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{session_id}", response_model=schemas.MessageListResponse)
def list_session_messages(session_id: str, db: Session = Depends(get_db)):
    try:
        messages = services.list_messages(db, session_id)
    except SQLAlchemyError:
        logger.exception("Error fetching messages for session %s", session_id)
        raise HTTPException(status_code=500, detail="Database error")
    return {"messages": messages}
