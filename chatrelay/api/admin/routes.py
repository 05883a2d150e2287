import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chatrelay.api.admin import schemas, services
from chatrelay.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/verify", response_model=schemas.AdminVerifyResponse)
def verify_admin(payload: schemas.AdminVerifyRequest):
    return {"success": services.verify_admin_password(payload.password)}


@router.get("/sessions", response_model=schemas.SessionListResponse)
def list_sessions(db: Session = Depends(get_db)):
    try:
        sessions = services.list_sessions(db)
    except SQLAlchemyError:
        logger.exception("Error fetching sessions")
        raise HTTPException(status_code=500, detail="Database error")
    return {"sessions": sessions}


@router.delete("/sessions/{session_id}", response_model=schemas.SessionDeleteResponse)
def delete_session(session_id: str, db: Session = Depends(get_db)):
    """
    Delete a session's whole transcript and forget its push token.
    """
    try:
        deleted = services.delete_session(db, session_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting session %s", session_id)
        raise HTTPException(status_code=500, detail="Database error")
    logger.info("Deleted session %s (%d messages)", session_id, deleted)
    return {"success": True, "deleted": deleted}
