import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chatrelay.api.push import schemas, services
from chatrelay.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=schemas.PushRegisterResponse)
def register_push_token(payload: schemas.PushRegisterRequest, db: Session = Depends(get_db)):
    """
    Register or replace the device token used for reply notifications.
    """
    try:
        services.register_push_token(db, payload.session_id, payload.push_token)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error registering push token for session %s", payload.session_id)
        raise HTTPException(status_code=500, detail="Database error")
    logger.info("Push token registered for session %s", payload.session_id)
    return {"success": True}
