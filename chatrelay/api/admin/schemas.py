from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class AdminVerifyRequest(BaseModel):
    password: str

class AdminVerifyResponse(BaseModel):
    success: bool


class SessionSummary(BaseModel):
    session_id: str
    last_message: Optional[datetime] = None
    display_name: Optional[str] = None

class SessionListResponse(BaseModel):
    sessions: List[SessionSummary] = []


class SessionDeleteResponse(BaseModel):
    success: bool
    deleted: int
