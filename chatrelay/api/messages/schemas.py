from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from chatrelay.db.models.message import SenderRole

# -----------------------------
# 🧾 Message Schemas
# -----------------------------

class MessageCreate(BaseModel):
    session_id: str
    sender_role: SenderRole
    text: str = ""
    image_data: Optional[str] = None
    display_name: Optional[str] = None
    reply_to_text: Optional[str] = None

class MessageResponse(BaseModel):
    id: int
    session_id: str
    sender_role: str
    text: str
    image_data: Optional[str] = None
    display_name: Optional[str] = None
    reply_to_text: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}

class MessageListResponse(BaseModel):
    messages: List[MessageResponse] = []
