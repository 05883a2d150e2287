from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from chatrelay.db.models.message import SenderRole

# Client -> server
JOIN = "join"
ADMIN_JOIN = "admin-join"
ADMIN_SELECT_SESSION = "admin-select-session"
ADMIN_TYPING = "admin-typing"
USER_TYPING = "user-typing"
SEND_MESSAGE = "send-message"

# Server -> client
MESSAGE = "message"
NEW_USER_MESSAGE = "new-user-message"
ERROR = "error"


def session_payload(data: Any) -> Any:
    """Accept a bare session id where an object with ``sessionId`` is expected."""
    if isinstance(data, str):
        return {"sessionId": data}
    return data


class JoinPayload(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    display_name: Optional[str] = Field(default=None, alias="displayName")

    model_config = {"populate_by_name": True}


class SelectSessionPayload(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)

    model_config = {"populate_by_name": True}


class UserTypingPayload(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    is_typing: bool = Field(alias="isTyping")

    model_config = {"populate_by_name": True}


class AdminTypingPayload(BaseModel):
    target_session_id: str = Field(alias="targetSessionId", min_length=1)
    is_typing: bool = Field(alias="isTyping")

    model_config = {"populate_by_name": True}


class SendMessagePayload(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    text: Optional[str] = ""
    sender_role: SenderRole = Field(alias="senderRole")
    image_data: Optional[str] = Field(default=None, alias="imageData")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    reply_to_text: Optional[str] = Field(default=None, alias="replyToText")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def require_content(self):
        if self.text is None:
            self.text = ""
        if not self.text and not self.image_data:
            raise ValueError("message needs text or an image")
        return self
