from pydantic import BaseModel, Field


class PushRegisterRequest(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    push_token: str = Field(alias="pushToken", min_length=1)

    model_config = {"populate_by_name": True}

class PushRegisterResponse(BaseModel):
    success: bool
