# app/schemas/message_schema.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user_schema import UserBrief


class MessageIn(BaseModel):
    content: str = Field("", description="Message body")
    file_url: Optional[str] = Field(None, max_length=500, description="Uploaded attachment URL")


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message_id: str
    contract_id: str
    sender_id: str
    content: str
    file_url: Optional[str] = None
    is_read: bool
    created_at: datetime
    sender: Optional[UserBrief] = None
