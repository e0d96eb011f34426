# app/schemas/notification_schema.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.models.notification import NotificationTypeEnum


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    notification_id: str
    user_id: str
    type: NotificationTypeEnum
    title: str
    message: Optional[str] = None
    reference_id: Optional[str] = None
    is_read: bool
    created_at: datetime
