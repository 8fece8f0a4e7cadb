# api/notifications/notifications_schema.py
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Literal, Optional


class NotificationRead(BaseModel):
    id: int
    user_id: str
    title: str
    body: str
    type: Literal["waste", "food", "system"]
    related_id: Optional[str] = None
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
