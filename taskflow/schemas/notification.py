#taskflow/schemas/notification.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from taskflow.schemas.response import Pagination
from taskflow.schemas.user import UserShort

class NotificationRead(BaseModel):
    """
    NotificationRead — notification as shown to its recipient.
    """
    id: int
    recipient_id: int
    sender_id: int
    sender: Optional[UserShort] = None
    type: str
    title: str
    message: str
    related_task_id: Optional[int] = None
    related_project_id: Optional[int] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class NotificationList(BaseModel):
    notifications: List[NotificationRead]
    pagination: Pagination
    unread_count: int

class MarkReadRequest(BaseModel):
    """
    MarkReadRequest — empty or missing ids means "all unread".
    """
    notification_ids: Optional[List[int]] = Field(None, description="Notification ids to mark as read")

class BulkResult(BaseModel):
    message: str
    count: int
