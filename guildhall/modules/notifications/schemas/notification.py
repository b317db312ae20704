from typing import List, Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict

from guildhall.core.content import ContentType
from guildhall.core.pagination import Pagination

class NotificationType(str, Enum):
    COMMENT_REPLY = "COMMENT_REPLY"
    FOLLOW_REQUEST = "FOLLOW_REQUEST"
    FOLLOW_ACCEPTED = "FOLLOW_ACCEPTED"
    FOLLOW_REJECTED = "FOLLOW_REJECTED"

class NotificationCreate(BaseModel):
    user_id: str
    type: NotificationType
    title: str
    message: str
    content_id: Optional[str] = None
    content_type: Optional[ContentType] = None

class NotificationUpdate(BaseModel):
    """Either a list of ids or mark_all_as_read must be supplied"""
    notification_ids: Optional[List[str]] = None
    mark_all_as_read: bool = False

class Notification(BaseModel):
    """Notification model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: str
    title: str
    message: str
    content_id: Optional[str] = None
    content_type: Optional[str] = None
    is_read: bool
    created_at: datetime

class NotificationPage(BaseModel):
    notifications: List[Notification]
    total_notifications: int
    unread_count: int
    pagination: Pagination

class NotificationList(BaseModel):
    data: NotificationPage
