from typing import List, Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict

from guildhall.core.pagination import Pagination
from guildhall.modules.user_management.schemas.user import UserSummary

class FollowRequestStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

class FollowAction(str, Enum):
    FOLLOW = "follow"
    UNFOLLOW = "unfollow"
    CANCEL_REQUEST = "cancel_request"
    ACCEPT = "accept"
    REJECT = "reject"

class FollowRelation(str, Enum):
    NONE = "none"
    FOLLOWING = "following"
    REQUEST_SENT = "request_sent"
    REQUEST_RECEIVED = "request_received"

class FollowRequestDirection(str, Enum):
    RECEIVED = "received"
    SENT = "sent"

class FollowActionRequest(BaseModel):
    target_user_id: str = Field(..., min_length=1)
    action: FollowAction

class FollowRequest(BaseModel):
    """Follow request model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    receiver_id: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None

class FollowActionResult(BaseModel):
    success: bool = True
    action: str
    follow_request: Optional[FollowRequest] = None

class FollowStatus(BaseModel):
    status: FollowRelation
    follower_count: int
    following_count: int

class FollowStatusResponse(BaseModel):
    data: FollowStatus

class FollowRequestPage(BaseModel):
    requests: List[FollowRequest]
    total_requests: int
    pagination: Pagination

class FollowRequestPageResponse(BaseModel):
    data: FollowRequestPage
