from typing import Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict

class UserRole(str, Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"

STAFF_ROLES = (UserRole.MODERATOR.value, UserRole.ADMIN.value)

class UserSummary(BaseModel):
    """Public author/actor card embedded in comments, reactions and requests"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None

class User(UserSummary):
    """User model returned to client"""
    username: Optional[str] = None
    role: str = UserRole.USER.value
    created_at: Optional[datetime] = None
