from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

from guildhall.core.content import ContentType
from guildhall.modules.user_management.schemas.user import UserSummary

class ReactionAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"

class ReactionToggle(BaseModel):
    content_id: str = Field(..., min_length=1)
    content_type: ContentType
    emoji: str = Field(..., min_length=1)

class Reaction(BaseModel):
    """Reaction model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    content_id: str
    content_type: str
    user_id: str
    emoji: str
    created_at: Optional[datetime] = None

class ReactionToggleResult(BaseModel):
    success: bool = True
    action: ReactionAction
    reaction: Optional[Reaction] = None

class ReactionGroup(BaseModel):
    """Users that reacted with one emoji"""
    count: int
    users: List[UserSummary]

class ReactionSummary(BaseModel):
    content_id: str
    content_type: ContentType
    reactions: Dict[str, ReactionGroup]
    user_reaction: Optional[str] = None
    total_reactions: int

class ReactionSummaryResponse(BaseModel):
    data: ReactionSummary
