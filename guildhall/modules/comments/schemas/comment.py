from typing import List, Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field

from guildhall.core.config import settings
from guildhall.core.content import ContentType
from guildhall.core.pagination import Pagination
from guildhall.modules.user_management.schemas.user import UserSummary


class CommentSortBy(str, Enum):
    DATE = "date"
    REPLIES = "replies"

class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.COMMENT_MAX_LENGTH)
    content_id: str = Field(..., min_length=1)
    content_type: ContentType
    parent_id: Optional[str] = None  # For replies

class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.COMMENT_MAX_LENGTH)

class ParentComment(BaseModel):
    id: str
    author: Optional[UserSummary] = None

class Comment(BaseModel):
    """Comment model returned to client"""
    id: str
    content: str
    content_id: str
    content_type: str
    author_id: str
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    parent: Optional[ParentComment] = None
    reply_count: int = 0
    is_edited: bool = False

class CommentActionResult(BaseModel):
    success: bool = True
    action: str
    comment: Optional[Comment] = None

class CommentPage(BaseModel):
    content_id: str
    content_type: ContentType
    comments: List[Comment]
    total_comments: int
    user_comment: Optional[Comment] = None
    pagination: Pagination

class CommentPageResponse(BaseModel):
    data: CommentPage

class UserCommentPage(BaseModel):
    user_id: str
    comments: List[Comment]
    total_comments: int
    pagination: Pagination

class UserCommentPageResponse(BaseModel):
    data: UserCommentPage
