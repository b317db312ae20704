from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guildhall.core.config import settings
from guildhall.core.exceptions import NotFoundError
from guildhall.db.session import get_db
from guildhall.deps import get_current_user
from guildhall.modules.comments.schemas.comment import UserCommentPageResponse
from guildhall.modules.comments.services.comment import get_user_comments
from guildhall.modules.user_management.models.user import User
from guildhall.modules.user_management.schemas.user import User as UserSchema
from guildhall.modules.user_management.services.user import get_user

router = APIRouter()

def _validate_user(db: Session, user_id: str) -> User:
    """Validate user exists and return user object"""
    user = get_user(db, user_id=user_id)
    if not user:
        raise NotFoundError("User not found")
    return user

@router.get("/me", response_model=UserSchema)
def read_user_me(
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get current user"""
    return current_user

@router.get("/{user_id}", response_model=UserSchema)
def read_user(
    *,
    db: Session = Depends(get_db),
    user_id: str,
) -> Any:
    """Get a user's public profile"""
    return _validate_user(db, user_id)

@router.get("/{user_id}/comments", response_model=UserCommentPageResponse)
def read_user_comments(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.COMMENTS_PAGE_SIZE, ge=1, le=settings.COMMENTS_MAX_PAGE_SIZE),
) -> Any:
    """Get a user's comment history, newest first"""
    return {"data": get_user_comments(db, user_id, page, limit)}
