from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guildhall.core.config import settings
from guildhall.db.session import get_db
from guildhall.deps import get_current_user
from guildhall.modules.user_management.models.user import User
from guildhall.modules.follows.schemas.follow import (
    FollowActionRequest,
    FollowActionResult,
    FollowRequestDirection,
    FollowRequestPageResponse,
    FollowStatusResponse,
)
from guildhall.modules.follows.services.follow import (
    get_follow_requests,
    get_follow_status,
    perform_follow_action,
)

router = APIRouter()

@router.post("", response_model=FollowActionResult)
def follow_action(
    *,
    db: Session = Depends(get_db),
    action_in: FollowActionRequest,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Follow, unfollow, cancel a request, or answer one"""
    result = perform_follow_action(db, current_user, action_in.target_user_id, action_in.action)
    return {"success": True, **result}

@router.get("", response_model=FollowStatusResponse)
def read_follow_status(
    *,
    db: Session = Depends(get_db),
    target_user_id: str = Query(..., min_length=1),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Relation between the current user and a target user"""
    return {"data": get_follow_status(db, current_user.id, target_user_id)}

@router.get("/requests", response_model=FollowRequestPageResponse)
def read_follow_requests(
    *,
    db: Session = Depends(get_db),
    type: FollowRequestDirection = FollowRequestDirection.RECEIVED,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.FOLLOW_REQUESTS_PAGE_SIZE, ge=1, le=100),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Pending requests addressed to the current user, or every request they sent"""
    return {"data": get_follow_requests(db, current_user.id, type, page, limit)}
