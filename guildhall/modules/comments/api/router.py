from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guildhall.core.config import settings
from guildhall.core.content import ContentType
from guildhall.db.session import get_db
from guildhall.deps import get_current_user, get_current_user_optional
from guildhall.modules.user_management.models.user import User
from guildhall.modules.comments.schemas.comment import (
    CommentActionResult,
    CommentCreate,
    CommentPageResponse,
    CommentSortBy,
    CommentUpdate,
    SortOrder,
)
from guildhall.modules.comments.services.comment import (
    create_comment,
    get_comments,
    update_comment,
    delete_comment,
)

router = APIRouter()

@router.post("", response_model=CommentActionResult)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Create a comment, or a reply when parent_id is given"""
    comment = create_comment(
        db,
        author=current_user,
        content=comment_in.content,
        content_id=comment_in.content_id,
        content_type=comment_in.content_type,
        parent_id=comment_in.parent_id,
    )
    return {"success": True, "action": "created", "comment": comment}

@router.get("", response_model=CommentPageResponse)
def read_comments(
    *,
    db: Session = Depends(get_db),
    content_id: str = Query(..., min_length=1),
    content_type: ContentType = Query(...),
    sort_by: CommentSortBy = CommentSortBy.DATE,
    sort_order: SortOrder = SortOrder.DESC,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.COMMENTS_PAGE_SIZE, ge=1, le=settings.COMMENTS_MAX_PAGE_SIZE),
    parent_id: Optional[str] = None,
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> Any:
    """Get top-level comments on a content item, or the replies to one comment"""
    viewer_id = current_user.id if current_user else None
    return {
        "data": get_comments(
            db,
            content_id=content_id,
            content_type=content_type,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
            parent_id=parent_id,
            viewer_id=viewer_id,
        )
    }

@router.put("/{comment_id}", response_model=CommentActionResult)
def update_comment_by_id(
    *,
    db: Session = Depends(get_db),
    comment_id: str,
    comment_in: CommentUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Edit a comment"""
    comment = update_comment(db, comment_id, current_user.id, comment_in.content)
    return {"success": True, "action": "updated", "comment": comment}

@router.delete("/{comment_id}", response_model=CommentActionResult)
def delete_comment_by_id(
    *,
    db: Session = Depends(get_db),
    comment_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Soft delete a comment"""
    delete_comment(db, comment_id, current_user.id)
    return {"success": True, "action": "deleted", "comment": None}
