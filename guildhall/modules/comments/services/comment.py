from typing import Any, Dict, List, Optional, Tuple
import uuid
import logging
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from guildhall.core.config import settings
from guildhall.core.content import ContentType
from guildhall.core.exceptions import ForbiddenError, NotFoundError, StateInvalidError, ValidationFailed
from guildhall.core.pagination import build_pagination, page_offset
from guildhall.db.helpers import update_fields
from guildhall.db.session import atomic
from guildhall.modules.comments.models.comment import Comment
from guildhall.modules.comments.schemas.comment import (
    Comment as CommentSchema,
    CommentSortBy,
    ParentComment,
    SortOrder,
)
from guildhall.modules.notifications.services.notification_events import create_comment_reply_notification
from guildhall.modules.user_management.models.user import User
from guildhall.modules.user_management.schemas.user import UserSummary

logger = logging.getLogger(__name__)

def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    """Get comment by ID, including soft-deleted ones"""
    return db.query(Comment).filter(Comment.id == comment_id).first()

def _reply_counts():
    """Subquery of live reply counts keyed by parent comment id"""
    return (
        select(Comment.parent_id.label("parent_id"), func.count(Comment.id).label("reply_count"))
        .where(Comment.parent_id.isnot(None), Comment.is_deleted.is_(False))
        .group_by(Comment.parent_id)
        .subquery()
    )

def _with_reply_counts(db: Session):
    counts = _reply_counts()
    query = (
        db.query(Comment, func.coalesce(counts.c.reply_count, 0))
        .outerjoin(counts, counts.c.parent_id == Comment.id)
    )
    return query, counts

def _count_replies(db: Session, comment_id: str) -> int:
    return (
        db.query(func.count(Comment.id))
        .filter(Comment.parent_id == comment_id, Comment.is_deleted.is_(False))
        .scalar()
        or 0
    )

def _to_schema(comment: Comment, reply_count: int = 0) -> CommentSchema:
    """Convert a Comment row to the client payload"""
    parent = None
    if comment.parent_id and comment.parent is not None:
        parent = ParentComment(
            id=comment.parent.id,
            author=UserSummary.model_validate(comment.parent.author) if comment.parent.author else None,
        )

    return CommentSchema(
        id=comment.id,
        content=comment.content,
        content_id=comment.content_id,
        content_type=comment.content_type,
        author_id=comment.author_id,
        parent_id=comment.parent_id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        author=UserSummary.model_validate(comment.author) if comment.author else None,
        parent=parent,
        reply_count=reply_count,
        is_edited=comment.updated_at is not None,
    )

def _validate_content(content: str) -> None:
    if not content:
        raise ValidationFailed("Comment content is required")
    if len(content) > settings.COMMENT_MAX_LENGTH:
        raise ValidationFailed("Comment too long")

def create_comment(
    db: Session,
    author: User,
    content: str,
    content_id: str,
    content_type: ContentType,
    parent_id: Optional[str] = None,
) -> CommentSchema:
    """
    Create a comment or a reply.
    A reply must sit on the same content item as its parent. The parent's
    author is notified after the comment is stored; that notification can
    fail without affecting the new comment.
    """
    _validate_content(content)
    content_type = ContentType(content_type).value

    parent = None
    if parent_id:
        parent = get_comment(db, parent_id)
        if not parent or parent.is_deleted:
            raise NotFoundError("Parent comment not found")
        if parent.content_id != content_id or parent.content_type != content_type:
            raise ValidationFailed("Parent comment must be on the same content")

    comment = Comment(
        id=str(uuid.uuid4()),
        content=content,
        content_id=content_id,
        content_type=content_type,
        author_id=author.id,
        parent_id=parent_id or None,
        is_deleted=False,
    )
    with atomic(db):
        db.add(comment)
    db.refresh(comment)
    logger.info(f"User {author.id} commented on {content_type}:{content_id} ({comment.id})")

    if parent is not None:
        create_comment_reply_notification(
            db,
            parent_author_id=parent.author_id,
            replier=author,
            content_id=content_id,
            content_type=content_type,
        )

    return _to_schema(comment)

def get_comments(
    db: Session,
    content_id: str,
    content_type: ContentType,
    sort_by: CommentSortBy = CommentSortBy.DATE,
    sort_order: SortOrder = SortOrder.DESC,
    page: int = 1,
    limit: int = 20,
    parent_id: Optional[str] = None,
    viewer_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Get a page of comments on a content item.
    Without parent_id only top-level comments are returned; with it, the
    direct replies of that comment.
    """
    content_type = ContentType(content_type).value
    query, counts = _with_reply_counts(db)
    query = query.filter(
        Comment.content_id == content_id,
        Comment.content_type == content_type,
        Comment.is_deleted.is_(False),
    )
    if parent_id:
        query = query.filter(Comment.parent_id == parent_id)
    else:
        query = query.filter(Comment.parent_id.is_(None))

    total = query.count()

    if CommentSortBy(sort_by) == CommentSortBy.REPLIES:
        sort_column = func.coalesce(counts.c.reply_count, 0)
    else:
        sort_column = Comment.created_at
    if SortOrder(sort_order) == SortOrder.ASC:
        ordering = [sort_column.asc(), Comment.created_at.asc(), Comment.id.asc()]
    else:
        ordering = [sort_column.desc(), Comment.created_at.desc(), Comment.id.desc()]

    rows: List[Tuple[Comment, int]] = (
        query.order_by(*ordering)
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )

    return {
        "content_id": content_id,
        "content_type": content_type,
        "comments": [_to_schema(comment, reply_count) for comment, reply_count in rows],
        "total_comments": total,
        "user_comment": get_viewer_comment(db, content_id, content_type, viewer_id) if viewer_id else None,
        "pagination": build_pagination(page, limit, total),
    }

def get_viewer_comment(db: Session, content_id: str, content_type: ContentType, viewer_id: str) -> Optional[CommentSchema]:
    """The viewer's earliest live comment on a content item, if any"""
    comment = (
        db.query(Comment)
        .filter(
            Comment.content_id == content_id,
            Comment.content_type == ContentType(content_type).value,
            Comment.author_id == viewer_id,
            Comment.is_deleted.is_(False),
        )
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .first()
    )
    if not comment:
        return None
    return _to_schema(comment, _count_replies(db, comment.id))

def get_user_comments(db: Session, user_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
    """Get a user's live comments across all content, newest first"""
    query, _ = _with_reply_counts(db)
    query = query.filter(Comment.author_id == user_id, Comment.is_deleted.is_(False))

    total = query.count()
    rows = (
        query.order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )

    return {
        "user_id": user_id,
        "comments": [_to_schema(comment, reply_count) for comment, reply_count in rows],
        "total_comments": total,
        "pagination": build_pagination(page, limit, total),
    }

def _get_editable_comment(db: Session, comment_id: str, user_id: str, deleted_detail: str, forbidden_detail: str) -> Comment:
    comment = get_comment(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    if comment.is_deleted:
        raise StateInvalidError(deleted_detail)
    if comment.author_id != user_id:
        raise ForbiddenError(forbidden_detail)
    return comment

def update_comment(db: Session, comment_id: str, editor_id: str, content: str) -> CommentSchema:
    """Edit a comment in place; only its author may do so while it is live"""
    _validate_content(content)
    comment = _get_editable_comment(
        db, comment_id, editor_id,
        deleted_detail="Comment has been deleted",
        forbidden_detail="You can only edit your own comments",
    )

    with atomic(db):
        update_fields(comment, content=content)
    db.refresh(comment)

    return _to_schema(comment, _count_replies(db, comment.id))

def delete_comment(db: Session, comment_id: str, requester_id: str) -> None:
    """
    Soft delete a comment.
    The row stays so existing replies keep their parent; deleting twice is an error.
    """
    comment = _get_editable_comment(
        db, comment_id, requester_id,
        deleted_detail="Comment has already been deleted",
        forbidden_detail="You can only delete your own comments",
    )

    with atomic(db):
        # A plain flag flip: the edit timestamp is left alone
        comment.is_deleted = True
    logger.info(f"User {requester_id} deleted comment {comment_id}")
