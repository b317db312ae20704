from typing import Any, Dict, List, Optional
import uuid
from sqlalchemy.orm import Session

from guildhall.core.content import ContentType
from guildhall.core.pagination import build_pagination, page_offset
from guildhall.db.helpers import soft_delete, soft_delete_query
from guildhall.db.session import atomic
from guildhall.modules.notifications.models.notification import Notification
from guildhall.modules.notifications.schemas.notification import (
    Notification as NotificationSchema,
    NotificationCreate,
    NotificationType,
)

def _live_notifications(db: Session, user_id: str):
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.deleted_at.is_(None),
    )

def get_notification(db: Session, notification_id: str) -> Optional[Notification]:
    """Get a notification by ID, ignoring soft-deleted rows"""
    return (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.deleted_at.is_(None))
        .first()
    )

def get_user_notifications(db: Session, user_id: str, page: int = 1, limit: int = 20, unread_only: bool = False) -> Dict[str, Any]:
    """Get a page of a user's notifications, newest first"""
    query = _live_notifications(db, user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    total = query.count()
    notifications = (
        query.order_by(Notification.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )
    unread_count = _live_notifications(db, user_id).filter(Notification.is_read.is_(False)).count()

    return {
        "notifications": [NotificationSchema.model_validate(n) for n in notifications],
        "total_notifications": total,
        "unread_count": unread_count,
        "pagination": build_pagination(page, limit, total),
    }

def create_notification(db: Session, notification_in: NotificationCreate) -> Notification:
    """Create a new notification"""
    notification_data = notification_in.model_dump(mode="json")

    notification = Notification(
        id=str(uuid.uuid4()),
        **notification_data,
    )

    with atomic(db):
        db.add(notification)
    db.refresh(notification)

    return notification

def mark_as_read(db: Session, user_id: str, notification_ids: List[str]) -> int:
    """Mark specific notifications of a user as read"""
    with atomic(db):
        count = (
            _live_notifications(db, user_id)
            .filter(Notification.id.in_(notification_ids))
            .update({"is_read": True}, synchronize_session=False)
        )
    return count

def mark_all_as_read(db: Session, user_id: str) -> int:
    """Mark all notifications as read for a user"""
    with atomic(db):
        count = (
            _live_notifications(db, user_id)
            .filter(Notification.is_read.is_(False))
            .update({"is_read": True}, synchronize_session=False)
        )
    return count

def delete_notification(db: Session, notification: Notification) -> Notification:
    """Soft delete a notification"""
    with atomic(db):
        soft_delete(notification)
    return notification

def soft_delete_follow_request_notifications(db: Session, receiver_id: str, sender_id: str) -> int:
    """
    Hide the FOLLOW_REQUEST notifications a sender produced for a receiver.
    Does not commit: callers run it inside their own transaction.
    """
    query = _live_notifications(db, receiver_id).filter(
        Notification.type == NotificationType.FOLLOW_REQUEST.value,
        Notification.content_id == sender_id,
        Notification.content_type == ContentType.USER.value,
    )
    return soft_delete_query(query)
