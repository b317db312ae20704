"""
Notification events service.
This module creates notifications for social events in the application.
Every function here is best-effort: it runs after the primary change has
been committed, logs any failure and reports it through its return value.
It never raises, so a broken notification can not undo a comment or a
follow action.
"""
from sqlalchemy.orm import Session
import logging

from guildhall.core.content import ContentType
from guildhall.modules.notifications.schemas.notification import NotificationCreate, NotificationType
from guildhall.modules.notifications.services.notification import create_notification
from guildhall.modules.user_management.models.user import User

# Set up logger
logger = logging.getLogger(__name__)

def _display_name(user: User) -> str:
    return user.name or user.username or "Someone"

def dispatch_notification(db: Session, **fields) -> bool:
    """
    Validate and store a notification, swallowing and logging any failure.

    Returns:
        True if notification was created, False otherwise
    """
    kind = fields.get("type")
    try:
        notification_in = NotificationCreate(**fields)
        create_notification(db, notification_in)
        logger.info(f"Created {notification_in.type.value} notification for user {notification_in.user_id}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating {getattr(kind, 'value', kind)} notification: {e}")
        return False

def create_comment_reply_notification(
    db: Session,
    parent_author_id: str,
    replier: User,
    content_id: str,
    content_type: str,
) -> bool:
    """
    Create a notification when someone replies to a comment.

    Args:
        db: Database session
        parent_author_id: ID of the author of the comment being replied to
        replier: User who wrote the reply
        content_id: ID of the content the comment thread belongs to
        content_type: Type of that content

    Returns:
        True if notification was created, False otherwise
    """
    # Don't notify if the user replied to their own comment
    if parent_author_id == replier.id:
        logger.debug(f"User {replier.id} replied to their own comment, no notification created")
        return False

    return dispatch_notification(
        db,
        user_id=parent_author_id,
        type=NotificationType.COMMENT_REPLY,
        title="New Reply to Your Comment",
        message=f"{_display_name(replier)} replied to your comment",
        content_id=content_id,
        content_type=content_type,
    )

def create_follow_request_notification(db: Session, sender: User, receiver_id: str) -> bool:
    """Notify a user that someone wants to follow them"""
    return dispatch_notification(
        db,
        user_id=receiver_id,
        type=NotificationType.FOLLOW_REQUEST,
        title="New Follow Request",
        message=f"{_display_name(sender)} wants to follow you",
        content_id=sender.id,
        content_type=ContentType.USER,
    )

def create_follow_accepted_notification(db: Session, accepter: User, requester_id: str) -> bool:
    """Notify the original sender that their follow request was accepted"""
    return dispatch_notification(
        db,
        user_id=requester_id,
        type=NotificationType.FOLLOW_ACCEPTED,
        title="Follow Request Accepted",
        message=f"{_display_name(accepter)} accepted your follow request",
        content_id=accepter.id,
        content_type=ContentType.USER,
    )

def create_follow_rejected_notification(db: Session, rejecter: User, requester_id: str) -> bool:
    """Notify the original sender that their follow request was rejected"""
    return dispatch_notification(
        db,
        user_id=requester_id,
        type=NotificationType.FOLLOW_REJECTED,
        title="Follow Request Rejected",
        message=f"{_display_name(rejecter)} rejected your follow request",
        content_id=rejecter.id,
        content_type=ContentType.USER,
    )
