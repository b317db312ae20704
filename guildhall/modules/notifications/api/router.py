from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guildhall.core.config import settings
from guildhall.core.exceptions import ForbiddenError, NotFoundError, ValidationFailed
from guildhall.db.session import get_db
from guildhall.deps import get_current_user
from guildhall.modules.user_management.models.user import User
from guildhall.modules.notifications.schemas.notification import (
    Notification as NotificationSchema,
    NotificationList,
    NotificationUpdate,
)
from guildhall.modules.notifications.services.notification import (
    get_notification,
    get_user_notifications,
    mark_as_read,
    mark_all_as_read,
    delete_notification,
)

router = APIRouter()

@router.get("", response_model=NotificationList)
def read_notifications(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.NOTIFICATIONS_PAGE_SIZE, ge=1, le=100),
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get user's notifications with pagination and filter options"""
    return {"data": get_user_notifications(db, current_user.id, page, limit, unread_only)}

@router.patch("", response_model=Dict[str, Any])
def update_notifications(
    *,
    db: Session = Depends(get_db),
    notification_in: NotificationUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Mark some or all of the user's notifications as read"""
    if notification_in.mark_all_as_read:
        count = mark_all_as_read(db, current_user.id)
        return {"success": True, "message": "All notifications marked as read", "count": count}

    if notification_in.notification_ids:
        count = mark_as_read(db, current_user.id, notification_in.notification_ids)
        return {"success": True, "message": "Notifications marked as read", "count": count}

    raise ValidationFailed("Invalid request body")

@router.delete("/{notification_id}", response_model=NotificationSchema)
def delete_notification_by_id(
    *,
    db: Session = Depends(get_db),
    notification_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete a specific notification"""
    notification = get_notification(db, notification_id=notification_id)
    if not notification:
        raise NotFoundError("Notification not found")

    if notification.user_id != current_user.id:
        raise ForbiddenError()

    return delete_notification(db, notification)
