from typing import Any, Dict, Optional
import uuid
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from guildhall.core.exceptions import ConflictError, NotFoundError, StateInvalidError, ValidationFailed
from guildhall.core.pagination import build_pagination, page_offset
from guildhall.db.helpers import update_fields
from guildhall.db.session import atomic
from guildhall.modules.follows.models.follow import Follow, FollowRequest
from guildhall.modules.follows.schemas.follow import (
    FollowAction,
    FollowRelation,
    FollowRequest as FollowRequestSchema,
    FollowRequestDirection,
    FollowRequestStatus,
)
from guildhall.modules.notifications.services.notification import soft_delete_follow_request_notifications
from guildhall.modules.notifications.services.notification_events import (
    create_follow_request_notification,
    create_follow_accepted_notification,
    create_follow_rejected_notification,
)
from guildhall.modules.user_management.models.user import User
from guildhall.modules.user_management.services.user import get_user

logger = logging.getLogger(__name__)

# Request operations
def get_follow_request(db: Session, sender_id: str, receiver_id: str) -> Optional[FollowRequest]:
    """Get follow request by sender and receiver IDs, whatever its status"""
    return db.query(FollowRequest).filter(
        FollowRequest.sender_id == sender_id,
        FollowRequest.receiver_id == receiver_id
    ).first()

def _get_pending_request(db: Session, sender_id: str, receiver_id: str, lock: bool = False) -> Optional[FollowRequest]:
    query = db.query(FollowRequest).filter(
        FollowRequest.sender_id == sender_id,
        FollowRequest.receiver_id == receiver_id,
        FollowRequest.status == FollowRequestStatus.PENDING.value,
    )
    if lock:
        query = query.with_for_update()
    return query.first()

def get_follow_requests(
    db: Session,
    user_id: str,
    direction: FollowRequestDirection = FollowRequestDirection.RECEIVED,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    """
    Get follow requests for a user.
    Received lists pending requests only; sent lists every request the user made.
    """
    if FollowRequestDirection(direction) == FollowRequestDirection.RECEIVED:
        query = db.query(FollowRequest).filter(
            FollowRequest.receiver_id == user_id,
            FollowRequest.status == FollowRequestStatus.PENDING.value,
        )
    else:
        query = db.query(FollowRequest).filter(FollowRequest.sender_id == user_id)

    total = query.count()
    requests = (
        query.order_by(FollowRequest.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )
    return {
        "requests": [FollowRequestSchema.model_validate(r) for r in requests],
        "total_requests": total,
        "pagination": build_pagination(page, limit, total),
    }

# Follow operations
def get_follow(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    """Get the follow edge follower -> following"""
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.following_id == following_id
    ).first()

def is_following(db: Session, follower_id: str, following_id: str) -> bool:
    """Check if one user follows another"""
    return get_follow(db, follower_id, following_id) is not None

def count_followers(db: Session, user_id: str) -> int:
    return db.query(Follow).filter(Follow.following_id == user_id).count()

def count_following(db: Session, user_id: str) -> int:
    return db.query(Follow).filter(Follow.follower_id == user_id).count()

def send_follow_request(db: Session, sender: User, target_id: str) -> FollowRequest:
    """
    Ask to follow a user.
    Any earlier request between the pair, whatever its status, blocks a new one.
    """
    if is_following(db, sender.id, target_id):
        raise ConflictError("Already following this user")

    if get_follow_request(db, sender.id, target_id):
        raise ConflictError("Follow request already sent")

    follow_request = FollowRequest(
        id=str(uuid.uuid4()),
        sender_id=sender.id,
        receiver_id=target_id,
        status=FollowRequestStatus.PENDING.value,
    )
    try:
        with atomic(db):
            db.add(follow_request)
    except IntegrityError:
        raise ConflictError("Follow request already sent")
    db.refresh(follow_request)
    logger.info(f"Follow request sent: {sender.id} -> {target_id}")

    create_follow_request_notification(db, sender=sender, receiver_id=target_id)
    return follow_request

def unfollow(db: Session, follower_id: str, target_id: str) -> None:
    """Remove the follow edge follower -> target"""
    with atomic(db):
        deleted = db.query(Follow).filter(
            Follow.follower_id == follower_id,
            Follow.following_id == target_id
        ).delete(synchronize_session=False)
        if deleted == 0:
            raise StateInvalidError("Not following this user")
    logger.info(f"Unfollowed: {follower_id} -> {target_id}")

def cancel_follow_request(db: Session, sender_id: str, target_id: str) -> None:
    """
    Withdraw a pending follow request.
    The request row and the receiver's FOLLOW_REQUEST notification go in
    the same transaction, so no actionable notification outlives its request.
    """
    existing_request = get_follow_request(db, sender_id, target_id)
    if not existing_request:
        raise StateInvalidError("No follow request found")
    if existing_request.status != FollowRequestStatus.PENDING.value:
        raise StateInvalidError("Follow request is not pending")

    with atomic(db):
        deleted = db.query(FollowRequest).filter(
            FollowRequest.id == existing_request.id,
            FollowRequest.status == FollowRequestStatus.PENDING.value,
        ).delete(synchronize_session=False)
        if deleted == 0:
            raise StateInvalidError("Follow request is not pending")
        hidden = soft_delete_follow_request_notifications(db, receiver_id=target_id, sender_id=sender_id)
    db.expire_all()
    logger.info(f"Follow request cancelled: {sender_id} -> {target_id}, {hidden} notification(s) hidden")

def accept_follow_request(db: Session, receiver: User, sender_id: str) -> FollowRequest:
    """Accept a pending request: flip it to ACCEPTED and create the follow edge together"""
    try:
        with atomic(db):
            follow_request = _get_pending_request(db, sender_id, receiver.id, lock=True)
            if not follow_request:
                raise StateInvalidError("No pending follow request found")

            update_fields(follow_request, status=FollowRequestStatus.ACCEPTED.value)
            db.add(Follow(follower_id=sender_id, following_id=receiver.id))
            db.flush()
    except IntegrityError:
        raise ConflictError("Already following this user")
    db.refresh(follow_request)
    logger.info(f"Follow request accepted: {sender_id} -> {receiver.id}")

    create_follow_accepted_notification(db, accepter=receiver, requester_id=sender_id)
    return follow_request

def reject_follow_request(db: Session, receiver: User, sender_id: str) -> FollowRequest:
    """Reject a pending request; no follow edge is created"""
    with atomic(db):
        follow_request = _get_pending_request(db, sender_id, receiver.id, lock=True)
        if not follow_request:
            raise StateInvalidError("No pending follow request found")

        update_fields(follow_request, status=FollowRequestStatus.REJECTED.value)
    db.refresh(follow_request)
    logger.info(f"Follow request rejected: {sender_id} -> {receiver.id}")

    create_follow_rejected_notification(db, rejecter=receiver, requester_id=sender_id)
    return follow_request

def perform_follow_action(db: Session, current_user: User, target_user_id: str, action: FollowAction) -> Dict[str, Any]:
    """Run one follow action for the current user against a target user"""
    if target_user_id == current_user.id:
        raise ValidationFailed("Cannot follow yourself")

    if not get_user(db, target_user_id):
        raise NotFoundError("Target user not found")

    action = FollowAction(action)
    if action == FollowAction.FOLLOW:
        follow_request = send_follow_request(db, current_user, target_user_id)
        return {"action": "follow_request_sent", "follow_request": follow_request}
    if action == FollowAction.UNFOLLOW:
        unfollow(db, current_user.id, target_user_id)
        return {"action": "unfollowed"}
    if action == FollowAction.CANCEL_REQUEST:
        cancel_follow_request(db, current_user.id, target_user_id)
        return {"action": "request_cancelled"}
    if action == FollowAction.ACCEPT:
        accept_follow_request(db, current_user, target_user_id)
        return {"action": "request_accepted"}
    reject_follow_request(db, current_user, target_user_id)
    return {"action": "request_rejected"}

def get_follow_status(db: Session, viewer_id: str, target_id: str) -> Dict[str, Any]:
    """
    Relation of the viewer to a target user, plus the target's follower counts.
    A request row in any status counts, the same rows that make follow() refuse.
    """
    if is_following(db, viewer_id, target_id):
        relation = FollowRelation.FOLLOWING
    elif get_follow_request(db, viewer_id, target_id):
        relation = FollowRelation.REQUEST_SENT
    elif get_follow_request(db, target_id, viewer_id):
        relation = FollowRelation.REQUEST_RECEIVED
    else:
        relation = FollowRelation.NONE

    return {
        "status": relation,
        "follower_count": count_followers(db, target_id),
        "following_count": count_following(db, target_id),
    }
