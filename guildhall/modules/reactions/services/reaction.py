from typing import Any, Dict, Optional, Tuple
import uuid
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from guildhall.core.content import ContentType
from guildhall.core.exceptions import ConflictError, ValidationFailed
from guildhall.db.session import atomic
from guildhall.modules.reactions.models.reaction import Reaction
from guildhall.modules.reactions.schemas.reaction import ReactionAction, ReactionGroup
from guildhall.modules.user_management.models.user import User
from guildhall.modules.user_management.schemas.user import UserSummary

logger = logging.getLogger(__name__)

def get_reaction(db: Session, user_id: str, content_id: str, content_type: ContentType, lock: bool = False) -> Optional[Reaction]:
    """Get a user's reaction to a content item"""
    query = db.query(Reaction).filter(
        Reaction.content_id == content_id,
        Reaction.content_type == ContentType(content_type).value,
        Reaction.user_id == user_id,
    )
    if lock:
        query = query.with_for_update()
    return query.first()

def toggle_reaction(
    db: Session,
    user_id: str,
    content_id: str,
    content_type: ContentType,
    emoji: str,
) -> Tuple[ReactionAction, Optional[Reaction]]:
    """
    Toggle a user's emoji reaction on a content item.

    Same emoji as the one held removes it, a different emoji replaces it,
    and no reaction yet creates one. The lookup and the write commit
    together; a concurrent toggle that slips past the lookup is stopped by
    the unique key and reported as a conflict.
    """
    if not emoji:
        raise ValidationFailed("Emoji is required")
    content_type = ContentType(content_type).value

    try:
        with atomic(db):
            existing = get_reaction(db, user_id, content_id, content_type, lock=True)

            if existing is None:
                reaction = Reaction(
                    id=str(uuid.uuid4()),
                    content_id=content_id,
                    content_type=content_type,
                    user_id=user_id,
                    emoji=emoji,
                )
                db.add(reaction)
                db.flush()
                action = ReactionAction.CREATED
            elif existing.emoji == emoji:
                db.delete(existing)
                reaction = None
                action = ReactionAction.REMOVED
            else:
                existing.emoji = emoji
                reaction = existing
                action = ReactionAction.UPDATED
    except IntegrityError:
        logger.warning(f"Concurrent reaction toggle for user {user_id} on {content_type}:{content_id}")
        raise ConflictError("Reaction was changed by another request, please retry")

    if reaction is not None:
        db.refresh(reaction)
    logger.info(f"Reaction {action.value} for user {user_id} on {content_type}:{content_id}")
    return action, reaction

def get_reactions(db: Session, content_id: str, content_type: ContentType, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """Group every reaction on a content item by emoji, newest first within each group"""
    content_type = ContentType(content_type).value
    rows = (
        db.query(Reaction, User)
        .join(User, User.id == Reaction.user_id)
        .filter(Reaction.content_id == content_id, Reaction.content_type == content_type)
        .order_by(Reaction.created_at.desc(), Reaction.id)
        .all()
    )

    groups: Dict[str, ReactionGroup] = {}
    user_reaction = None
    for reaction, user in rows:
        group = groups.setdefault(reaction.emoji, ReactionGroup(count=0, users=[]))
        group.count += 1
        group.users.append(UserSummary.model_validate(user))
        if viewer_id and reaction.user_id == viewer_id:
            user_reaction = reaction.emoji

    return {
        "content_id": content_id,
        "content_type": content_type,
        "reactions": groups,
        "user_reaction": user_reaction,
        "total_reactions": len(rows),
    }
