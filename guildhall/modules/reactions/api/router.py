from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guildhall.core.content import ContentType
from guildhall.db.session import get_db
from guildhall.deps import get_current_user, get_current_user_optional
from guildhall.modules.user_management.models.user import User
from guildhall.modules.reactions.schemas.reaction import (
    ReactionSummaryResponse,
    ReactionToggle,
    ReactionToggleResult,
)
from guildhall.modules.reactions.services.reaction import get_reactions, toggle_reaction

router = APIRouter()

@router.post("", response_model=ReactionToggleResult)
def toggle_content_reaction(
    *,
    db: Session = Depends(get_db),
    reaction_in: ReactionToggle,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Add, switch or remove the current user's reaction on a content item"""
    action, reaction = toggle_reaction(
        db,
        user_id=current_user.id,
        content_id=reaction_in.content_id,
        content_type=reaction_in.content_type,
        emoji=reaction_in.emoji,
    )
    return {"success": True, "action": action, "reaction": reaction}

@router.get("", response_model=ReactionSummaryResponse)
def read_content_reactions(
    *,
    db: Session = Depends(get_db),
    content_id: str = Query(..., min_length=1),
    content_type: ContentType = Query(...),
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> Any:
    """Get reactions on a content item grouped by emoji"""
    viewer_id = current_user.id if current_user else None
    return {"data": get_reactions(db, content_id, content_type, viewer_id)}
