from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from guildhall.core.config import settings
from guildhall.core.exceptions import NotFoundError
from guildhall.db.session import get_db
from guildhall.deps import get_current_user, require_staff
from guildhall.modules.user_management.models.user import User
from guildhall.modules.events.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    RegistrationStatus,
)
from guildhall.modules.events.services.event import (
    create_event,
    delete_event,
    get_event,
    get_events,
    is_registered,
    register_for_event,
    to_event_schema,
    unregister_from_event,
    update_event,
)
from guildhall.modules.events.services.event_status import EventStatus

router = APIRouter()

@router.get("", response_model=EventListResponse)
def read_events(
    *,
    db: Session = Depends(get_db),
    game_slug: Optional[str] = None,
    status: Optional[EventStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.EVENTS_PAGE_SIZE, ge=1, le=100),
) -> Any:
    """List events ordered by start date"""
    return get_events(db, game_slug=game_slug, status=status, page=page, limit=limit)

@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_new_event(
    *,
    db: Session = Depends(get_db),
    event_in: EventCreate,
    current_user: User = Depends(require_staff),
) -> Any:
    """Create an event (moderators and admins)"""
    event = create_event(db, event_in, current_user.id)
    return {"data": to_event_schema(event), "message": "Event created successfully"}

@router.get("/{event_id}", response_model=EventResponse)
def read_event(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    include_deleted: bool = False,
) -> Any:
    """Get one event with its effective status"""
    event = get_event(db, event_id, include_deleted=include_deleted)
    if not event:
        raise NotFoundError("Event not found")
    return {"data": to_event_schema(event)}

@router.put("/{event_id}", response_model=EventResponse)
def update_event_by_id(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    event_in: EventUpdate,
    current_user: User = Depends(require_staff),
) -> Any:
    """Update an event (moderators and admins)"""
    event = update_event(db, event_id, event_in)
    return {"data": to_event_schema(event), "message": "Event updated successfully"}

@router.delete("/{event_id}", response_model=Dict[str, str])
def delete_event_by_id(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    current_user: User = Depends(require_staff),
) -> Any:
    """Soft delete an event (moderators and admins)"""
    delete_event(db, event_id)
    return {"message": "Event deleted successfully"}

@router.post("/{event_id}/register", response_model=Dict[str, str], status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Register the current user for an event"""
    register_for_event(db, current_user.id, event_id)
    return {"message": "Successfully registered for event"}

@router.delete("/{event_id}/register", response_model=Dict[str, str])
def unregister(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Withdraw the current user's registration"""
    unregister_from_event(db, current_user.id, event_id)
    return {"message": "Successfully unregistered from event"}

@router.get("/{event_id}/register", response_model=RegistrationStatus)
def read_registration(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Whether the current user is registered for an event"""
    return {"is_registered": is_registered(db, current_user.id, event_id)}
