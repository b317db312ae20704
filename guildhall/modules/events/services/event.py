from datetime import datetime
from typing import Any, Dict, Optional
import uuid
import logging
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from guildhall.core.exceptions import ConflictError, NotFoundError, StateInvalidError, ValidationFailed
from guildhall.core.pagination import build_pagination, page_offset
from guildhall.db.helpers import soft_delete, update_fields, utcnow
from guildhall.db.session import atomic
from guildhall.modules.events.models.event import Event, EventRegistration
from guildhall.modules.events.schemas.event import Event as EventSchema, EventCreate, EventUpdate
from guildhall.modules.events.services.event_status import (
    EventStatus,
    StatusOverride,
    can_override_event_status,
    describe_event_status,
    effective_status_clause,
    get_effective_event_status,
)

logger = logging.getLogger(__name__)

# Fields an update may set back to null
CLEARABLE_FIELDS = {"game_slug", "location", "online_url", "max_participants", "registration_deadline", "status_override"}

def get_event(db: Session, event_id: str, include_deleted: bool = False) -> Optional[Event]:
    """Get event by ID; soft-deleted events only when asked for"""
    query = db.query(Event).filter(Event.id == event_id)
    if not include_deleted:
        query = query.filter(Event.deleted_at.is_(None))
    return query.first()

def _require_event(db: Session, event_id: str) -> Event:
    event = get_event(db, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event

def effective_status(event: Event, now: Optional[datetime] = None) -> EventStatus:
    return get_effective_event_status(event.start_date, event.end_date, event.status_override, now)

def to_event_schema(event: Event, now: Optional[datetime] = None) -> EventSchema:
    """Serialize an event with its status computed for ``now``"""
    now = now or utcnow()
    status = effective_status(event, now)
    return EventSchema(
        id=event.id,
        title=event.title,
        description=event.description,
        game_slug=event.game_slug,
        type=event.type,
        start_date=event.start_date,
        end_date=event.end_date,
        location=event.location,
        online_url=event.online_url,
        registration_deadline=event.registration_deadline,
        max_participants=event.max_participants,
        current_participants=event.current_participants,
        status=status,
        status_description=describe_event_status(status, event.start_date, event.end_date, now),
        status_override=event.status_override,
        created_by_id=event.created_by_id,
        created_at=event.created_at,
        updated_at=event.updated_at,
        deleted_at=event.deleted_at,
    )

def get_events(
    db: Session,
    game_slug: Optional[str] = None,
    status: Optional[EventStatus] = None,
    page: int = 1,
    limit: int = 10,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """List live events by start date, filtering on the effective status"""
    now = now or utcnow()
    query = db.query(Event).filter(Event.deleted_at.is_(None))
    if game_slug:
        query = query.filter(Event.game_slug == game_slug)
    if status:
        query = query.filter(effective_status_clause(Event, status, now))

    total = query.count()
    events = (
        query.order_by(Event.start_date.asc(), Event.id.asc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )
    return {
        "data": [to_event_schema(event, now) for event in events],
        "pagination": build_pagination(page, limit, total),
    }

def create_event(db: Session, event_in: EventCreate, created_by_id: str) -> Event:
    """Create a new event"""
    event = Event(
        id=str(uuid.uuid4()),
        created_by_id=created_by_id,
        current_participants=0,
        **event_in.model_dump(mode="python"),
    )
    event.type = event_in.type.value
    with atomic(db):
        db.add(event)
    db.refresh(event)
    logger.info(f"Event {event.id} ({event.title}) created by {created_by_id}")
    return event

def update_event(db: Session, event_id: str, event_in: EventUpdate, now: Optional[datetime] = None) -> Event:
    """Apply a partial update to an event"""
    now = now or utcnow()
    event = _require_event(db, event_id)
    update_data = {
        field: value
        for field, value in event_in.model_dump(exclude_unset=True).items()
        if value is not None or field in CLEARABLE_FIELDS
    }

    if "type" in update_data:
        update_data["type"] = update_data["type"].value

    start_date = update_data.get("start_date") or event.start_date
    end_date = update_data.get("end_date") or event.end_date
    if end_date < start_date:
        raise ValidationFailed("end_date must not be before start_date")

    if "status_override" in update_data:
        override = update_data["status_override"]
        new_override = None if override in (None, StatusOverride.AUTO) else override.value
        if new_override != event.status_override and not can_override_event_status(start_date, end_date, now):
            raise StateInvalidError("Event status can no longer be changed")
        update_data["status_override"] = new_override

    max_participants = update_data.get("max_participants")
    if max_participants is not None and max_participants < event.current_participants:
        raise StateInvalidError("Capacity cannot be lower than the current number of participants")

    with atomic(db):
        update_fields(event, **update_data)
    db.refresh(event)
    logger.info(f"Event {event.id} updated: {sorted(update_data)}")
    return event

def delete_event(db: Session, event_id: str) -> Event:
    """Soft delete an event"""
    event = _require_event(db, event_id)
    with atomic(db):
        soft_delete(event)
    db.refresh(event)
    logger.info(f"Event {event.id} soft deleted")
    return event

# Registration operations
def get_registration(db: Session, user_id: str, event_id: str) -> Optional[EventRegistration]:
    return db.query(EventRegistration).filter(
        EventRegistration.event_id == event_id,
        EventRegistration.user_id == user_id,
    ).first()

def is_registered(db: Session, user_id: str, event_id: str) -> bool:
    """Check if a user holds a registration for an event"""
    return get_registration(db, user_id, event_id) is not None

def register_for_event(db: Session, user_id: str, event_id: str, now: Optional[datetime] = None) -> EventRegistration:
    """
    Register a user for an upcoming event.

    The registration row and the participant counter are written in one
    transaction. The counter is bumped with a conditional UPDATE so two
    requests racing for the last seat can not both get it.
    """
    now = now or utcnow()
    event = _require_event(db, event_id)

    if effective_status(event, now) != EventStatus.UPCOMING:
        raise StateInvalidError("Event is not open for registration")

    if event.registration_deadline and event.registration_deadline < now:
        raise StateInvalidError("Registration deadline has passed")

    if is_registered(db, user_id, event_id):
        raise ConflictError("Already registered for this event")

    if event.max_participants and event.current_participants >= event.max_participants:
        raise StateInvalidError("Event is full")

    registration = EventRegistration(id=str(uuid.uuid4()), event_id=event_id, user_id=user_id)
    try:
        with atomic(db):
            db.add(registration)
            db.flush()
            result = db.execute(
                update(Event)
                .where(
                    Event.id == event_id,
                    Event.deleted_at.is_(None),
                    or_(
                        Event.max_participants.is_(None),
                        Event.current_participants < Event.max_participants,
                    ),
                )
                .values(current_participants=Event.current_participants + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise StateInvalidError("Event is full")
    except IntegrityError:
        raise ConflictError("Already registered for this event")

    db.refresh(registration)
    logger.info(f"User {user_id} registered for event {event_id}")
    return registration

def unregister_from_event(db: Session, user_id: str, event_id: str, now: Optional[datetime] = None) -> None:
    """Withdraw a registration while the event is still upcoming"""
    now = now or utcnow()
    event = _require_event(db, event_id)

    if not is_registered(db, user_id, event_id):
        raise StateInvalidError("Not registered for this event")

    if effective_status(event, now) != EventStatus.UPCOMING:
        raise StateInvalidError("Cannot unregister once the event has started")

    with atomic(db):
        deleted = db.query(EventRegistration).filter(
            EventRegistration.event_id == event_id,
            EventRegistration.user_id == user_id,
        ).delete(synchronize_session=False)
        if deleted == 0:
            raise StateInvalidError("Not registered for this event")
        db.execute(
            update(Event)
            .where(Event.id == event_id, Event.current_participants > 0)
            .values(current_participants=Event.current_participants - 1)
            .execution_options(synchronize_session=False)
        )
    logger.info(f"User {user_id} unregistered from event {event_id}")
