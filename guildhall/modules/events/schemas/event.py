from typing import List, Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator

from guildhall.core.pagination import Pagination
from guildhall.db.helpers import as_naive_utc
from guildhall.modules.events.services.event_status import EventStatus, StatusOverride

class EventType(str, Enum):
    TOURNAMENT = "TOURNAMENT"
    CASUAL = "CASUAL"
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    game_slug: Optional[str] = None
    type: EventType
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    online_url: Optional[str] = None
    max_participants: Optional[int] = Field(None, gt=0)
    registration_deadline: Optional[datetime] = None

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

class EventUpdate(BaseModel):
    """Partial update; only the supplied fields change"""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    game_slug: Optional[str] = None
    type: Optional[EventType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    online_url: Optional[str] = None
    max_participants: Optional[int] = Field(None, gt=0)
    registration_deadline: Optional[datetime] = None
    status_override: Optional[StatusOverride] = None

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(v) if v is not None else None

class Event(BaseModel):
    """Event model returned to client, with its status derived at read time"""
    id: str
    title: str
    description: str
    game_slug: Optional[str] = None
    type: str
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    online_url: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    max_participants: Optional[int] = None
    current_participants: int
    status: EventStatus
    status_description: str
    status_override: Optional[str] = None
    created_by_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class EventResponse(BaseModel):
    data: Event
    message: Optional[str] = None

class EventListResponse(BaseModel):
    data: List[Event]
    pagination: Pagination

class RegistrationStatus(BaseModel):
    is_registered: bool
