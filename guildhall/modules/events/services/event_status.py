"""
Effective event status.

An event's status is never read from storage: it is derived from the
current time and the event dates, unless a moderator pinned it with an
override. ONGOING covers start_date and end_date inclusively.
"""
import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from sqlalchemy import and_, or_

from guildhall.db.helpers import as_naive_utc, utcnow


class EventStatus(str, Enum):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class StatusOverride(str, Enum):
    AUTO = "AUTO"
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Overrides may still be changed this long after an event ended
OVERRIDE_GRACE_PERIOD = timedelta(hours=24)


def get_automatic_event_status(start_date: datetime, end_date: datetime, now: Optional[datetime] = None) -> EventStatus:
    now = as_naive_utc(now) if now else utcnow()
    start_date = as_naive_utc(start_date)
    end_date = as_naive_utc(end_date)

    if now < start_date:
        return EventStatus.UPCOMING
    if start_date <= now <= end_date:
        return EventStatus.ONGOING
    return EventStatus.COMPLETED


def get_effective_event_status(
    start_date: datetime,
    end_date: datetime,
    status_override: Optional[str] = None,
    now: Optional[datetime] = None,
) -> EventStatus:
    """Status shown to users: a manual override wins, AUTO or None falls back to the dates"""
    if status_override and status_override != StatusOverride.AUTO.value:
        return EventStatus(status_override)
    return get_automatic_event_status(start_date, end_date, now)


def can_override_event_status(start_date: datetime, end_date: datetime, now: Optional[datetime] = None) -> bool:
    """Overrides are allowed unless the event ended more than a day ago"""
    now = as_naive_utc(now) if now else utcnow()
    if get_automatic_event_status(start_date, end_date, now) == EventStatus.COMPLETED:
        return now - as_naive_utc(end_date) <= OVERRIDE_GRACE_PERIOD
    return True


def describe_event_status(
    status: EventStatus,
    start_date: datetime,
    end_date: datetime,
    now: Optional[datetime] = None,
) -> str:
    now = as_naive_utc(now) if now else utcnow()
    start_date = as_naive_utc(start_date)
    end_date = as_naive_utc(end_date)

    if status == EventStatus.UPCOMING:
        days_until_start = math.ceil((start_date - now).total_seconds() / 86400)
        if days_until_start <= 0:
            return "Starting today"
        if days_until_start == 1:
            return "Starting tomorrow"
        return f"Starting in {days_until_start} days"

    if status == EventStatus.ONGOING:
        hours_until_end = math.ceil((end_date - now).total_seconds() / 3600)
        if hours_until_end <= 1:
            return "Ending soon"
        if hours_until_end <= 24:
            return f"Ending in {hours_until_end} hours"
        return f"Ending in {math.ceil(hours_until_end / 24)} days"

    if status == EventStatus.COMPLETED:
        hours_since_end = math.floor((now - end_date).total_seconds() / 3600)
        if hours_since_end < 1:
            return "Just ended"
        if hours_since_end < 24:
            return f"Ended {hours_since_end} hours ago"
        return f"Ended {hours_since_end // 24} days ago"

    return "Event cancelled"


def effective_status_clause(model, status: EventStatus, now: Optional[datetime] = None):
    """SQL filter selecting rows of ``model`` whose effective status equals ``status``"""
    now = as_naive_utc(now) if now else utcnow()
    status = EventStatus(status)
    automatic = or_(model.status_override.is_(None), model.status_override == StatusOverride.AUTO.value)

    if status == EventStatus.UPCOMING:
        by_dates = model.start_date > now
    elif status == EventStatus.ONGOING:
        by_dates = and_(model.start_date <= now, model.end_date >= now)
    elif status == EventStatus.COMPLETED:
        by_dates = model.end_date < now
    else:
        return model.status_override == EventStatus.CANCELLED.value

    return or_(model.status_override == status.value, and_(automatic, by_dates))
