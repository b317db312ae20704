"""
Explicit write helpers for rows that carry audit timestamps.
Soft deletes only stamp ``deleted_at`` and never touch ``updated_at``;
regular updates always refresh ``updated_at``.
"""
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Query


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching how rows are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC already"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def update_fields(row: Any, **fields: Any) -> Any:
    for field, value in fields.items():
        setattr(row, field, value)
    if hasattr(row, "updated_at"):
        row.updated_at = utcnow()
    return row


def soft_delete(row: Any) -> Any:
    row.deleted_at = utcnow()
    return row


def soft_delete_query(query: Query) -> int:
    """Bulk soft delete; returns the number of rows stamped"""
    return query.update({"deleted_at": utcnow()}, synchronize_session=False)
