from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from guildhall.db.helpers import utcnow
from guildhall.db.session import Base

class Event(Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    game_slug = Column(String, nullable=True, index=True)
    type = Column(String, nullable=False)  # TOURNAMENT, CASUAL, ONLINE, OFFLINE
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    location = Column(String, nullable=True)
    online_url = Column(String, nullable=True)
    registration_deadline = Column(DateTime, nullable=True)
    max_participants = Column(Integer, nullable=True)
    # Denormalized count of live registrations; only changed together with event_registrations
    current_participants = Column(Integer, default=0, nullable=False)
    status_override = Column(String, nullable=True)  # UPCOMING, ONGOING, COMPLETED, CANCELLED or NULL for automatic
    created_by_id = Column(String, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    created_by = relationship("User")

    __table_args__ = (
        CheckConstraint("current_participants >= 0", name="non_negative_participants"),
    )

class EventRegistration(Base):
    __tablename__ = "event_registrations"

    id = Column(String, primary_key=True, index=True)
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="unique_event_registration"),
    )
