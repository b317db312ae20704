from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Text, Index

from guildhall.db.helpers import utcnow
from guildhall.db.session import Base

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)  # The recipient
    type = Column(String)  # COMMENT_REPLY, FOLLOW_REQUEST, FOLLOW_ACCEPTED, FOLLOW_REJECTED
    title = Column(String)
    message = Column(Text)
    content_id = Column(String, nullable=True)  # ID of the related entity (user, comment target, ...)
    content_type = Column(String, nullable=True)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_notifications_user_type_content", "user_id", "type", "content_id"),
    )
