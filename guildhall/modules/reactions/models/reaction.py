from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Index

from guildhall.db.helpers import utcnow
from guildhall.db.session import Base

class Reaction(Base):
    __tablename__ = "reactions"

    id = Column(String, primary_key=True, index=True)
    content_id = Column(String, nullable=False)
    content_type = Column(String, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    emoji = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        # One reaction per user per content item
        UniqueConstraint("content_id", "content_type", "user_id", name="unique_user_reaction"),
        Index("ix_reactions_content", "content_id", "content_type"),
    )
