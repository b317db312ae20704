from sqlalchemy import Boolean, Column, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from guildhall.db.helpers import utcnow
from guildhall.db.session import Base

class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    content_id = Column(String, nullable=False)
    content_type = Column(String, nullable=False)
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    parent_id = Column(String, ForeignKey("comments.id"), nullable=True, index=True)
    is_deleted = Column(Boolean, default=False, nullable=False)  # Soft delete flag, never reset
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)

    author = relationship("User", lazy="joined")
    parent = relationship("Comment", remote_side=[id])

    __table_args__ = (
        Index("ix_comments_content", "content_id", "content_type"),
    )
