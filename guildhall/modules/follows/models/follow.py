from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from guildhall.db.helpers import utcnow
from guildhall.db.session import Base

# The realized, directed edge: follower -> following
class Follow(Base):
    __tablename__ = "follows"

    follower_id = Column(String, ForeignKey("users.id"), primary_key=True)
    following_id = Column(String, ForeignKey("users.id"), primary_key=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="unique_follow"),
        CheckConstraint("follower_id != following_id", name="no_self_follow"),
    )

# Follow request model
class FollowRequest(Base):
    __tablename__ = "follow_requests"

    id = Column(String, primary_key=True, index=True)
    sender_id = Column(String, ForeignKey("users.id"), nullable=False)
    receiver_id = Column(String, ForeignKey("users.id"), nullable=False)
    status = Column(String, default="PENDING", nullable=False)  # PENDING, ACCEPTED, REJECTED
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)

    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

    __table_args__ = (
        UniqueConstraint("sender_id", "receiver_id", name="unique_follow_request"),
    )
