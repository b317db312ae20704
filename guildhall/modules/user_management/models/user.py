from sqlalchemy import Boolean, Column, String, DateTime

from guildhall.db.helpers import utcnow
from guildhall.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    username = Column(String, unique=True, index=True)
    name = Column(String)
    avatar = Column(String, nullable=True)
    role = Column(String, default="USER")  # USER, MODERATOR, ADMIN
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
