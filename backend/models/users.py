# backend/models/users.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime
from database import Base


def _utcnow():
    return datetime.now(timezone.utc)


# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    # bcrypt hash, never the plaintext password
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
