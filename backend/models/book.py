# backend/models/book.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from database import Base


def _utcnow():
    return datetime.now(timezone.utc)


# Model Book
# A single catalog entry. Price and stock are guarded by check constraints,
# the image column holds either an external URL or a path relative to the
# upload directory (e.g. "uploads/1700000000000-ab12.png").
class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False)

    image = Column(String, nullable=True)

    # Python-side defaults keep sub-second ordering on SQLite
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
