# backend/schemas/book.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Full book representation; image is already an absolute URL (or null)
class BookResponse(ORMBase):
    id: int
    title: str
    author: str
    category: str
    description: str
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookEnvelope(BaseModel):
    success: bool = True
    book: BookResponse


class BookSavedResponse(BookEnvelope):
    message: str


class BookListResponse(BaseModel):
    success: bool = True
    books: List[BookResponse]
