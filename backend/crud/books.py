# backend/crud/books.py
from typing import List, Optional

from sqlalchemy.orm import Session

from models.book import Book


def list_books(db: Session) -> List[Book]:
    # Newest first; id breaks ties between rows stored in the same instant
    return db.query(Book).order_by(Book.created_at.desc(), Book.id.desc()).all()


def get_book(db: Session, book_id: int) -> Optional[Book]:
    return db.query(Book).filter(Book.id == book_id).first()


def create_book(db: Session, **fields) -> Book:
    book = Book(**fields)
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


def save_book(db: Session, book: Book) -> Book:
    db.commit()
    db.refresh(book)
    return book


def delete_book(db: Session, book_id: int) -> bool:
    book = get_book(db, book_id)
    if not book:
        return False
    db.delete(book)
    db.commit()
    return True
