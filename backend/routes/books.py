# backend/routes/books.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import crud.books as books_store
from config import Settings, get_settings
from database import get_db
from models.book import Book
from schemas.book import BookEnvelope, BookListResponse, BookResponse, BookSavedResponse
from schemas.user import MessageResponse
from utils.audit import client_ip, write_log
from utils.images import image_url_for_request, remove_upload, save_upload

router = APIRouter(prefix="/api/books", tags=["Books"])
logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "author", "description", "category")


# ---- HELPERS ----
def _book_out(request: Request, book: Book) -> BookResponse:
    out = BookResponse.model_validate(book)
    return out.model_copy(update={"image": image_url_for_request(request, book.image)})

def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None

def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


# =========================
# LIST
# =========================
@router.get("", response_model=BookListResponse)
def list_books(request: Request, db: Session = Depends(get_db)):
    try:
        books = books_store.list_books(db)
    except SQLAlchemyError as e:
        logger.exception("Error fetching books: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch books")
    return {"success": True, "books": [_book_out(request, b) for b in books]}


# =========================
# SINGLE BOOK
# =========================
@router.get("/{book_id}", response_model=BookEnvelope)
def get_book(book_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        book = books_store.get_book(db, book_id)
    except SQLAlchemyError as e:
        logger.exception("Error fetching book %s: %s", book_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch book")
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return {"success": True, "book": _book_out(request, book)}


# =========================
# ADD
# =========================
@router.post("", response_model=BookSavedResponse, status_code=201)
def add_book(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    image: Optional[UploadFile] = File(None),
    title: str = Form(...),
    author: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    price: float = Form(..., ge=0, allow_inf_nan=False),
    stock: int = Form(..., ge=0),
):
    fields = {
        "title": _clean(title),
        "author": _clean(author),
        "description": _clean(description),
        "category": _clean(category),
    }
    missing = [name for name in TEXT_FIELDS if not fields[name]]
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")

    image_ref = save_upload(image, settings.UPLOAD_DIR) if _has_file(image) else None

    try:
        book = books_store.create_book(db, **fields, price=price, stock=stock, image=image_ref)
    except SQLAlchemyError as e:
        db.rollback()
        remove_upload(image_ref, settings.UPLOAD_DIR)
        logger.exception("Error adding book: %s", e)
        raise HTTPException(status_code=500, detail="Failed to add book")

    write_log(
        db, user_id=None, action="BOOK_CREATE", resource="books",
        status="SUCCESS", ip=client_ip(request), meta={"id": book.id, "title": book.title}
    )
    return {"success": True, "message": "Book added successfully", "book": _book_out(request, book)}


# =========================
# UPDATE (multipart, partial)
# =========================
@router.put("/{book_id}", response_model=BookSavedResponse)
def update_book(
    book_id: int,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    image: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[float] = Form(None, ge=0, allow_inf_nan=False),
    stock: Optional[int] = Form(None, ge=0),
):
    book = books_store.get_book(db, book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")

    # Absent fields stay as they are; 0 is a real value for price and stock
    for name, value in zip(TEXT_FIELDS, (title, author, description, category)):
        cleaned = _clean(value)
        if cleaned is not None:
            setattr(book, name, cleaned)
    if price is not None:
        book.price = price
    if stock is not None:
        book.stock = stock

    new_image = save_upload(image, settings.UPLOAD_DIR) if _has_file(image) else None
    if new_image:
        book.image = new_image

    try:
        book = books_store.save_book(db, book)
    except SQLAlchemyError as e:
        db.rollback()
        remove_upload(new_image, settings.UPLOAD_DIR)
        logger.exception("Error updating book %s: %s", book_id, e)
        raise HTTPException(status_code=500, detail="Failed to update book")

    write_log(
        db, user_id=None, action="BOOK_UPDATE", resource="books",
        status="SUCCESS", ip=client_ip(request), meta={"id": book.id}
    )
    return {"success": True, "message": "Book updated successfully", "book": _book_out(request, book)}


# =========================
# DELETE
# =========================
@router.delete("/{book_id}", response_model=MessageResponse)
def delete_book(book_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        deleted = books_store.delete_book(db, book_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting book %s: %s", book_id, e)
        raise HTTPException(status_code=500, detail="Failed to delete book")
    if not deleted:
        raise HTTPException(status_code=404, detail="Book not found")

    write_log(
        db, user_id=None, action="BOOK_DELETE", resource="books",
        status="SUCCESS", ip=client_ip(request), meta={"id": book_id}
    )
    return {"success": True, "message": "Book deleted successfully"}
