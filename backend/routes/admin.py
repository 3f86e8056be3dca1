# backend/routes/admin.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import crud.users as users_store
from database import get_db
from schemas.user import (
    MessageResponse, Role, TokenData, UserEnvelope, UserListEnvelope, UserResponse, UserUpdate,
)
from utils.audit import client_ip, write_log
from utils.hashing import get_password_hash
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/users", tags=["Admin"])
logger = logging.getLogger(__name__)

admin_only = role_required(Role.ADMIN.value)


# Retrieve every user account (Admin only)
@router.get("", response_model=UserListEnvelope)
def get_all_users(db: Session = Depends(get_db), admin: TokenData = Depends(admin_only)):
    users = users_store.list_users(db)
    return {"success": True, "users": [UserResponse.model_validate(u) for u in users]}


# Retrieve a single user (Admin only)
@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(user_id: int, db: Session = Depends(get_db), admin: TokenData = Depends(admin_only)):
    user = users_store.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"success": True, "user": UserResponse.model_validate(user)}


# Partially update a user; a new password is re-hashed (Admin only)
@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: TokenData = Depends(admin_only),
):
    if not users_store.get_user(db, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    patch = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if "name" in patch:
        patch["name"] = patch["name"].strip()
    if "email" in patch:
        patch["email"] = patch["email"].strip().lower()
        other = users_store.get_user_by_email(db, patch["email"])
        if other and other.id != user_id:
            raise HTTPException(status_code=400, detail="User already exists")
    if "password" in patch:
        patch["password_hash"] = get_password_hash(patch.pop("password"))

    try:
        user = users_store.update_user(db, user_id, patch)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="User already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Update user %s error: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Server error")
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    write_log(
        db, user_id=admin.user_id, action="USER_UPDATE", resource="users", status="SUCCESS",
        ip=client_ip(request), meta={"id": user_id, "fields": sorted(patch)},
    )
    return {"success": True, "user": UserResponse.model_validate(user)}


# Delete a user account (Admin only)
@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: TokenData = Depends(admin_only),
):
    # Prevent self-deletion
    if user_id == admin.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    try:
        deleted = users_store.delete_user(db, user_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Delete user %s error: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Server error")
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    write_log(
        db, user_id=admin.user_id, action="USER_DELETE", resource="users", status="SUCCESS",
        ip=client_ip(request), meta={"id": user_id},
    )
    return {"success": True, "message": "User deleted successfully"}
