# backend/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import crud.users as users_store
from config import Settings, get_settings
from database import get_db
from models.users import User
from schemas import user as schemas
from utils.audit import client_ip, write_log
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import TokenConfigError, create_access_token, get_current_identity

router = APIRouter(prefix="/api/users", tags=["Auth"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _issue_token(user: User, settings: Settings) -> str:
    try:
        return create_access_token(user.id, user.role, settings)
    except TokenConfigError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


def _require_signing_key(settings: Settings) -> None:
    if not settings.SECRET_KEY:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="JWT secret not set")


# Register a new user
@router.post("/register", response_model=schemas.AuthResponse, status_code=201)
def register(
    payload: schemas.UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # Normalize email input
    normalized_email = payload.email.strip().lower()

    if users_store.get_user_by_email(db, normalized_email):
        write_log(
            db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
            ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"},
        )
        raise HTTPException(status_code=400, detail="User already exists")

    # No account is created unless a token can be issued for it
    _require_signing_key(settings)

    try:
        new_user = users_store.create_user(
            db,
            name=payload.name.strip(),
            email=normalized_email,
            password_hash=get_password_hash(payload.password),
            role=payload.role.value,
        )
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="User already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Register error: %s", e)
        raise HTTPException(status_code=500, detail="Server error")

    token = _issue_token(new_user, settings)

    write_log(
        db, user_id=new_user.id, action="REGISTER", resource="auth", status="SUCCESS",
        ip=client_ip(request), meta={"email": new_user.email},
    )

    return {
        "success": True,
        "message": "User registered successfully",
        "user": schemas.UserResponse.model_validate(new_user),
        "token": token,
    }


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.AuthResponse)
def login(
    payload: schemas.UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    db_user = users_store.get_user_by_email(db, payload.email)

    # Unknown email and wrong password get the same answer
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=400, detail=INVALID_CREDENTIALS)

    _require_signing_key(settings)
    token = _issue_token(db_user, settings)

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {
        "success": True,
        "message": "Login successful",
        "user": schemas.UserResponse.model_validate(db_user),
        "token": token,
    }


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserEnvelope)
def me(identity: schemas.TokenData = Depends(get_current_identity), db: Session = Depends(get_db)):
    user = users_store.get_user(db, identity.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"success": True, "user": schemas.UserResponse.model_validate(user)}
