# utils/tokenJWT.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from config import Settings, get_settings
from schemas.user import TokenData

logger = logging.getLogger(__name__)

# auto_error=False so a missing header ends up as 401, not 403
bearer_scheme = HTTPBearer(auto_error=False)


class TokenConfigError(RuntimeError):
    """Raised when a token is requested but no signing key is configured."""


# Generate a signed token binding the user id and role
def create_access_token(user_id: int, role: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    if not settings.SECRET_KEY:
        logger.warning("Token requested for user %s but no SECRET_KEY is configured", user_id)
        raise TokenConfigError("JWT secret not set")
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenData:
    """Verify signature and expiry, returning the embedded identity.

    Raises ``JWTError`` for anything that is not a valid, unexpired token
    signed with the configured key.
    """
    if not settings.SECRET_KEY:
        raise JWTError("JWT secret not set")
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    sub = payload.get("sub")
    role = payload.get("role")
    if sub is None or role is None:
        raise JWTError("Token is missing claims")
    try:
        return TokenData(user_id=int(sub), role=role)
    except ValueError:
        raise JWTError("Malformed subject claim")


# Resolve the caller identity from the bearer token
def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> TokenData:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        return decode_access_token(credentials.credentials, settings)
    except JWTError:
        raise credentials_exception


# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    def _checker(identity: TokenData = Depends(get_current_identity)):
        if allowed_roles and identity.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required"
            )
        return identity
    return _checker
