from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# Closed set of account roles accepted at the API boundary
class Role(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str = Field(..., min_length=1)

# Schema for user registration requests
class UserCreate(UserBase):
    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Role

# Schema for administrative partial updates; unset fields are left alone
class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    password: Optional[str] = Field(None, min_length=1)

# Output schema for user profile details (no password hash)
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse
    token: str


class UserEnvelope(BaseModel):
    success: bool = True
    user: UserResponse


class UserListEnvelope(BaseModel):
    success: bool = True
    users: List[UserResponse]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# Schema for JWT payload contents
class TokenData(BaseModel):
    user_id: int
    role: str
