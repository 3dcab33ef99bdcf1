"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from eventfinder.schemas.common import CamelModel


class UserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=30)
    # Admin accounts are never self-registered
    role: Literal["user", "organizer"] = "user"


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    bio: Optional[str] = Field(None, max_length=1000)
    profile_image: Optional[str] = Field(None, max_length=500)


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: str
    phone: Optional[str]
    profile_image: Optional[str]
    bio: Optional[str]
    is_verified: bool
    is_active: bool
    created_at: datetime


class PublicUserResponse(CamelModel):
    id: int
    name: str
    role: str
    profile_image: Optional[str]
    bio: Optional[str]


class AuthPayload(CamelModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"
