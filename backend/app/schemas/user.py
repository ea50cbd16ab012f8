"""
User Schemas
Pydantic models for user-related data.

Request models only describe the shape of the payload. Field rules live in
app.utils.validation and run before anything reaches the auth service.
"""

from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None


class PasswordUpdate(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_new_password: Optional[str] = None


class UserResponse(CamelModel):
    """Public profile. Never carries the password hash or tokens."""
    id: int
    name: str
    email: str
    role: str
    created_at: datetime


class AuthPayload(CamelModel):
    user: UserResponse
    access_token: str


class AccessTokenPayload(CamelModel):
    access_token: str


class UserPayload(CamelModel):
    user: UserResponse
