"""User-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from app.domain.entities import UserRole
from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for user registration."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: str = Field(default="user", pattern="^(user|host)$")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not re.search(r"[A-Za-z]", v):
            raise ValueError("Password must contain at least one letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one digit")
        return v


class UserLogin(CamelModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class RefreshTokenRequest(CamelModel):
    """Schema for exchanging a refresh token."""

    refresh_token: str


class UserResponse(CamelModel):
    """Schema for user response."""

    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime | None = None


class TokenResponse(CamelModel):
    """Schema for authentication token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse | None = None
