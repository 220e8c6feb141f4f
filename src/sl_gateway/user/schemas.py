"""Pydantic request/response schemas for sl_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

import re
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.sl_common.enums import UserRole
from src.sl_gateway.user.db_models import UserModel


def _check_password(v: str) -> str:
    """Enforce: at least one uppercase, one lowercase, one digit."""
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one digit")
    return v


class UserDetails(BaseModel):
    """Profile fields. `id` is never part of an update."""

    role: UserRole = UserRole.USER
    birthdate: date | None = None
    city: str | None = Field(None, max_length=128)
    state: str | None = Field(None, max_length=128)
    race: str | None = Field(None, max_length=64)
    profile_image: str | None = Field(None, max_length=1024)
    lifetime_val: Decimal = Decimal("0")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    details: UserDetails = Field(default_factory=UserDetails)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        return _check_password(v)


class UpdateUserRequest(BaseModel):
    # Blank or missing password leaves the current one untouched
    password: str | None = Field(None, max_length=128)
    details: UserDetails
    is_active: bool | None = None

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return _check_password(v)


class UserInfo(BaseModel):
    user_id: str
    email: str
    username: str
    role: str
    is_active: bool
    birthdate: date | None = None
    city: str | None = None
    state: str | None = None
    race: str | None = None
    profile_image: str | None = None
    lifetime_val: Decimal = Decimal("0")
    created_at: str | None = None

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            user_id=str(user.id),
            email=user.email,
            username=user.username,
            role=user.role,
            is_active=user.is_active,
            birthdate=user.birthdate,
            city=user.city,
            state=user.state,
            race=user.race,
            profile_image=user.profile_image,
            lifetime_val=user.lifetime_val if user.lifetime_val is not None else Decimal("0"),
            created_at=user.created_at.isoformat() if user.created_at else None,
        )


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds
    user: UserInfo


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int = 1800
