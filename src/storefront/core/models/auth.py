"""Request and response models for authentication endpoints."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.storefront.core.models.common import CamelModel
from src.storefront.entities.core.user import User, UserRole

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
PASSWORD_CHARS = re.compile(r"^[A-Za-z\d@$!%*?&#^()_+\-=.,;:]+$")
PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


def _check_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one lowercase letter, "
            "one uppercase letter and one number"
        )
    if not PASSWORD_CHARS.match(value):
        raise ValueError("Password contains unsupported characters")
    return value


class RegisterRequest(CamelModel):
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    role: UserRole = Field(default=UserRole.CUSTOMER)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class LoginRequest(BaseModel):
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=128)


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)


class UserProfile(CamelModel):
    """Public view of a user account; never carries the password hash."""

    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: UserRole
    phone: str | None = None
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            role=user.role,
            phone=user.phone,
            is_active=user.is_active,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
        )


class AuthTokens(BaseModel):
    """Token pair returned by register, login and refresh."""

    access_token: str
    refresh_token: str
    expires_in: int = Field(description="Access token lifetime in seconds")
    token_type: str = "Bearer"
    user: UserProfile
