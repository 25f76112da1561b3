"""User domain entity."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from src.storefront.entities.core._base import SoftDeleteEntity


class UserRole(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


class User(SoftDeleteEntity):
    """User entity representing a shop account.

    ``password_hash`` never leaves the service layer; HTTP projections are
    built from ``UserProfile`` instead.
    """

    email: str = Field(description="Login email address, unique among live accounts")
    password_hash: str = Field(description="bcrypt hash of the user's password")
    role: UserRole = Field(default=UserRole.CUSTOMER)
    first_name: str = Field(description="User's first name")
    last_name: str = Field(description="User's last name")
    phone: str | None = Field(default=None, description="User's phone number")
    last_login_at: datetime | None = Field(default=None)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
