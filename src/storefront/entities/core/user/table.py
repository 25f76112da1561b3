"""User database table model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from src.storefront.entities.core._base import SoftDeleteEntityTable
from src.storefront.entities.core.user.entity import UserRole


class UserTable(SoftDeleteEntityTable, table=True):
    """Database persistence model for users."""

    __tablename__ = "users"
    __table_args__ = (
        # Email uniqueness only applies to accounts that have not been deleted
        sa.Index(
            "uq_users_email_live",
            "email",
            unique=True,
            postgresql_where=sa.text("deleted_at IS NULL"),
            sqlite_where=sa.text("deleted_at IS NULL"),
        ),
    )

    email: str = Field(max_length=255)
    password_hash: str = Field(max_length=255)
    role: UserRole = Field(
        default=UserRole.CUSTOMER,
        sa_column=sa.Column(sa.String(20), nullable=False, default=UserRole.CUSTOMER.value),
    )
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    last_login_at: datetime | None = Field(default=None)
