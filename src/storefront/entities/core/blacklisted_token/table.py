from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from src.storefront.entities.core._base import EntityTable


class BlacklistedTokenTable(EntityTable, table=True):
    """Database persistence model for revoked tokens."""

    __tablename__ = "blacklisted_tokens"

    jti: str = Field(max_length=255, unique=True, index=True)
    user_id: str = Field(index=True)
    token_type: str = Field(
        default="access", sa_column=sa.Column(sa.String(10), nullable=False)
    )
    expires_at: datetime = Field(index=True)
