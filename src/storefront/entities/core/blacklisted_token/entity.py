from datetime import datetime
from enum import Enum

from pydantic import Field

from src.storefront.entities.core._base import Entity, as_utc, utcnow


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class BlacklistedToken(Entity):
    """A revoked JWT, identified by its ``jti``, kept until its natural expiry."""

    jti: str = Field(description="Unique token identifier from the JWT")
    user_id: str = Field(description="Owner of the revoked token")
    token_type: TokenType = Field(default=TokenType.ACCESS)
    expires_at: datetime = Field(description="When the token would have expired")

    def is_expired(self, now: datetime | None = None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())
