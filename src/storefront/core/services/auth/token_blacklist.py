"""Revocation list for issued JWTs."""

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.storefront.entities.core._base import utcnow
from src.storefront.entities.core.blacklisted_token import (
    BlacklistedToken,
    BlacklistedTokenRepository,
    TokenType,
)


class TokenBlacklistService:
    """Records revoked token ids until the tokens would have expired anyway."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repository = BlacklistedTokenRepository(session)

    def add(
        self,
        jti: str,
        user_id: str,
        expires_at: int | datetime,
        token_type: TokenType = TokenType.ACCESS,
    ) -> None:
        """Revoke a token. Revoking the same ``jti`` twice is a no-op."""
        if isinstance(expires_at, int):
            expires_at = datetime.fromtimestamp(expires_at, tz=UTC)

        if self._repository.get_by_jti(jti) is not None:
            return

        try:
            self._repository.create(
                BlacklistedToken(
                    jti=jti,
                    user_id=user_id,
                    token_type=token_type,
                    expires_at=expires_at,
                )
            )
            self._session.commit()
        except IntegrityError:
            # Revoked concurrently by another request
            self._session.rollback()
        logger.bind(user_id=user_id, token_type=token_type.value).info("Token revoked")

    def is_blacklisted(self, jti: str) -> bool:
        """Whether ``jti`` is revoked. Expired entries are dropped on sight."""
        entry = self._repository.get_by_jti(jti)
        if entry is None:
            return False
        if entry.is_expired():
            self._repository.delete_by_jti(jti)
            self._session.commit()
            return False
        return True

    def purge_expired(self) -> int:
        removed = self._repository.delete_expired(utcnow())
        self._session.commit()
        if removed:
            logger.info("Purged {} expired blacklisted tokens", removed)
        return removed
