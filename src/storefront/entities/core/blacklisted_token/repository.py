from datetime import datetime

from sqlalchemy import delete
from sqlmodel import Session, col, select

from src.storefront.entities.core.blacklisted_token.entity import BlacklistedToken
from src.storefront.entities.core.blacklisted_token.table import BlacklistedTokenTable


class BlacklistedTokenRepository:
    """Data-access layer for revoked tokens."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_jti(self, jti: str) -> BlacklistedToken | None:
        statement = select(BlacklistedTokenTable).where(
            col(BlacklistedTokenTable.jti) == jti
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return BlacklistedToken.model_validate(row, from_attributes=True)

    def create(self, token: BlacklistedToken) -> BlacklistedToken:
        data = token.model_dump()
        data["token_type"] = token.token_type.value
        self._session.add(BlacklistedTokenTable(**data))
        self._session.flush()
        return token

    def delete_by_jti(self, jti: str) -> None:
        self._session.exec(
            delete(BlacklistedTokenTable).where(col(BlacklistedTokenTable.jti) == jti)
        )

    def delete_expired(self, now: datetime) -> int:
        result = self._session.exec(
            delete(BlacklistedTokenTable).where(
                col(BlacklistedTokenTable.expires_at) <= now
            )
        )
        return result.rowcount or 0
