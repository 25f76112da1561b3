"""User repository for data access operations."""

from sqlmodel import col, func, select

from src.storefront.entities.core._base import utcnow
from src.storefront.entities.core._repository import SoftDeleteRepository
from src.storefront.entities.core.user.entity import User
from src.storefront.entities.core.user.table import UserTable


class UserRepository(SoftDeleteRepository[UserTable, User]):
    """Data-access layer for users."""

    table = UserTable
    entity = User

    def get_by_email(self, email: str) -> User | None:
        statement = self.select_rows().where(
            func.lower(col(UserTable.email)) == email.strip().lower()
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return self.to_entity(row)

    def create(self, user: User) -> User:
        data = user.model_dump()
        data["email"] = user.email.strip().lower()
        data["role"] = user.role.value
        row = UserTable(**data)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self.to_entity(row)

    def touch_last_login(self, user_id: str) -> None:
        row = self.get_row(user_id)
        if row is None:
            return
        row.last_login_at = utcnow()
        self._session.add(row)
        self._session.flush()

    def list_page(self, skip: int, limit: int) -> list[User]:
        statement = (
            self.select_rows()
            .order_by(col(UserTable.created_at).desc(), col(UserTable.id))
            .offset(skip)
            .limit(limit)
        )
        return [self.to_entity(row) for row in self._session.exec(statement).all()]

    def count(self, *, role: str | None = None) -> int:
        statement = (
            select(func.count())
            .select_from(UserTable)
            .where(col(UserTable.deleted_at).is_(None))
        )
        if role is not None:
            statement = statement.where(col(UserTable.role) == role)
        return self._session.exec(statement).one()
