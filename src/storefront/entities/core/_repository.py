"""Shared data-access behaviour for soft-deletable tables."""

from typing import Generic, TypeVar

from sqlalchemy.sql import Select
from sqlmodel import Session, col, select

from src.storefront.entities.core._base import (
    SoftDeleteEntity,
    SoftDeleteEntityTable,
    utcnow,
)

TableT = TypeVar("TableT", bound=SoftDeleteEntityTable)
EntityT = TypeVar("EntityT", bound=SoftDeleteEntity)


class SoftDeleteRepository(Generic[TableT, EntityT]):
    """Repository whose reads exclude soft-deleted rows unless asked otherwise.

    Subclasses set ``table`` and ``entity`` and build their queries on
    ``select_rows()`` so the ``deleted_at IS NULL`` predicate is never
    forgotten at a call site.
    """

    table: type[TableT]
    entity: type[EntityT]

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def select_rows(self, *, include_deleted: bool = False) -> Select:
        statement = select(self.table)
        if not include_deleted:
            statement = statement.where(col(self.table.deleted_at).is_(None))
        return statement

    def get_row(self, entity_id: str, *, include_deleted: bool = False) -> TableT | None:
        statement = self.select_rows(include_deleted=include_deleted).where(
            col(self.table.id) == entity_id
        )
        return self._session.exec(statement).first()

    def to_entity(self, row: TableT) -> EntityT:
        return self.entity.model_validate(row, from_attributes=True)

    def get(self, entity_id: str) -> EntityT | None:
        row = self.get_row(entity_id)
        if row is None:
            return None
        return self.to_entity(row)

    def get_active(self, entity_id: str) -> EntityT | None:
        """Like ``get`` but also hides deactivated rows."""
        row = self.get_row(entity_id)
        if row is None or not row.is_active:
            return None
        return self.to_entity(row)

    def update_fields(self, entity_id: str, changes: dict) -> EntityT | None:
        """Overwrite only the given columns; omitted columns stay untouched."""
        row = self.get_row(entity_id)
        if row is None:
            return None
        for field_name, value in changes.items():
            setattr(row, field_name, value)
        row.updated_at = utcnow()
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self.to_entity(row)

    def soft_delete(self, entity_id: str) -> bool:
        row = self.get_row(entity_id)
        if row is None:
            return False
        row.deleted_at = utcnow()
        self._session.add(row)
        self._session.flush()
        return True
