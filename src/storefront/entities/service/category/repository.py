"""Category repository for data access operations."""

from sqlmodel import col, func, select

from src.storefront.entities.core._repository import SoftDeleteRepository
from src.storefront.entities.service.category.entity import Category
from src.storefront.entities.service.category.table import CategoryTable
from src.storefront.entities.service.links import ProductCategoryLink


class CategoryRepository(SoftDeleteRepository[CategoryTable, Category]):
    """Data-access layer for categories."""

    table = CategoryTable
    entity = Category

    def create(self, category: Category) -> Category:
        data = category.model_dump(exclude={"product_count"})
        row = CategoryTable(**data)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self.to_entity(row)

    def get_by_slug(self, slug: str) -> Category | None:
        row = self._session.exec(
            self.select_rows().where(col(CategoryTable.slug) == slug)
        ).first()
        if row is None:
            return None
        return self.to_entity(row)

    def slug_taken(self, slug: str, *, exclude_id: str | None = None) -> bool:
        statement = self.select_rows().where(col(CategoryTable.slug) == slug)
        if exclude_id is not None:
            statement = statement.where(col(CategoryTable.id) != exclude_id)
        return self._session.exec(statement).first() is not None

    def list_active(self) -> list[Category]:
        statement = (
            self.select_rows()
            .where(col(CategoryTable.is_active).is_(True))
            .order_by(col(CategoryTable.sort_order), col(CategoryTable.name))
        )
        rows = self._session.exec(statement).all()
        counts = self.count_products([row.id for row in rows])
        return [
            self.to_entity(row).model_copy(update={"product_count": counts.get(row.id, 0)})
            for row in rows
        ]

    def active_rows_by_ids(self, category_ids: list[str]) -> list[CategoryTable]:
        if not category_ids:
            return []
        statement = self.select_rows().where(
            col(CategoryTable.id).in_(category_ids),
            col(CategoryTable.is_active).is_(True),
        )
        return list(self._session.exec(statement).all())

    def count_products(self, category_ids: list[str]) -> dict[str, int]:
        """Number of live products linked to each of the given categories."""
        from src.storefront.entities.service.product.table import ProductTable

        if not category_ids:
            return {}
        statement = (
            select(ProductCategoryLink.category_id, func.count())
            .join(ProductTable, col(ProductTable.id) == ProductCategoryLink.product_id)
            .where(
                col(ProductCategoryLink.category_id).in_(category_ids),
                col(ProductTable.deleted_at).is_(None),
            )
            .group_by(ProductCategoryLink.category_id)
        )
        return {category_id: count for category_id, count in self._session.exec(statement).all()}
