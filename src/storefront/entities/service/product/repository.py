"""Product repository for data access operations."""

from typing import TYPE_CHECKING

from sqlalchemy import update
from sqlalchemy.orm import selectinload
from sqlmodel import col, func, select

from src.storefront.entities.core._repository import SoftDeleteRepository
from src.storefront.entities.core.user.entity import User
from src.storefront.entities.service.category.entity import Category
from src.storefront.entities.service.category.table import CategoryTable
from src.storefront.entities.service.product.entity import Product
from src.storefront.entities.service.product.table import ProductTable

if TYPE_CHECKING:
    from src.storefront.core.services.catalog.search_criteria import (
        ProductSearchCriteria,
    )

_RELATIONS = ("categories", "created_by")


class ProductRepository(SoftDeleteRepository[ProductTable, Product]):
    """Data-access layer for products."""

    table = ProductTable
    entity = Product

    def to_entity(self, row: ProductTable, *, include_owner: bool = False) -> Product:
        data = {
            name: getattr(row, name)
            for name in Product.model_fields
            if name not in _RELATIONS
        }
        owner = None
        if include_owner and row.created_by is not None:
            owner = User.model_validate(row.created_by, from_attributes=True)
        return Product(
            **data,
            categories=[
                Category.model_validate(category, from_attributes=True)
                for category in row.categories
                if category.deleted_at is None
            ],
            created_by=owner,
        )

    def _live(self):
        """Rows visible to catalogue reads: not deleted and active."""
        return self.select_rows().where(col(ProductTable.is_active).is_(True))

    def get_visible(self, product_id: str, *, include_owner: bool = False) -> Product | None:
        row = self._session.exec(
            self._live().where(col(ProductTable.id) == product_id)
        ).first()
        if row is None:
            return None
        return self.to_entity(row, include_owner=include_owner)

    def get_visible_by_slug(self, slug: str, *, include_owner: bool = False) -> Product | None:
        row = self._session.exec(
            self._live().where(col(ProductTable.slug) == slug)
        ).first()
        if row is None:
            return None
        return self.to_entity(row, include_owner=include_owner)

    def slug_taken(self, slug: str, *, exclude_id: str | None = None) -> bool:
        statement = self.select_rows().where(col(ProductTable.slug) == slug)
        if exclude_id is not None:
            statement = statement.where(col(ProductTable.id) != exclude_id)
        return self._session.exec(statement).first() is not None

    def create(self, product: Product, categories: list[CategoryTable]) -> Product:
        data = product.model_dump(exclude=set(_RELATIONS))
        row = ProductTable(**data)
        row.categories = list(categories)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self.to_entity(row, include_owner=True)

    def replace_categories(self, product_id: str, categories: list[CategoryTable]) -> None:
        row = self.get_row(product_id)
        if row is None:
            return
        row.categories = list(categories)
        self._session.add(row)
        self._session.flush()

    def get_with_owner(self, product_id: str) -> Product | None:
        row = self.get_row(product_id)
        if row is None:
            return None
        return self.to_entity(row, include_owner=True)

    def increment_view_count(self, product_id: str, amount: int = 1) -> None:
        self._session.exec(
            update(ProductTable)
            .where(col(ProductTable.id) == product_id)
            .values(view_count=col(ProductTable.view_count) + amount)
        )

    def popular(self, limit: int) -> list[Product]:
        statement = (
            self._live()
            .where(col(ProductTable.order_count) > 0)
            .options(selectinload(ProductTable.categories))
            .order_by(
                col(ProductTable.order_count).desc(),
                col(ProductTable.view_count).desc(),
                col(ProductTable.id),
            )
            .limit(limit)
        )
        return [self.to_entity(row) for row in self._session.exec(statement).all()]

    def recent(self, limit: int) -> list[Product]:
        statement = (
            self._live()
            .options(selectinload(ProductTable.categories))
            .order_by(col(ProductTable.created_at).desc(), col(ProductTable.id))
            .limit(limit)
        )
        return [self.to_entity(row) for row in self._session.exec(statement).all()]

    def count_active(self) -> int:
        statement = (
            select(func.count())
            .select_from(ProductTable)
            .where(
                col(ProductTable.deleted_at).is_(None),
                col(ProductTable.is_active).is_(True),
            )
        )
        return self._session.exec(statement).one()

    def find_matching(
        self, criteria: "ProductSearchCriteria", *, include_owner: bool = False
    ) -> list[Product]:
        statement = criteria.build_detail_query(include_owner=include_owner)
        rows = self._session.exec(statement).all()
        return [self.to_entity(row, include_owner=include_owner) for row in rows]

    def count_matching(self, criteria: "ProductSearchCriteria") -> int:
        return self._session.exec(criteria.build_count_query()).one()
