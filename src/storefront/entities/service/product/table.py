"""Product database table model."""

from decimal import Decimal
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, Relationship

from src.storefront.entities.core._base import SoftDeleteEntityTable
from src.storefront.entities.core.user.table import UserTable
from src.storefront.entities.service.category.table import CategoryTable
from src.storefront.entities.service.links import ProductCategoryLink


class ProductTable(SoftDeleteEntityTable, table=True):
    """Database persistence model for products."""

    __tablename__ = "products"
    __table_args__ = (
        sa.Index(
            "uq_products_slug_live",
            "slug",
            unique=True,
            postgresql_where=sa.text("deleted_at IS NULL"),
            sqlite_where=sa.text("deleted_at IS NULL"),
        ),
        sa.Index("ix_products_price_active", "price", "is_active"),
        sa.Index("ix_products_popularity", "order_count", "view_count"),
    )

    name: str = Field(max_length=500)
    description: str | None = Field(default=None, sa_column=sa.Column(sa.Text))
    slug: str = Field(max_length=100)
    price: Decimal = Field(max_digits=10, decimal_places=2)
    stock: int = Field(default=0)
    sku: str = Field(max_length=10, index=True)
    images: list[str] = Field(
        default_factory=list, sa_column=sa.Column(sa.JSON, nullable=False)
    )
    attributes: dict[str, Any] = Field(
        default_factory=dict, sa_column=sa.Column(sa.JSON, nullable=False)
    )
    rating: Decimal | None = Field(default=None, max_digits=3, decimal_places=2)
    review_count: int = Field(default=0)
    view_count: int = Field(default=0)
    order_count: int = Field(default=0)
    created_by_id: str | None = Field(default=None, foreign_key="users.id", index=True)

    categories: list[CategoryTable] = Relationship(
        back_populates="products", link_model=ProductCategoryLink
    )
    created_by: UserTable | None = Relationship()
