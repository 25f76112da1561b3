"""Category database table model."""

from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlmodel import Field, Relationship

from src.storefront.entities.core._base import SoftDeleteEntityTable
from src.storefront.entities.service.links import ProductCategoryLink

if TYPE_CHECKING:
    from src.storefront.entities.service.product.table import ProductTable


class CategoryTable(SoftDeleteEntityTable, table=True):
    """Database persistence model for categories."""

    __tablename__ = "categories"
    __table_args__ = (
        sa.Index(
            "uq_categories_slug_live",
            "slug",
            unique=True,
            postgresql_where=sa.text("deleted_at IS NULL"),
            sqlite_where=sa.text("deleted_at IS NULL"),
        ),
    )

    name: str = Field(max_length=100)
    slug: str = Field(max_length=100)
    description: str | None = Field(default=None, sa_column=sa.Column(sa.Text))
    image_url: str | None = Field(default=None, max_length=500)
    sort_order: int = Field(default=0)
    # "metadata" is reserved on declarative classes, hence the attribute name
    meta_data: dict[str, Any] = Field(
        default_factory=dict, sa_column=sa.Column("metadata", sa.JSON, nullable=False)
    )

    products: list["ProductTable"] = Relationship(
        back_populates="categories", link_model=ProductCategoryLink
    )
