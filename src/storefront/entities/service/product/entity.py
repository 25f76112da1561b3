"""Entity: Product."""

from decimal import Decimal
from typing import Any

from pydantic import Field

from src.storefront.entities.core._base import SoftDeleteEntity
from src.storefront.entities.core.user.entity import User
from src.storefront.entities.service.category.entity import Category

LOW_STOCK_THRESHOLD = 10


class Product(SoftDeleteEntity):
    """Product entity representing a sellable catalogue item."""

    name: str = Field(description="Display name")
    description: str | None = Field(default=None)
    slug: str = Field(description="URL-safe identifier, unique among live products")
    price: Decimal = Field(max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    sku: str = Field(description="Stock keeping unit")
    images: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)
    rating: Decimal | None = Field(default=None, ge=0, le=5)
    review_count: int = Field(default=0)
    view_count: int = Field(default=0)
    order_count: int = Field(default=0)
    created_by_id: str | None = Field(default=None)

    categories: list[Category] = Field(default_factory=list)
    created_by: User | None = Field(default=None)

    @property
    def is_in_stock(self) -> bool:
        return self.stock > 0

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock <= LOW_STOCK_THRESHOLD

    @property
    def average_rating(self) -> Decimal:
        return self.rating or Decimal("0")
