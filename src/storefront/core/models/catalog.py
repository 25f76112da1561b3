"""Request, filter and response models for products and categories."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.storefront.core.models.common import CamelModel
from src.storefront.entities.service.category import Category
from src.storefront.entities.service.product import Product

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
PRICE_ORDER_MESSAGE = "Maximum price must be greater than or equal to minimum price"


class ProductSortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    CREATED_AT = "createdAt"
    RATING = "rating"
    POPULARITY = "popularity"
    VIEW_COUNT = "viewCount"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class ProductSearchFilters(BaseModel):
    """Normalised product search request.

    ``limit`` is deliberately unbounded here: the HTTP layer rejects values
    above the maximum while the search criteria clamp direct callers.
    """

    search: str | None = Field(default=None, max_length=255)
    category_id: str | None = None
    category: str | None = Field(default=None, description="Category slug")
    min_price: Decimal | None = Field(default=None, ge=0)
    max_price: Decimal | None = Field(default=None, ge=0)
    in_stock: bool | None = None
    min_rating: Decimal | None = Field(default=None, ge=0, le=5)
    sort_by: ProductSortField = ProductSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)

    @field_validator("search", "category")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @model_validator(mode="after")
    def check_price_range(self) -> "ProductSearchFilters":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.max_price < self.min_price
        ):
            raise ValueError(PRICE_ORDER_MESSAGE)
        return self


class CreateProductRequest(CamelModel):
    name: str = Field(min_length=3, max_length=500)
    description: str | None = Field(default=None, max_length=2000)
    slug: str = Field(min_length=3, max_length=100, pattern=SLUG_PATTERN)
    price: Decimal = Field(ge=0, le=Decimal("999999.99"), decimal_places=2)
    stock: int = Field(ge=0)
    sku: str = Field(min_length=1, max_length=10)
    images: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)
    category_ids: list[UUID] = Field(min_length=1)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class _PartialUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied.

    Fields listed in ``nullable_fields`` may be cleared with an explicit
    null. Any other explicit null is rejected.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in self.model_fields_set - self.nullable_fields:
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


class UpdateProductRequest(_PartialUpdate):
    nullable_fields = frozenset({"description"})

    name: str | None = Field(default=None, min_length=3, max_length=500)
    description: str | None = Field(default=None, max_length=2000)
    slug: str | None = Field(default=None, min_length=3, max_length=100, pattern=SLUG_PATTERN)
    price: Decimal | None = Field(default=None, ge=0, le=Decimal("999999.99"), decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    sku: str | None = Field(default=None, min_length=1, max_length=10)
    images: list[str] | None = None
    attributes: dict[str, Any] | None = None
    category_ids: list[UUID] | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class CreateCategoryRequest(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    slug: str = Field(min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=1000)
    image_url: str | None = Field(default=None, max_length=500)
    sort_order: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True


class UpdateCategoryRequest(_PartialUpdate):
    nullable_fields = frozenset({"description", "image_url"})

    name: str | None = Field(default=None, min_length=2, max_length=100)
    slug: str | None = Field(default=None, min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=1000)
    image_url: str | None = Field(default=None, max_length=500)
    sort_order: int | None = None
    metadata: dict[str, Any] | None = None
    is_active: bool | None = None


class CategorySummary(CamelModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CategoryResponse(CategorySummary):
    image_url: str | None = None
    sort_order: int
    metadata: dict[str, Any] = Field(default_factory=dict)
    product_count: int = 0

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            is_active=category.is_active,
            created_at=category.created_at,
            updated_at=category.updated_at,
            image_url=category.image_url,
            sort_order=category.sort_order,
            metadata=category.meta_data,
            product_count=category.product_count,
        )


class ProductResponse(CamelModel):
    id: str
    name: str
    description: str | None = None
    slug: str
    price: float
    stock: int
    sku: str
    images: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)
    rating: float | None = None
    review_count: int
    view_count: int
    order_count: int
    is_active: bool
    is_in_stock: bool
    is_low_stock: bool
    average_rating: float
    categories: list[CategorySummary] = Field(default_factory=list)
    created_by: dict[str, Any] = Field(
        default_factory=dict,
        description="Owning user; empty for unauthenticated callers",
    )
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product, *, include_owner: bool = False) -> "ProductResponse":
        created_by: dict[str, Any] = {}
        if include_owner and product.created_by is not None:
            owner = product.created_by
            created_by = {
                "id": owner.id,
                "email": owner.email,
                "firstName": owner.first_name,
                "lastName": owner.last_name,
            }
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            slug=product.slug,
            price=float(product.price),
            stock=product.stock,
            sku=product.sku,
            images=product.images,
            attributes=product.attributes,
            rating=float(product.rating) if product.rating is not None else None,
            review_count=product.review_count,
            view_count=product.view_count,
            order_count=product.order_count,
            is_active=product.is_active,
            is_in_stock=product.is_in_stock,
            is_low_stock=product.is_low_stock,
            average_rating=float(product.average_rating),
            categories=[
                CategorySummary.model_validate(category.model_dump())
                for category in product.categories
            ],
            created_by=created_by,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
