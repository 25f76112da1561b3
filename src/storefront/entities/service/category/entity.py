"""Entity: Category."""

from typing import Any

from pydantic import Field

from src.storefront.entities.core._base import SoftDeleteEntity


class Category(SoftDeleteEntity):
    """Product grouping addressed by a unique slug."""

    name: str = Field(description="Display name")
    slug: str = Field(description="URL-safe identifier, unique among live categories")
    description: str | None = Field(default=None)
    image_url: str | None = Field(default=None)
    sort_order: int = Field(default=0, description="Position in category listings")
    meta_data: dict[str, Any] = Field(default_factory=dict)
    product_count: int = Field(
        default=0, description="Live products in this category, when loaded"
    )
