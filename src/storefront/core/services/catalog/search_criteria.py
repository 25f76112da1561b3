"""Translation of a product search request into SQL constraints.

``ProductSearchCriteria`` owns every decision about *what* a search means:
which text predicate to use, how price and rating bounds apply, how results
are ordered and which page is returned. It never touches a session; the
same predicates feed both the detail query and the lighter count query so
``total`` always describes the rows being paged through.
"""

import base64
import json
import math
from typing import Any

from sqlalchemy import ColumnElement, and_, func, or_
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select
from sqlmodel import col, select

from src.storefront.core.models.catalog import (
    ProductSearchFilters,
    ProductSortField,
    SortOrder,
)
from src.storefront.entities.service.category.table import CategoryTable
from src.storefront.entities.service.links import ProductCategoryLink
from src.storefront.entities.service.product.table import ProductTable

FULL_TEXT_MIN_LENGTH = 3
MAX_LIMIT = 100
CACHE_KEY_PREFIX = "product_search"

_SORT_COLUMNS = {
    ProductSortField.NAME: ProductTable.name,
    ProductSortField.PRICE: ProductTable.price,
    ProductSortField.CREATED_AT: ProductTable.created_at,
    ProductSortField.RATING: ProductTable.rating,
    ProductSortField.POPULARITY: ProductTable.order_count,
    ProductSortField.VIEW_COUNT: ProductTable.view_count,
}


class ProductSearchCriteria:
    """Search constraints for one request, independent of any session.

    Args:
        filters: Validated search filters
        dialect: Name of the SQL dialect the statements will run on. Full-text
            and trigram operators are only emitted for ``postgresql``; other
            dialects fall back to case-insensitive substring matching.
        text_search_config: PostgreSQL text search configuration
        max_limit: Upper bound applied to the page size
    """

    def __init__(
        self,
        filters: ProductSearchFilters,
        *,
        dialect: str = "postgresql",
        text_search_config: str = "spanish",
        max_limit: int = MAX_LIMIT,
    ) -> None:
        self.filters = filters
        self.dialect = dialect
        self.text_search_config = text_search_config
        self.page = max(filters.page, 1)
        self.limit = min(max(filters.limit, 1), max_limit)

    # -- pagination -------------------------------------------------------

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)

    # -- predicates -------------------------------------------------------

    @property
    def search_term(self) -> str | None:
        return self.filters.search.strip() if self.filters.search else None

    @property
    def uses_full_text(self) -> bool:
        term = self.search_term
        return term is not None and len(term) >= FULL_TEXT_MIN_LENGTH

    def _text_predicate(self, term: str) -> ColumnElement[bool]:
        name = col(ProductTable.name)
        description = col(ProductTable.description)

        if self.dialect != "postgresql":
            return or_(
                name.icontains(term, autoescape=True),
                description.icontains(term, autoescape=True),
            )

        trigram = or_(name.op("%")(term), description.op("%")(term))
        if len(term) < FULL_TEXT_MIN_LENGTH:
            return trigram

        document = func.to_tsvector(
            self.text_search_config,
            name + " " + func.coalesce(description, ""),
        )
        query = func.plainto_tsquery(self.text_search_config, term)
        return or_(document.op("@@")(query), trigram)

    def _category_predicate(self) -> ColumnElement[bool] | None:
        category_id = self.filters.category_id
        slug = self.filters.category
        if category_id is None and slug is None:
            return None

        linked = select(ProductCategoryLink.product_id)
        if category_id is not None:
            linked = linked.where(ProductCategoryLink.category_id == str(category_id))
        if slug is not None:
            linked = linked.join(
                CategoryTable, col(CategoryTable.id) == ProductCategoryLink.category_id
            ).where(
                col(CategoryTable.slug) == slug,
                col(CategoryTable.deleted_at).is_(None),
            )
        return col(ProductTable.id).in_(linked)

    def _price_predicate(self) -> ColumnElement[bool] | None:
        price = col(ProductTable.price)
        low, high = self.filters.min_price, self.filters.max_price
        if low is not None and high is not None:
            return price.between(low, high)
        if low is not None:
            return price >= low
        if high is not None:
            return price <= high
        return None

    def where_clauses(self) -> list[ColumnElement[bool]]:
        """All filter predicates, shared by the detail and count queries."""
        clauses: list[ColumnElement[bool]] = [
            col(ProductTable.deleted_at).is_(None),
            col(ProductTable.is_active).is_(True),
        ]

        term = self.search_term
        if term:
            clauses.append(self._text_predicate(term))

        category = self._category_predicate()
        if category is not None:
            clauses.append(category)

        price = self._price_predicate()
        if price is not None:
            clauses.append(price)

        if self.filters.in_stock:
            clauses.append(col(ProductTable.stock) > 0)

        if self.filters.min_rating is not None:
            rating = col(ProductTable.rating)
            clauses.append(or_(rating >= self.filters.min_rating, rating.is_(None)))

        return clauses

    # -- ordering ---------------------------------------------------------

    def order_by(self) -> list[Any]:
        sort_by = self.filters.sort_by
        column = col(_SORT_COLUMNS[sort_by])
        descending = self.filters.sort_order == SortOrder.DESC

        if sort_by == ProductSortField.RATING:
            primary = column.desc().nulls_last() if descending else column.asc().nulls_first()
        else:
            primary = column.desc() if descending else column.asc()

        ordering = [primary]
        if sort_by != ProductSortField.CREATED_AT:
            # Stable pages when the sort column ties
            ordering.append(col(ProductTable.id).asc())
        return ordering

    # -- statements -------------------------------------------------------

    def build_detail_query(self, *, include_owner: bool = False) -> Select:
        statement = (
            select(ProductTable)
            .where(and_(*self.where_clauses()))
            .options(selectinload(ProductTable.categories))
        )
        if include_owner:
            statement = statement.options(selectinload(ProductTable.created_by))
        return statement.order_by(*self.order_by()).offset(self.skip).limit(self.limit)

    def build_count_query(self) -> Select:
        return (
            select(func.count())
            .select_from(ProductTable)
            .where(and_(*self.where_clauses()))
        )

    # -- helpers ----------------------------------------------------------

    def requires_joins(self) -> bool:
        """Whether the filters reach into the category relation."""
        return self.filters.category_id is not None or self.filters.category is not None

    def cache_key(self) -> str:
        """Stable key for the normalised filters, page and limit."""
        normalised = {
            "search": self.search_term.lower() if self.search_term else None,
            "categoryId": str(self.filters.category_id) if self.filters.category_id else None,
            "category": self.filters.category,
            "minPrice": str(self.filters.min_price) if self.filters.min_price is not None else None,
            "maxPrice": str(self.filters.max_price) if self.filters.max_price is not None else None,
            "inStock": self.filters.in_stock,
            "minRating": str(self.filters.min_rating) if self.filters.min_rating is not None else None,
            "sortBy": self.filters.sort_by.value,
            "sortOrder": self.filters.sort_order.value,
            "page": self.page,
            "limit": self.limit,
        }
        encoded = base64.urlsafe_b64encode(
            json.dumps(normalised, sort_keys=True, separators=(",", ":")).encode("utf-8")
        ).decode("ascii")
        return f"{CACHE_KEY_PREFIX}:{encoded}"
