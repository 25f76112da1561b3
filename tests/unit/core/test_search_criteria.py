"""Unit tests for translating search filters into SQL."""

from decimal import Decimal

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from src.storefront.core.models.catalog import (
    PRICE_ORDER_MESSAGE,
    ProductSearchFilters,
    ProductSortField,
    SortOrder,
)
from src.storefront.core.services.catalog.search_criteria import (
    CACHE_KEY_PREFIX,
    ProductSearchCriteria,
)


def _sql(statement, dialect=None) -> str:
    return str(
        statement.compile(
            dialect=dialect or postgresql.dialect(),
            compile_kwargs={"literal_binds": True},
        )
    )


def _compiled(statement):
    """Compile with bound parameters; REGCONFIG arguments have no literal form."""
    return statement.compile(dialect=postgresql.dialect())


def _criteria(dialect: str = "postgresql", **filters) -> ProductSearchCriteria:
    return ProductSearchCriteria(ProductSearchFilters(**filters), dialect=dialect)


class TestTextSearch:
    def test_short_term_uses_trigram_similarity_only(self):
        criteria = _criteria(search="tv")

        sql = _sql(criteria.build_count_query())

        assert not criteria.uses_full_text
        assert "to_tsvector" not in sql
        assert "plainto_tsquery" not in sql
        assert sql.count("'tv'") == 2

    def test_long_term_uses_full_text_with_trigram_fallback(self):
        criteria = _criteria(search="laptop")

        compiled = _compiled(criteria.build_detail_query())
        sql = str(compiled)
        params = list(compiled.params.values())

        assert criteria.uses_full_text
        assert "to_tsvector(" in sql
        assert "plainto_tsquery(" in sql
        assert "@@" in sql
        assert "coalesce(products.description" in sql
        assert "spanish" in params
        assert "laptop" in params

    def test_text_search_config_is_configurable(self):
        criteria = ProductSearchCriteria(
            ProductSearchFilters(search="laptop"), text_search_config="english"
        )

        compiled = _compiled(criteria.build_count_query())

        assert "plainto_tsquery(" in str(compiled)
        assert "english" in compiled.params.values()
        assert "spanish" not in compiled.params.values()

    def test_search_term_is_trimmed(self):
        assert _criteria(search="  laptop  ").search_term == "laptop"

    def test_blank_search_is_ignored(self):
        criteria = _criteria(search="   ")

        assert criteria.search_term is None
        assert "products.name" not in _sql(criteria.build_count_query()).split("WHERE")[1]

    def test_other_dialects_use_substring_matching(self):
        criteria = _criteria(dialect="sqlite", search="laptop")

        sql = _sql(criteria.build_count_query(), sqlite.dialect())

        assert "lower(products.name) LIKE" in sql
        assert "to_tsvector" not in sql
        assert "%%" not in sql


class TestFilters:
    def test_visibility_predicates_always_present(self):
        sql = _sql(_criteria().build_count_query())

        assert "products.deleted_at IS NULL" in sql
        assert "products.is_active IS true" in sql

    def test_price_range_uses_between(self):
        sql = _sql(_criteria(min_price=Decimal("10"), max_price=Decimal("20")).build_count_query())

        assert "products.price BETWEEN 10 AND 20" in sql

    def test_single_price_bound(self):
        assert "products.price >= 10" in _sql(_criteria(min_price=10).build_count_query())
        assert "products.price <= 20" in _sql(_criteria(max_price=20).build_count_query())

    def test_in_stock(self):
        assert "products.stock > 0" in _sql(_criteria(in_stock=True).build_count_query())
        assert "products.stock" not in _sql(_criteria(in_stock=False).build_count_query())

    def test_min_rating_keeps_unrated_products(self):
        sql = _sql(_criteria(min_rating=Decimal("4")).build_count_query())

        assert "products.rating >= 4" in sql
        assert "products.rating IS NULL" in sql

    def test_category_id_filters_through_link_table(self):
        criteria = _criteria(category_id="cat-1")

        sql = _sql(criteria.build_count_query())

        assert criteria.requires_joins()
        assert "products.id IN (SELECT product_categories.product_id" in sql
        assert "product_categories.category_id = 'cat-1'" in sql

    def test_category_slug_joins_live_categories(self):
        sql = _sql(_criteria(category="electronics").build_count_query())

        assert "categories.slug = 'electronics'" in sql
        assert "categories.deleted_at IS NULL" in sql

    def test_no_category_filter(self):
        assert not _criteria().requires_joins()

    def test_max_price_below_min_price_is_rejected(self):
        with pytest.raises(ValueError, match=PRICE_ORDER_MESSAGE):
            ProductSearchFilters(min_price=Decimal("100"), max_price=Decimal("10"))


class TestPagination:
    @pytest.mark.parametrize(
        ("page", "limit", "skip"),
        [(1, 20, 0), (2, 20, 20), (3, 15, 30)],
    )
    def test_skip(self, page, limit, skip):
        assert _criteria(page=page, limit=limit).skip == skip

    def test_limit_is_clamped_to_maximum(self):
        criteria = _criteria(limit=500)

        assert criteria.limit == 100
        assert "LIMIT 100" in _sql(criteria.build_detail_query())

    def test_custom_maximum(self):
        criteria = ProductSearchCriteria(ProductSearchFilters(limit=50), max_limit=10)

        assert criteria.limit == 10

    def test_total_pages(self):
        criteria = _criteria(limit=20)

        assert criteria.total_pages(0) == 0
        assert criteria.total_pages(20) == 1
        assert criteria.total_pages(21) == 2

    def test_count_query_has_no_paging_or_ordering(self):
        sql = _sql(_criteria(page=3).build_count_query())

        assert "LIMIT" not in sql
        assert "OFFSET" not in sql
        assert "ORDER BY" not in sql


class TestOrdering:
    def test_default_is_newest_first(self):
        sql = _sql(_criteria().build_detail_query())

        assert "ORDER BY products.created_at DESC" in sql

    def test_rating_descending_puts_unrated_last(self):
        sql = _sql(
            _criteria(sort_by=ProductSortField.RATING, sort_order=SortOrder.DESC)
            .build_detail_query()
        )

        assert "products.rating DESC NULLS LAST" in sql

    def test_popularity_sorts_by_order_count_with_tiebreak(self):
        sql = _sql(
            _criteria(sort_by=ProductSortField.POPULARITY, sort_order=SortOrder.ASC)
            .build_detail_query()
        )

        assert "ORDER BY products.order_count ASC, products.id ASC" in sql


class TestCacheKey:
    def test_equivalent_filters_share_a_key(self):
        first = _criteria(search="Laptop ", limit=500)
        second = _criteria(search="laptop", limit=100)

        assert first.cache_key() == second.cache_key()
        assert first.cache_key().startswith(f"{CACHE_KEY_PREFIX}:")

    def test_different_pages_have_different_keys(self):
        assert _criteria(page=1).cache_key() != _criteria(page=2).cache_key()
