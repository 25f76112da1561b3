"""Unit tests for the performance analytics service."""

import uuid
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.storefront.core.models.analytics import PerformanceRating
from src.storefront.core.services import AnalyticsService, ProductService
from src.storefront.core.services.analytics_service import (
    BENCHMARK_LIMIT,
    CATEGORY_THRESHOLDS,
    POPULAR_THRESHOLDS,
    RECENT_THRESHOLDS,
    SEARCH_THRESHOLDS,
    Thresholds,
)


@pytest.fixture
def analytics(session) -> AnalyticsService:
    return AnalyticsService(ProductService(session))


class TestThresholds:
    @pytest.mark.parametrize(
        ("elapsed", "rating"),
        [
            (10, PerformanceRating.EXCELLENT),
            (49.99, PerformanceRating.EXCELLENT),
            (50, PerformanceRating.GOOD),
            (99.9, PerformanceRating.GOOD),
            (100, PerformanceRating.NEEDS_IMPROVEMENT),
        ],
    )
    def test_search_rating_boundaries(self, elapsed, rating):
        assert SEARCH_THRESHOLDS.rate(elapsed) == rating

    def test_operation_specific_thresholds(self):
        assert POPULAR_THRESHOLDS == Thresholds(excellent=30, good=60)
        assert RECENT_THRESHOLDS == Thresholds(excellent=25, good=50)
        assert CATEGORY_THRESHOLDS == Thresholds(excellent=40, good=80)


class TestStaticReports:
    def test_dashboard(self, analytics):
        dashboard = analytics.get_dashboard().model_dump(by_alias=True)

        assert dashboard["status"] == "Excellent"
        assert dashboard["activeIndexes"] == 29
        assert dashboard["avgResponseTime"] == "45ms"

    def test_optimization_results(self, analytics):
        results = analytics.get_optimization_results()

        assert len(results.improvements) == 5
        assert results.improvements[0].operation == "Product Search with Filters"
        assert len(results.techniques) == 7

    def test_system_info(self, analytics):
        info = analytics.get_system_info()

        assert "FastAPI" in info.architecture
        assert len(info.monitoring) == 5


class TestBenchmarks:
    def test_search_benchmark_uses_defaults(self, session, electronics, product_factory):
        product_factory("galaxy", name="Samsung Galaxy", price="500", categories=[electronics])
        product_factory("cheap-samsung", name="Samsung Cable", price="5")

        result = AnalyticsService(ProductService(session)).benchmark_search()

        assert result.operation == 'Search: "Samsung" with filters'
        assert result.result_count == 1
        assert result.execution_time >= 0
        assert "GIN full-text search" in result.optimization_applied
        assert result.performance_rating in set(PerformanceRating)

    def test_search_benchmark_with_custom_filters(self):
        products = MagicMock(spec=ProductService)
        products.search_products.return_value.data = []

        result = AnalyticsService(products).benchmark_search(
            "lamp", min_price=Decimal("1"), max_price=Decimal("2")
        )

        filters = products.search_products.call_args.args[0]
        assert filters.search == "lamp"
        assert filters.min_price == Decimal("1")
        assert filters.max_price == Decimal("2")
        assert filters.limit == BENCHMARK_LIMIT
        assert result.operation == 'Search: "lamp" with filters'

    def test_listing_benchmarks_count_results(self, analytics, product_factory):
        product_factory("a", order_count=3)
        product_factory("b")

        assert analytics.benchmark_popular().result_count == 1
        assert analytics.benchmark_recent().result_count == 2

    def test_failed_benchmark_is_reported_not_raised(self):
        products = MagicMock(spec=ProductService)
        products.get_popular_products.side_effect = RuntimeError("db down")

        result = AnalyticsService(products).benchmark_popular()

        assert result.operation == "Popular Products Listing (failed)"
        assert result.result_count == 0
        assert result.optimization_applied == []
        assert result.performance_rating == PerformanceRating.NEEDS_IMPROVEMENT

    def test_unknown_category_benchmark_fails_softly(self, analytics):
        category_id = str(uuid.uuid4())

        result = analytics.benchmark_category(category_id)

        assert result.operation == f"Category Products (ID: {category_id}) (failed)"

    def test_category_benchmark(self, analytics, electronics, product_factory):
        product_factory("laptop", categories=[electronics])

        result = analytics.benchmark_category(electronics.id)

        assert result.operation == f"Category Products (ID: {electronics.id})"
        assert result.result_count == 1
