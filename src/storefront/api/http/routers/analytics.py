"""Performance analytics endpoints."""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.storefront.api.http.deps import get_analytics_service
from src.storefront.api.http.envelope import EnvelopeRoute
from src.storefront.core.models.analytics import (
    BenchmarkResult,
    OptimizationResults,
    SystemHealth,
    SystemInfo,
)
from src.storefront.core.services import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"], route_class=EnvelopeRoute)


@router.get("/dashboard")
def dashboard(service: AnalyticsService = Depends(get_analytics_service)) -> SystemHealth:
    return service.get_dashboard()


@router.get("/optimization-results")
def optimization_results(
    service: AnalyticsService = Depends(get_analytics_service),
) -> OptimizationResults:
    return service.get_optimization_results()


@router.get("/benchmark/search")
def benchmark_search(
    search: str | None = Query(None, max_length=255),
    category: UUID | None = Query(None, description="Category id filter"),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    service: AnalyticsService = Depends(get_analytics_service),
) -> BenchmarkResult:
    """Time a live search; unset filters fall back to a representative query."""
    return service.benchmark_search(
        search=search,
        category_id=str(category) if category else None,
        min_price=min_price,
        max_price=max_price,
    )


@router.get("/benchmark/popular")
def benchmark_popular(
    service: AnalyticsService = Depends(get_analytics_service),
) -> BenchmarkResult:
    return service.benchmark_popular()


@router.get("/benchmark/recent")
def benchmark_recent(
    service: AnalyticsService = Depends(get_analytics_service),
) -> BenchmarkResult:
    return service.benchmark_recent()


@router.get("/benchmark/category")
def benchmark_category(
    category_id: UUID = Query(..., alias="categoryId"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> BenchmarkResult:
    return service.benchmark_category(str(category_id))


@router.get("/system-info")
def system_info(service: AnalyticsService = Depends(get_analytics_service)) -> SystemInfo:
    return service.get_system_info()
