"""Product catalogue endpoints."""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.storefront.api.http.deps import (
    get_optional_user,
    get_product_service,
    require_admin,
)
from src.storefront.api.http.envelope import EnvelopeRoute
from src.storefront.core.models.catalog import (
    CreateProductRequest,
    ProductResponse,
    ProductSearchFilters,
    ProductSortField,
    SortOrder,
    UpdateProductRequest,
)
from src.storefront.core.models.common import PaginatedResult
from src.storefront.core.services import ProductService
from src.storefront.entities.core.user import User
from src.storefront.entities.service.product import Product

router = APIRouter(prefix="/products", tags=["products"], route_class=EnvelopeRoute)


def _page(
    result: PaginatedResult[Product], include_owner: bool
) -> PaginatedResult[ProductResponse]:
    return PaginatedResult[ProductResponse](
        data=[
            ProductResponse.from_entity(product, include_owner=include_owner)
            for product in result.data
        ],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


def search_filters(
    search: str | None = Query(None, max_length=255, description="Free-text search"),
    category_id: UUID | None = Query(None, alias="categoryId"),
    category: str | None = Query(None, description="Category slug"),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    in_stock: bool | None = Query(None, alias="inStock"),
    min_rating: Decimal | None = Query(None, alias="minRating", ge=0, le=5),
    sort_by: ProductSortField = Query(ProductSortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ProductSearchFilters:
    return ProductSearchFilters(
        search=search,
        category_id=str(category_id) if category_id else None,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        min_rating=min_rating,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.post("", status_code=201)
def create_product(
    data: CreateProductRequest,
    user: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    """Create a product (admin only)."""
    product = service.create_product(data, user)
    return ProductResponse.from_entity(product, include_owner=True)


@router.get("")
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: str | None = Query(None, description="Category slug"),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    user: User | None = Depends(get_optional_user),
    service: ProductService = Depends(get_product_service),
) -> PaginatedResult[ProductResponse]:
    """List visible products, newest first."""
    include_owner = user is not None
    result = service.list_products(
        page=page,
        limit=limit,
        category=category,
        min_price=min_price,
        max_price=max_price,
        include_owner=include_owner,
    )
    return _page(result, include_owner)


@router.get("/search")
def search_products(
    filters: ProductSearchFilters = Depends(search_filters),
    user: User | None = Depends(get_optional_user),
    service: ProductService = Depends(get_product_service),
) -> PaginatedResult[ProductResponse]:
    """Full-text search with price, rating, stock and category filters."""
    include_owner = user is not None
    return _page(service.search_products(filters, include_owner=include_owner), include_owner)


@router.get("/popular")
def popular_products(
    limit: int = Query(10, ge=1),
    service: ProductService = Depends(get_product_service),
) -> list[ProductResponse]:
    return [ProductResponse.from_entity(p) for p in service.get_popular_products(limit)]


@router.get("/recent")
def recent_products(
    limit: int = Query(10, ge=1),
    service: ProductService = Depends(get_product_service),
) -> list[ProductResponse]:
    return [ProductResponse.from_entity(p) for p in service.get_recent_products(limit)]


@router.get("/category/{category_id}")
def products_by_category(
    category_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    service: ProductService = Depends(get_product_service),
) -> PaginatedResult[ProductResponse]:
    result = service.get_products_by_category(str(category_id), page=page, limit=limit)
    return _page(result, include_owner=False)


@router.get("/slug/{slug}")
def get_product_by_slug(
    slug: str,
    user: User | None = Depends(get_optional_user),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    include_owner = user is not None
    product = service.get_product_by_slug(slug, include_owner=include_owner)
    return ProductResponse.from_entity(product, include_owner=include_owner)


@router.get("/{product_id}")
def get_product(
    product_id: UUID,
    user: User | None = Depends(get_optional_user),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    include_owner = user is not None
    product = service.get_product_by_id(str(product_id), include_owner=include_owner)
    return ProductResponse.from_entity(product, include_owner=include_owner)


@router.patch("/{product_id}")
def update_product(
    product_id: UUID,
    data: UpdateProductRequest,
    _: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    """Partially update a product (admin only)."""
    product = service.update_product(str(product_id), data)
    return ProductResponse.from_entity(product, include_owner=True)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: UUID,
    _: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
) -> None:
    """Soft-delete a product (admin only)."""
    service.delete_product(str(product_id))
