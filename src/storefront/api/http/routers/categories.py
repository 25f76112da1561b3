"""Category endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from src.storefront.api.http.deps import get_category_service, require_admin
from src.storefront.api.http.envelope import EnvelopeRoute
from src.storefront.core.models.catalog import (
    CategoryResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from src.storefront.core.services import CategoryService
from src.storefront.entities.core.user import User

router = APIRouter(prefix="/categories", tags=["categories"], route_class=EnvelopeRoute)


@router.post("", status_code=201)
def create_category(
    data: CreateCategoryRequest,
    _: User = Depends(require_admin),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    return CategoryResponse.from_entity(service.create_category(data))


@router.get("")
def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> list[CategoryResponse]:
    """Active categories ordered by sort order, then name."""
    return [CategoryResponse.from_entity(c) for c in service.get_all_categories()]


@router.get("/{category_id}")
def get_category(
    category_id: UUID,
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    return CategoryResponse.from_entity(service.get_category_by_id(str(category_id)))


@router.patch("/{category_id}")
def update_category(
    category_id: UUID,
    data: UpdateCategoryRequest,
    _: User = Depends(require_admin),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    return CategoryResponse.from_entity(service.update_category(str(category_id), data))


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: UUID,
    _: User = Depends(require_admin),
    service: CategoryService = Depends(get_category_service),
) -> None:
    """Soft-delete a category; refused while it still holds products."""
    service.delete_category(str(category_id))
