"""Unit tests for CategoryService."""

import uuid

import pytest

from src.storefront.core.errors import BadRequestError, ConflictError, NotFoundError
from src.storefront.core.models.catalog import (
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from src.storefront.core.services import CategoryService
from src.storefront.core.services.catalog.category_service import CATEGORY_HAS_PRODUCTS


@pytest.fixture
def service(session) -> CategoryService:
    return CategoryService(session)


class TestCreateCategory:
    def test_create(self, service):
        category = service.create_category(
            CreateCategoryRequest(
                name="Electronics",
                slug="electronics",
                metadata={"icon": "chip"},
                sortOrder=3,
            )
        )

        assert category.slug == "electronics"
        assert category.sort_order == 3
        assert category.meta_data == {"icon": "chip"}
        assert service.get_category_by_id(category.id).name == "Electronics"

    def test_duplicate_slug_conflicts(self, service, electronics):
        with pytest.raises(ConflictError, match="'electronics' already exists"):
            service.create_category(CreateCategoryRequest(name="Other", slug="electronics"))


class TestUpdateCategory:
    def test_only_given_fields_change(self, service, electronics):
        updated = service.update_category(
            electronics.id, UpdateCategoryRequest(description="Gadgets")
        )

        assert updated.description == "Gadgets"
        assert updated.name == electronics.name
        assert updated.sort_order == electronics.sort_order

    def test_slug_conflict(self, service, electronics, category_factory):
        books = category_factory("books")

        with pytest.raises(ConflictError):
            service.update_category(books.id, UpdateCategoryRequest(slug="electronics"))

    def test_keeping_own_slug_is_allowed(self, service, electronics):
        updated = service.update_category(
            electronics.id, UpdateCategoryRequest(slug="electronics", name="Tech")
        )

        assert updated.name == "Tech"

    def test_missing_category(self, service):
        with pytest.raises(NotFoundError, match="Category not found"):
            service.update_category(str(uuid.uuid4()), UpdateCategoryRequest(name="Xy"))

    def test_explicit_null_is_rejected_for_required_fields(self):
        with pytest.raises(ValueError, match="name cannot be null"):
            UpdateCategoryRequest.model_validate({"name": None})

    def test_explicit_null_clears_optional_fields(self, service, category_factory):
        category = category_factory("books", description="Paper")

        updated = service.update_category(
            category.id, UpdateCategoryRequest.model_validate({"description": None})
        )

        assert updated.description is None


class TestDeleteCategory:
    def test_delete_empty_category(self, service, electronics):
        service.delete_category(electronics.id)

        with pytest.raises(NotFoundError):
            service.get_category_by_id(electronics.id)
        assert electronics.id not in {c.id for c in service.get_all_categories()}

    def test_category_with_products_cannot_be_deleted(
        self, service, electronics, product_factory
    ):
        product_factory("laptop", categories=[electronics])

        with pytest.raises(BadRequestError) as exc_info:
            service.delete_category(electronics.id)

        assert exc_info.value.detail == CATEGORY_HAS_PRODUCTS
        assert service.get_category_by_id(electronics.id).product_count == 1

    def test_delete_missing_category(self, service):
        with pytest.raises(NotFoundError):
            service.delete_category(str(uuid.uuid4()))


class TestLookups:
    def test_inactive_category_is_not_found(self, service, category_factory):
        hidden = category_factory("hidden", is_active=False)

        with pytest.raises(NotFoundError):
            service.get_category_by_id(hidden.id)
        assert not service.exists_by_id(hidden.id)

    def test_get_categories_by_ids(self, service, electronics, category_factory):
        books = category_factory("books")

        found = service.get_categories_by_ids([electronics.id, books.id, "missing"])

        assert {c.slug for c in found} == {"electronics", "books"}


class TestValidateCategoryIds:
    def test_empty_list(self, service):
        assert service.validate_category_ids([]) == []

    def test_all_found(self, service, electronics):
        rows = service.validate_category_ids([electronics.id, electronics.id])

        assert [row.id for row in rows] == [electronics.id]

    def test_reports_exactly_the_missing_ids(self, service, electronics, category_factory):
        inactive = category_factory("inactive", is_active=False)
        missing = str(uuid.uuid4())

        with pytest.raises(BadRequestError) as exc_info:
            service.validate_category_ids([electronics.id, missing, inactive.id])

        assert exc_info.value.details == {"missingIds": [missing, inactive.id]}
        assert missing in exc_info.value.detail
