"""Category management and lookup."""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.storefront.core.errors import BadRequestError, ConflictError, NotFoundError
from src.storefront.core.models.catalog import (
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from src.storefront.entities.service.category import (
    Category,
    CategoryRepository,
    CategoryTable,
)

CATEGORY_NOT_FOUND = "Category not found"
CATEGORY_HAS_PRODUCTS = (
    "Cannot delete category that contains products. Remove products first."
)


class CategoryService:
    """Category CRUD plus the id validation used by product writes."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repository = CategoryRepository(session)

    def _commit(self, slug: str | None = None) -> None:
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            logger.warning("Category write violated a unique constraint: {}", e.orig)
            raise ConflictError(
                f"Category with slug '{slug}' already exists"
                if slug
                else "Category already exists"
            ) from e

    def create_category(self, data: CreateCategoryRequest) -> Category:
        if self._repository.slug_taken(data.slug):
            raise ConflictError(f"Category with slug '{data.slug}' already exists")

        try:
            category = self._repository.create(
                Category(
                    name=data.name,
                    slug=data.slug,
                    description=data.description,
                    image_url=data.image_url,
                    sort_order=data.sort_order,
                    meta_data=data.metadata,
                    is_active=data.is_active,
                )
            )
        except IntegrityError as e:
            self._session.rollback()
            raise ConflictError(f"Category with slug '{data.slug}' already exists") from e
        self._commit(data.slug)
        logger.info("Category created: {} ({})", category.slug, category.id)
        return category

    def update_category(self, category_id: str, data: UpdateCategoryRequest) -> Category:
        if self._repository.get(category_id) is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)

        changes = data.model_dump(exclude_unset=True)
        if "metadata" in changes:
            changes["meta_data"] = changes.pop("metadata") or {}

        slug = changes.get("slug")
        if slug and self._repository.slug_taken(slug, exclude_id=category_id):
            raise ConflictError(f"Category with slug '{slug}' already exists")

        try:
            updated = self._repository.update_fields(category_id, changes)
        except IntegrityError as e:
            self._session.rollback()
            raise ConflictError(f"Category with slug '{slug}' already exists") from e
        if updated is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)
        self._commit(slug)
        return updated

    def delete_category(self, category_id: str) -> None:
        if self._repository.get(category_id) is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)

        if self._repository.count_products([category_id]).get(category_id, 0) > 0:
            raise BadRequestError(CATEGORY_HAS_PRODUCTS)

        self._repository.soft_delete(category_id)
        self._commit()
        logger.info("Category soft-deleted: {}", category_id)

    def get_all_categories(self) -> list[Category]:
        return self._repository.list_active()

    def get_category_by_id(self, category_id: str) -> Category:
        category = self._repository.get_active(category_id)
        if category is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)
        counts = self._repository.count_products([category_id])
        return category.model_copy(update={"product_count": counts.get(category_id, 0)})

    def exists_by_id(self, category_id: str) -> bool:
        return self._repository.get_active(category_id) is not None

    def get_categories_by_ids(self, category_ids: list[str]) -> list[Category]:
        rows = self._repository.active_rows_by_ids(category_ids)
        return [self._repository.to_entity(row) for row in rows]

    def validate_category_ids(self, category_ids: list[str]) -> list[CategoryTable]:
        """Resolve ids to active categories, failing on any missing or inactive id.

        Raises:
            BadRequestError: Listing exactly the ids that were not found
        """
        if not category_ids:
            return []

        requested = list(dict.fromkeys(str(category_id) for category_id in category_ids))
        rows = self._repository.active_rows_by_ids(requested)
        if len(rows) < len(requested):
            found = {row.id for row in rows}
            missing = [category_id for category_id in requested if category_id not in found]
            raise BadRequestError(
                f"Categories not found or inactive: {', '.join(missing)}",
                details={"missingIds": missing},
            )
        return rows
