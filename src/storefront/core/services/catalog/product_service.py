"""Product catalogue operations: writes, lookups, listings and search."""

from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from src.storefront.core.errors import (
    ConflictError,
    NotFoundError,
    ServiceError,
    ServiceFailureError,
)
from src.storefront.core.models.catalog import (
    CreateProductRequest,
    ProductSearchFilters,
    ProductSortField,
    SortOrder,
    UpdateProductRequest,
)
from src.storefront.core.models.common import PaginatedResult
from src.storefront.core.services.catalog.category_service import CategoryService
from src.storefront.core.services.catalog.search_criteria import ProductSearchCriteria
from src.storefront.core.services.catalog.view_counter import ViewCountRecorder
from src.storefront.entities.core.user import User
from src.storefront.entities.service.product import Product, ProductRepository
from src.storefront.runtime.config.config_data import SearchConfig
from src.storefront.runtime.context import get_config

PRODUCT_NOT_FOUND = "Product not found"
SEARCH_FAILED = "Failed to search products"


def _slug_conflict(slug: str) -> ConflictError:
    return ConflictError(f"Product with slug '{slug}' already exists")


class ProductService:
    """Product use cases on top of one request-scoped session.

    Args:
        session: Open database session
        category_service: Used to validate category ids on writes
        view_recorder: Receives a view for every successful single-product
            read. Without one, views are not counted.
        search_config: Search tuning (defaults to the active configuration)
    """

    def __init__(
        self,
        session: Session,
        category_service: CategoryService | None = None,
        view_recorder: ViewCountRecorder | None = None,
        search_config: SearchConfig | None = None,
    ) -> None:
        self._session = session
        self._repository = ProductRepository(session)
        self._categories = category_service or CategoryService(session)
        self._view_recorder = view_recorder
        self._search_config = search_config or get_config().search

    @property
    def dialect(self) -> str:
        return self._session.get_bind().dialect.name

    def _commit(self, slug: str | None) -> None:
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            logger.warning("Product write violated a unique constraint: {}", e.orig)
            raise _slug_conflict(slug or "") from e

    def _record_view(self, product: Product) -> None:
        if self._view_recorder is not None:
            self._view_recorder.record(product.id)

    # -- writes -----------------------------------------------------------

    def create_product(self, data: CreateProductRequest, created_by: User) -> Product:
        if self._repository.slug_taken(data.slug):
            raise _slug_conflict(data.slug)

        categories = self._categories.validate_category_ids(
            [str(category_id) for category_id in data.category_ids]
        )
        product = Product(
            name=data.name,
            description=data.description,
            slug=data.slug,
            price=data.price,
            stock=data.stock,
            sku=data.sku,
            images=data.images,
            attributes=data.attributes,
            is_active=data.is_active,
            created_by_id=created_by.id,
        )

        try:
            created = self._repository.create(product, categories)
        except IntegrityError as e:
            self._session.rollback()
            raise _slug_conflict(data.slug) from e
        self._commit(data.slug)
        logger.bind(product_id=created.id, user_id=created_by.id).info(
            "Product created: {}", created.slug
        )
        return created

    def update_product(self, product_id: str, data: UpdateProductRequest) -> Product:
        if self._repository.get(product_id) is None:
            raise NotFoundError(PRODUCT_NOT_FOUND)

        changes = data.model_dump(exclude_unset=True)
        category_ids = changes.pop("category_ids", None)

        slug = changes.get("slug")
        if slug and self._repository.slug_taken(slug, exclude_id=product_id):
            raise _slug_conflict(slug)

        try:
            if category_ids is not None:
                categories = self._categories.validate_category_ids(
                    [str(category_id) for category_id in category_ids]
                )
                self._repository.replace_categories(product_id, categories)
            self._repository.update_fields(product_id, changes)
        except IntegrityError as e:
            self._session.rollback()
            raise _slug_conflict(slug or "") from e
        self._commit(slug)

        updated = self._repository.get_with_owner(product_id)
        if updated is None:
            raise NotFoundError(PRODUCT_NOT_FOUND)
        logger.bind(product_id=product_id).info(
            "Product updated: {}", ", ".join(sorted(changes)) or "categories"
        )
        return updated

    def delete_product(self, product_id: str) -> None:
        if not self._repository.soft_delete(product_id):
            raise NotFoundError(PRODUCT_NOT_FOUND)
        self._session.commit()
        logger.bind(product_id=product_id).info("Product soft-deleted")

    # -- single reads -----------------------------------------------------

    def get_product_by_id(self, product_id: str, *, include_owner: bool = False) -> Product:
        product = self._repository.get_visible(product_id, include_owner=include_owner)
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND)
        self._record_view(product)
        return product

    def get_product_by_slug(self, slug: str, *, include_owner: bool = False) -> Product:
        product = self._repository.get_visible_by_slug(slug, include_owner=include_owner)
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND)
        self._record_view(product)
        return product

    # -- listings ---------------------------------------------------------

    def _listing_limit(self, limit: int) -> int:
        return min(max(limit, 1), self._search_config.max_listing_limit)

    def get_popular_products(self, limit: int = 10) -> list[Product]:
        return self._repository.popular(self._listing_limit(limit))

    def get_recent_products(self, limit: int = 10) -> list[Product]:
        return self._repository.recent(self._listing_limit(limit))

    def get_products_by_category(
        self, category_id: str, page: int = 1, limit: int = 20
    ) -> PaginatedResult[Product]:
        if not self._categories.exists_by_id(category_id):
            raise NotFoundError("Category not found")
        return self.search_products(
            ProductSearchFilters(category_id=category_id, page=page, limit=limit)
        )

    def list_products(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        category: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        include_owner: bool = False,
    ) -> PaginatedResult[Product]:
        """Plain paginated listing, newest first, with optional narrowing."""
        filters = ProductSearchFilters(
            category=category,
            min_price=min_price,
            max_price=max_price,
            sort_by=ProductSortField.CREATED_AT,
            sort_order=SortOrder.DESC,
            page=page,
            limit=limit,
        )
        return self.search_products(filters, include_owner=include_owner)

    # -- search -----------------------------------------------------------

    def build_criteria(self, filters: ProductSearchFilters) -> ProductSearchCriteria:
        return ProductSearchCriteria(
            filters,
            dialect=self.dialect,
            text_search_config=self._search_config.text_search_config,
            max_limit=self._search_config.max_limit,
        )

    def _count(self, criteria: ProductSearchCriteria) -> int:
        try:
            return self._repository.count_matching(criteria)
        except SQLAlchemyError as e:
            # The page itself was found, so report an approximate total
            logger.bind(error_type=type(e).__name__).warning(
                "Search count query failed, falling back to active product count: {}", e
            )
            self._session.rollback()
            return self._repository.count_active()

    def search_products(
        self, filters: ProductSearchFilters, *, include_owner: bool = False
    ) -> PaginatedResult[Product]:
        """Paginated search over visible products.

        Raises:
            ServiceFailureError: When the page query itself fails
        """
        criteria = self.build_criteria(filters)
        try:
            products = self._repository.find_matching(criteria, include_owner=include_owner)
            total = self._count(criteria)
        except ServiceError:
            raise
        except Exception as e:
            logger.bind(
                error_type=type(e).__name__,
                cache_key=criteria.cache_key(),
                search=criteria.search_term,
                page=criteria.page,
                limit=criteria.limit,
            ).error("Product search failed: {}", e)
            raise ServiceFailureError(SEARCH_FAILED) from e

        logger.bind(
            cache_key=criteria.cache_key(),
            search=criteria.search_term,
            full_text=criteria.uses_full_text,
            category_filter=criteria.requires_joins(),
            total=total,
            returned=len(products),
        ).debug("Product search completed")
        return PaginatedResult[Product].build(
            data=products, total=total, page=criteria.page, limit=criteria.limit
        )
