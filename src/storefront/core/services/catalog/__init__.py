from .category_service import CategoryService
from .product_service import ProductService
from .search_criteria import ProductSearchCriteria
from .view_counter import ViewCountRecorder

__all__ = [
    "CategoryService",
    "ProductSearchCriteria",
    "ProductService",
    "ViewCountRecorder",
]
