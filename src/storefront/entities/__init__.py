"""Entities organised by business concept.

Each entity has its own package containing:
- entity.py: Domain model with business logic
- table.py: Database persistence model
- repository.py: Data access layer

Importing this package registers every table with the SQLModel metadata.
"""

from .core.blacklisted_token import (
    BlacklistedToken,
    BlacklistedTokenRepository,
    BlacklistedTokenTable,
    TokenType,
)
from .core.user import User, UserRepository, UserRole, UserTable
from .service.category import Category, CategoryRepository, CategoryTable
from .service.links import ProductCategoryLink
from .service.product import Product, ProductRepository, ProductTable

__all__ = [
    "BlacklistedToken",
    "BlacklistedTokenRepository",
    "BlacklistedTokenTable",
    "TokenType",
    "User",
    "UserRole",
    "UserTable",
    "UserRepository",
    "Category",
    "CategoryTable",
    "CategoryRepository",
    "ProductCategoryLink",
    "Product",
    "ProductTable",
    "ProductRepository",
]
