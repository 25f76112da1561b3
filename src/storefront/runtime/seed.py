"""Idempotent sample data: two accounts, four categories and a few products."""

from decimal import Decimal
from typing import Any

from loguru import logger
from sqlmodel import Session

from src.storefront.core.security import hash_password
from src.storefront.entities.core.user import User, UserRepository, UserRole
from src.storefront.entities.service.category import Category, CategoryRepository
from src.storefront.entities.service.product import Product, ProductRepository

SEED_USERS: list[dict[str, Any]] = [
    {
        "email": "admin@ecommerce.local",
        "password": "admin123",
        "role": UserRole.ADMIN,
        "first_name": "Admin",
        "last_name": "User",
    },
    {
        "email": "customer@ecommerce.local",
        "password": "customer123",
        "role": UserRole.CUSTOMER,
        "first_name": "Test",
        "last_name": "Customer",
    },
]

SEED_CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Electronics",
        "slug": "electronics",
        "description": "Electronic devices and gadgets",
        "sort_order": 1,
    },
    {
        "name": "Clothing",
        "slug": "clothing",
        "description": "Fashion and apparel",
        "sort_order": 2,
    },
    {
        "name": "Books",
        "slug": "books",
        "description": "Books and literature",
        "sort_order": 3,
    },
    {
        "name": "Home & Garden",
        "slug": "home-garden",
        "description": "Home improvement and garden supplies",
        "sort_order": 4,
    },
]

SEED_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": 'MacBook Pro 16"',
        "slug": "macbook-pro-16",
        "description": "Apple MacBook Pro with M2 chip, 16-inch display",
        "price": Decimal("2499.99"),
        "stock": 15,
        "sku": "MBP16M2",
        "category": "electronics",
        "attributes": {
            "brand": "Apple",
            "screen_size": "16 inches",
            "processor": "M2",
            "ram": "16GB",
            "storage": "512GB SSD",
        },
    },
    {
        "name": "iPhone 15 Pro",
        "slug": "iphone-15-pro",
        "description": "Latest iPhone with A17 Pro chip and titanium design",
        "price": Decimal("999.99"),
        "stock": 25,
        "sku": "IP15PRO",
        "category": "electronics",
        "attributes": {
            "brand": "Apple",
            "screen_size": "6.1 inches",
            "storage": "128GB",
            "color": "Natural Titanium",
        },
    },
    {
        "name": "Premium Cotton T-Shirt",
        "slug": "premium-cotton-tshirt",
        "description": "High-quality 100% organic cotton t-shirt",
        "price": Decimal("29.99"),
        "stock": 100,
        "sku": "PCOT001",
        "category": "clothing",
        "attributes": {
            "material": "100% Organic Cotton",
            "sizes": ["S", "M", "L", "XL"],
            "colors": ["White", "Black", "Navy"],
        },
    },
]


def seed_database(session: Session) -> dict[str, list[str]]:
    """Insert whatever seed rows are missing and commit.

    Returns:
        The emails, category slugs and product slugs that were created
    """
    created: dict[str, list[str]] = {"users": [], "categories": [], "products": []}
    users = UserRepository(session)
    categories = CategoryRepository(session)
    products = ProductRepository(session)

    for data in SEED_USERS:
        if users.get_by_email(data["email"]) is not None:
            continue
        users.create(
            User(
                email=data["email"],
                password_hash=hash_password(data["password"]),
                role=data["role"],
                first_name=data["first_name"],
                last_name=data["last_name"],
            )
        )
        created["users"].append(data["email"])

    for data in SEED_CATEGORIES:
        if categories.get_by_slug(data["slug"]) is not None:
            continue
        categories.create(Category(**data))
        created["categories"].append(data["slug"])

    admin = users.get_by_email(SEED_USERS[0]["email"])
    for data in SEED_PRODUCTS:
        if products.slug_taken(data["slug"]):
            continue
        category = categories.get_by_slug(data["category"])
        category_rows = categories.active_rows_by_ids([category.id]) if category else []
        fields = {key: value for key, value in data.items() if key != "category"}
        products.create(
            Product(**fields, created_by_id=admin.id if admin else None),
            category_rows,
        )
        created["products"].append(data["slug"])

    session.commit()
    logger.info(
        "Seeding completed: {} users, {} categories, {} products created",
        len(created["users"]),
        len(created["categories"]),
        len(created["products"]),
    )
    return created
