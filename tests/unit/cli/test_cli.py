"""Tests for the management CLI and the seed data."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from src.cli import app
from src.storefront.entities.core.user import UserRepository, UserRole
from src.storefront.entities.service.category import CategoryRepository
from src.storefront.entities.service.product import ProductRepository
from src.storefront.runtime.seed import SEED_CATEGORIES, SEED_PRODUCTS, seed_database

runner = CliRunner()


@pytest.fixture
def cli_db(db_service):
    """Point every CLI command at the per-test database."""
    with (
        patch("src.cli.db_commands.DbSessionService", return_value=db_service),
        patch("src.cli.user_commands.DbSessionService", return_value=db_service),
        patch("src.storefront.runtime.init_db.DbSessionService", return_value=db_service),
    ):
        yield db_service


class TestSeedDatabase:
    def test_seed_creates_sample_data(self, session):
        created = seed_database(session)

        assert created["users"] == ["admin@ecommerce.local", "customer@ecommerce.local"]
        assert len(created["categories"]) == len(SEED_CATEGORIES)
        assert len(created["products"]) == len(SEED_PRODUCTS)

        admin = UserRepository(session).get_by_email("admin@ecommerce.local")
        assert admin.role == UserRole.ADMIN
        product = ProductRepository(session).get_visible_by_slug("macbook-pro-16")
        assert [c.slug for c in product.categories] == ["electronics"]
        assert product.created_by_id == admin.id

    def test_seed_is_idempotent(self, session):
        seed_database(session)

        again = seed_database(session)

        assert again == {"users": [], "categories": [], "products": []}
        assert len(CategoryRepository(session).list_active()) == len(SEED_CATEGORIES)


class TestDbCommands:
    def test_init(self, cli_db):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        assert "Database tables created" in result.output

    def test_seed(self, cli_db, session):
        result = runner.invoke(app, ["seed"])

        assert result.exit_code == 0
        assert "Seed results" in result.output
        assert UserRepository(session).count() == 2

    def test_reset_requires_confirmation(self, cli_db, user_factory, session):
        user_factory("keep@shop.local")

        result = runner.invoke(app, ["db", "reset"], input="n\n")

        assert "Reset cancelled" in result.output
        assert UserRepository(session).count() == 1

    def test_forced_reset(self, cli_db, user_factory, session):
        user_factory("gone@shop.local")

        result = runner.invoke(app, ["db", "reset", "--force"])

        assert result.exit_code == 0
        assert UserRepository(session).count() == 0


class TestUserCommands:
    def test_create_admin(self, cli_db, session):
        result = runner.invoke(
            app,
            ["users", "create-admin", "--email", "root@shop.local", "--password", "Root1234"],
        )

        assert result.exit_code == 0, result.output
        user = UserRepository(session).get_by_email("root@shop.local")
        assert user.role == UserRole.ADMIN

    def test_create_admin_rejects_weak_password(self, cli_db):
        result = runner.invoke(
            app, ["users", "create-admin", "--email", "root@shop.local", "--password", "weak"]
        )

        assert result.exit_code == 1
        assert "password" in result.output

    def test_create_admin_duplicate_email(self, cli_db, admin_user):
        result = runner.invoke(
            app,
            ["users", "create-admin", "--email", admin_user.email, "--password", "Root1234"],
        )

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_list(self, cli_db, admin_user, customer_user):
        result = runner.invoke(app, ["users", "list"])

        assert result.exit_code == 0
        assert "2 users in total" in result.output

    def test_list_empty(self, cli_db):
        result = runner.invoke(app, ["users", "list"])

        assert "No users found" in result.output
