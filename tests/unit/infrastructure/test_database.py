"""Unit tests for engine construction and session handling."""

import pytest
from sqlalchemy import StaticPool
from sqlalchemy.exc import OperationalError

from src.storefront.core.services import DbManageService, DbSessionService
from src.storefront.core.services.database.db_session import build_engine
from src.storefront.entities.core.user import UserRepository
from src.storefront.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    DatabaseConfig,
)


class TestBuildEngine:
    def test_in_memory_sqlite_uses_a_single_connection(self):
        engine = build_engine(ConfigData(database=DatabaseConfig(url="sqlite://")))

        assert isinstance(engine.pool, StaticPool)
        assert engine.dialect.name == "sqlite"

    def test_file_sqlite(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'shop.db'}"
        engine = build_engine(
            ConfigData(app=AppConfig(environment="test"), database=DatabaseConfig(url=url))
        )

        assert not isinstance(engine.pool, StaticPool)


class TestDbSessionService:
    def test_health_check(self, db_service):
        assert db_service.health_check() is True
        assert db_service.dialect_name == "sqlite"

    def test_session_scope_commits(self, db_service, session, user_factory):
        user = user_factory("scope@shop.local")

        with db_service.session_scope() as scoped:
            UserRepository(scoped).update_fields(user.id, {"first_name": "Scoped"})

        session.expire_all()
        assert UserRepository(session).get(user.id).first_name == "Scoped"

    def test_session_scope_rolls_back_and_reraises(self, db_service, session, user_factory):
        user = user_factory("scope@shop.local")

        with pytest.raises(RuntimeError):
            with db_service.session_scope() as scoped:
                UserRepository(scoped).update_fields(user.id, {"first_name": "Lost"})
                raise RuntimeError("abort")

        session.expire_all()
        assert UserRepository(session).get(user.id).first_name == "Test"


class TestDbManageService:
    def test_create_and_drop(self, tmp_path):
        service = DbSessionService(
            engine=build_engine(
                ConfigData(database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'm.db'}"))
            )
        )
        manager = DbManageService(service.engine)

        manager.create_all()
        with service.session_scope() as session:
            assert UserRepository(session).count() == 0

        manager.drop_all()
        with pytest.raises(OperationalError):
            with service.session_scope() as session:
                UserRepository(session).count()
