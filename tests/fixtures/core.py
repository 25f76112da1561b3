from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from sqlalchemy import Engine, StaticPool
from sqlmodel import Session, SQLModel, create_engine
from starlette.requests import Request

from src.storefront.core.services import DbSessionService


@pytest.fixture
def engine() -> Generator[Engine]:
    """Fresh in-memory database per test, shared by every session that uses it."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Register every table with the metadata
    import src.storefront.entities  # noqa: F401

    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    """Create a fresh database session for testing."""
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()


@pytest.fixture
def db_service(engine: Engine) -> DbSessionService:
    return DbSessionService(engine=engine)


@pytest.fixture
def request_factory() -> Callable[..., Request]:
    def _make_request(
        headers: dict[str, str] | None = None,
        method: str = "GET",
        path: str = "/",
        client: tuple[str, int] = ("127.0.0.1", 5000),
    ) -> Request:
        scope = {
            "type": "http",
            "headers": [
                (name.lower().encode("ascii"), value.encode("latin-1"))
                for name, value in (headers or {}).items()
            ],
            "method": method,
            "path": path,
            "query_string": b"",
            "client": client,
        }
        return Request(scope)

    return _make_request
