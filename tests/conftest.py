"""Shared fixtures for catalog tests.

Every test gets its own SQLite database file. Tables and seed rows are
written through a synchronous engine; the code under test talks to the
same file through aiosqlite.
"""

import asyncio
import os
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from noctura_catalog.catalog.models import Category, Product
from noctura_catalog.domain.exceptions import UploadFailureError
from noctura_catalog.infrastructure.database import Base


# ============================================================================
# Object Store Double
# ============================================================================


class FakeObjectStore:
    """In-memory object store.

    Attributes:
        delays: Seconds to wait per filename before answering.
        failures: Filenames whose upload fails.
        calls: Filenames in the order uploads were started.
        completed: Filenames in the order uploads finished.
    """

    def __init__(
        self,
        delays: dict[str, float] | None = None,
        failures: set[str] | None = None,
    ) -> None:
        self.delays = delays or {}
        self.failures = failures or set()
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def upload(self, filename: str, content: bytes, content_type: str | None = None) -> str:
        self.calls.append(filename)
        await asyncio.sleep(self.delays.get(filename, 0))
        if filename in self.failures:
            raise UploadFailureError(filename, "object store unavailable", 503)
        self.completed.append(filename)
        return f"https://cdn.example.com/products/{filename}"


@pytest.fixture
def object_store() -> FakeObjectStore:
    """Object store that accepts every upload."""
    return FakeObjectStore()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Create an empty catalog database file."""
    path = tmp_path / "catalog.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture
def session_factory(db_path: Path) -> async_sessionmaker[AsyncSession]:
    """Async session factory bound to the test database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Async session for repository and service tests."""
    async with session_factory() as session:
        yield session


BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def build_product(index: int = 0, **overrides: Any) -> Product:
    """Build a product row; higher ``index`` means created later."""
    created = BASE_TIME + timedelta(minutes=index)
    fields: dict[str, Any] = {
        "name": f"Producto {index}",
        "description": f"Descripcion {index}",
        "price": 100.0 + index,
        "category": "sillas",
        "colors": ["negro", "blanco"],
        "images": [f"https://cdn.example.com/{index}-a.jpg", f"https://cdn.example.com/{index}-b.jpg"],
        "width": "45 cm",
        "height": "90 cm",
        "thickness": "3 cm",
        "material": "roble",
        "created_at": created,
        "updated_at": created,
    }
    fields.update(overrides)
    return Product(**fields)


@pytest.fixture(name="make_product")
def make_product_fixture() -> Callable[..., Product]:
    """Factory for product rows."""
    return build_product


@pytest.fixture
def seed(db_path: Path) -> Callable[..., list[dict[str, Any]]]:
    """Insert rows synchronously and return them as plain dicts."""

    def _seed(*rows: Product | Category) -> list[dict[str, Any]]:
        sync_engine = create_engine(f"sqlite:///{db_path}")
        with Session(sync_engine, expire_on_commit=False) as db:
            db.add_all(rows)
            db.commit()
            stored = [
                {c.key: getattr(row, c.key) for c in row.__table__.columns}
                for row in rows
            ]
        sync_engine.dispose()
        return stored

    return _seed


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client(
    session_factory: async_sessionmaker[AsyncSession],
    object_store: FakeObjectStore,
) -> Generator:
    """Create test client wired to the test database and object store."""
    from fastapi.testclient import TestClient

    from noctura_catalog.api.dependencies import get_object_store
    from noctura_catalog.infrastructure.database import get_session
    from noctura_catalog.main import app

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_object_store] = lambda: object_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
