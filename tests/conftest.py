"""
Top-level pytest configuration.

Provides:
  - A fresh SQLite database file (aiosqlite) per test with all tables created.
  - A session factory and RecommendationStore bound to that database.
  - A db_session fixture for seeding rows (factories commit so the store's
    own sessions can see them).
  - An async_client fixture wired to the FastAPI app with the store swapped
    for the test store and the external model disabled.
"""

from __future__ import annotations

import os
from typing import AsyncGenerator

# ---------------------------------------------------------------------------
# Environment must be set BEFORE any obimo module is imported so that
# pydantic-settings picks up the test values.
# ---------------------------------------------------------------------------
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test")
os.environ.setdefault("POSTGRES_PASSWORD", "test")
os.environ.setdefault("POSTGRES_DB", "test")
os.environ["AI_API_KEY"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import JSON
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def _patch_postgres_types_for_sqlite(metadata) -> None:
    """
    Replace PostgreSQL-specific column types that SQLite cannot compile.

    UUID(as_uuid=True) renders fine on SQLite, but JSONB does not. Walk the
    metadata before DDL generation and swap any JSONB column for plain JSON.
    """
    from sqlalchemy.dialects.postgresql import JSONB

    for table in metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, JSONB):
                col.type = JSON()


# ---------------------------------------------------------------------------
# Per-test engine on a temporary SQLite file. A file (rather than :memory:)
# lets every store operation open its own connection, as it does against
# PostgreSQL, while still seeing committed data.
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path):
    from obimo.core.database import Base
    import obimo.models  # noqa: F401  registers every table on Base.metadata

    _patch_postgres_types_for_sqlite(Base.metadata)

    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'obimo-test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    from obimo.repositories.store import RecommendationStore
    return RecommendationStore(session_factory)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding test data."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# FastAPI client with the store dependency pointing at the test database.
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def async_client(store) -> AsyncGenerator[AsyncClient, None]:
    from obimo.api.deps import get_generative_model, get_store
    from obimo.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_generative_model] = lambda: None

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seeded fixtures
# ---------------------------------------------------------------------------
LOS_ANGELES = ("34.05", "-118.24")


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession):
    """Onboarded traveler parked in Los Angeles."""
    from tests.factories import UserFactory

    return await UserFactory.create_async(
        db_session,
        email="traveler@example.com",
        first_name="Sam",
        latitude=LOS_ANGELES[0],
        longitude=LOS_ANGELES[1],
    )
