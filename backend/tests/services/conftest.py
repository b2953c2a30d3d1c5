"""Store test fixtures - file-backed SQLite database per test.

Invariants:
    - Every test gets a fresh database file under tmp_path
    - NullPool: each session opens its own connection, so concurrent
      transactions really are separate connections
    - accounts fixture seeds account 1 (balance 100) and account 2 (balance 50)

Design Decisions:
    - SQLite through aiosqlite: no external dependency; its database-level write
      lock serializes transfers the way PostgreSQL row locks do for one account pair
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import NullPool

import simplebank.models  # noqa: F401
from simplebank.db.base import Base
from simplebank.db.store import SQLStore
from simplebank.infrastructure.database import get_store
from simplebank.main import app


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        echo=False, poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def store(test_session_factory):
    return SQLStore(test_session_factory)


@pytest.fixture
async def locking_store(test_session_factory):
    """Store that takes an explicit row lock before each balance update."""
    return SQLStore(test_session_factory, lock_rows=True)


@pytest.fixture
async def accounts(store):
    """Account 1 with balance 100 and account 2 with balance 50."""
    first = await store.create_account("alice", 100, "USD")
    second = await store.create_account("bob", 50, "USD")
    return first, second


@pytest.fixture
async def client(store):
    """FastAPI test client with the store dependency overridden."""
    async def override_get_store():
        yield store

    app.dependency_overrides[get_store] = override_get_store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
