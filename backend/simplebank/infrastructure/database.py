"""Database Session Manager - async connection pool and the process-wide ledger store.

Invariants:
    - Connection pool uses pool_pre_ping for stale connection detection
    - The SQLStore shares the manager's session factory; it owns transaction boundaries
    - get_store() raises until init_db() has run

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: rows handed out after commit stay readable
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from simplebank.db.store import SQLStore

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages the async engine, its session factory, and the ledger store."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        lock_rows: bool = False,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.store = SQLStore(self._session_factory, lock_rows=lock_rows)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self._session_factory() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.close()
        db_manager = None


async def get_store() -> AsyncGenerator[SQLStore, None]:
    """FastAPI dependency for the ledger store."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    yield db_manager.store
