"""SimpleBank API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SimpleBankError -> structured JSON responses
    - Database initialized on startup and disposed on shutdown via lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from simplebank.api.error_handlers import register_error_handlers
from simplebank.api.routes import accounts, health, transfers
from simplebank.config import get_settings
from simplebank.infrastructure.database import close_db, init_db
from simplebank.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        lock_rows=settings.transfer_lock_rows,
    )
    logger.info("SimpleBank API started")
    yield
    await close_db()
    logger.info("SimpleBank API shutting down")


app = FastAPI(
    title="SimpleBank API", version="1.0.0", lifespan=lifespan,
)

# Routes - explicit registration
app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(transfers.router)

register_error_handlers(app)
