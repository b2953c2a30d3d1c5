"""Health & Readiness Probes for the ledger API.

Invariants:
    - GET /health/ always returns 200 if the process is up
    - GET /health/ready returns 503 until init_db() has run or while the
      database is unreachable; when ready it reports the transfer lock mode
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from simplebank.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "simplebank-api"}


@router.get("/ready")
async def readiness_check():
    """Ready once the ledger store exists and its database answers."""
    manager = database.db_manager
    if manager is None:
        return _not_ready("store_not_initialized")
    if not await manager.health_check():
        return _not_ready("database_unavailable")
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "transfer_locking": "explicit" if manager.store.lock_rows else "implicit",
    }


def _not_ready(reason: str) -> JSONResponse:
    logger.warning(f"Readiness check failed: {reason}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )
