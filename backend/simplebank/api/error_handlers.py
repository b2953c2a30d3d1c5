"""Error Handlers - global exception handlers for the SimpleBank API.

Invariants:
    - SimpleBankError -> its http_status with the to_response() envelope
    - Client-side ledger errors (4xx) log at WARNING, store failures (5xx) at ERROR
    - Log records carry the error's account_id, transfer_id and operation
    - RollbackError logs both the transaction error and the rollback error
    - RequestValidationError -> 400 with field-level error details
    - Exception (catch-all) -> never leaks internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from simplebank.core.errors import (
    ErrorCategory, ErrorSeverity, RollbackError, SimpleBankError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_simplebank_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_simplebank_error_handler(app: FastAPI) -> None:

    @app.exception_handler(SimpleBankError)
    async def simplebank_error_handler(request: Request, exc: SimpleBankError):
        level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
        logger.log(
            level,
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra=_ledger_log_fields(request, exc),
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _ledger_log_fields(request: Request, exc: SimpleBankError) -> dict:
    ctx = exc.context
    fields = {
        "error_code": exc.code,
        "path": request.url.path,
        "account_id": ctx.account_id,
        "transfer_id": ctx.transfer_id,
        "operation": ctx.operation,
    }
    if isinstance(exc, RollbackError):
        fields["tx_error"] = repr(exc.tx_error)
        fields["rollback_error"] = repr(exc.rollback_error)
    return fields


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": ErrorCategory.INTERNAL.value,
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": ErrorCategory.VALIDATION.value,
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
