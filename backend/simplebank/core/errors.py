"""Error Hierarchy - typed, categorized exceptions for all SimpleBank failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages
    - TransferCancelledError is a CancelledError, never an Exception: cancellation
      must keep unwinding through `except Exception` blocks

Design Decisions:
    - Single hierarchy with SimpleBankError base: the FastAPI global handler catches all
    - RollbackError keeps both the triggering error and the rollback error as attributes
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    account_id: int | None = None
    transfer_id: int | None = None
    operation: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class SimpleBankError(Exception):
    """Base exception for all SimpleBank errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "account_id": self.context.account_id,
                    "transfer_id": self.context.transfer_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(SimpleBankError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: int | str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConstraintViolationError(SimpleBankError):
    """A write was rejected by a store constraint (check, foreign key, unique)."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Constraint violated during {operation}: {message}",
            "CONSTRAINT_VIOLATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.operation = operation


class ConcurrencyError(SimpleBankError):
    """Lock conflict reported by the store (serialization failure, deadlock)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SimpleBankError):
    """Database operation failed."""
    def __init__(
        self, message: str, operation: str,
        context: ErrorContext | None = None, code: str = "DATABASE_ERROR",
    ):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Database {operation} failed: {message}",
            code, ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation


class DatabaseConnectionError(DatabaseError):
    """Transaction could not be started, executed or committed because of connectivity."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            message, operation, context, code="DATABASE_CONNECTION_ERROR",
        )


class RollbackError(SimpleBankError):
    """Rollback failed after an earlier failure; carries both errors."""
    def __init__(
        self,
        tx_error: BaseException,
        rollback_error: BaseException,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"tx err: {tx_error!r}, rb err: {rollback_error!r}",
            "ROLLBACK_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.tx_error = tx_error
        self.rollback_error = rollback_error


class TransferCancelledError(asyncio.CancelledError):
    """The caller cancelled the task before the transaction committed.

    The transaction has been rolled back by the time this is raised.
    """
    code = "TRANSACTION_CANCELLED"

    def __init__(self, message: str = "Transaction cancelled before commit"):
        super().__init__(message)
        self.message = message
