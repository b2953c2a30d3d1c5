"""Driver Error Translation - maps SQLAlchemy/driver failures onto core/errors.py.

Invariants:
    - IntegrityError -> ConstraintViolationError
    - SQLSTATE 40001 (serialization) / 40P01 (deadlock) -> ConcurrencyError
    - OperationalError, InterfaceError, invalidated connections, OSError -> DatabaseConnectionError
    - Any other SQLAlchemyError -> DatabaseError
    - Driver messages go into ErrorContext.debug_info, never into the user-facing message
"""

from sqlalchemy.exc import (
    DBAPIError, IntegrityError, InterfaceError, OperationalError,
)

from simplebank.core.errors import (
    ConcurrencyError, ConstraintViolationError, DatabaseConnectionError,
    DatabaseError, ErrorContext, SimpleBankError,
)

LOCK_CONFLICT_SQLSTATES = frozenset({"40001", "40P01"})


def translate_db_error(exc: BaseException, operation: str) -> SimpleBankError:
    """Map a database failure raised during `operation` to a SimpleBankError."""
    orig = getattr(exc, "orig", None)
    context = ErrorContext(
        operation=operation,
        debug_info={"driver_error": repr(orig if orig is not None else exc)},
    )
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)

    if sqlstate in LOCK_CONFLICT_SQLSTATES:
        return ConcurrencyError(
            f"Lock conflict during {operation} (SQLSTATE {sqlstate})", context,
        )
    if isinstance(exc, IntegrityError):
        return ConstraintViolationError(
            "Integrity constraint violated", operation, context,
        )
    if isinstance(exc, (OperationalError, InterfaceError, OSError)) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    ):
        return DatabaseConnectionError(
            "Connection or operational error", operation, context,
        )
    return DatabaseError("Database operation failed", operation, context)
