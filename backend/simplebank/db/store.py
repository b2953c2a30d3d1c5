"""Ledger Store - runs units of work atomically and performs money transfers.

Invariants:
    - exec_tx opens one session per call; every exit path (success, error,
      cancellation) ends in a commit or a rollback, then close
    - A failed rollback raises RollbackError carrying both errors
    - Cancellation anywhere before commit (begin included) rolls back and
      raises TransferCancelledError; inside asyncio.timeout() it still
      surfaces as TimeoutError (3.12+ matches CancelledError subclasses)
    - transfer() updates the lower account id first, whichever side it is on,
      so transfers between the same pair always lock rows in the same order
    - TransferResult is always source-then-destination, independent of lock order
    - Nothing is retried

Design Decisions:
    - CRUD methods delegate explicitly to Queries, each in its own transaction,
      so SQLStore satisfies the Store protocol without inheriting the accessor
    - Entries are inserted before balances are touched; with FOR NO KEY UPDATE
      (or the UPDATE's own lock) the FK check on entries takes only a KEY SHARE
      lock, which never conflicts with a balance update
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from simplebank.core.errors import RollbackError, TransferCancelledError
from simplebank.core.ledger_types import (
    AccountId, EntryId, TransferId,
    AccountRow, EntryRow, TransferRow, TransferResult, BalanceChange,
)
from simplebank.db.queries import Queries
from simplebank.db.translate_errors import translate_db_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLStore:
    """Transactional ledger store over an async session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lock_rows: bool = False,
    ):
        self._session_factory = session_factory
        self.lock_rows = lock_rows

    # ─── Transaction Scope ───────────────────────────────────────

    async def exec_tx(self, fn: Callable[[Queries], Awaitable[T]]) -> T:
        """Run fn inside one database transaction with a freshly bound Queries."""
        session = self._session_factory()
        try:
            await _begin(session)
            try:
                result = await fn(Queries(session))
            except asyncio.CancelledError as exc:
                logger.warning("Transaction cancelled before commit, rolling back")
                await _rollback(session, exc)
                raise TransferCancelledError() from exc
            except SQLAlchemyError as exc:
                err = translate_db_error(exc, "execute")
                await _rollback(session, err)
                raise err from exc
            except Exception as exc:
                await _rollback(session, exc)
                raise
            await _commit(session)
            return result
        finally:
            await session.close()

    # ─── Transfers ───────────────────────────────────────────────

    async def transfer(
        self, from_account_id: AccountId, to_account_id: AccountId, amount: int,
    ) -> TransferResult:
        """Move amount from one account to another in a single transaction.

        Creates the transfer record, a debit entry for the source, a credit
        entry for the destination, then adjusts both balances lower id first.
        """
        async def unit_of_work(q: Queries) -> TransferResult:
            transfer = await q.create_transfer(from_account_id, to_account_id, amount)
            from_entry = await q.create_entry(from_account_id, -amount)
            to_entry = await q.create_entry(to_account_id, amount)

            debit = BalanceChange(from_account_id, -amount)
            credit = BalanceChange(to_account_id, amount)
            if from_account_id < to_account_id:
                from_account, to_account = await add_money(
                    q, debit, credit, lock_rows=self.lock_rows,
                )
            else:
                to_account, from_account = await add_money(
                    q, credit, debit, lock_rows=self.lock_rows,
                )

            return TransferResult(
                transfer=transfer,
                from_account=from_account,
                to_account=to_account,
                from_entry=from_entry,
                to_entry=to_entry,
            )

        result = await self.exec_tx(unit_of_work)
        logger.info(
            f"Transfer {result.transfer.id} committed",
            extra={
                "transfer_id": result.transfer.id,
                "from_account_id": from_account_id,
                "to_account_id": to_account_id,
                "amount": amount,
            },
        )
        return result

    # ─── CRUD Delegation ─────────────────────────────────────────

    async def create_account(
        self, owner: str, balance: int, currency: str,
    ) -> AccountRow:
        return await self.exec_tx(
            lambda q: q.create_account(owner, balance, currency),
        )

    async def get_account(self, account_id: AccountId) -> AccountRow:
        return await self.exec_tx(lambda q: q.get_account(account_id))

    async def get_account_for_update(self, account_id: AccountId) -> AccountRow:
        # The lock is released as soon as this call's transaction commits.
        return await self.exec_tx(lambda q: q.get_account_for_update(account_id))

    async def list_accounts(
        self, owner: str | None = None, limit: int = 10, offset: int = 0,
    ) -> list[AccountRow]:
        return await self.exec_tx(
            lambda q: q.list_accounts(owner=owner, limit=limit, offset=offset),
        )

    async def update_account(
        self, account_id: AccountId, balance: int,
    ) -> AccountRow:
        return await self.exec_tx(lambda q: q.update_account(account_id, balance))

    async def add_account_balance(
        self, account_id: AccountId, amount: int,
    ) -> AccountRow:
        return await self.exec_tx(
            lambda q: q.add_account_balance(account_id, amount),
        )

    async def delete_account(self, account_id: AccountId) -> None:
        await self.exec_tx(lambda q: q.delete_account(account_id))

    async def create_entry(self, account_id: AccountId, amount: int) -> EntryRow:
        return await self.exec_tx(lambda q: q.create_entry(account_id, amount))

    async def get_entry(self, entry_id: EntryId) -> EntryRow:
        return await self.exec_tx(lambda q: q.get_entry(entry_id))

    async def list_entries(
        self, account_id: AccountId, limit: int = 10, offset: int = 0,
    ) -> list[EntryRow]:
        return await self.exec_tx(
            lambda q: q.list_entries(account_id, limit=limit, offset=offset),
        )

    async def create_transfer(
        self, from_account_id: AccountId, to_account_id: AccountId, amount: int,
    ) -> TransferRow:
        """Insert a bare transfer record. Does not move money; see transfer()."""
        return await self.exec_tx(
            lambda q: q.create_transfer(from_account_id, to_account_id, amount),
        )

    async def get_transfer(self, transfer_id: TransferId) -> TransferRow:
        return await self.exec_tx(lambda q: q.get_transfer(transfer_id))

    async def list_transfers(
        self,
        from_account_id: AccountId,
        to_account_id: AccountId,
        limit: int = 10,
        offset: int = 0,
    ) -> list[TransferRow]:
        return await self.exec_tx(
            lambda q: q.list_transfers(
                from_account_id, to_account_id, limit=limit, offset=offset,
            ),
        )


async def add_money(
    q: Queries,
    first: BalanceChange,
    second: BalanceChange,
    lock_rows: bool = False,
) -> tuple[AccountRow, AccountRow]:
    """Apply first, then second, and return both updated rows in that order.

    The order is the caller's lock order. If the first update fails the second
    is never issued.
    """
    if lock_rows:
        await q.get_account_for_update(first.account_id)
    account1 = await q.add_account_balance(first.account_id, first.amount)

    if lock_rows:
        await q.get_account_for_update(second.account_id)
    account2 = await q.add_account_balance(second.account_id, second.amount)

    return account1, account2


# ─── Transaction Helpers ─────────────────────────────────────────

async def _begin(session: AsyncSession) -> None:
    """Begin and check out the connection, so connectivity fails here."""
    try:
        await session.begin()
        await session.connection()
    except asyncio.CancelledError as exc:
        logger.warning("Transaction cancelled while beginning, rolling back")
        await _rollback(session, exc)
        raise TransferCancelledError() from exc
    except (SQLAlchemyError, OSError) as exc:
        logger.error(f"Could not begin transaction: {exc}")
        raise translate_db_error(exc, "begin") from exc


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except asyncio.CancelledError as exc:
        logger.warning("Commit cancelled, rolling back")
        await _rollback(session, exc)
        raise TransferCancelledError() from exc
    except SQLAlchemyError as exc:
        err = translate_db_error(exc, "commit")
        logger.error(
            f"Commit failed: {exc}", extra={"error_code": err.code},
        )
        raise err from exc


async def _rollback(session: AsyncSession, error: BaseException) -> None:
    """Roll back after `error`; raise RollbackError if the rollback fails too."""
    try:
        await session.rollback()
    except Exception as rb_exc:
        logger.error(
            f"Rollback failed after {error!r}: {rb_exc!r}",
            extra={"error_code": "ROLLBACK_FAILED"},
        )
        raise RollbackError(error, rb_exc) from error
    logger.warning(f"Transaction rolled back after {error!r}")
