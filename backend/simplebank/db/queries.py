"""Ledger Accessor - single-row CRUD on accounts, entries and transfers.

Invariants:
    - Every method runs on the AsyncSession the accessor was built with and never
      commits or rolls back: transaction boundaries belong to SQLStore.exec_tx
    - Every write uses RETURNING, so callers get the row as the database stored it
    - Reads and updates of a missing row raise ResourceNotFoundError
    - add_account_balance is a single UPDATE ... SET balance = balance + :amount;
      the row lock is taken by that statement

Design Decisions:
    - Core statements against the mapped tables, rows converted to frozen
      snapshots: no identity map state leaks between transactions
"""

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from simplebank.core.errors import ResourceNotFoundError, ErrorContext
from simplebank.core.ledger_types import (
    AccountId, EntryId, TransferId,
    AccountRow, EntryRow, TransferRow,
)
from simplebank.models.account import Account
from simplebank.models.entry import Entry
from simplebank.models.transfer import Transfer

accounts = Account.__table__
entries = Entry.__table__
transfers = Transfer.__table__


class Queries:
    """Row accessor bound to one session (and so to one transaction)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ─── Accounts ────────────────────────────────────────────────

    async def create_account(
        self, owner: str, balance: int, currency: str,
    ) -> AccountRow:
        result = await self.session.execute(
            insert(accounts)
            .values(owner=owner, balance=balance, currency=currency)
            .returning(*accounts.c),
        )
        return AccountRow(**result.mappings().one())

    async def get_account(self, account_id: AccountId) -> AccountRow:
        result = await self.session.execute(
            select(accounts).where(accounts.c.id == account_id),
        )
        return _account_or_404(result.mappings().one_or_none(), account_id)

    async def get_account_for_update(self, account_id: AccountId) -> AccountRow:
        """Read an account and lock its row until the transaction ends.

        Renders FOR NO KEY UPDATE on PostgreSQL so inserts that reference the
        account through a foreign key are not blocked by the lock.
        """
        result = await self.session.execute(
            select(accounts)
            .where(accounts.c.id == account_id)
            .with_for_update(key_share=True),
        )
        return _account_or_404(result.mappings().one_or_none(), account_id)

    async def list_accounts(
        self, owner: str | None = None, limit: int = 10, offset: int = 0,
    ) -> list[AccountRow]:
        query = select(accounts).order_by(accounts.c.id)
        if owner is not None:
            query = query.where(accounts.c.owner == owner)
        result = await self.session.execute(query.limit(limit).offset(offset))
        return [AccountRow(**row) for row in result.mappings().all()]

    async def update_account(
        self, account_id: AccountId, balance: int,
    ) -> AccountRow:
        """Overwrite an account's balance."""
        result = await self.session.execute(
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(balance=balance)
            .returning(*accounts.c),
        )
        return _account_or_404(result.mappings().one_or_none(), account_id)

    async def add_account_balance(
        self, account_id: AccountId, amount: int,
    ) -> AccountRow:
        """Add a signed amount to an account's balance and return the new row."""
        result = await self.session.execute(
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(balance=accounts.c.balance + amount)
            .returning(*accounts.c),
        )
        return _account_or_404(result.mappings().one_or_none(), account_id)

    async def delete_account(self, account_id: AccountId) -> None:
        await self.session.execute(
            delete(accounts).where(accounts.c.id == account_id),
        )

    # ─── Entries ─────────────────────────────────────────────────

    async def create_entry(self, account_id: AccountId, amount: int) -> EntryRow:
        result = await self.session.execute(
            insert(entries)
            .values(account_id=account_id, amount=amount)
            .returning(*entries.c),
        )
        return EntryRow(**result.mappings().one())

    async def get_entry(self, entry_id: EntryId) -> EntryRow:
        result = await self.session.execute(
            select(entries).where(entries.c.id == entry_id),
        )
        row = result.mappings().one_or_none()
        if row is None:
            raise ResourceNotFoundError("Entry", entry_id)
        return EntryRow(**row)

    async def list_entries(
        self, account_id: AccountId, limit: int = 10, offset: int = 0,
    ) -> list[EntryRow]:
        result = await self.session.execute(
            select(entries)
            .where(entries.c.account_id == account_id)
            .order_by(entries.c.id)
            .limit(limit)
            .offset(offset),
        )
        return [EntryRow(**row) for row in result.mappings().all()]

    # ─── Transfers ───────────────────────────────────────────────

    async def create_transfer(
        self, from_account_id: AccountId, to_account_id: AccountId, amount: int,
    ) -> TransferRow:
        result = await self.session.execute(
            insert(transfers)
            .values(
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount,
            )
            .returning(*transfers.c),
        )
        return TransferRow(**result.mappings().one())

    async def get_transfer(self, transfer_id: TransferId) -> TransferRow:
        result = await self.session.execute(
            select(transfers).where(transfers.c.id == transfer_id),
        )
        row = result.mappings().one_or_none()
        if row is None:
            raise ResourceNotFoundError(
                "Transfer", transfer_id,
                ErrorContext(transfer_id=transfer_id),
            )
        return TransferRow(**row)

    async def list_transfers(
        self,
        from_account_id: AccountId,
        to_account_id: AccountId,
        limit: int = 10,
        offset: int = 0,
    ) -> list[TransferRow]:
        """Transfers sent by from_account_id or received by to_account_id."""
        result = await self.session.execute(
            select(transfers)
            .where(
                (transfers.c.from_account_id == from_account_id)
                | (transfers.c.to_account_id == to_account_id),
            )
            .order_by(transfers.c.id)
            .limit(limit)
            .offset(offset),
        )
        return [TransferRow(**row) for row in result.mappings().all()]


def _account_or_404(row, account_id: AccountId) -> AccountRow:
    if row is None:
        raise ResourceNotFoundError(
            "Account", account_id, ErrorContext(account_id=account_id),
        )
    return AccountRow(**row)
