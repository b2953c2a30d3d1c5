"""Boundary Protocols - contracts between the ledger core and its callers.

Invariants:
    - Querier is the single-row CRUD surface of the accounts, entries and transfers tables
    - Store is Querier plus the atomic transfer operation
    - Implementations satisfy these structurally (no inheritance required)

Design Decisions:
    - Protocol over ABC: SQLStore composes a Querier by explicit delegation
      instead of inheriting from the accessor
"""

from typing import Protocol

from simplebank.core.ledger_types import (
    AccountId, EntryId, TransferId,
    AccountRow, EntryRow, TransferRow, TransferResult,
)


class Querier(Protocol):
    """Contract for row-level ledger persistence."""
    async def create_account(
        self, owner: str, balance: int, currency: str,
    ) -> AccountRow: ...
    async def get_account(self, account_id: AccountId) -> AccountRow: ...
    async def get_account_for_update(self, account_id: AccountId) -> AccountRow: ...
    async def list_accounts(
        self, owner: str | None = None, limit: int = 10, offset: int = 0,
    ) -> list[AccountRow]: ...
    async def update_account(
        self, account_id: AccountId, balance: int,
    ) -> AccountRow: ...
    async def add_account_balance(
        self, account_id: AccountId, amount: int,
    ) -> AccountRow: ...
    async def delete_account(self, account_id: AccountId) -> None: ...

    async def create_entry(self, account_id: AccountId, amount: int) -> EntryRow: ...
    async def get_entry(self, entry_id: EntryId) -> EntryRow: ...
    async def list_entries(
        self, account_id: AccountId, limit: int = 10, offset: int = 0,
    ) -> list[EntryRow]: ...

    async def create_transfer(
        self, from_account_id: AccountId, to_account_id: AccountId, amount: int,
    ) -> TransferRow: ...
    async def get_transfer(self, transfer_id: TransferId) -> TransferRow: ...
    async def list_transfers(
        self,
        from_account_id: AccountId,
        to_account_id: AccountId,
        limit: int = 10,
        offset: int = 0,
    ) -> list[TransferRow]: ...


class Store(Querier, Protocol):
    """Contract for the ledger store: CRUD plus atomic transfers."""
    async def transfer(
        self, from_account_id: AccountId, to_account_id: AccountId, amount: int,
    ) -> TransferResult: ...
