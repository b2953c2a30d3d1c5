"""Ledger Types - immutable row snapshots handed out by the accessor.

Invariants:
    - Snapshots are frozen: a row read inside a transaction never changes afterwards
    - Amounts and balances are integers in the smallest currency unit
    - TransferResult lists accounts and entries in source-then-destination order
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", int)
EntryId = NewType("EntryId", int)
TransferId = NewType("TransferId", int)


# ─── Row Snapshots ───────────────────────────────────────────────

@dataclass(frozen=True)
class AccountRow:
    id: AccountId
    owner: str
    balance: int
    currency: str
    created_at: datetime


@dataclass(frozen=True)
class EntryRow:
    """One signed balance movement against one account."""
    id: EntryId
    account_id: AccountId
    amount: int
    created_at: datetime


@dataclass(frozen=True)
class TransferRow:
    """One money movement between two accounts (amount always positive)."""
    id: TransferId
    from_account_id: AccountId
    to_account_id: AccountId
    amount: int
    created_at: datetime


# ─── Transfer Values ─────────────────────────────────────────────

@dataclass(frozen=True)
class BalanceChange:
    """Signed delta to add to one account's balance."""
    account_id: AccountId
    amount: int


@dataclass(frozen=True)
class TransferResult:
    """Everything one transfer wrote. Not persisted."""
    transfer: TransferRow
    from_account: AccountRow
    to_account: AccountRow
    from_entry: EntryRow
    to_entry: EntryRow
