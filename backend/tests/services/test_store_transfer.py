"""SQLStore.transfer - ledger effects, lock order and failure surfacing.

Invariants:
    - Entries are -amount / +amount and sum to zero
    - Balances move by exactly amount, source down, destination up
    - Lower account id is updated first regardless of direction
    - Result is source-then-destination regardless of lock order
    - Identical calls are not deduplicated
"""

import pytest

from simplebank.core.errors import ConstraintViolationError, ResourceNotFoundError
from simplebank.db.queries import Queries


# -- Helpers -------------------------------------------------------------------

def _record_balance_updates(monkeypatch):
    """Patch Queries.add_account_balance to log account ids in call order."""
    order = []
    original = Queries.add_account_balance

    async def recording(self, account_id, amount):
        order.append(account_id)
        return await original(self, account_id, amount)

    monkeypatch.setattr(Queries, "add_account_balance", recording)
    return order


# ==============================================================================
# Ledger effects
# ==============================================================================


async def test_transfer_moves_money_and_writes_entries(store, accounts):
    """Balances (100, 50), transfer(1, 2, 30) -> entries -30/+30, balances 70/80."""
    a, b = accounts

    result = await store.transfer(a.id, b.id, 30)

    assert result.transfer.from_account_id == a.id
    assert result.transfer.to_account_id == b.id
    assert result.transfer.amount == 30
    assert result.from_entry.account_id == a.id
    assert result.from_entry.amount == -30
    assert result.to_entry.account_id == b.id
    assert result.to_entry.amount == 30
    assert result.from_account.id == a.id
    assert result.from_account.balance == 70
    assert result.to_account.id == b.id
    assert result.to_account.balance == 80


async def test_reverse_transfer_restores_original_balances(store, accounts):
    a, b = accounts
    await store.transfer(a.id, b.id, 30)

    result = await store.transfer(b.id, a.id, 30)

    assert result.from_account.id == b.id
    assert result.from_account.balance == 50
    assert result.to_account.id == a.id
    assert result.to_account.balance == 100


@pytest.mark.parametrize("amount", [1, 17, 50])
async def test_entries_sum_to_zero_and_match_balances(store, accounts, amount):
    a, b = accounts

    result = await store.transfer(b.id, a.id, amount)

    assert result.from_entry.amount + result.to_entry.amount == 0
    assert result.from_entry.amount == -amount
    assert result.from_account.balance == b.balance - amount
    assert result.to_account.balance == a.balance + amount


async def test_transfer_is_persisted(store, accounts):
    a, b = accounts

    result = await store.transfer(a.id, b.id, 10)

    assert await store.get_transfer(result.transfer.id) == result.transfer
    assert await store.get_entry(result.from_entry.id) == result.from_entry
    assert await store.get_entry(result.to_entry.id) == result.to_entry
    assert (await store.get_account(a.id)).balance == 90
    assert (await store.get_account(b.id)).balance == 60


async def test_identical_transfers_are_not_deduplicated(store, accounts):
    a, b = accounts

    first = await store.transfer(a.id, b.id, 10)
    second = await store.transfer(a.id, b.id, 10)

    assert first.transfer.id != second.transfer.id
    assert second.from_account.balance == 80
    assert second.to_account.balance == 70
    assert len(await store.list_transfers(a.id, b.id)) == 2
    assert len(await store.list_entries(a.id)) == 2


# ==============================================================================
# Lock order
# ==============================================================================


async def test_lower_id_source_is_updated_first(store, accounts, monkeypatch):
    a, b = accounts
    order = _record_balance_updates(monkeypatch)

    await store.transfer(a.id, b.id, 5)

    assert a.id < b.id
    assert order == [a.id, b.id]


async def test_lower_id_destination_is_updated_first(store, accounts, monkeypatch):
    """from > to: the destination (lower id) is locked before the source."""
    a, b = accounts
    order = _record_balance_updates(monkeypatch)

    result = await store.transfer(b.id, a.id, 5)

    assert order == [a.id, b.id]
    # result order still follows the transfer direction
    assert result.from_account.id == b.id
    assert result.to_account.id == a.id


async def test_explicit_row_locks_follow_the_same_order(
    locking_store, accounts, monkeypatch,
):
    a, b = accounts
    calls = []
    original_lock = Queries.get_account_for_update
    original_add = Queries.add_account_balance

    async def lock(self, account_id):
        calls.append(("lock", account_id))
        return await original_lock(self, account_id)

    async def add(self, account_id, amount):
        calls.append(("add", account_id))
        return await original_add(self, account_id, amount)

    monkeypatch.setattr(Queries, "get_account_for_update", lock)
    monkeypatch.setattr(Queries, "add_account_balance", add)

    result = await locking_store.transfer(b.id, a.id, 20)

    assert calls == [("lock", a.id), ("add", a.id), ("lock", b.id), ("add", b.id)]
    assert result.from_account.balance == 30
    assert result.to_account.balance == 120


# ==============================================================================
# Failures
# ==============================================================================


async def test_insufficient_funds_is_a_constraint_violation(store, accounts):
    """Account 2 cannot go below zero; account 1's credit is rolled back too."""
    a, b = accounts

    with pytest.raises(ConstraintViolationError) as exc_info:
        await store.transfer(b.id, a.id, 500)

    assert exc_info.value.http_status == 409
    assert exc_info.value.operation == "execute"
    assert (await store.get_account(a.id)).balance == 100
    assert (await store.get_account(b.id)).balance == 50
    assert await store.list_transfers(b.id, a.id) == []


async def test_non_positive_amount_rejected_by_store(store, accounts):
    a, b = accounts

    with pytest.raises(ConstraintViolationError):
        await store.transfer(a.id, b.id, 0)

    assert (await store.get_account(a.id)).balance == 100


async def test_unknown_destination_rolls_back_everything(store, accounts):
    a, _ = accounts

    with pytest.raises(ResourceNotFoundError) as exc_info:
        await store.transfer(a.id, 999, 10)

    assert exc_info.value.resource_id == 999
    assert (await store.get_account(a.id)).balance == 100
    assert await store.list_transfers(a.id, 999) == []
    assert await store.list_entries(a.id) == []
