"""Concurrent transfers - opposite directions on one pair, disjoint pairs, cancellation.

Invariants:
    - N transfers A->B racing N transfers B->A all complete
    - Final balances equal start plus the net of all applied deltas
    - A cancelled in-flight transaction leaves no trace and raises TransferCancelledError
    - asyncio.timeout() around a transaction still raises TimeoutError
"""

import asyncio

import pytest

from simplebank.core.errors import TransferCancelledError

N_EACH_WAY = 5


@pytest.mark.parametrize("lock_rows", [False, True], ids=["implicit", "explicit"])
async def test_opposite_direction_transfers_all_complete(
    store, locking_store, accounts, lock_rows,
):
    store = locking_store if lock_rows else store
    a, b = accounts
    amount = 10

    calls = []
    for _ in range(N_EACH_WAY):
        calls.append(store.transfer(a.id, b.id, amount))
        calls.append(store.transfer(b.id, a.id, amount))

    results = await asyncio.wait_for(asyncio.gather(*calls), timeout=60)

    assert len(results) == 2 * N_EACH_WAY
    assert len({r.transfer.id for r in results}) == 2 * N_EACH_WAY
    assert (await store.get_account(a.id)).balance == 100
    assert (await store.get_account(b.id)).balance == 50
    assert len(await store.list_entries(a.id, limit=100)) == 2 * N_EACH_WAY
    assert len(await store.list_entries(b.id, limit=100)) == 2 * N_EACH_WAY


async def test_one_way_concurrent_transfers_accumulate(store, accounts):
    a, b = accounts

    results = await asyncio.gather(
        *(store.transfer(a.id, b.id, 10) for _ in range(N_EACH_WAY)),
    )

    # every debit saw a distinct balance: no lost updates
    assert sorted(r.from_account.balance for r in results) == [50, 60, 70, 80, 90]
    assert (await store.get_account(a.id)).balance == 50
    assert (await store.get_account(b.id)).balance == 100


async def test_disjoint_pairs_run_side_by_side(store, accounts):
    a, b = accounts
    c = await store.create_account("carol", 40, "USD")
    d = await store.create_account("dave", 0, "USD")

    first, second = await asyncio.gather(
        store.transfer(a.id, b.id, 25),
        store.transfer(c.id, d.id, 40),
    )

    assert (first.from_account.balance, first.to_account.balance) == (75, 75)
    assert (second.from_account.balance, second.to_account.balance) == (0, 40)


async def test_cancelled_transaction_is_rolled_back(store, accounts):
    a, b = accounts
    reached = asyncio.Event()

    async def stalled_transfer(q):
        await q.create_transfer(a.id, b.id, 10)
        await q.create_entry(a.id, -10)
        await q.add_account_balance(a.id, -10)
        reached.set()
        await asyncio.Event().wait()

    task = asyncio.create_task(store.exec_tx(stalled_transfer))
    await reached.wait()
    task.cancel()

    with pytest.raises(TransferCancelledError):
        await task

    assert (await store.get_account(a.id)).balance == 100
    assert await store.list_transfers(a.id, b.id) == []
    assert await store.list_entries(a.id) == []


async def test_timeout_around_transaction_raises_timeout_error(store, accounts):
    a, b = accounts

    async def stalled_transfer(q):
        await q.create_transfer(a.id, b.id, 10)
        await q.add_account_balance(a.id, -10)
        await asyncio.Event().wait()

    with pytest.raises(TimeoutError):
        async with asyncio.timeout(0.2):
            await store.exec_tx(stalled_transfer)

    assert (await store.get_account(a.id)).balance == 100
    assert await store.list_transfers(a.id, b.id) == []
