"""Ledger Schemas - request validation and response shaping.

Invariants:
    - TransferCreate rejects non-positive amounts, non-positive ids, same-account transfers
    - AccountCreate enforces a 3-letter upper-case currency and strips the owner
    - TransferResponse builds from a TransferResult
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from simplebank.core.ledger_types import (
    AccountRow, EntryRow, TransferRow, TransferResult,
)
from simplebank.schemas.ledger import AccountCreate, TransferCreate, TransferResponse

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_transfer_create_accepts_valid_request():
    body = TransferCreate(from_account_id=1, to_account_id=2, amount=30)

    assert body.amount == 30


@pytest.mark.parametrize("amount", [0, -1])
def test_transfer_create_rejects_non_positive_amount(amount):
    with pytest.raises(ValidationError):
        TransferCreate(from_account_id=1, to_account_id=2, amount=amount)


def test_transfer_create_rejects_same_account():
    with pytest.raises(ValidationError, match="must differ"):
        TransferCreate(from_account_id=3, to_account_id=3, amount=1)


def test_transfer_create_rejects_non_positive_ids():
    with pytest.raises(ValidationError):
        TransferCreate(from_account_id=0, to_account_id=2, amount=1)


def test_account_create_strips_owner_and_defaults_balance():
    body = AccountCreate(owner="  alice ", currency="USD")

    assert body.owner == "alice"
    assert body.balance == 0


@pytest.mark.parametrize("currency", ["usd", "US", "USDT"])
def test_account_create_rejects_bad_currency(currency):
    with pytest.raises(ValidationError):
        AccountCreate(owner="alice", currency=currency)


def test_account_create_rejects_blank_owner():
    with pytest.raises(ValidationError):
        AccountCreate(owner="   ", currency="USD")


def test_transfer_response_from_result():
    result = TransferResult(
        transfer=TransferRow(1, 2, 1, 30, NOW),
        from_account=AccountRow(2, "bob", 20, "USD", NOW),
        to_account=AccountRow(1, "alice", 130, "USD", NOW),
        from_entry=EntryRow(1, 2, -30, NOW),
        to_entry=EntryRow(2, 1, 30, NOW),
    )

    body = TransferResponse.model_validate(result).model_dump()

    assert body["transfer"]["from_account_id"] == 2
    assert body["from_account"]["balance"] == 20
    assert body["to_account"]["balance"] == 130
    assert body["from_entry"]["amount"] + body["to_entry"]["amount"] == 0
