"""Accounts - create, fetch and list ledger accounts.

Invariants:
    - Balances are never written here except the opening balance on create
    - Missing accounts surface as ResourceNotFoundError (404 via the global handler)
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from simplebank.core.repository_protocols import Store
from simplebank.infrastructure.database import get_store
from simplebank.schemas.ledger import AccountCreate, AccountResponse, EntryResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/accounts", tags=["accounts"])


@router.post(
    "", response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_account(
    body: AccountCreate, store: Store = Depends(get_store),
):
    """Open a new account."""
    account = await store.create_account(body.owner, body.balance, body.currency)
    logger.info(
        f"Account {account.id} created", extra={"account_id": account.id},
    )
    return AccountResponse.model_validate(account)


@router.get("", response_model=list[AccountResponse])
async def list_accounts(
    owner: str | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: Store = Depends(get_store),
):
    """List accounts with pagination, optionally for one owner."""
    accounts = await store.list_accounts(owner=owner, limit=limit, offset=offset)
    return [AccountResponse.model_validate(a) for a in accounts]


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int, store: Store = Depends(get_store),
):
    """Get account details."""
    return AccountResponse.model_validate(await store.get_account(account_id))


@router.get("/{account_id}/entries", response_model=list[EntryResponse])
async def list_entries(
    account_id: int,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: Store = Depends(get_store),
):
    """List an account's ledger entries, oldest first."""
    await store.get_account(account_id)
    entries = await store.list_entries(account_id, limit=limit, offset=offset)
    return [EntryResponse.model_validate(e) for e in entries]
