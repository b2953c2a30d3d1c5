"""Transfers - the HTTP entry point for atomic money transfers.

Invariants:
    - One request = one SQLStore.transfer call = one database transaction
    - Nothing is retried; store errors map to their http_status via the global handler
"""

from fastapi import APIRouter, Depends, status

from simplebank.core.repository_protocols import Store
from simplebank.infrastructure.database import get_store
from simplebank.schemas.ledger import TransferCreate, TransferResponse

router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])


@router.post(
    "", response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transfer(
    body: TransferCreate, store: Store = Depends(get_store),
):
    """Move money between two accounts."""
    result = await store.transfer(
        body.from_account_id, body.to_account_id, body.amount,
    )
    return TransferResponse.model_validate(result)
