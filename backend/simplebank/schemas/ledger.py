"""Ledger Schemas - Pydantic models for accounts, entries and transfers.

Invariants:
    - TransferCreate: positive ids, positive amount, distinct accounts
    - AccountCreate.currency: three upper-case letters
    - Response models read straight from the frozen row snapshots (from_attributes)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class AccountCreate(BaseModel):
    """Account creation - owner and currency, optional opening balance."""
    owner: str = Field(min_length=1, max_length=255)
    currency: str = Field(pattern=r"^[A-Z]{3}$")
    balance: int = Field(0, ge=0)

    @field_validator("owner")
    @classmethod
    def strip_owner(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("owner cannot be empty or whitespace")
        return v


class TransferCreate(BaseModel):
    """Transfer request - money moves from from_account_id to to_account_id."""
    from_account_id: int = Field(gt=0)
    to_account_id: int = Field(gt=0)
    amount: int = Field(gt=0)

    @model_validator(mode="after")
    def check_distinct_accounts(self) -> "TransferCreate":
        if self.from_account_id == self.to_account_id:
            raise ValueError("from_account_id and to_account_id must differ")
        return self


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner: str
    balance: int
    currency: str
    created_at: datetime


class EntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    amount: int
    created_at: datetime


class TransferRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    from_account_id: int
    to_account_id: int
    amount: int
    created_at: datetime


class TransferResponse(BaseModel):
    """Everything one transfer wrote, source side first."""
    model_config = ConfigDict(from_attributes=True)

    transfer: TransferRecordResponse
    from_account: AccountResponse
    to_account: AccountResponse
    from_entry: EntryResponse
    to_entry: EntryResponse
