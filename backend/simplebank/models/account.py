"""Account ORM - persists owner, currency and the running balance.

Invariants:
    - balance is never negative (accounts_balance_nonnegative check constraint)
    - balance is only mutated through Queries.add_account_balance / update_account
    - currency is a 3-letter code; transfers never convert between currencies
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from simplebank.db.base import Base
from simplebank.models.types import BigIntPK


class Account(Base):
    """Account entity - one owner's balance in one currency."""
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="accounts_balance_nonnegative"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
