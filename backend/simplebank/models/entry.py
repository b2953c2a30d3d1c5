"""Entry ORM - immutable ledger line recording one signed balance movement.

Invariants:
    - Always belongs to an Account (account_id FK)
    - amount is negative for a debit, positive for a credit
    - Never updated after insert
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from simplebank.db.base import Base
from simplebank.models.types import BigIntPK


class Entry(Base):
    """Entry entity - one debit or credit against one account."""
    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
