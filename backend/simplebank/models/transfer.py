"""Transfer ORM - immutable record of one money movement between two accounts.

Invariants:
    - amount > 0 (transfers_amount_positive check constraint)
    - Paired with exactly two entries written in the same transaction
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from simplebank.db.base import Base
from simplebank.models.types import BigIntPK


class Transfer(Base):
    """Transfer entity - from_account_id pays amount to to_account_id."""
    __tablename__ = "transfers"
    __table_args__ = (
        CheckConstraint("amount > 0", name="transfers_amount_positive"),
        Index("ix_transfers_from_to", "from_account_id", "to_account_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    from_account_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    to_account_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
