"""ORM Models - SQLAlchemy declarative models for the ledger tables.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per table
    - All models imported here so Base.metadata knows every table before
      create_all() or an alembic autogenerate runs
"""

from simplebank.models.account import Account  # noqa: F401
from simplebank.models.entry import Entry  # noqa: F401
from simplebank.models.transfer import Transfer  # noqa: F401
