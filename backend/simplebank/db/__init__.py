"""Database Layer - ORM base, row accessor and the transactional store.

Invariants:
    - All sessions are async (AsyncSession)
    - Account balances change only inside SQLStore.exec_tx
"""
