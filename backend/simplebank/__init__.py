"""SimpleBank Ledger Package - accounts, entries and atomic transfers.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
