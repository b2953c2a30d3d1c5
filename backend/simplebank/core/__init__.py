"""Core Layer - ledger types, error hierarchy and boundary protocols.

Invariants:
    - No module in core/ imports from db/, api/, infrastructure/ or models/
    - Nothing in core/ performs IO
"""
