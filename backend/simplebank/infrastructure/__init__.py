"""Infrastructure Layer - engine lifecycle and cross-cutting concerns.

Invariants:
    - One async engine per process, owned by DatabaseSessionManager
    - Logging configured once, on application startup
"""
