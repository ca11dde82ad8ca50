"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services own IO (AsyncSession); core/ stays pure
    - Only EntityLifecycle commits or rolls back

Design Decisions:
    - Store, reconciler and lifecycle in separate files: each is one responsibility
"""
