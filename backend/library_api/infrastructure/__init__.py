"""Infrastructure Layer — database engine lifecycle and cross-cutting concerns.

Invariants:
    - Infrastructure holds no book/author business rules
    - Database errors leave this layer as StoreFailureError

Design Decisions:
    - One process-wide session manager, opened and closed by the app lifespan
"""
