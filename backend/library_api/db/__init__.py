"""Database Metadata — declarative Base shared by models, alembic and schema bootstrap.

Invariants:
    - One metadata object per process

Design Decisions:
    - Engine/session lifecycle lives in infrastructure/database.py, not here
"""
