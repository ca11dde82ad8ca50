"""Book ORM — persists a book row.

Invariants:
    - id is a server-generated integer, monotonic (AUTOINCREMENT on SQLite)
    - deleted_at NULL means live; any timestamp means soft-deleted
    - created_at/updated_at are always set (timezone-aware UTC)

Design Decisions:
    - No ORM relationship to Author: associations are written through the
      books_authors table directly, so an identity-mapped collection would go stale
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from library_api.db.base import Base


class Book(Base):
    """Book entity."""
    __tablename__ = "books"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    pages: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True,
    )
