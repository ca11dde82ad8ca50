"""books_authors — many-to-many join relation between books and authors.

Invariants:
    - Composite primary key (book_id, author_id): each pair at most once
    - Both columns are FKs with ON DELETE CASCADE (store-level backstop)
    - Rows are hard-deleted, never soft-deleted

Design Decisions:
    - Plain Table over an ORM class: rows carry no data beyond the pair, and the
      store writes them with Core insert/delete statements
    - One index per side: cascade deletes and hydration filter by either column
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, Table

from library_api.db.base import Base


books_authors = Table(
    "books_authors",
    Base.metadata,
    Column(
        "book_id", Integer,
        ForeignKey("books.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "author_id", Integer,
        ForeignKey("authors.id", ondelete="CASCADE"), primary_key=True,
    ),
    Index("ix_books_authors_author_id", "author_id"),
)
