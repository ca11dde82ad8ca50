"""ORM Models — SQLAlchemy declarative models for books, authors and their join table.

Invariants:
    - All models inherit from Base (db/base.py)
    - Book and Author are peers; neither owns the other

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from library_api.models.book import Book  # noqa: F401
from library_api.models.author import Author  # noqa: F401
from library_api.models.book_author import books_authors  # noqa: F401
