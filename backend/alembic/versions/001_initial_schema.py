"""Initial schema — books, authors, books_authors.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

books_authors carries ON DELETE CASCADE on both sides as a backstop; the
application removes join rows itself when it soft-deletes an entity.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(64), nullable=False, server_default=""),
        sa.Column("pages", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_books_deleted_at", "books", ["deleted_at"])

    op.create_table(
        "authors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(64), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_authors_deleted_at", "authors", ["deleted_at"])

    op.create_table(
        "books_authors",
        sa.Column("book_id", sa.Integer, nullable=False),
        sa.Column("author_id", sa.Integer, nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["authors.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("book_id", "author_id"),
    )
    op.create_index("ix_books_authors_author_id", "books_authors", ["author_id"])


def downgrade() -> None:
    op.drop_index("ix_books_authors_author_id", table_name="books_authors")
    op.drop_table("books_authors")
    op.drop_index("ix_authors_deleted_at", table_name="authors")
    op.drop_table("authors")
    op.drop_index("ix_books_deleted_at", table_name="books")
    op.drop_table("books")
