"""Record Store — SQLAlchemy implementation of the RecordStore protocol.

Invariants:
    - Never commits: every write is flushed into the caller's transaction
    - Reads treat soft-deleted rows as absent (deleted_at IS NULL filter everywhere)
    - Association pairs are only written toward live targets (DanglingReferenceError otherwise)
    - Targets are locked (SELECT ... FOR UPDATE) while their join rows are written
    - Soft delete hard-deletes the entity's join rows before stamping deleted_at
    - Hydrated related lists are ordered by id; top-level lists by id (insertion order)

Design Decisions:
    - Explicit JoinLayout per kind over reflection on relationships: the join table,
      own column and far column are spelled out once and shared by every query
    - Core insert/delete on books_authors instead of ORM collections: the diff is
      applied row by row, no identity-mapped collection to go stale
    - Explicit ids on PostgreSQL advance the serial sequence so later generated ids
      never collide with client-supplied ones
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from sqlalchemy import Column, Select, delete, insert, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.core.association_diff import (
    AssociationDiff, compute_association_diff, find_missing_ids,
)
from library_api.core.domain_types import EntityKind
from library_api.core.errors import (
    DanglingReferenceError, IdentifierConflictError, RecordNotFoundError,
)
from library_api.core.field_overlay import changed_fields, select_overlay
from library_api.models.author import Author
from library_api.models.book import Book
from library_api.models.book_author import books_authors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinLayout:
    """How one entity kind sits in the books_authors relation."""
    model: type
    own_column: Column
    other_column: Column
    fields: tuple[str, ...]
    related_key: str


LAYOUTS: dict[EntityKind, JoinLayout] = {
    EntityKind.BOOK: JoinLayout(
        model=Book,
        own_column=books_authors.c.book_id,
        other_column=books_authors.c.author_id,
        fields=("title", "pages"),
        related_key="authors",
    ),
    EntityKind.AUTHOR: JoinLayout(
        model=Author,
        own_column=books_authors.c.author_id,
        other_column=books_authors.c.book_id,
        fields=("name",),
        related_key="books",
    ),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def live_ids_statement(kind: EntityKind, ids: set[int], lock: bool = False) -> Select:
    """SELECT the ids among `ids` that name live rows, optionally FOR UPDATE."""
    model = LAYOUTS[kind].model
    stmt = select(model.id).where(model.id.in_(ids), model.deleted_at.is_(None))
    return stmt.with_for_update() if lock else stmt


class SqlRecordStore:
    """Book/author persistence over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Entity rows ────────────────────────────────────────────

    async def create(self, kind: EntityKind, record: Mapping[str, Any]) -> int:
        """Insert a row; a supplied id must not be occupied (live or soft-deleted)."""
        layout = LAYOUTS[kind]
        entity_id = record.get("id") or None
        if entity_id is not None and await self.occupied_ids(kind, [entity_id]):
            raise IdentifierConflictError(kind.value, entity_id)

        values = {
            f: record[f] for f in layout.fields if record.get(f) is not None
        }
        row = layout.model(**values)
        if entity_id is not None:
            row.id = entity_id
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as e:
            if entity_id is None:
                raise
            raise IdentifierConflictError(kind.value, entity_id) from e

        if entity_id is not None:
            await self._advance_id_sequence(layout)
        return row.id

    async def get(self, kind: EntityKind, entity_id: int) -> dict:
        """Live record with its related list, or RecordNotFoundError."""
        row = await self._live_row(kind, entity_id)
        related = await self._related_summaries(kind, [row.id])
        return self._to_record(kind, row, related.get(row.id, []))

    async def list_all(self, kind: EntityKind) -> list[dict]:
        layout = LAYOUTS[kind]
        result = await self.db.execute(
            select(layout.model)
            .where(layout.model.deleted_at.is_(None))
            .order_by(layout.model.id)
        )
        rows = result.scalars().all()
        if not rows:
            return []
        related = await self._related_summaries(kind, [r.id for r in rows])
        return [self._to_record(kind, r, related.get(r.id, [])) for r in rows]

    async def update_fields(
        self, kind: EntityKind, entity_id: int, partial: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Overlay the non-empty fields of `partial`; returns what changed."""
        layout = LAYOUTS[kind]
        row = await self._live_row(kind, entity_id)
        overlay = select_overlay(partial, layout.fields)
        stored = {f: getattr(row, f) for f in layout.fields}
        changes = changed_fields(stored, overlay)
        for key, value in overlay.items():
            setattr(row, key, value)
        row.updated_at = _now()
        await self.db.flush()
        return changes

    async def soft_delete_cascade(self, kind: EntityKind, entity_id: int) -> int:
        """Drop every join row naming the entity, then stamp deleted_at.

        Returns the number of join rows removed.
        """
        layout = LAYOUTS[kind]
        row = await self._live_row(kind, entity_id)
        result = await self.db.execute(
            delete(books_authors).where(layout.own_column == entity_id),
        )
        row.deleted_at = _now()
        await self.db.flush()
        detached = result.rowcount or 0
        logger.debug(
            f"Soft-deleted {kind.value} {entity_id}, detached {detached} association(s)",
        )
        return detached

    # ─── Associations ───────────────────────────────────────────

    async def association_ids(self, kind: EntityKind, entity_id: int) -> set[int]:
        layout = LAYOUTS[kind]
        result = await self.db.execute(
            select(layout.other_column).where(layout.own_column == entity_id),
        )
        return set(result.scalars().all())

    async def live_ids(self, kind: EntityKind, ids: Iterable[int]) -> set[int]:
        ids = set(ids)
        if not ids:
            return set()
        result = await self.db.execute(live_ids_statement(kind, ids))
        return set(result.scalars().all())

    async def occupied_ids(self, kind: EntityKind, ids: Iterable[int]) -> set[int]:
        """Ids held by any row, soft-deleted ones included."""
        ids = set(ids)
        if not ids:
            return set()
        model = LAYOUTS[kind].model
        result = await self.db.execute(select(model.id).where(model.id.in_(ids)))
        return set(result.scalars().all())

    async def replace_associations(
        self, kind: EntityKind, entity_id: int, target_ids: Iterable[int],
    ) -> AssociationDiff:
        """Make the entity's association set equal to target_ids, by diff."""
        layout = LAYOUTS[kind]
        targets = set(target_ids)
        missing = find_missing_ids(
            targets, await self._lock_live_ids(kind.other, targets),
        )
        if missing:
            raise DanglingReferenceError(kind.other.value, missing)

        diff = compute_association_diff(
            await self.association_ids(kind, entity_id), targets,
        )
        if diff.to_remove:
            await self.db.execute(
                delete(books_authors).where(
                    layout.own_column == entity_id,
                    layout.other_column.in_(diff.to_remove),
                ),
            )
        if diff.to_add:
            await self.db.execute(
                insert(books_authors),
                [
                    {
                        layout.own_column.name: entity_id,
                        layout.other_column.name: other_id,
                    }
                    for other_id in diff.to_add
                ],
            )
        return diff

    # ─── Helpers ────────────────────────────────────────────────

    async def _lock_live_ids(self, kind: EntityKind, ids: set[int]) -> set[int]:
        """live_ids, holding row locks on the targets until the transaction ends.

        A concurrent soft delete of a target then waits for this commit instead
        of landing between the check and the join-row insert. SQLite has no
        row locks; its single writer serializes the two transactions instead.
        """
        if not ids:
            return set()
        result = await self.db.execute(live_ids_statement(kind, ids, lock=True))
        return set(result.scalars().all())

    async def _live_row(self, kind: EntityKind, entity_id: int):
        model = LAYOUTS[kind].model
        result = await self.db.execute(
            select(model).where(model.id == entity_id, model.deleted_at.is_(None)),
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise RecordNotFoundError(kind.value, entity_id)
        return row

    async def _related_summaries(
        self, kind: EntityKind, ids: list[int],
    ) -> dict[int, list[dict]]:
        """Live related records for each of `ids`, keyed by owner id."""
        layout = LAYOUTS[kind]
        other = LAYOUTS[kind.other]
        columns = [other.model.id] + [getattr(other.model, f) for f in other.fields]
        result = await self.db.execute(
            select(layout.own_column, *columns)
            .select_from(books_authors)
            .join(other.model, other.model.id == layout.other_column)
            .where(
                layout.own_column.in_(ids),
                other.model.deleted_at.is_(None),
            )
            .order_by(layout.own_column, other.model.id)
        )
        related: dict[int, list[dict]] = {}
        for owner_id, other_id, *values in result.all():
            summary = {"id": other_id, **dict(zip(other.fields, values))}
            related.setdefault(owner_id, []).append(summary)
        return related

    @staticmethod
    def _to_record(kind: EntityKind, row, related: list[dict]) -> dict:
        layout = LAYOUTS[kind]
        record = {"id": row.id}
        record.update({f: getattr(row, f) for f in layout.fields})
        record["created_at"] = row.created_at
        record["updated_at"] = row.updated_at
        record[layout.related_key] = related
        return record

    async def _advance_id_sequence(self, layout: JoinLayout) -> None:
        """Keep a PostgreSQL serial ahead of explicitly inserted ids."""
        if self.db.get_bind().dialect.name != "postgresql":
            return
        table = layout.model.__tablename__
        await self.db.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"(SELECT MAX(id) FROM {table}))"
            ),
        )
