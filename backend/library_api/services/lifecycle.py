"""Entity Lifecycle — create/read/update/delete orchestration for one entity kind.

Invariants:
    - Every operation is exactly one transaction: commit on success, rollback on any error
    - Create: conflict check -> primary fields -> associations (if supplied) -> hydrated read
    - Update: field overlay, then associations only when the patch is not KEEP
    - Delete: join rows of the entity removed, then the row soft-deleted
    - Errors keep their kind; SQLAlchemy errors become StoreFailureError; nothing retried
    - Ids outside 1..MAX_ENTITY_ID are malformed and never reach the driver

Design Decisions:
    - One controller parameterized by EntityKind instead of a Book and an Author copy:
      the two kinds differ only in their JoinLayout (services/record_store.py)
    - No persistent state: a controller lives for one request/session
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.core.domain_types import (
    MAX_ENTITY_ID, AssociationPatch, EntityKind, is_valid_entity_id,
)
from library_api.core.errors import (
    ErrorContext, LibraryError, MalformedRequestError, StoreFailureError,
)
from library_api.core.repository_protocols import RecordStore
from library_api.services.association_reconciler import AssociationReconciler
from library_api.services.record_store import SqlRecordStore

logger = logging.getLogger(__name__)


def _check_id(entity_id: int, field: str = "id") -> None:
    if not is_valid_entity_id(entity_id):
        raise MalformedRequestError(
            f"Invalid ID format: {entity_id} (must be between 1 and {MAX_ENTITY_ID})",
            field,
        )


class EntityLifecycle:
    """Lifecycle controller for books or authors."""

    def __init__(
        self, db: AsyncSession, kind: EntityKind, store: RecordStore | None = None,
    ):
        self.db = db
        self.kind = kind
        self.store = store or SqlRecordStore(db)
        self.reconciler = AssociationReconciler(self.store)

    async def create(
        self, fields: Mapping[str, Any], patch: AssociationPatch,
    ) -> dict:
        """Persist a new record and its associations; returns the hydrated record."""
        if fields.get("id"):
            _check_id(fields["id"])
        async with self._unit_of_work("create"):
            entity_id = await self.store.create(self.kind, fields)
            await self.reconciler.reconcile(self.kind, entity_id, patch)
            record = await self.store.get(self.kind, entity_id)
        logger.info(
            f"Created {self.kind.value} {entity_id}",
            extra={"entity_kind": self.kind.value, "entity_id": entity_id},
        )
        return record

    async def get(self, entity_id: int) -> dict:
        _check_id(entity_id)
        async with self._unit_of_work("read"):
            return await self.store.get(self.kind, entity_id)

    async def list_all(self) -> list[dict]:
        async with self._unit_of_work("read"):
            return await self.store.list_all(self.kind)

    async def update(
        self, entity_id: int, fields: Mapping[str, Any], patch: AssociationPatch,
    ) -> None:
        """Overlay fields, then replace associations unless the patch is KEEP."""
        _check_id(entity_id)
        async with self._unit_of_work("update"):
            changes = await self.store.update_fields(self.kind, entity_id, fields)
            await self.reconciler.reconcile(self.kind, entity_id, patch)
        logger.info(
            f"Updated {self.kind.value} {entity_id} "
            f"(fields: {sorted(changes) or 'none'}, associations: {patch.mode.value})",
            extra={"entity_kind": self.kind.value, "entity_id": entity_id},
        )

    async def delete(self, entity_id: int) -> None:
        _check_id(entity_id)
        async with self._unit_of_work("delete"):
            detached = await self.store.soft_delete_cascade(self.kind, entity_id)
        logger.info(
            f"Deleted {self.kind.value} {entity_id} ({detached} association(s) removed)",
            extra={"entity_kind": self.kind.value, "entity_id": entity_id},
        )

    @asynccontextmanager
    async def _unit_of_work(self, operation: str) -> AsyncGenerator[None, None]:
        """Commit on success; roll back and classify on failure."""
        try:
            yield
            await self.db.commit()
        except LibraryError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Store failure during {self.kind.value} {operation}: {e}",
                extra={"entity_kind": self.kind.value},
            )
            raise StoreFailureError(
                type(e).__name__, operation,
                ErrorContext(entity_kind=self.kind.value),
            ) from e
