"""Association Reconciler — drives an entity's association set to a desired target.

Invariants:
    - KEEP patch: zero reads, zero writes
    - CLEAR/REPLACE: the persisted set equals the resolved target set afterwards
    - Nested refs carrying fields for an unoccupied id (or no id) are created
      in the caller's transaction before being linked
    - Bare id refs must name a live record; otherwise the store raises
      DanglingReferenceError and the caller's transaction rolls back

Design Decisions:
    - Reconciler resolves refs, store applies the diff: the store never needs to know
      about payload shapes, the reconciler never writes join rows itself
    - A nested ref naming an existing live record links it and ignores its fields
      (related records are not edited through the other side)
"""

import logging

from library_api.core.association_diff import AssociationDiff
from library_api.core.domain_types import AssociationPatch, EntityKind, EntityRef
from library_api.core.repository_protocols import RecordStore

logger = logging.getLogger(__name__)


class AssociationReconciler:
    """Replaces an entity's association set atomically (within the caller's transaction)."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def reconcile(
        self, kind: EntityKind, entity_id: int, patch: AssociationPatch,
    ) -> AssociationDiff | None:
        """Apply `patch` to the associations of (kind, entity_id).

        Returns the applied diff, or None when the patch is KEEP.
        """
        if patch.is_keep:
            return None

        target_ids = await self._resolve_targets(kind.other, patch.refs)
        diff = await self.store.replace_associations(kind, entity_id, target_ids)
        logger.info(
            f"Reconciled {kind.value} {entity_id} associations",
            extra={
                "entity_kind": kind.value,
                "entity_id": entity_id,
                "added": list(diff.to_add),
                "removed": list(diff.to_remove),
            },
        )
        return diff

    async def _resolve_targets(
        self, target_kind: EntityKind, refs: tuple[EntityRef, ...],
    ) -> list[int]:
        """Map nested refs to target ids, creating records the payload introduces."""
        referenced = {r.id for r in refs if r.id is not None}
        live = await self.store.live_ids(target_kind, referenced)
        occupied = await self.store.occupied_ids(target_kind, referenced)

        target_ids: list[int] = []
        for ref in refs:
            if ref.id is not None and (ref.id in live or ref.is_bare or ref.id in occupied):
                # Live ids link as-is; dead or unknown bare ids are left for the
                # store to reject as dangling.
                target_ids.append(ref.id)
                continue
            new_id = await self.store.create(target_kind, {"id": ref.id, **ref.fields})
            live.add(new_id)
            occupied.add(new_id)
            target_ids.append(new_id)
        return target_ids
