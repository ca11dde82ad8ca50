"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Store methods never commit: the caller owns the transaction boundary

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Records cross the boundary as dicts, hydrated with the related-entity list
      under "authors" (books) or "books" (authors)
"""

from typing import Any, Iterable, Mapping, Protocol

from library_api.core.association_diff import AssociationDiff
from library_api.core.domain_types import EntityKind


class RecordStore(Protocol):
    """Contract for book/author persistence — implemented by shell."""
    async def create(self, kind: EntityKind, record: Mapping[str, Any]) -> int: ...
    async def get(self, kind: EntityKind, entity_id: int) -> dict: ...
    async def list_all(self, kind: EntityKind) -> list[dict]: ...
    async def update_fields(
        self, kind: EntityKind, entity_id: int, partial: Mapping[str, Any],
    ) -> dict[str, Any]: ...
    async def association_ids(self, kind: EntityKind, entity_id: int) -> set[int]: ...
    async def live_ids(self, kind: EntityKind, ids: Iterable[int]) -> set[int]: ...
    async def occupied_ids(self, kind: EntityKind, ids: Iterable[int]) -> set[int]: ...
    async def replace_associations(
        self, kind: EntityKind, entity_id: int, target_ids: Iterable[int],
    ) -> AssociationDiff: ...
    async def soft_delete_cascade(self, kind: EntityKind, entity_id: int) -> int: ...
