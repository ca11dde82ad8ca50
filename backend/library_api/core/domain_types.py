"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Entity ids are positive and fit the 32-bit INTEGER id column (1..MAX_ENTITY_ID)
    - EntityKind is the only way to name a record kind (no raw string matching)
    - AssociationPatch has exactly three modes: KEEP, CLEAR, REPLACE
    - KEEP never carries refs; CLEAR always has zero refs; REPLACE always has at least one

Design Decisions:
    - Tri-state patch instead of Optional[list]: "field omitted" and "clear all"
      must never collapse into the same value
    - EntityRef keeps nested payload fields as a plain mapping: core does not
      know column names, the store does
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


# ─── Identity ────────────────────────────────────────────────────

# Upper bound of the INTEGER id columns (books.id, authors.id)
MAX_ENTITY_ID = 2**31 - 1


def is_valid_entity_id(value: int) -> bool:
    """True when `value` can name a books or authors row."""
    return 1 <= value <= MAX_ENTITY_ID


# ─── Enums ───────────────────────────────────────────────────────

class EntityKind(str, Enum):
    """The two first-class record kinds."""
    BOOK = "book"
    AUTHOR = "author"

    @property
    def other(self) -> "EntityKind":
        """Kind on the far side of the join relation."""
        return EntityKind.AUTHOR if self is EntityKind.BOOK else EntityKind.BOOK


class PatchMode(str, Enum):
    """What an update wants done with an association set."""
    KEEP = "keep"
    CLEAR = "clear"
    REPLACE = "replace"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class EntityRef:
    """Nested reference to a related record, as bound from a payload.

    id=None means "new record"; fields holds whatever primary fields came with it.
    """
    id: int | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_bare(self) -> bool:
        """True when the reference names an id and nothing else."""
        return self.id is not None and not any(
            v not in (None, "", 0) for v in self.fields.values()
        )


@dataclass(frozen=True)
class AssociationPatch:
    """Tri-state association field of a create/update payload."""
    mode: PatchMode
    refs: tuple[EntityRef, ...] = ()

    @classmethod
    def keep(cls) -> "AssociationPatch":
        return cls(PatchMode.KEEP)

    @classmethod
    def from_refs(cls, refs) -> "AssociationPatch":
        refs = tuple(refs)
        if not refs:
            return cls(PatchMode.CLEAR)
        return cls(PatchMode.REPLACE, refs)

    @property
    def is_keep(self) -> bool:
        return self.mode is PatchMode.KEEP
