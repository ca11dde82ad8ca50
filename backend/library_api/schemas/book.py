"""Book Schemas — request payloads and response shape for /books.

Invariants:
    - BookCreate.id is optional; 0 or missing means "generate"
    - authors omitted or null -> associations untouched (KEEP)
    - authors == [] -> associations cleared; non-empty list -> replaced
    - BookUpdate carries no id: the path identifies the target
"""

from datetime import datetime

from pydantic import BaseModel, Field

from library_api.core.domain_types import MAX_ENTITY_ID, AssociationPatch
from library_api.schemas.refs import AuthorRef, AuthorSummary


class _BookPayload(BaseModel):
    authors: list[AuthorRef] | None = None

    def author_patch(self) -> AssociationPatch:
        if self.authors is None:
            return AssociationPatch.keep()
        return AssociationPatch.from_refs(a.to_ref() for a in self.authors)


class BookCreate(_BookPayload):
    """Book creation payload."""
    id: int | None = Field(None, le=MAX_ENTITY_ID)
    title: str = Field("", max_length=64)
    pages: int = 0

    def field_values(self) -> dict:
        return {"id": self.id, "title": self.title, "pages": self.pages}


class BookUpdate(_BookPayload):
    """Partial book update — empty fields keep their stored values."""
    title: str | None = Field(None, max_length=64)
    pages: int | None = None

    def field_values(self) -> dict:
        return {"title": self.title, "pages": self.pages}


class BookResponse(BaseModel):
    """Hydrated book."""
    id: int
    title: str
    pages: int
    created_at: datetime
    updated_at: datetime
    authors: list[AuthorSummary] = []
