"""Author Schemas — request payloads and response shape for /authors.

Invariants:
    - Same tri-state rule as books: books omitted/null -> KEEP, [] -> CLEAR, list -> REPLACE
"""

from datetime import datetime

from pydantic import BaseModel, Field

from library_api.core.domain_types import MAX_ENTITY_ID, AssociationPatch
from library_api.schemas.refs import BookRef, BookSummary


class _AuthorPayload(BaseModel):
    books: list[BookRef] | None = None

    def book_patch(self) -> AssociationPatch:
        if self.books is None:
            return AssociationPatch.keep()
        return AssociationPatch.from_refs(b.to_ref() for b in self.books)


class AuthorCreate(_AuthorPayload):
    """Author creation payload."""
    id: int | None = Field(None, le=MAX_ENTITY_ID)
    name: str = Field("", max_length=64)

    def field_values(self) -> dict:
        return {"id": self.id, "name": self.name}


class AuthorUpdate(_AuthorPayload):
    """Partial author update — empty fields keep their stored values."""
    name: str | None = Field(None, max_length=64)

    def field_values(self) -> dict:
        return {"name": self.name}


class AuthorResponse(BaseModel):
    """Hydrated author."""
    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    books: list[BookSummary] = []
