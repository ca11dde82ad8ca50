"""Nested Reference Schemas — related records as they appear inside a book or author.

Invariants:
    - Refs are inputs: id optional (bounded by the id column), primary fields optional
    - Summaries are outputs: one level deep, never nest further

Design Decisions:
    - Summaries exclude timestamps and the back-reference list: avoids
      book -> authors -> books recursion in responses
"""

from pydantic import BaseModel, Field

from library_api.core.domain_types import MAX_ENTITY_ID, EntityRef


class AuthorRef(BaseModel):
    """Author named from a book payload."""
    id: int | None = Field(None, le=MAX_ENTITY_ID)
    name: str | None = Field(None, max_length=64)

    def to_ref(self) -> EntityRef:
        return EntityRef(
            id=self.id or None,
            fields=self.model_dump(exclude={"id"}, exclude_none=True),
        )


class BookRef(BaseModel):
    """Book named from an author payload."""
    id: int | None = Field(None, le=MAX_ENTITY_ID)
    title: str | None = Field(None, max_length=64)
    pages: int | None = None

    def to_ref(self) -> EntityRef:
        return EntityRef(
            id=self.id or None,
            fields=self.model_dump(exclude={"id"}, exclude_none=True),
        )


class AuthorSummary(BaseModel):
    id: int
    name: str


class BookSummary(BaseModel):
    id: int
    title: str
    pages: int
