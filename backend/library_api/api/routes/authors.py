"""Author Routes — HTTP surface for the author lifecycle.

Invariants:
    - GET /authors → 200 list; GET /authors/{id} → 200 | 404
    - POST /authors → 201 hydrated author
    - PUT /authors/{id} → 204 | 404; DELETE /authors/{id} → 204 | 500 when missing
    - Non-integer or out-of-range ids and malformed bodies → 400
    - Routes never contain business logic (delegate to EntityLifecycle)

Design Decisions:
    - DELETE of a missing author answers 500, not 404: the override lives in
      api/error_handlers.py so the envelope matches every other error
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.core.domain_types import EntityKind
from library_api.infrastructure.database import get_db
from library_api.schemas.author import AuthorCreate, AuthorResponse, AuthorUpdate
from library_api.services.lifecycle import EntityLifecycle

router = APIRouter(prefix="/authors", tags=["authors"])


def _authors(db: AsyncSession) -> EntityLifecycle:
    return EntityLifecycle(db, EntityKind.AUTHOR)


@router.get("", response_model=list[AuthorResponse])
async def list_authors(db: AsyncSession = Depends(get_db)):
    """Get all authors with their books."""
    return await _authors(db).list_all()


@router.get("/{author_id}", response_model=AuthorResponse)
async def get_author(author_id: int, db: AsyncSession = Depends(get_db)):
    """Get author by ID."""
    return await _authors(db).get(author_id)


@router.post(
    "", response_model=AuthorResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_author(body: AuthorCreate, db: AsyncSession = Depends(get_db)):
    """Create a new author, optionally linking (or introducing) books."""
    return await _authors(db).create(body.field_values(), body.book_patch())


@router.put("/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_author(
    author_id: int, body: AuthorUpdate, db: AsyncSession = Depends(get_db),
):
    """Overlay author fields; replace books only when the field is sent."""
    await _authors(db).update(author_id, body.field_values(), body.book_patch())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_author(author_id: int, db: AsyncSession = Depends(get_db)):
    """Detach all books, then soft-delete the author."""
    await _authors(db).delete(author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
