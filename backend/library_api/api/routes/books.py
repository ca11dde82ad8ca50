"""Book Routes — HTTP surface for the book lifecycle.

Invariants:
    - GET /books → 200 list; GET /books/{id} → 200 | 404
    - POST /books → 201 hydrated book
    - PUT /books/{id} → 204 | 404; DELETE /books/{id} → 204 | 500 when missing
    - Non-integer or out-of-range ids and malformed bodies → 400
    - Routes never contain business logic (delegate to EntityLifecycle)

Design Decisions:
    - DELETE of a missing book answers 500, not 404: the override lives in
      api/error_handlers.py so the envelope matches every other error
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.core.domain_types import EntityKind
from library_api.infrastructure.database import get_db
from library_api.schemas.book import BookCreate, BookResponse, BookUpdate
from library_api.services.lifecycle import EntityLifecycle

router = APIRouter(prefix="/books", tags=["books"])


def _books(db: AsyncSession) -> EntityLifecycle:
    return EntityLifecycle(db, EntityKind.BOOK)


@router.get("", response_model=list[BookResponse])
async def list_books(db: AsyncSession = Depends(get_db)):
    """Get all books with their authors."""
    return await _books(db).list_all()


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: int, db: AsyncSession = Depends(get_db)):
    """Get book by ID."""
    return await _books(db).get(book_id)


@router.post(
    "", response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_book(body: BookCreate, db: AsyncSession = Depends(get_db)):
    """Create a new book, optionally linking (or introducing) authors."""
    return await _books(db).create(body.field_values(), body.author_patch())


@router.put("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_book(
    book_id: int, body: BookUpdate, db: AsyncSession = Depends(get_db),
):
    """Overlay book fields; replace authors only when the field is sent."""
    await _books(db).update(book_id, body.field_values(), body.author_patch())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(book_id: int, db: AsyncSession = Depends(get_db)):
    """Detach all authors, then soft-delete the book."""
    await _books(db).delete(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
