"""Books HTTP router — books, progress, status and notes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.auth import verify_api_key
from app.reading.books import BookRepository
from app.reading.engine import GoalsEngine
from app.reading.models import Book, BookCreate, BookStatusUpdate, NoteWrite, ProgressUpdate
from app.reading.router import get_engine, publish_progress

router = APIRouter(prefix="/books", tags=["books"])


def get_books(engine: GoalsEngine = Depends(get_engine)) -> BookRepository:
    return BookRepository(engine.goals.store, engine)


@router.get("", response_model=list[Book])
async def books_list(
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> list[Book]:
    return await books.list_books()


@router.post("", response_model=Book, status_code=201)
async def book_create(
    body: BookCreate,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> Book:
    return await books.add_book(body)


@router.get("/{book_id}", response_model=Book)
async def book_detail(
    book_id: str,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> Book:
    book = await books.get_book(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail=f"Book not found: {book_id}")
    return book


@router.delete("/{book_id}", status_code=204)
async def book_delete(
    book_id: str,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> None:
    await books.delete_book(book_id)


@router.put("/{book_id}/progress", response_model=Book)
async def book_progress(
    book_id: str,
    body: ProgressUpdate,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> Book:
    book = await books.update_progress(book_id, body.current_page)
    await publish_progress(books.engine)
    return book


@router.put("/{book_id}/status", response_model=Book)
async def book_status(
    book_id: str,
    body: BookStatusUpdate,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> Book:
    return await books.update_status(book_id, body.status)


@router.post("/{book_id}/notes", response_model=Book, status_code=201)
async def note_create(
    book_id: str,
    body: NoteWrite,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> Book:
    return await books.add_note(book_id, body.content)


@router.put("/{book_id}/notes/{note_id}", response_model=Book)
async def note_update(
    book_id: str,
    note_id: str,
    body: NoteWrite,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> Book:
    return await books.edit_note(book_id, note_id, body.content)


@router.delete("/{book_id}/notes/{note_id}", response_model=Book)
async def note_delete(
    book_id: str,
    note_id: str,
    books: BookRepository = Depends(get_books),
    _: str = Depends(verify_api_key),
) -> Book:
    return await books.delete_note(book_id, note_id)
