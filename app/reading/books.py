"""Book repository — books, status and notes over the ``readmate_books`` record.

Progress updates are the one path into the goals engine: the page delta is
fanned out to the active goals before the book itself is written.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from app.config import settings
from app.reading import features
from app.reading.engine import GoalsEngine, mutation_lock
from app.reading.errors import BookNotFound, NoteNotFound
from app.reading.models import Book, BookCreate, BookStatus, Note
from app.reading.store import RecordStore, load_list

logger = logging.getLogger(__name__)


class BookRepository:
    def __init__(self, store: RecordStore, engine: GoalsEngine | None = None, books_key: str | None = None):
        self.store = store
        self.engine = engine or GoalsEngine(store)
        self.books_key = books_key or settings.books_record_key

    async def list_books(self) -> list[Book]:
        return [Book.model_validate(b) for b in await load_list(self.store, self.books_key)]

    async def _save(self, books: list[Book]) -> None:
        await self.store.set(self.books_key, [b.to_record() for b in books])

    async def get_book(self, book_id: str) -> Book | None:
        return next((b for b in await self.list_books() if b.id == book_id), None)

    async def _load_with(self, book_id: str) -> tuple[list[Book], Book]:
        books = await self.list_books()
        book = next((b for b in books if b.id == book_id), None)
        if book is None:
            raise BookNotFound(book_id)
        return books, book

    async def add_book(self, data: BookCreate) -> Book:
        async with mutation_lock():
            books = await self.list_books()
            book = Book(**data.model_dump())
            await self._save([book, *books])
        logger.info("Added book %s (%s)", book.id, book.title)
        return book

    async def delete_book(self, book_id: str) -> None:
        async with mutation_lock():
            books, book = await self._load_with(book_id)
            await self._save([b for b in books if b.id != book.id])
        logger.info("Deleted book %s", book_id)

    async def update_progress(self, book_id: str, current_page: Any, today: date | None = None) -> Book:
        """Set the current page (coerced, clamped to [0, totalPages]).

        The goals engine sees (previous, clamped) before the book is persisted;
        if the engine fails the book keeps its old page.
        """
        async with mutation_lock():
            books, book = await self._load_with(book_id)
            previous = book.current_page
            book.current_page = features.clamp_page(current_page, book.total_pages)

            await self.engine.record_page_change_unlocked(previous, book.current_page, today)
            await self._save(books)

        logger.info("Book %s progress %d -> %d", book_id, previous, book.current_page)
        return book

    async def update_status(self, book_id: str, status: BookStatus) -> Book:
        async with mutation_lock():
            books, book = await self._load_with(book_id)
            book.status = status
            await self._save(books)
        logger.info("Book %s status set to %s", book_id, status.value)
        return book

    # -- notes --------------------------------------------------------------

    async def add_note(self, book_id: str, content: str) -> Book:
        async with mutation_lock():
            books, book = await self._load_with(book_id)
            book.notes.append(Note(content=content.strip()))
            await self._save(books)
        return book

    async def edit_note(self, book_id: str, note_id: str, content: str) -> Book:
        async with mutation_lock():
            books, book = await self._load_with(book_id)
            note = next((n for n in book.notes if n.id == note_id), None)
            if note is None:
                raise NoteNotFound(note_id)
            note.content = content.strip()
            note.updated_at = datetime.now(timezone.utc)
            await self._save(books)
        return book

    async def delete_note(self, book_id: str, note_id: str) -> Book:
        async with mutation_lock():
            books, book = await self._load_with(book_id)
            if not any(n.id == note_id for n in book.notes):
                raise NoteNotFound(note_id)
            book.notes = [n for n in book.notes if n.id != note_id]
            await self._save(books)
        return book
