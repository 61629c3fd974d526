"""Shared fixtures for the test suite."""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from app.db import get_store, get_store_opener
from app.main import app
from app.reading.books import BookRepository
from app.reading.engine import GoalsEngine
from app.reading.store import MemoryStore


# ---------------------------------------------------------------------------
# In-memory store (no database needed)
# ---------------------------------------------------------------------------

@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def engine(store):
    return GoalsEngine(store, "UTC")


@pytest.fixture()
def books(store, engine):
    return BookRepository(store, engine)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

class CountingOpener:
    """Store opener that records how many stores are currently open."""

    def __init__(self, store: MemoryStore):
        self.store = store
        self.opened = 0
        self.open = 0

    @asynccontextmanager
    async def __call__(self):
        self.opened += 1
        self.open += 1
        try:
            yield self.store
        finally:
            self.open -= 1


@pytest.fixture()
def store_opener(store):
    return CountingOpener(store)


@pytest.fixture()
def override_store(store, store_opener):
    """Override the FastAPI dependencies so every request shares the MemoryStore."""
    async def _override():
        yield store

    app.dependency_overrides[get_store] = _override
    app.dependency_overrides[get_store_opener] = lambda: store_opener
    yield store
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_store):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
