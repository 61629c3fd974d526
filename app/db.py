from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.reading.store import RecordStore, SqlRecordStore

_raw_url = settings.database_url

if _raw_url.startswith("postgres://"):
    _raw_url = _raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
elif _raw_url.startswith("postgresql://"):
    _raw_url = _raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
elif _raw_url.startswith("sqlite://"):
    _raw_url = _raw_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

engine = create_async_engine(_raw_url, pool_pre_ping=True)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

CREATE_RECORDS_TABLE = (
    "CREATE TABLE IF NOT EXISTS reading_records ("
    "record_key VARCHAR(128) PRIMARY KEY, "
    "payload TEXT NOT NULL)"
)


async def init_store(bind: AsyncEngine = engine) -> None:
    """Create the records table if it is missing."""
    async with bind.begin() as conn:
        await conn.execute(text(CREATE_RECORDS_TABLE))


@asynccontextmanager
async def open_store() -> AsyncIterator[RecordStore]:
    """A store on its own session, closed when the block exits."""
    async with async_session() as session:
        yield SqlRecordStore(session)


async def get_store() -> RecordStore:  # type: ignore[misc]
    async with open_store() as store:
        yield store


def get_store_opener() -> Callable[[], AbstractAsyncContextManager[RecordStore]]:
    """For endpoints that must not hold a session for their whole response."""
    return open_store
