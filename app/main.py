import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import settings
from app.db import init_store
from app.reading.books_router import router as books_router
from app.reading.errors import NotFoundError
from app.reading.router import router as goals_router

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_store()
    yield


app = FastAPI(title="ReadMate", version="0.1.0", lifespan=lifespan)
app.include_router(books_router)
app.include_router(goals_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "reading": {
            "books": "/books",
            "book_detail": "/books/{id}",
            "book_progress": "/books/{id}/progress",
            "book_status": "/books/{id}/status",
            "book_notes": "/books/{id}/notes",
            "goals": "/goals",
            "goals_active": "/goals/active",
            "goals_progress": "/goals/progress",
            "goals_progress_stream": "/goals/progress/stream",
            "goal_detail": "/goals/{id}",
            "goal_ledger": "/goals/{id}/ledger",
            "goal_status": "/goals/{id}/status",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
