"""Goals HTTP router — goals, progress summaries and the progress stream."""

from __future__ import annotations

import asyncio
from contextlib import AbstractAsyncContextManager
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from app.auth import verify_api_key
from app.config import settings
from app.db import get_store, get_store_opener
from app.reading.engine import GoalsEngine
from app.reading.events import progress_notifier
from app.reading.models import (
    GoalCreate,
    GoalProgress,
    GoalStatusUpdate,
    GoalSummary,
    ProgressSnapshot,
    ReadingGoal,
)
from app.reading.store import RecordStore

router = APIRouter(prefix="/goals", tags=["goals"])

STREAM_KEEPALIVE_SECONDS = 15.0
STREAM_QUEUE_SIZE = 8

StoreOpener = Callable[[], AbstractAsyncContextManager[RecordStore]]


def offer_latest(queue: asyncio.Queue[ProgressSnapshot], snapshot: ProgressSnapshot) -> None:
    """Enqueue without blocking; a full queue drops its oldest snapshot."""
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(snapshot)


def get_engine(store: RecordStore = Depends(get_store)) -> GoalsEngine:
    return GoalsEngine(store, settings.default_tz)


async def publish_progress(engine: GoalsEngine) -> None:
    """Push the active goals' progress to stream subscribers, if any."""
    if progress_notifier.subscriber_count == 0:
        return
    progress_notifier.publish(ProgressSnapshot(goals=await engine.active_summaries()))


def _sse(snapshot: ProgressSnapshot) -> str:
    return f"event: progress\ndata: {snapshot.model_dump_json(by_alias=True)}\n\n"


# ---------------------------------------------------------------------------
# /goals
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ReadingGoal])
async def goals_list(
    engine: GoalsEngine = Depends(get_engine),
    _: str = Depends(verify_api_key),
) -> list[ReadingGoal]:
    return await engine.goals.list_goals()


@router.post("", response_model=ReadingGoal, status_code=201)
async def goal_create(
    body: GoalCreate,
    engine: GoalsEngine = Depends(get_engine),
    _: str = Depends(verify_api_key),
) -> ReadingGoal:
    goal = await engine.create_goal(body.type, body.pages_per_period)
    await publish_progress(engine)
    return goal


@router.get("/active", response_model=GoalSummary)
async def goal_active(
    engine: GoalsEngine = Depends(get_engine),
    _: str = Depends(verify_api_key),
) -> GoalSummary:
    goal = await engine.goals.get_active_goal()
    if goal is None:
        raise HTTPException(status_code=404, detail="No active goal")
    return await engine.summarize(goal)


@router.get("/progress", response_model=list[GoalSummary])
async def goals_progress(
    engine: GoalsEngine = Depends(get_engine),
    _: str = Depends(verify_api_key),
) -> list[GoalSummary]:
    return await engine.active_summaries()


@router.get("/progress/stream")
async def goals_progress_stream(
    request: Request,
    open_store: StoreOpener = Depends(get_store_opener),
    _: str = Depends(verify_api_key),
) -> StreamingResponse:
    """Server-sent events: one snapshot now, then one per progress change.

    The store is only open while the first snapshot is read; later snapshots
    come from the notifier.
    """
    async with open_store() as store:
        initial = ProgressSnapshot(goals=await GoalsEngine(store, settings.default_tz).active_summaries())

    queue: asyncio.Queue[ProgressSnapshot] = asyncio.Queue(maxsize=STREAM_QUEUE_SIZE)
    unsubscribe = progress_notifier.subscribe(lambda snapshot: offer_latest(queue, snapshot))

    async def _events():
        try:
            yield _sse(initial)
            while not await request.is_disconnected():
                try:
                    snapshot = await asyncio.wait_for(queue.get(), timeout=STREAM_KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield _sse(snapshot)
        finally:
            unsubscribe()

    return StreamingResponse(_events(), media_type="text/event-stream")


# ---------------------------------------------------------------------------
# /goals/{goal_id}
# ---------------------------------------------------------------------------


@router.get("/{goal_id}", response_model=GoalSummary)
async def goal_detail(
    goal_id: str,
    engine: GoalsEngine = Depends(get_engine),
    _: str = Depends(verify_api_key),
) -> GoalSummary:
    return await engine.goal_summary(goal_id)


@router.get("/{goal_id}/ledger", response_model=GoalProgress)
async def goal_ledger(
    goal_id: str,
    engine: GoalsEngine = Depends(get_engine),
    _: str = Depends(verify_api_key),
) -> GoalProgress:
    ledger = await engine.ledger.get_ledger(goal_id)
    if ledger is None:
        raise HTTPException(status_code=404, detail=f"Goal progress not found: {goal_id}")
    return ledger


@router.put("/{goal_id}/status", response_model=ReadingGoal)
async def goal_status_update(
    goal_id: str,
    body: GoalStatusUpdate,
    engine: GoalsEngine = Depends(get_engine),
    _: str = Depends(verify_api_key),
) -> ReadingGoal:
    goal = await engine.set_goal_status(goal_id, body.status)
    await publish_progress(engine)
    return goal
