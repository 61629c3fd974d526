"""Goals engine — repository, ledger and evaluator behind one mutation lock.

Every read-modify-write against the store runs under ``mutation_lock()`` so two
requests on the event loop never interleave halfway through a write. There is
one lock per running event loop. The lock is not re-entrant: code that already
holds it (the book repository) calls the ``*_unlocked`` variants.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from datetime import date, datetime

from app.reading import features
from app.reading.errors import GoalNotFound
from app.reading.goals import GoalRepository
from app.reading.ledger import GoalLedger
from app.reading.models import GoalProgress, GoalStatus, GoalSummary, GoalType, ReadingGoal
from app.reading.store import RecordStore

logger = logging.getLogger(__name__)

_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock] = weakref.WeakKeyDictionary()


def mutation_lock() -> asyncio.Lock:
    """The mutation lock of the running event loop, created on first use."""
    loop = asyncio.get_running_loop()
    lock = _locks.get(loop)
    if lock is None:
        lock = _locks[loop] = asyncio.Lock()
    return lock


class GoalsEngine:
    def __init__(self, store: RecordStore, tz_name: str | None = None):
        self.goals = GoalRepository(store)
        self.ledger = GoalLedger(self.goals, tz_name)
        self.tz_name = tz_name

    # -- mutations ----------------------------------------------------------

    async def create_goal(self, goal_type: GoalType, pages_per_period: int) -> ReadingGoal:
        async with mutation_lock():
            return await self.goals.create_goal(goal_type, pages_per_period)

    async def set_goal_status(self, goal_id: str, status: GoalStatus) -> ReadingGoal:
        async with mutation_lock():
            return await self.goals.set_goal_status(goal_id, status)

    async def record_page_change(
        self, old_page: int, new_page: int, today: date | None = None
    ) -> list[GoalProgress]:
        async with mutation_lock():
            return await self.record_page_change_unlocked(old_page, new_page, today)

    async def record_page_change_unlocked(
        self, old_page: int, new_page: int, today: date | None = None
    ) -> list[GoalProgress]:
        """Fan a book's page change out to every active goal's ledger for today.

        The delta is not tied to a book: all active goals share one page stream.
        """
        delta = new_page - old_page
        if delta == 0:
            return []

        day = today or features.local_today(self.tz_name)
        active_ids = [g.id for g in await self.goals.get_active_goals()]
        if active_ids:
            logger.info("Page change %+d fanned out to %d active goal(s)", delta, len(active_ids))
        return await self.ledger.apply_delta_to(active_ids, day, delta)

    # -- reads --------------------------------------------------------------

    async def summarize(self, goal: ReadingGoal, now: datetime | date | None = None) -> GoalSummary:
        now = now if now is not None else features.local_now(self.tz_name)
        ledger = await self.ledger.get_ledger(goal.id)
        today = features.local_date(now, self.tz_name)
        return GoalSummary(
            goal=goal,
            stats=features.evaluate(goal, ledger, now, self.tz_name),
            streak=features.calculate_streak(ledger.daily_progress, today) if ledger else 0,
        )

    async def goal_summary(self, goal_id: str, now: datetime | date | None = None) -> GoalSummary:
        goal = await self.goals.get_goal(goal_id)
        if goal is None:
            raise GoalNotFound(goal_id)
        return await self.summarize(goal, now)

    async def active_summaries(self, now: datetime | date | None = None) -> list[GoalSummary]:
        return [await self.summarize(g, now) for g in await self.goals.get_active_goals()]
