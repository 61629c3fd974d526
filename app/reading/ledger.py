"""Goal progress ledger — additive pages-per-day counts, one ledger per goal."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable

from app.reading import features
from app.reading.errors import LedgerNotFound
from app.reading.goals import GoalRepository
from app.reading.models import DailyProgress, GoalProgress, GoalStatus
from app.reading.store import load_list

logger = logging.getLogger(__name__)


class GoalLedger:
    def __init__(self, goals: GoalRepository, tz_name: str | None = None):
        self.goals = goals
        self.store = goals.store
        self.progress_key = goals.progress_key
        self.tz_name = tz_name

    async def list_ledgers(self) -> list[GoalProgress]:
        return [GoalProgress.model_validate(p) for p in await load_list(self.store, self.progress_key)]

    async def get_ledger(self, goal_id: str) -> GoalProgress | None:
        return next((p for p in await self.list_ledgers() if p.goal_id == goal_id), None)

    async def apply_delta(
        self,
        goal_id: str,
        day: date,
        pages_delta: int,
        now: datetime | date | None = None,
    ) -> GoalProgress:
        """Add `pages_delta` to the goal's entry for `day`.

        The entry is created on first use and never overwritten or clamped, so
        it can drop below zero. After the write the goal is evaluated as of
        `now` (default: `day`) and an active goal that reached 100% is
        completed.
        """
        ledgers = await self.list_ledgers()
        ledger = next((p for p in ledgers if p.goal_id == goal_id), None)
        if ledger is None:
            raise LedgerNotFound(goal_id)

        entry = ledger.entry_for(day)
        if entry is None:
            ledger.daily_progress.append(DailyProgress(day=day, pages_read=pages_delta))
        else:
            entry.pages_read += pages_delta

        await self.store.set(self.progress_key, [p.to_record() for p in ledgers])
        logger.debug("Goal %s: %+d pages on %s", goal_id, pages_delta, day.isoformat())

        goal = await self.goals.get_goal(goal_id)
        if goal is not None and goal.status == GoalStatus.active:
            stats = features.evaluate(goal, ledger, now if now is not None else day, self.tz_name)
            if features.is_complete(stats):
                await self.goals.set_goal_status(goal_id, GoalStatus.completed)
                logger.info("Goal %s reached %d/%d pages, completed", goal_id, stats.current, stats.target)

        return ledger

    async def apply_delta_to(
        self,
        goal_ids: Iterable[str],
        day: date,
        pages_delta: int,
        now: datetime | date | None = None,
    ) -> list[GoalProgress]:
        """Broadcast one page delta to several goals, in the given order."""
        return [await self.apply_delta(goal_id, day, pages_delta, now) for goal_id in goal_ids]
