"""Goal repository — reading goals over the ``reading_goals`` record.

The goals record is newest-first. Every goal gets its (empty) ledger in the
``goal_progress`` record at creation time; goals are never deleted.
"""

from __future__ import annotations

import logging

from app.config import settings
from app.reading.errors import GoalNotFound
from app.reading.models import GoalProgress, GoalStatus, GoalType, ReadingGoal
from app.reading.store import RecordStore, load_list

logger = logging.getLogger(__name__)


class GoalRepository:
    def __init__(
        self,
        store: RecordStore,
        goals_key: str | None = None,
        progress_key: str | None = None,
    ):
        self.store = store
        self.goals_key = goals_key or settings.goals_record_key
        self.progress_key = progress_key or settings.progress_record_key

    async def list_goals(self) -> list[ReadingGoal]:
        return [ReadingGoal.model_validate(g) for g in await load_list(self.store, self.goals_key)]

    async def _save(self, goals: list[ReadingGoal]) -> None:
        await self.store.set(self.goals_key, [g.to_record() for g in goals])

    async def get_goal(self, goal_id: str) -> ReadingGoal | None:
        return next((g for g in await self.list_goals() if g.id == goal_id), None)

    async def get_active_goals(self) -> list[ReadingGoal]:
        return [g for g in await self.list_goals() if g.status == GoalStatus.active]

    async def get_active_goal(self) -> ReadingGoal | None:
        active = await self.get_active_goals()
        return active[0] if active else None

    async def create_goal(self, goal_type: GoalType, pages_per_period: int) -> ReadingGoal:
        """Create the new active goal together with its empty ledger.

        This is the only place the single-active-goal rule is enforced: every
        goal still active is closed as completed (never abandoned) first.
        """
        goals = await self.list_goals()
        for goal in goals:
            if goal.status == GoalStatus.active:
                goal.status = GoalStatus.completed
                logger.info("Goal %s completed to make room for a new goal", goal.id)

        new_goal = ReadingGoal(type=goal_type, pages_per_period=pages_per_period)

        # Ledger first: a failure between the two writes leaves an unused
        # ledger, never a goal without one.
        progress = await load_list(self.store, self.progress_key)
        progress.append(GoalProgress(goal_id=new_goal.id).to_record())
        await self.store.set(self.progress_key, progress)

        await self._save([new_goal, *goals])

        logger.info(
            "Created %s goal %s (%d pages)", new_goal.type.value, new_goal.id, new_goal.pages_per_period
        )
        return new_goal

    async def set_goal_status(self, goal_id: str, status: GoalStatus) -> ReadingGoal:
        """Overwrite a goal's status.

        No transition check: re-activating a goal, even while another is
        active, is allowed here and left to callers.
        """
        goals = await self.list_goals()
        goal = next((g for g in goals if g.id == goal_id), None)
        if goal is None:
            raise GoalNotFound(goal_id)

        goal.status = status
        await self._save(goals)
        logger.info("Goal %s status set to %s", goal_id, status.value)
        return goal
