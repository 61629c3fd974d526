"""Pure stateless goal math — evaluation, completion and streaks. Never touches the store."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from app.config import settings
from app.reading.models import (
    DailyProgress,
    GoalProgress,
    GoalType,
    ProgressStats,
    ReadingGoal,
    coerce_int,
)


def local_now(tz_name: str | None = None) -> datetime:
    return datetime.now(ZoneInfo(tz_name or settings.default_tz))


def local_today(tz_name: str | None = None) -> date:
    return local_now(tz_name).date()


def local_date(now: datetime | date, tz_name: str | None = None) -> date:
    """Calendar day of `now` in the configured zone. Naive datetimes are taken as local."""
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(ZoneInfo(tz_name or settings.default_tz))
        return now.date()
    return now


def clamp_page(value: Any, total_pages: int) -> int:
    """Coerce a page number and clamp it to [0, total_pages]."""
    return max(0, min(coerce_int(value), total_pages))


def progress_percentage(current: int, target: int) -> float:
    """current / target * 100, capped at 100 from above only.

    Negative progress stays negative. A non-positive target yields 0.
    """
    if target <= 0:
        return 0.0
    return min(100.0, (current / target) * 100.0)


def pages_in_window(entries: Iterable[DailyProgress], goal_type: GoalType, today: date) -> int:
    if goal_type == GoalType.daily:
        return sum(e.pages_read for e in entries if e.day == today)
    return sum(
        e.pages_read
        for e in entries
        if e.day.year == today.year and e.day.month == today.month
    )


def evaluate(
    goal: ReadingGoal,
    ledger: GoalProgress | None,
    now: datetime | date,
    tz_name: str | None = None,
) -> ProgressStats:
    """Compute {target, current, percentage} for `goal` as of `now`.

    - daily: pages recorded on today's date (0 when absent)
    - monthly: pages recorded in the current calendar month and year
    """
    today = local_date(now, tz_name)
    entries = ledger.daily_progress if ledger is not None else []
    current = pages_in_window(entries, goal.type, today)
    return ProgressStats(
        target=goal.pages_per_period,
        current=current,
        percentage=progress_percentage(current, goal.pages_per_period),
    )


def is_complete(stats: ProgressStats) -> bool:
    return stats.percentage >= 100.0


def calculate_streak(daily_progress: list[DailyProgress], today: date) -> int:
    """Consecutive days with a ledger entry, counted back from today.

    The page value of an entry is irrelevant, only its presence counts.
    Returns 0 when the newest entry is not today.
    """
    if not daily_progress:
        return 0

    ordered = sorted(daily_progress, key=lambda p: p.day, reverse=True)
    if ordered[0].day != today:
        return 0

    streak = 1
    for previous, current in zip(ordered, ordered[1:]):
        if (previous.day - current.day).days == 1:
            streak += 1
        else:
            break
    return streak
