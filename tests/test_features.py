"""Tests for pure goal math."""

from datetime import date, datetime, timedelta, timezone

from app.reading.features import (
    calculate_streak,
    clamp_page,
    evaluate,
    is_complete,
    local_date,
    progress_percentage,
)
from app.reading.models import (
    DailyProgress,
    GoalProgress,
    GoalType,
    ProgressStats,
    ReadingGoal,
    coerce_int,
)

TODAY = date(2024, 2, 1)


def _goal(goal_type: GoalType, pages: int) -> ReadingGoal:
    return ReadingGoal(type=goal_type, pages_per_period=pages)


def _ledger(goal: ReadingGoal, *entries: tuple[date, int]) -> GoalProgress:
    return GoalProgress(
        goal_id=goal.id,
        daily_progress=[DailyProgress(day=d, pages_read=p) for d, p in entries],
    )


def _days(*offsets: int) -> list[DailyProgress]:
    return [DailyProgress(day=TODAY - timedelta(days=o), pages_read=5) for o in offsets]


class TestProgressPercentage:
    def test_half(self):
        assert progress_percentage(10, 20) == 50.0

    def test_capped_at_100(self):
        assert progress_percentage(25, 20) == 100.0

    def test_negative_kept(self):
        assert progress_percentage(-5, 20) == -25.0

    def test_zero_target(self):
        assert progress_percentage(10, 0) == 0.0


class TestEvaluateDaily:
    def test_over_target_is_clamped(self):
        goal = _goal(GoalType.daily, 20)
        stats = evaluate(goal, _ledger(goal, (TODAY, 25)), TODAY)
        assert stats == ProgressStats(target=20, current=25, percentage=100.0)

    def test_only_today_counts(self):
        goal = _goal(GoalType.daily, 20)
        stats = evaluate(goal, _ledger(goal, (TODAY - timedelta(days=1), 30), (TODAY, 5)), TODAY)
        assert stats.current == 5
        assert stats.percentage == 25.0

    def test_no_entry_today(self):
        goal = _goal(GoalType.daily, 20)
        stats = evaluate(goal, _ledger(goal, (TODAY - timedelta(days=1), 30)), TODAY)
        assert stats.current == 0
        assert stats.percentage == 0.0

    def test_missing_ledger(self):
        goal = _goal(GoalType.daily, 20)
        assert evaluate(goal, None, TODAY).current == 0

    def test_negative_progress(self):
        goal = _goal(GoalType.daily, 20)
        stats = evaluate(goal, _ledger(goal, (TODAY, -10)), TODAY)
        assert stats.current == -10
        assert stats.percentage == -50.0
        assert not is_complete(stats)


class TestEvaluateMonthly:
    def test_only_current_month(self):
        goal = _goal(GoalType.monthly, 100)
        ledger = _ledger(goal, (date(2024, 1, 31), 10), (date(2024, 2, 1), 5))
        stats = evaluate(goal, ledger, datetime(2024, 2, 1, 9, 0))
        assert stats.current == 5

    def test_same_month_other_year_excluded(self):
        goal = _goal(GoalType.monthly, 100)
        ledger = _ledger(goal, (date(2023, 2, 10), 40), (date(2024, 2, 1), 5), (date(2024, 2, 20), 7))
        stats = evaluate(goal, ledger, TODAY)
        assert stats.current == 12
        assert stats.percentage == 12.0

    def test_aware_now_uses_configured_zone(self):
        goal = _goal(GoalType.monthly, 100)
        ledger = _ledger(goal, (date(2024, 1, 31), 10), (date(2024, 2, 1), 5))
        # 03:00 UTC on Feb 1 is still Jan 31 in New York
        now = datetime(2024, 2, 1, 3, 0, tzinfo=timezone.utc)
        assert evaluate(goal, ledger, now, "America/New_York").current == 10
        assert evaluate(goal, ledger, now, "UTC").current == 5


class TestIsComplete:
    def test_exactly_100(self):
        assert is_complete(ProgressStats(target=20, current=20, percentage=100.0))

    def test_below(self):
        assert not is_complete(ProgressStats(target=20, current=19, percentage=95.0))


class TestCalculateStreak:
    def test_consecutive(self):
        assert calculate_streak(_days(2, 1, 0), TODAY) == 3

    def test_gap_breaks_walk(self):
        assert calculate_streak(_days(2, 0), TODAY) == 1

    def test_not_today_is_zero(self):
        assert calculate_streak(_days(3, 2, 1), TODAY) == 0

    def test_empty(self):
        assert calculate_streak([], TODAY) == 0

    def test_unsorted_input(self):
        assert calculate_streak(_days(0, 2, 1, 5), TODAY) == 3

    def test_zero_and_negative_entries_count(self):
        entries = [
            DailyProgress(day=TODAY - timedelta(days=1), pages_read=0),
            DailyProgress(day=TODAY, pages_read=-3),
        ]
        assert calculate_streak(entries, TODAY) == 2


class TestPageCoercion:
    def test_numeric_string(self):
        assert coerce_int("42") == 42

    def test_float_truncates(self):
        assert coerce_int(12.9) == 12

    def test_garbage_is_zero(self):
        assert coerce_int("abc") == 0
        assert coerce_int(None) == 0
        assert coerce_int(float("nan")) == 0

    def test_clamp_high(self):
        assert clamp_page(500, 300) == 300

    def test_clamp_low(self):
        assert clamp_page(-4, 300) == 0

    def test_clamp_garbage(self):
        assert clamp_page("page ten", 300) == 0


class TestLocalDate:
    def test_plain_date_passthrough(self):
        assert local_date(TODAY) == TODAY

    def test_naive_datetime_is_local(self):
        assert local_date(datetime(2024, 2, 1, 23, 59)) == TODAY

    def test_aware_datetime_converted(self):
        now = datetime(2024, 2, 2, 1, 0, tzinfo=timezone.utc)
        assert local_date(now, "America/Los_Angeles") == TODAY
