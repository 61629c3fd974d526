"""Reading records — Pydantic v2 models.

Attributes are snake_case; JSON (stored and served) is camelCase, matching the
record layout the browser build wrote to local storage.
"""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.config import settings


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_int(value: Any) -> int:
    """Best-effort integer; anything non-numeric (or NaN/inf) becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class GoalType(str, Enum):
    daily = "daily"
    monthly = "monthly"


class GoalStatus(str, Enum):
    active = "active"
    completed = "completed"
    abandoned = "abandoned"


class BookStatus(str, Enum):
    reading = "reading"
    completed = "completed"
    dropped = "dropped"


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


class ReadingGoal(CamelModel):
    id: str = Field(default_factory=_new_id)
    type: GoalType
    pages_per_period: int
    created_at: datetime = Field(default_factory=_utcnow)
    status: GoalStatus = GoalStatus.active


class DailyProgress(CamelModel):
    day: date = Field(alias="date")
    pages_read: int = 0


class GoalProgress(CamelModel):
    """Ledger of one goal: pages read per calendar day, insertion ordered."""

    goal_id: str
    daily_progress: list[DailyProgress] = Field(default_factory=list)

    def entry_for(self, day: date) -> DailyProgress | None:
        return next((p for p in self.daily_progress if p.day == day), None)


class ProgressStats(CamelModel):
    target: int
    current: int
    percentage: float


class GoalSummary(CamelModel):
    goal: ReadingGoal
    stats: ProgressStats
    streak: int = 0


class ProgressSnapshot(CamelModel):
    """What the progress notifier hands to subscribers."""

    generated_at: datetime = Field(default_factory=_utcnow)
    goals: list[GoalSummary] = Field(default_factory=list)


class GoalCreate(CamelModel):
    type: GoalType = GoalType.daily
    pages_per_period: int = Field(default_factory=lambda: settings.default_goal_pages, gt=0)


class GoalStatusUpdate(CamelModel):
    status: GoalStatus


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------


class Note(CamelModel):
    id: str = Field(default_factory=_new_id)
    content: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Book(CamelModel):
    id: str = Field(default_factory=_new_id)
    title: str
    author: str = ""
    total_pages: int
    current_page: int = 0
    cover_url: str = ""
    start_date: date | None = None
    status: BookStatus = BookStatus.reading
    notes: list[Note] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class BookCreate(CamelModel):
    title: str = Field(min_length=1)
    author: str = ""
    total_pages: int = Field(gt=0)
    cover_url: str = ""
    start_date: date | None = None


class ProgressUpdate(CamelModel):
    current_page: int

    @field_validator("current_page", mode="before")
    @classmethod
    def coerce_page(cls, value: Any) -> int:
        return coerce_int(value)


class BookStatusUpdate(CamelModel):
    status: BookStatus


class NoteWrite(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Note content must not be blank")
        return value
