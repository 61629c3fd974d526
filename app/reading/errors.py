"""Domain errors. Raised before any write, so a failed call leaves the store untouched."""

from __future__ import annotations


class ReadingError(Exception):
    pass


class NotFoundError(ReadingError):
    kind = "record"

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"{self.kind.capitalize()} not found: {identifier}")


class GoalNotFound(NotFoundError):
    kind = "goal"


class LedgerNotFound(NotFoundError):
    kind = "goal progress"


class BookNotFound(NotFoundError):
    kind = "book"


class NoteNotFound(NotFoundError):
    kind = "note"
