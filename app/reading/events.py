"""Progress notifier — subscription boundary between the goals engine and its clients.

Routers publish a ProgressSnapshot after each mutation that can move goal
progress; subscribers get it synchronously. The engine itself never publishes.
"""

from __future__ import annotations

import logging
from typing import Callable

from app.reading.models import ProgressSnapshot

logger = logging.getLogger(__name__)

Subscriber = Callable[[ProgressSnapshot], None]


class ProgressNotifier:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback`; returns the matching unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self, snapshot: ProgressSnapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                # Subscriber failures are logged, never raised to the publisher
                logger.exception("Progress subscriber %r failed", callback)


progress_notifier = ProgressNotifier()
