"""Daily completed-session counting with day-boundary reset."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Protocol

from pomobar.exceptions import PersistenceReadFailure, PersistenceWriteFailure


class CounterStore(Protocol):
    """Durable storage for the daily counter."""

    def read_today_count(self) -> tuple[int, date | None]: ...

    def write_today_count(self, count: int, day: date) -> None: ...


class SessionTracker:
    """Counts completed work sessions for the current calendar day.

    A stored count from an earlier day is treated as zero and persisted as
    such before any increment. Store failures are logged and the tracker
    keeps counting in memory.
    """

    def __init__(
        self,
        store: CounterStore,
        clock: Callable[[], date] = date.today,
        logger: logging.Logger | None = None,
    ):
        self._store = store
        self._clock = clock
        self._logger = logger or logging.getLogger("pomobar.sessions")
        self._count = 0
        self._day = clock()
        self._load()

    @property
    def completed_today(self) -> int:
        self._roll_over()
        return self._count

    @property
    def last_session_date(self) -> date:
        return self._day

    def record_completion(self) -> int:
        """Count one completed work session and persist it. Returns the new count."""
        self._roll_over()
        self._count += 1
        self._persist()
        return self._count

    def _load(self) -> None:
        try:
            count, day = self._store.read_today_count()
        except PersistenceReadFailure as e:
            self._logger.error("Session counter unreadable, starting from zero: %s", e)
            return

        self._count = max(0, int(count))
        self._day = day if day is not None else self._clock()
        self._roll_over()

    def _roll_over(self) -> None:
        today = self._clock()
        if self._day == today:
            return
        self._logger.info(
            "Day changed (%s -> %s), resetting session count from %d",
            self._day,
            today,
            self._count,
        )
        self._count = 0
        self._day = today
        self._persist()

    def _persist(self) -> None:
        try:
            self._store.write_today_count(self._count, self._day)
        except PersistenceWriteFailure as e:
            self._logger.error("Failed to persist session count %d: %s", self._count, e)
