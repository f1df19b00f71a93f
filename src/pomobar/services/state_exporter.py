"""Publishes the engine state to a JSON file read by status bars."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path

from pomobar.exceptions import ExportWriteFailure
from pomobar.models.exported_state import ExportedState
from pomobar.utils.files import atomic_write_text

from .engine import EngineEvent, TimerSnapshot


class StateExporter:
    """Rewrites the exported state file on every state-changed signal.

    Writes are write-then-rename, so a reader sees either the previous or
    the new record. Transition writes are never skipped; plain tick writes
    may be spaced out by ``tick_write_interval`` seconds. Failures are
    logged and counted, never raised to the engine.
    """

    def __init__(
        self,
        path: Path,
        *,
        pid: int | None = None,
        clock: Callable[[], float] = time.time,
        tick_write_interval: float = 0.0,
        logger: logging.Logger | None = None,
    ):
        self.path = path
        self.pid = pid if pid is not None else os.getpid()
        self._clock = clock
        self._tick_write_interval = tick_write_interval
        self._logger = logger or logging.getLogger("pomobar.exporter")
        self._last_write_at: float | None = None

        self.writes = 0
        self.failures = 0
        self.throttled = 0

    def __call__(self, snapshot: TimerSnapshot, event: EngineEvent) -> None:
        self.export(snapshot, transition=event.is_transition)

    def build_state(self, snapshot: TimerSnapshot, now: float | None = None) -> ExportedState:
        elapsed = snapshot.duration - snapshot.time_remaining
        progress = max(0.0, min(100.0, elapsed * 100 / snapshot.duration))
        return ExportedState(
            process_id=self.pid,
            phase=snapshot.phase.label,
            time_remaining_seconds=snapshot.time_remaining,
            progress_percent=progress,
            total_duration_seconds=snapshot.duration,
            session_count=snapshot.session_count,
            is_running=snapshot.is_running,
            updated_at_epoch_seconds=self._clock() if now is None else now,
        )

    def export(self, snapshot: TimerSnapshot, transition: bool = True) -> bool:
        """Write ``snapshot``; returns whether a write happened and succeeded."""
        now = self._clock()
        if not transition and self._throttled(now):
            self.throttled += 1
            return False

        try:
            self.write(self.build_state(snapshot, now))
        except ExportWriteFailure as e:
            self.failures += 1
            self._logger.warning("State export failed (%d so far): %s", self.failures, e)
            return False

        self._last_write_at = now
        self.writes += 1
        return True

    def write(self, state: ExportedState) -> None:
        try:
            atomic_write_text(self.path, state.to_json(), mode=0o644)
        except OSError as e:
            raise ExportWriteFailure(f"Cannot write {self.path}: {e}") from e

    def clear(self) -> None:
        """Remove the state file so readers see the timer as disconnected."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning("Failed to remove state file %s: %s", self.path, e)
            return
        self._logger.info("State file cleared: %s", self.path)

    def _throttled(self, now: float) -> bool:
        if self._tick_write_interval <= 0 or self._last_write_at is None:
            return False
        return now - self._last_write_at < self._tick_write_interval
