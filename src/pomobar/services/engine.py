"""Tick-driven Pomodoro engine.

The engine owns the single ``PhaseState``/``SessionTracker`` pair. Every
mutation goes through one of its public operations, which hold a
non-reentrant lock, apply side effects (sleep prevention, sounds,
notifications, session counting) together with the state change and then
emit exactly one state-changed signal.

Listeners run while the lock is held, so they see mutations in order and
must not call back into the engine.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pomobar.models.phase import Phase, PhaseDurations, PhaseState
from pomobar.models.sessions import SessionTracker

from .alerts import NotificationScheduler, SoundPlayer
from .scheduler import Scheduler, TickHandle
from .sleep_prevention import SleepPreventer, SleepToken

SLEEP_REASON = "Pomodoro timer running"


class EngineEvent(str, Enum):
    """What kind of mutation a state-changed signal reports."""

    STARTED = "started"
    PAUSED = "paused"
    RESET = "reset"
    SKIPPED = "skipped"
    TICK = "tick"
    COMPLETED = "completed"

    @property
    def is_transition(self) -> bool:
        """Everything but a plain countdown tick."""
        return self is not EngineEvent.TICK


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable view of the engine state handed to listeners."""

    phase: Phase
    time_remaining: int
    duration: int
    is_running: bool
    session_count: int
    rotation_count: int
    session_in_cycle: int
    progress_percent: float


StateListener = Callable[[TimerSnapshot, EngineEvent], None]


class TimerEngine:
    """Runs one countdown at a time and serializes every mutation."""

    def __init__(
        self,
        *,
        tracker: SessionTracker,
        scheduler: Scheduler,
        sleep_preventer: SleepPreventer,
        durations: PhaseDurations | None = None,
        notifier: NotificationScheduler | None = None,
        sound_player: SoundPlayer | None = None,
        tick_interval: float = 1.0,
        tick_warning_seconds: int = 10,
        logger: logging.Logger | None = None,
    ):
        if tick_interval <= 0:
            raise ValueError("tick_interval must be greater than zero")

        self._state = PhaseState(durations=durations or PhaseDurations())
        self._tracker = tracker
        self._scheduler = scheduler
        self._sleep_preventer = sleep_preventer
        self._notifier = notifier
        self._sound_player = sound_player
        self._tick_interval = tick_interval
        self._tick_warning_seconds = tick_warning_seconds
        self._logger = logger or logging.getLogger("pomobar.engine")
        self._lock = threading.Lock()
        self._listeners: list[StateListener] = []

        self._tick_handle: TickHandle | None = None
        self._tick_generation = 0
        self._sleep_token: SleepToken | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._state.is_running

    @property
    def holds_sleep_token(self) -> bool:
        return self._sleep_token is not None

    @property
    def tick_scheduled(self) -> bool:
        return self._tick_handle is not None

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def add_listener(self, listener: StateListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        with self._lock:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Start the countdown. No-op when running or when the phase is at zero."""
        with self._lock:
            return self._start_locked()

    def pause(self) -> bool:
        with self._lock:
            return self._pause_locked()

    def toggle(self) -> bool:
        """Pause when running, start otherwise."""
        with self._lock:
            if self._state.is_running:
                return self._pause_locked()
            return self._start_locked()

    def reset(self) -> bool:
        """Refill the current phase and stop; phase and counts are kept."""
        with self._lock:
            self._ensure_open()
            if not self._state.reset():
                return False
            self._leave_running()
            self._logger.info("Timer reset: %s", self._state.current_phase.label)
            self._emit_locked(EngineEvent.RESET)
            return True

    def skip(self) -> bool:
        """Advance to the next phase.

        Leaving a work phase that was started counts as a completed session;
        skipping an untouched work phase does not.
        """
        with self._lock:
            self._ensure_open()
            leaving = self._state.current_phase
            count_session = leaving is Phase.WORK and self._state.is_in_progress
            if count_session:
                total = self._tracker.record_completion()
                self._logger.info("Work session skipped. Total today: %d", total)

            self._leave_running()
            self._state.skip(count_session=count_session)
            self._logger.info(
                "Skipped from %s to %s", leaving.label, self._state.current_phase.label
            )
            self._emit_locked(EngineEvent.SKIPPED)
            return True

    def tick(self) -> bool:
        """Advance the countdown by one second. Ignored while not running."""
        with self._lock:
            return self._tick_locked()

    def close(self) -> None:
        """Stop ticking and release the sleep token. Emits nothing."""
        with self._lock:
            if self._closed:
                return
            self._state.pause()
            self._leave_running()
            self._closed = True
            self._logger.info("Engine closed")

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("TimerEngine is closed")

    def _start_locked(self) -> bool:
        self._ensure_open()
        if not self._state.start():
            return False
        self._enter_running()
        self._logger.info(
            "Timer started: %s (%ss left)",
            self._state.current_phase.label,
            self._state.time_remaining,
        )
        self._emit_locked(EngineEvent.STARTED)
        return True

    def _pause_locked(self) -> bool:
        self._ensure_open()
        if not self._state.pause():
            return False
        self._leave_running()
        self._logger.info(
            "Timer paused: %s (%ss left)",
            self._state.current_phase.label,
            self._state.time_remaining,
        )
        self._emit_locked(EngineEvent.PAUSED)
        return True

    def _tick_locked(self) -> bool:
        if self._closed or not self._state.is_running:
            return False

        completing = self._state.should_complete
        self._state.tick()

        if completing:
            self._complete_phase_locked()
            self._emit_locked(EngineEvent.COMPLETED)
            return True

        if self._in_warning_window():
            self._call_collaborator("tick sound", self._sound_player.play_tick_sound)
        self._emit_locked(EngineEvent.TICK)
        return True

    def _in_warning_window(self) -> bool:
        remaining = self._state.time_remaining
        return (
            self._sound_player is not None
            and self._state.current_phase is Phase.WORK
            and 0 < remaining <= self._tick_warning_seconds
        )

    def _complete_phase_locked(self) -> None:
        completed = self._state.current_phase
        count_session = completed is Phase.WORK
        if count_session:
            session_count = self._tracker.record_completion()
            self._logger.info("Work session completed. Total today: %d", session_count)
        else:
            session_count = self._tracker.completed_today

        self._leave_running()
        if self._sound_player is not None:
            self._call_collaborator(
                "phase sound", self._sound_player.play_phase_change_sound, completed
            )
        if self._notifier is not None:
            self._call_collaborator(
                "completion notification",
                self._notifier.schedule_phase_complete_notification,
                completed,
                session_count,
            )

        self._state.skip(count_session=count_session)
        self._logger.info(
            "Phase completed: %s -> %s", completed.label, self._state.current_phase.label
        )

    def _call_collaborator(self, what: str, func: Callable[..., None], *args) -> None:
        # fire-and-forget; a failing sound or notification must not stop the countdown
        try:
            func(*args)
        except Exception:
            self._logger.exception("%s failed", what.capitalize())

    def _enter_running(self) -> None:
        if self._sleep_token is None:
            self._sleep_token = self._sleep_preventer.acquire(SLEEP_REASON)
        if self._tick_handle is None:
            self._schedule_tick_locked()

    def _leave_running(self) -> None:
        self._cancel_tick_locked()
        if self._sleep_token is not None:
            token, self._sleep_token = self._sleep_token, None
            self._sleep_preventer.release(token)

    def _schedule_tick_locked(self) -> None:
        generation = self._tick_generation
        self._tick_handle = self._scheduler.call_later(
            self._tick_interval, lambda: self._on_tick_timer(generation)
        )

    def _cancel_tick_locked(self) -> None:
        # bumping the generation invalidates a callback that already fired
        # and is waiting for the lock
        self._tick_generation += 1
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _on_tick_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._tick_generation:
                return
            self._tick_handle = None
            self._tick_locked()
            if self._state.is_running and self._tick_handle is None:
                self._schedule_tick_locked()

    def _snapshot_locked(self) -> TimerSnapshot:
        state = self._state
        return TimerSnapshot(
            phase=state.current_phase,
            time_remaining=state.time_remaining,
            duration=state.duration,
            is_running=state.is_running,
            session_count=self._tracker.completed_today,
            rotation_count=state.rotation_count,
            session_in_cycle=state.session_in_cycle,
            progress_percent=state.progress_percent,
        )

    def _emit_locked(self, event: EngineEvent) -> None:
        snapshot = self._snapshot_locked()
        for listener in list(self._listeners):
            try:
                listener(snapshot, event)
            except Exception:
                self._logger.exception("State listener %r failed on %s", listener, event.value)
