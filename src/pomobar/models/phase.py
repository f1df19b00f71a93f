"""Pomodoro phases and the countdown state of the active phase.

``PhaseState`` is pure in-memory arithmetic: it never performs I/O and never
decides on its own whether a work session counts. The engine makes that
call before asking the state to ``skip``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Phase(str, Enum):
    """One segment of the Pomodoro cycle."""

    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        """Human label, also used as the ``phase`` field of the exported state."""
        return _LABELS[self]

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @classmethod
    def from_label(cls, label: str) -> "Phase":
        """Resolve either a label ("Short Break") or a value ("short_break")."""
        for phase in cls:
            if label in (phase.label, phase.value):
                return phase
        raise ValueError(f"Unknown phase: {label!r}")


_LABELS = {
    Phase.WORK: "Work Session",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}

_ICONS = {
    Phase.WORK: "🍅",
    Phase.SHORT_BREAK: "☕",
    Phase.LONG_BREAK: "🏖",
}


@dataclass(frozen=True)
class PhaseDurations:
    """Nominal phase lengths in seconds plus the long-break rotation size."""

    work: int = 25 * 60
    short_break: int = 5 * 60
    long_break: int = 15 * 60
    sessions_before_long_break: int = 4

    def __post_init__(self) -> None:
        for name in ("work", "short_break", "long_break", "sessions_before_long_break"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be greater than zero")

    @classmethod
    def from_minutes(
        cls,
        work: int = 25,
        short_break: int = 5,
        long_break: int = 15,
        sessions_before_long_break: int = 4,
    ) -> "PhaseDurations":
        return cls(
            work=work * 60,
            short_break=short_break * 60,
            long_break=long_break * 60,
            sessions_before_long_break=sessions_before_long_break,
        )

    def for_phase(self, phase: Phase) -> int:
        """Get duration in seconds for a phase."""
        if phase is Phase.WORK:
            return self.work
        if phase is Phase.SHORT_BREAK:
            return self.short_break
        return self.long_break


@dataclass
class PhaseState:
    """Countdown state of the current phase.

    ``rotation_count`` counts completed work sessions for the long-break
    rotation. It is independent of the daily session count shown to the
    user and is never reset at a day boundary.
    """

    durations: PhaseDurations = field(default_factory=PhaseDurations)
    current_phase: Phase = Phase.WORK
    time_remaining: int | None = None
    is_running: bool = False
    rotation_count: int = 0

    def __post_init__(self) -> None:
        if self.time_remaining is None:
            self.time_remaining = self.duration
        if not 0 <= self.time_remaining <= self.duration:
            raise ValueError(
                f"time_remaining must be within [0, {self.duration}], "
                f"got {self.time_remaining}"
            )
        if self.rotation_count < 0:
            raise ValueError("rotation_count must not be negative")

    @property
    def duration(self) -> int:
        return self.durations.for_phase(self.current_phase)

    @property
    def should_complete(self) -> bool:
        """True when a running phase has counted down to zero."""
        return self.is_running and self.time_remaining == 0

    @property
    def is_in_progress(self) -> bool:
        """Running, or paused part-way through the countdown."""
        return self.is_running or self.time_remaining < self.duration

    @property
    def progress_percent(self) -> float:
        elapsed = self.duration - self.time_remaining
        return max(0.0, min(100.0, elapsed * 100 / self.duration))

    @property
    def session_in_cycle(self) -> int:
        """1-based position of the next work session within the rotation."""
        return self.rotation_count % self.durations.sessions_before_long_break + 1

    def start(self) -> bool:
        """Start counting down. No-op when running or already at zero."""
        if self.is_running or self.time_remaining == 0:
            return False
        self.is_running = True
        return True

    def pause(self) -> bool:
        if not self.is_running:
            return False
        self.is_running = False
        return True

    def tick(self) -> bool:
        """Consume one second. Ignored unless running; never changes the phase."""
        if not self.is_running:
            return False
        self.time_remaining = max(0, self.time_remaining - 1)
        return True

    def reset(self) -> bool:
        """Refill the current phase and stop. Returns whether anything changed."""
        changed = self.is_running or self.time_remaining != self.duration
        self.time_remaining = self.duration
        self.is_running = False
        return changed

    def next_phase(self, count_session: bool = False) -> Phase:
        """Determine the phase that follows the current one."""
        if self.current_phase is not Phase.WORK:
            return Phase.WORK
        if count_session:
            completed = self.rotation_count + 1
            if completed % self.durations.sessions_before_long_break == 0:
                return Phase.LONG_BREAK
        return Phase.SHORT_BREAK

    def skip(self, count_session: bool = False) -> Phase:
        """Advance to the next phase, stopped and with a full countdown.

        ``count_session`` tells the rotation that the work phase being left
        was completed; it is ignored when leaving a break.
        """
        next_phase = self.next_phase(count_session)
        if self.current_phase is Phase.WORK and count_session:
            self.rotation_count += 1

        self.current_phase = next_phase
        self.time_remaining = self.durations.for_phase(next_phase)
        self.is_running = False
        return next_phase
