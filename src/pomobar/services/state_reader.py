"""Reader side of the exported-state contract.

External status bars implement the same rules; ``pomobar status`` and the
command CLI use this implementation to decide whether a timer process is
there to talk to.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from pomobar.exceptions import StaleOrDisconnectedSource
from pomobar.models.exported_state import ExportedState
from pomobar.utils.files import pid_is_alive

DEFAULT_STALENESS_WINDOW = 10.0


class SourceStatus(str, Enum):
    LIVE = "live"
    STALE = "stale"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class ReadResult:
    """Outcome of one poll of the exported state file."""

    status: SourceStatus
    reason: str
    state: ExportedState | None = None
    age_seconds: float | None = None

    @property
    def is_live(self) -> bool:
        return self.status is SourceStatus.LIVE

    @property
    def owner_alive(self) -> bool:
        """The writing process exists, even if its last record is old."""
        return self.status is not SourceStatus.DISCONNECTED


class StateReader:
    """Classifies the exported state as live, stale or disconnected.

    Reading never modifies the file, whatever the outcome.
    """

    def __init__(
        self,
        path: Path,
        *,
        staleness_window: float = DEFAULT_STALENESS_WINDOW,
        clock: Callable[[], float] = time.time,
        pid_alive: Callable[[int], bool] = pid_is_alive,
    ):
        self.path = path
        self.staleness_window = staleness_window
        self._clock = clock
        self._pid_alive = pid_alive

    def read(self) -> ReadResult:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return ReadResult(SourceStatus.DISCONNECTED, "state file missing")
        except OSError as e:
            return ReadResult(SourceStatus.DISCONNECTED, f"state file unreadable: {e}")

        try:
            state = ExportedState.from_json(raw)
        except ValidationError as e:
            return ReadResult(
                SourceStatus.DISCONNECTED, f"invalid state: {e.error_count()} error(s)"
            )

        if not self._pid_alive(state.process_id):
            return ReadResult(
                SourceStatus.DISCONNECTED,
                f"process {state.process_id} is not running",
                state=state,
            )

        age = state.age(self._clock())
        if age > self.staleness_window:
            return ReadResult(
                SourceStatus.STALE,
                f"last update {age:.0f}s ago (window {self.staleness_window:.0f}s)",
                state=state,
                age_seconds=age,
            )
        return ReadResult(SourceStatus.LIVE, "ok", state=state, age_seconds=age)

    def require_live(self) -> ExportedState:
        """Return the state only when it is live; raise otherwise."""
        result = self.read()
        if not result.is_live:
            raise StaleOrDisconnectedSource(f"Timer state is {result.status.value}: {result.reason}")
        return result.state
