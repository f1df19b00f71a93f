"""Shared test fixtures and fakes.

Provides a manually driven scheduler, recording collaborators for the
engine, and isolation of platform directories so nothing touches the real
user config, data or log locations.
"""

from __future__ import annotations

import logging
from datetime import date
from unittest.mock import patch

import pytest

from pomobar.exceptions import PersistenceReadFailure, PersistenceWriteFailure
from pomobar.models.phase import Phase, PhaseDurations
from pomobar.models.sessions import SessionTracker
from pomobar.services.engine import TimerEngine

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class ManualHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose callbacks only run when the test fires them."""

    def __init__(self):
        self.handles: list[ManualHandle] = []

    def call_later(self, delay, callback) -> ManualHandle:
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire(self, count: int = 1) -> int:
        """Run up to ``count`` pending callbacks in order; returns how many ran."""
        fired = 0
        for _ in range(count):
            active = self.active
            if not active:
                break
            handle = active[0]
            self.handles.remove(handle)
            handle.callback()
            fired += 1
        return fired


class FakeStore:
    """In-memory CounterStore that can be told to fail."""

    def __init__(self, count: int = 0, day: date | None = None):
        self.count = count
        self.day = day
        self.fail_read = False
        self.fail_write = False
        self.writes: list[tuple[int, date]] = []

    def read_today_count(self):
        if self.fail_read:
            raise PersistenceReadFailure("disk on fire")
        return self.count, self.day

    def write_today_count(self, count, day):
        if self.fail_write:
            raise PersistenceWriteFailure("read-only")
        self.count, self.day = count, day
        self.writes.append((count, day))


class FakeDay:
    """Settable calendar clock."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


class RecordingNotifier:
    def __init__(self):
        self.calls: list[tuple[Phase, int]] = []

    def schedule_phase_complete_notification(self, phase, session_count):
        self.calls.append((phase, session_count))


class RecordingSoundPlayer:
    def __init__(self):
        self.phase_sounds: list[Phase] = []
        self.ticks = 0

    def play_phase_change_sound(self, phase):
        self.phase_sounds.append(phase)

    def play_tick_sound(self):
        self.ticks += 1


class RecordingSleepPreventer:
    """Hands out plain object tokens and tracks which are held."""

    def __init__(self):
        self.held: list[object] = []
        self.acquired = 0
        self.released = 0

    @property
    def active_count(self) -> int:
        return len(self.held)

    def acquire(self, reason):
        token = object()
        self.held.append(token)
        self.acquired += 1
        return token

    def release(self, token):
        if token in self.held:
            self.held.remove(token)
            self.released += 1

    def release_all(self):
        for token in list(self.held):
            self.release(token)


class RecordingListener:
    def __init__(self):
        self.events = []

    def __call__(self, snapshot, event):
        self.events.append((snapshot, event))

    @property
    def kinds(self):
        return [event for _, event in self.events]


class RecordingRaiseHandler:
    def __init__(self):
        self.snapshots = []

    def bring_to_front(self, snapshot):
        self.snapshots.append(snapshot)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path):
    """Point the application log file at tmp_path and drop handlers afterwards."""
    import pomobar.utils.logger as logger_module

    log_dir = tmp_path / "logs"
    with patch.object(logger_module, "user_log_dir", return_value=str(log_dir)):
        logger_module._logger = None
        yield log_dir
    app_logger = logging.getLogger("pomobar")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.propagate = True
    logger_module._logger = None


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from pomobar.services.config_service import get_config_service

    get_config_service.cache_clear()
    with patch(
        "pomobar.services.config_service.user_config_dir",
        return_value=str(tmp_path / "config"),
    ):
        with patch(
            "pomobar.services.config_service.user_data_dir",
            return_value=str(tmp_path / "data"),
        ):
            from pomobar.services.config_service import ConfigService

            svc = ConfigService()
            yield svc
    get_config_service.cache_clear()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def day():
    return FakeDay(date(2026, 3, 2))


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def sounds():
    return RecordingSoundPlayer()


@pytest.fixture()
def sleep_preventer():
    return RecordingSleepPreventer()


@pytest.fixture()
def listener():
    return RecordingListener()


@pytest.fixture()
def short_durations():
    """Three-second work phases, long break after two sessions."""
    return PhaseDurations(work=3, short_break=2, long_break=4, sessions_before_long_break=2)


@pytest.fixture()
def make_engine(scheduler, store, day, notifier, sounds, sleep_preventer, listener):
    """Factory for an engine wired to the recording fakes."""

    def _make(durations: PhaseDurations | None = None, **kwargs) -> TimerEngine:
        kwargs.setdefault("tick_warning_seconds", 0)
        engine = TimerEngine(
            tracker=SessionTracker(store, clock=day),
            scheduler=scheduler,
            sleep_preventer=sleep_preventer,
            durations=durations,
            notifier=notifier,
            sound_player=sounds,
            **kwargs,
        )
        engine.add_listener(listener)
        return engine

    return _make
