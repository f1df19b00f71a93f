"""Delayed-callback scheduling used by the engine's 1 Hz tick."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs ``callback`` once after ``delay`` seconds on the engine's context."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TickHandle: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop.

    All engine callbacks then run on the loop thread, the same context the
    command inbox is drained on.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(delay, callback)
