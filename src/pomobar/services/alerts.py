"""Fire-and-forget collaborators invoked by the engine: notifications, sounds
and the ``raise`` request.

Every implementation swallows only ``OSError`` from spawning helper
processes, logs it, and returns; nothing here may stall the tick loop.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from rich.console import Console

from pomobar.models.phase import Phase
from pomobar.utils.ui.formatters import format_clock

if TYPE_CHECKING:
    from pomobar.services.engine import TimerSnapshot


class NotificationScheduler(Protocol):
    def schedule_phase_complete_notification(self, phase: Phase, session_count: int) -> None: ...


class SoundPlayer(Protocol):
    def play_phase_change_sound(self, phase: Phase) -> None: ...

    def play_tick_sound(self) -> None: ...


class RaiseHandler(Protocol):
    def bring_to_front(self, snapshot: "TimerSnapshot") -> None: ...


def completion_message(phase: Phase, session_count: int) -> tuple[str, str]:
    """Title and body of the notification shown when ``phase`` ends."""
    if phase is Phase.WORK:
        return (
            f"{phase.icon} Work Session Complete!",
            f"Session {session_count} finished. Time for a break?",
        )
    return f"{phase.icon} Break Time Over!", "Ready to get back to work?"


def _spawn(argv: list[str], logger: logging.Logger) -> subprocess.Popen | None:
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.warning("Failed to run %s: %s", argv[0], e)
        return None


def _applescript_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class DesktopNotifier:
    """Posts desktop notifications via ``osascript`` or ``notify-send``."""

    def __init__(
        self,
        enabled: bool = True,
        platform: str = sys.platform,
        which: Callable[[str], str | None] = shutil.which,
        logger: logging.Logger | None = None,
    ):
        self.enabled = enabled
        self._platform = platform
        self._which = which
        self._logger = logger or logging.getLogger("pomobar.alerts")

    def command_for(self, title: str, body: str) -> list[str] | None:
        if self._platform == "darwin":
            osascript = self._which("osascript")
            if osascript:
                script = (
                    f"display notification {_applescript_string(body)} "
                    f"with title {_applescript_string(title)}"
                )
                return [osascript, "-e", script]
        elif self._platform.startswith("linux"):
            notify_send = self._which("notify-send")
            if notify_send:
                return [notify_send, "--app-name=pomobar", title, body]
        return None

    def notify(self, title: str, body: str, force: bool = False) -> None:
        """Post a notification; ``force`` ignores the ``enabled`` switch."""
        if not self.enabled and not force:
            return
        argv = self.command_for(title, body)
        if argv is None:
            self._logger.info("Notification (no backend): %s - %s", title, body)
            return
        _spawn(argv, self._logger)

    def schedule_phase_complete_notification(self, phase: Phase, session_count: int) -> None:
        title, body = completion_message(phase, session_count)
        self.notify(title, body)


# System sound names per phase, as shipped with macOS
PHASE_SOUNDS = {
    Phase.WORK: "Glass",
    Phase.SHORT_BREAK: "Ping",
    Phase.LONG_BREAK: "Sosumi",
}
TICK_SOUND = "Tink"


class SystemSoundPlayer:
    """Plays named system sounds with ``afplay``; elsewhere rings the terminal bell."""

    def __init__(
        self,
        enabled: bool = True,
        platform: str = sys.platform,
        which: Callable[[str], str | None] = shutil.which,
        console: Console | None = None,
        logger: logging.Logger | None = None,
    ):
        self.enabled = enabled
        self._platform = platform
        self._which = which
        self._console = console or Console(stderr=True)
        self._logger = logger or logging.getLogger("pomobar.alerts")

    def command_for(self, sound: str, volume: float = 1.0) -> list[str] | None:
        if self._platform != "darwin":
            return None
        afplay = self._which("afplay")
        if not afplay:
            return None
        return [afplay, "-v", f"{volume:.1f}", f"/System/Library/Sounds/{sound}.aiff"]

    def _play(self, sound: str, volume: float = 1.0) -> None:
        if not self.enabled:
            return
        argv = self.command_for(sound, volume)
        if argv is None:
            try:
                self._console.bell()
            except OSError as e:
                self._logger.warning("Failed to ring the terminal bell: %s", e)
            return
        _spawn(argv, self._logger)

    def play_phase_change_sound(self, phase: Phase) -> None:
        self._play(PHASE_SOUNDS[phase])

    def play_tick_sound(self) -> None:
        self._play(TICK_SOUND, volume=0.3)


class NotifyingRaiseHandler:
    """Answers ``raise`` by surfacing the current status as a notification.

    The timer process has no window of its own; a UI that does can supply
    its own ``RaiseHandler``.
    """

    def __init__(self, notifier: DesktopNotifier):
        self._notifier = notifier

    def bring_to_front(self, snapshot: "TimerSnapshot") -> None:
        state = "running" if snapshot.is_running else "paused"
        self._notifier.notify(
            f"{snapshot.phase.icon} {snapshot.phase.label}",
            f"{format_clock(snapshot.time_remaining)} left ({state}) - "
            f"{snapshot.session_count} sessions today",
            force=True,
        )
