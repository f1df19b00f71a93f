"""Idle-sleep prevention held while the timer is running.

Backed by ``caffeinate`` on macOS and ``systemd-inhibit`` on Linux. When no
backend is available a token is still handed out so callers never have to
special-case the platform.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import count

_token_ids = count(1)


@dataclass
class SleepToken:
    """Handle for one acquisition. Releasing it more than once is harmless."""

    reason: str
    process: subprocess.Popen | None = None
    released: bool = False
    token_id: int = field(default_factory=lambda: next(_token_ids))


def inhibitor_command(
    reason: str,
    platform: str = sys.platform,
    which: Callable[[str], str | None] = shutil.which,
) -> list[str] | None:
    """Build the argv of a process that blocks idle sleep while it lives."""
    if platform == "darwin":
        caffeinate = which("caffeinate")
        if caffeinate:
            return [caffeinate, "-i", "-w", str(os.getpid())]
    elif platform.startswith("linux"):
        inhibit = which("systemd-inhibit")
        if inhibit:
            return [
                inhibit,
                "--what=idle:sleep",
                "--who=pomobar",
                f"--why={reason}",
                "--mode=block",
                "sleep",
                "infinity",
            ]
    return None


class SleepPreventer:
    """Acquire/release interface over the platform sleep inhibitor."""

    def __init__(
        self,
        enabled: bool = True,
        command_factory: Callable[[str], list[str] | None] = inhibitor_command,
        logger: logging.Logger | None = None,
    ):
        self.enabled = enabled
        self._command_factory = command_factory
        self._logger = logger or logging.getLogger("pomobar.sleep")
        self._held: dict[int, SleepToken] = {}

    @property
    def active_count(self) -> int:
        return len(self._held)

    def acquire(self, reason: str) -> SleepToken:
        token = SleepToken(reason=reason)
        self._held[token.token_id] = token

        argv = self._command_factory(reason) if self.enabled else None
        if argv is None:
            self._logger.debug("Sleep prevention unavailable, holding no-op token: %s", reason)
            return token

        try:
            token.process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            self._logger.warning("Failed to start sleep inhibitor %s: %s", argv[0], e)
            return token

        self._logger.debug("Sleep prevention started (pid %s): %s", token.process.pid, reason)
        return token

    def release(self, token: SleepToken) -> None:
        if token.released:
            return
        token.released = True
        self._held.pop(token.token_id, None)

        process = token.process
        if process is None or process.poll() is not None:
            self._logger.debug("Sleep prevention released: %s", token.reason)
            return

        process.terminate()
        try:
            process.wait(timeout=2)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        self._logger.debug("Sleep prevention stopped (pid %s)", process.pid)

    def release_all(self) -> None:
        for token in list(self._held.values()):
            self.release(token)
