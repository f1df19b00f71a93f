"""Command intake for the timer process.

Commands arrive as independent invocations (``pomobar toggle``, a
``pomobar://skip`` URL ...) that each drop one token into an inbox
directory. The timer process drains the inbox on its event loop and applies
each token as exactly one engine call, in arrival order.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from enum import Enum
from itertools import count
from pathlib import Path
from urllib.parse import urlsplit

from pomobar.exceptions import InvalidCommand
from pomobar.utils.files import atomic_write_text

from .alerts import RaiseHandler
from .engine import TimerEngine


class Command(str, Enum):
    TOGGLE = "toggle"
    START = "start"
    PAUSE = "pause"
    RESET = "reset"
    SKIP = "skip"
    RAISE = "raise"

    @property
    def mutates_state(self) -> bool:
        return self is not Command.RAISE


# Spellings accepted by the URL handler of the original macOS app
_ALIASES = {
    "toggle-timer": Command.TOGGLE,
    "reset-timer": Command.RESET,
    "skip-phase": Command.SKIP,
    "show-app": Command.RAISE,
}


def parse_command(token: str) -> Command:
    """Resolve a command token; raises ``InvalidCommand``."""
    normalized = token.strip().lower()
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    try:
        return Command(normalized)
    except ValueError:
        raise InvalidCommand(token) from None


def parse_trigger_url(url: str, scheme: str = "pomobar") -> Command:
    """Resolve a ``<scheme>://<command>`` trigger; raises ``InvalidCommand``."""
    parts = urlsplit(url.strip())
    if parts.scheme.lower() != scheme.lower():
        raise InvalidCommand(url, f"Unknown URL scheme {parts.scheme!r} in {url!r}")

    token = parts.netloc or parts.path.strip("/")
    if not token:
        raise InvalidCommand(url, f"No command found in URL {url!r}")
    return parse_command(token)


class CommandInbox:
    """Directory of pending command tokens, one file per invocation.

    File names sort by submission time so draining preserves order.
    """

    SUFFIX = ".cmd"
    _sequence = count()

    def __init__(self, directory: Path, logger: logging.Logger | None = None):
        self.directory = directory
        self._logger = logger or logging.getLogger("pomobar.commands")

    def post(self, command: Command | str) -> Path:
        """Submit a token; raises ``OSError`` when the inbox is not writable."""
        token = command.value if isinstance(command, Command) else command
        name = (
            f"{time.time_ns():020d}-{os.getpid()}-{next(self._sequence):06d}-"
            f"{uuid.uuid4().hex[:8]}{self.SUFFIX}"
        )
        path = self.directory / name
        atomic_write_text(path, token)
        return path

    def pending(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(f"*{self.SUFFIX}"))

    def drain(self) -> list[str]:
        """Remove and return every pending token, oldest first."""
        tokens = []
        for path in self.pending():
            try:
                token = path.read_text(encoding="utf-8")
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                self._logger.error("Cannot consume command file %s: %s", path.name, e)
                continue
            tokens.append(token.strip())
        return tokens

    def purge(self) -> int:
        """Drop pending tokens without applying them."""
        dropped = self.drain()
        if dropped:
            self._logger.warning("Discarded %d stale command(s): %s", len(dropped), dropped)
        return len(dropped)


class CommandChannel:
    """Maps command tokens onto engine operations."""

    def __init__(
        self,
        engine: TimerEngine,
        *,
        raise_handler: RaiseHandler | None = None,
        logger: logging.Logger | None = None,
    ):
        self._engine = engine
        self._raise_handler = raise_handler
        self._logger = logger or logging.getLogger("pomobar.commands")
        self._operations = {
            Command.TOGGLE: engine.toggle,
            Command.START: engine.start,
            Command.PAUSE: engine.pause,
            Command.RESET: engine.reset,
            Command.SKIP: engine.skip,
        }

    def dispatch(self, command: Command) -> bool:
        """Apply one command. Returns whether the timer state changed."""
        if not command.mutates_state:
            self._logger.info("Command received: raise")
            if self._raise_handler is not None:
                try:
                    self._raise_handler.bring_to_front(self._engine.snapshot())
                except Exception:
                    self._logger.exception("Raise handler failed")
            return False

        changed = self._operations[command]()
        self._logger.info(
            "Command received: %s (%s)", command.value, "applied" if changed else "no change"
        )
        return changed

    def submit(self, token: str) -> bool:
        """Parse and apply a raw token; raises ``InvalidCommand``."""
        return self.dispatch(parse_command(token))

    def process_inbox(self, inbox: CommandInbox) -> int:
        """Apply every pending token. Unknown tokens are logged and dropped."""
        applied = 0
        for token in inbox.drain():
            try:
                self.submit(token)
            except InvalidCommand as e:
                self._logger.warning("Rejected command: %s", e)
                continue
            applied += 1
        return applied
