"""Error kinds raised across Pomobar.

I/O-adjacent errors (state export, session persistence) are raised by the
low-level writers and caught at their origin; only the CLI layer turns a
``PomobarError`` into an exit code.
"""

from __future__ import annotations

from pomobar.utils import exit_codes


class PomobarError(Exception):
    """Base error with the exit code the CLI should use."""

    exit_code: int = exit_codes.ERROR_GENERAL

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidCommand(PomobarError):
    """An unrecognised command token or trigger URL."""

    exit_code = exit_codes.ERROR_INVALID_ARGS

    def __init__(self, token: str, message: str | None = None):
        super().__init__(message or f"Unknown command: {token!r}")
        self.token = token


class ExportWriteFailure(PomobarError):
    """The exported state file could not be written."""


class PersistenceReadFailure(PomobarError):
    """The daily session counter could not be read."""


class PersistenceWriteFailure(PomobarError):
    """The daily session counter could not be written."""


class StaleOrDisconnectedSource(PomobarError):
    """The exported state is missing, invalid, stale or owned by a dead process."""

    exit_code = exit_codes.ERROR_NOT_FOUND


class ConfigError(PomobarError):
    """The configuration file or a configuration value is invalid."""

    exit_code = exit_codes.ERROR_INVALID_ARGS


class DaemonAlreadyRunning(PomobarError):
    """Another live timer process owns the exported state file."""

    exit_code = exit_codes.ERROR_CONFLICT

    def __init__(self, pid: int):
        super().__init__(f"Timer process {pid} is already running")
        self.pid = pid
