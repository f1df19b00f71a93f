"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer

from pomobar.exceptions import PomobarError
from pomobar.utils.logger import get_logger
from pomobar.utils.ui.formatters import format_error


def command_wrapper(_func: Callable | None = None):
    """Decorator to wrap command functions with logging and error mapping.

    ``PomobarError`` becomes ``typer.Exit`` with the error's exit code.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                result = func(*args, **kwargs)
                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except PomobarError as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s",
                    cmd,
                    elapsed,
                    str(e),
                )
                format_error(str(e))
                raise typer.Exit(code=e.exit_code) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=1) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
