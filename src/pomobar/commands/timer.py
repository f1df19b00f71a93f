"""Timer commands: the foreground timer process, control commands and status."""

import logging
from typing import Annotated

import typer

from pomobar.exceptions import StaleOrDisconnectedSource
from pomobar.models.phase import Phase
from pomobar.services.command_channel import (
    Command,
    CommandInbox,
    parse_command,
    parse_trigger_url,
)
from pomobar.services.config_service import ConfigService, get_config_service
from pomobar.services.runtime import AppPaths, run_daemon
from pomobar.services.state_reader import ReadResult, StateReader
from pomobar.utils import exit_codes
from pomobar.utils.logger import enable_console_logging
from pomobar.utils.ui.console import get_console
from pomobar.utils.ui.formatters import (
    format_clock,
    format_output,
    format_success,
    format_warning,
    get_progress_bar,
)

from .decorators import command_wrapper

app = typer.Typer()
console = get_console()

NOT_LIVE_LABEL = "-- --:--"


def _reader(config_service: ConfigService, window: float | None = None) -> StateReader:
    return StateReader(
        config_service.state_file,
        staleness_window=window or config_service.config.export.staleness_window_seconds,
    )


def _post(command: Command) -> None:
    """Hand ``command`` to the running timer process via its inbox."""
    config_service = get_config_service()
    result = _reader(config_service).read()
    if not result.owner_alive:
        raise StaleOrDisconnectedSource(
            f"Timer is not running ({result.reason}). Start it with 'pomobar run'."
        )

    CommandInbox(config_service.inbox_dir).post(command)
    format_success(f"Sent '{command.value}' to timer process {result.state.process_id}")


@app.command("run")
@command_wrapper
def run_command(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Mirror the log to stderr")
    ] = False,
) -> None:
    """Run the timer process in the foreground (Ctrl+C to stop)."""
    if verbose:
        enable_console_logging(logging.INFO)

    config_service = get_config_service()
    console.print(
        f"[bold]Pomobar[/bold] running, state file [cyan]{config_service.state_file}[/cyan]"
    )
    run_daemon(config_service.config, AppPaths.from_config_service(config_service))


@app.command("toggle")
@command_wrapper
def toggle_command() -> None:
    """Start the timer when paused, pause it when running."""
    _post(Command.TOGGLE)


@app.command("start")
@command_wrapper
def start_command() -> None:
    """Start the countdown of the current phase."""
    _post(Command.START)


@app.command("pause")
@command_wrapper
def pause_command() -> None:
    """Pause the countdown."""
    _post(Command.PAUSE)


@app.command("reset")
@command_wrapper
def reset_command() -> None:
    """Refill the current phase and stop."""
    _post(Command.RESET)


@app.command("skip")
@command_wrapper
def skip_command() -> None:
    """Move on to the next phase."""
    _post(Command.SKIP)


@app.command("raise")
@command_wrapper
def raise_command() -> None:
    """Ask the timer process to show itself."""
    _post(Command.RAISE)


@app.command("send")
@command_wrapper
def send_command(
    token: Annotated[str, typer.Argument(help="Command token, e.g. toggle or skip-phase")],
) -> None:
    """Send a raw command token to the timer process."""
    _post(parse_command(token))


@app.command("open")
@command_wrapper
def open_command(
    url: Annotated[str, typer.Argument(help="Trigger URL, e.g. pomobar://toggle")],
) -> None:
    """Handle a URL-style trigger."""
    scheme = get_config_service().config.commands.url_scheme
    _post(parse_trigger_url(url, scheme=scheme))


def status_label(result: ReadResult) -> str:
    """Compact one-line status for status bars."""
    if not result.is_live:
        return NOT_LIVE_LABEL
    phase = Phase.from_label(result.state.phase)
    return f"{phase.icon} {format_clock(result.state.time_remaining_seconds)}"


def status_payload(result: ReadResult, sessions_per_cycle: int) -> dict:
    data: dict = {"status": result.status.value, "reason": result.reason}
    state = result.state
    if state is None:
        return data

    data.update(
        {
            "phase": state.phase,
            "time_remaining": format_clock(state.time_remaining_seconds),
            "time_remaining_seconds": state.time_remaining_seconds,
            "total_duration_seconds": state.total_duration_seconds,
            "progress_percent": round(state.progress_percent, 1),
            "is_running": state.is_running,
            "session_count": state.session_count,
            "session": f"{state.session_count % sessions_per_cycle + 1}/{sessions_per_cycle}",
            "process_id": state.process_id,
            "age_seconds": None if result.age_seconds is None else round(result.age_seconds, 1),
        }
    )
    return data


@app.command("status")
@command_wrapper
def status_command(
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output format: pretty, json, yaml or label"),
    ] = "pretty",
    window: Annotated[
        float | None,
        typer.Option("--window", help="Staleness window in seconds"),
    ] = None,
) -> None:
    """Show the timer state as published by the timer process.

    Exits with code 5 unless the state is live. A paused timer writes
    nothing, so once the staleness window has passed it shows as stale;
    raise --window to keep a long pause live.
    """
    config_service = get_config_service()
    result = _reader(config_service, window).read()

    if output == "label":
        print(status_label(result))
    elif output in ("json", "yaml"):
        format_output(
            status_payload(result, config_service.config.timer.sessions_before_long_break),
            output,
        )
    else:
        _print_pretty(result, config_service.config.timer.sessions_before_long_break)

    if not result.is_live:
        raise typer.Exit(code=exit_codes.ERROR_NOT_FOUND)


def _print_pretty(result: ReadResult, sessions_per_cycle: int) -> None:
    state = result.state
    if state is None:
        format_warning(f"Timer is {result.status.value}: {result.reason}")
        return

    phase = Phase.from_label(state.phase)
    run_state = "[green]running[/green]" if state.is_running else "[yellow]paused[/yellow]"
    console.print(
        f"{phase.icon} [bold]{phase.label}[/bold]  "
        f"[cyan]{format_clock(state.time_remaining_seconds)}[/cyan]  {run_state}"
    )
    console.print(f"{get_progress_bar(state.progress_percent)} {state.progress_percent:.0f}%")
    console.print(
        f"Session {state.session_count % sessions_per_cycle + 1}/{sessions_per_cycle}"
        f"  ·  {state.session_count} completed today"
    )
    if not result.is_live:
        format_warning(f"Timer is {result.status.value}: {result.reason}")
