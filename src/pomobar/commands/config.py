"""Configuration management commands."""

from typing import Annotated

import typer
from platformdirs import user_log_dir

from pomobar.services.config_service import get_config_service
from pomobar.utils.ui.console import get_console
from pomobar.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(help="Configuration management commands", no_args_is_help=True)
console = get_console()


@app.command("show")
@command_wrapper
def show_config(
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """Show the current configuration."""
    format_output(get_config_service().config.model_dump(), output)


@app.command("get")
@command_wrapper
def get_config(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., timer.work_minutes)")],
) -> None:
    """Get a configuration value."""
    value = get_config_service().get_value(key)
    if isinstance(value, dict):
        format_output(value, "table")
    else:
        console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., timer.work_minutes)")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
) -> None:
    """Set a configuration value.

    Changes take effect the next time the timer process starts.
    """
    config_service = get_config_service()
    config_service.set_value(key, value)
    format_success(f"Configuration '{key}' set to '{config_service.get_value(key)}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: Annotated[str | None, typer.Argument(help="Configuration key to reset")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        confirm = typer.confirm(f"Are you sure you want to reset {msg}?")
        if not confirm:
            format_error("Cancelled")
            raise typer.Exit(0)

    get_config_service().reset_config(key)
    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")


@app.command("path")
@command_wrapper
def config_path(
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """Show where configuration, state and logs live."""
    config_service = get_config_service()
    format_output(
        {
            "config_file": str(config_service.config_path),
            "state_file": str(config_service.state_file),
            "command_inbox": str(config_service.inbox_dir),
            "sessions_file": str(config_service.sessions_file),
            "log_dir": user_log_dir("pomobar"),
        },
        output,
    )
