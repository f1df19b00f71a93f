"""Main entry point for Pomobar."""

import typer

from pomobar import __version__
from pomobar.commands import config, timer
from pomobar.utils.typer_helpers import SuggestingGroup
from pomobar.utils.ui.console import get_console

# Create main app with custom group class
app = typer.Typer(
    name="pomobar",
    cls=SuggestingGroup,
    help="A Pomodoro timer that publishes its state for status bars",
    no_args_is_help=True,
)

console = get_console(highlight=False)


# Timer commands (run, toggle, status ...) live at the top level
app.registered_commands.extend(timer.app.registered_commands)
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Pomobar[/bold] version [cyan]{__version__}[/cyan]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
