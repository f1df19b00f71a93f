"""Output formatters for different formats."""

import json
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

console = Console()


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False))
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        formatted_key = key.replace("_", " ").title()
        if isinstance(value, bool):
            formatted_value = "✓" if value else "✗"
        elif isinstance(value, dict):
            formatted_value = ", ".join(f"{k}={v}" for k, v in value.items())
        elif value is None:
            formatted_value = "-"
        else:
            formatted_value = str(value)
        table.add_row(formatted_key, formatted_value)

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


# ============================================================================
# Helper Functions
# ============================================================================


def format_clock(seconds: int) -> str:
    """Render a countdown as MM:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def get_progress_bar(percentage: float) -> str:
    """Get a progress bar representation."""
    filled = int(max(0.0, min(100.0, percentage)) / 10)
    empty = 10 - filled
    return "▓" * filled + "░" * empty
