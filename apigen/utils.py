"""Shared utility functions for apigen.

Provides resource naming helpers and Rich-based operator output.  Core
components never print; the CLI renders their results through the helpers
below.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Resource naming
# ---------------------------------------------------------------------------


def singularize(name: str) -> str:
    """Strip one trailing ``s``.

    Examples::

        singularize("widgets") -> "widget"
        singularize("widget")  -> "widget"
    """
    return name[:-1] if name.endswith("s") else name


def pluralize(name: str) -> str:
    """Append an ``s`` unless the name already ends with one."""
    return name if name.endswith("s") else name + "s"


def capitalize(value: str) -> str:
    """Upper-case the first character only (``"fooBar"`` -> ``"FooBar"``)."""
    return value[:1].upper() + value[1:]


def display_path(path: str | Path, root: str | Path) -> str:
    """Return *path* relative to *root* when possible, for console output."""
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return str(path)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a dimmed informational line."""
    console.print(f"[dim]{message}[/dim]")


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Field", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(str(key), str(value))

    console.print(table)


def print_records_table(records: list[dict[str, Any]], title: str) -> None:
    """Print a list of instance records, one row per record.

    Columns are the union of every record's keys in first-seen order.
    """
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)

    table = Table(title=title, show_header=True, header_style="bold cyan")
    for column in columns:
        table.add_column(column, no_wrap=column == "id")
    for record in records:
        table.add_row(*(_cell(record.get(column)) for column in columns))

    console.print(table)


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    return str(value)
