"""Output helpers: rich consoles, status lines, tables."""

from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


def is_piped() -> bool:
    return not sys.stdin.isatty() or not sys.stdout.isatty()


def output(data: Any, fmt: str | None = None) -> None:
    """Print ``data`` as JSON when fmt is "json", plain text otherwise."""
    if fmt == "json":
        if isinstance(data, (dict, list)):
            print(json.dumps(data, indent=2, default=str))
        else:
            print(json.dumps({"value": data}, default=str))
    else:
        console.print(str(data))


def output_table(rows: list[dict[str, str]], columns: list[str], title: str | None = None) -> None:
    table = Table(title=title)
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for row in rows:
        table.add_row(*[str(row.get(col, "")) for col in columns])
    console.print(table)


def heading(msg: str) -> None:
    console.print(f"[bold]=== {msg} ===[/bold]\n")


def error(msg: str) -> None:
    error_console.print(f"[red]✘ Error:[/red] {msg}")


def hint(msg: str) -> None:
    error_console.print(f"  {msg}", highlight=False)


def warn(msg: str) -> None:
    console.print(f"[yellow]{msg}[/yellow]")


def success(msg: str) -> None:
    console.print(f"[green]✔[/green] {msg}")


def info(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")


def show_cursor() -> None:
    console.show_cursor(True)
