"""Thin wrapper around rich.Console with project theme and helper functions."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "heading": "bold cyan",
        "success": "bold green",
        "error": "bold red",
        "muted": "dim",
    }
)

_console: Console | None = None


def get_console() -> Console:
    """Return the singleton Console instance."""
    global _console
    if _console is None:
        _console = Console(theme=_THEME)
    return _console


def set_console(console: Console) -> None:
    """Replace the singleton Console (test seam)."""
    global _console
    _console = console


def print_heading(label: str) -> None:
    get_console().print(f"\n[heading]{escape(label)}[/heading]")


def print_success(msg: str) -> None:
    """Print a bold green success message."""
    get_console().print(f"[success]{escape(msg)}[/success]")


def print_error(msg: str) -> None:
    """Print a bold red error message."""
    get_console().print(f"[error]{escape(msg)}[/error]")


def print_muted(text: str) -> None:
    """Print dim text for secondary info."""
    get_console().print(f"[muted]{escape(text)}[/muted]")


def print_table(title: str, columns: list[str], rows: list[list[str]]) -> None:
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    get_console().print(table)
