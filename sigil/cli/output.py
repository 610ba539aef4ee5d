"""Terminal rendering for CLI results."""

from __future__ import annotations

from typing import Any, Dict, Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sigil.diagnostics import Diagnostic

console = Console()
error_console = Console(stderr=True)


def print_wire(payload: Dict[str, Any]) -> None:
    """Print a wire object as JSON."""
    console.print_json(data=payload)


def print_source(text: str) -> None:
    console.out(text, end="", highlight=False)


def print_diagnostics(diagnostics: Iterable[Diagnostic], *, source_name: str) -> None:
    """Render diagnostics as a table, one row per finding."""
    items = list(diagnostics)
    table = Table(title=f"{escape(source_name)}: {len(items)} diagnostic(s)", title_justify="left")
    table.add_column("Location", style="cyan", no_wrap=True)
    table.add_column("Code", style="bold red", no_wrap=True)
    table.add_column("Message", style="white")
    table.add_column("Hint", style="green")
    for diagnostic in items:
        table.add_row(
            f"{diagnostic.location.line}:{diagnostic.location.column}",
            diagnostic.code,
            escape(diagnostic.message),
            escape(diagnostic.hint or ""),
        )
    console.print(table)


def print_success(message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")


def print_error(message: str) -> None:
    error_console.print(f"[red]error:[/red] {escape(message)}")


__all__ = ["console", "error_console", "print_wire", "print_source", "print_diagnostics", "print_success", "print_error"]
