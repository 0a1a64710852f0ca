"""Shared console utilities for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tether.diagnostics import Severity

if TYPE_CHECKING:
    from tether.diagnostics import Diagnostics
    from tether.state import ResourceState

# Shared console instance for all CLI commands
console = Console()


def error(msg: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]{escape(msg)}[/red]")


def warning(msg: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]{escape(msg)}[/yellow]")


def success(msg: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]{escape(msg)}[/green]")


def dim(msg: str) -> None:
    """Print a dimmed message."""
    console.print(f"[dim]{escape(msg)}[/dim]")


def print_diagnostics(diags: Diagnostics) -> None:
    """Print each diagnostic with its severity and optional detail."""
    for diag in diags:
        if diag.severity is Severity.ERROR:
            error(f"Error: {diag.summary}")
        else:
            warning(f"Warning: {diag.summary}")
        if diag.detail:
            dim(diag.detail)


def state_table(state: ResourceState, title: str = "Entity alias") -> Table:
    """Render a resource state as a two-column table."""
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("id", escape(state.id) if state.id else "[dim]<none>[/dim]")
    for key, value in state.to_dict()["values"].items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in sorted(value.items()))
        table.add_row(key, escape(str(value)))
    return table
