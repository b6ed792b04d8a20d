"""UI messages and status indicators."""

from __future__ import annotations

from typing import Any

from rich import box
from rich.table import Table

from zpeaks.ui.console import console


def show_header(text: str) -> None:
    """Display a prominent section header."""
    console.print("[header]" + "━" * 60 + "[/header]")
    console.print(f"[header]  {text}[/header]")
    console.print("[header]" + "━" * 60 + "[/header]")


def success(message: str) -> None:
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    console.print(f"[warning]⚠[/warning]  {message}")


def error(message: str) -> None:
    console.print(f"[error]✗[/error] {message}")


def info(message: str) -> None:
    console.print(f"[dim]▸[/dim] {message}")


def action(message: str) -> None:
    """Display an action/process message with visual separation."""
    console.print(f"\n[bold yellow]→[/bold yellow] {message}")


def print_summary(items: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column summary table."""
    table = Table(
        title=title,
        title_style="header",
        box=box.ROUNDED,
        show_header=False,
        border_style="dim",
    )
    table.add_column("Item", style="metric")
    table.add_column("Value", style="value")
    for key, value in items.items():
        table.add_row(key, str(value))
    console.print(table)


__all__ = ["action", "error", "info", "print_summary", "show_header", "success", "warning"]
