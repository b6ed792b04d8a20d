"""Typer callbacks for CLI."""

import typer

from zpeaks.ui import VERSION, console


def version_callback(value: bool | None) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"ZPeaks version {VERSION}")
        raise typer.Exit
