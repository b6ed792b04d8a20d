"""CLI command modules for ZPeaks.

Each module exports one command function; app.py registers them with the
main Typer application.
"""

from zpeaks.cli.commands.init import init_command
from zpeaks.cli.commands.run import run_command

__all__ = ["init_command", "run_command"]
