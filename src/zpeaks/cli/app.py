"""Main Typer application for ZPeaks.

This module provides a thin orchestration layer that creates the Typer
application and registers the commands from the commands/ subpackage.
"""

from typing import Annotated

import typer

from zpeaks.cli.callbacks import version_callback
from zpeaks.cli.commands import init_command, run_command

app = typer.Typer(
    name="zpeaks",
    help="ZPeaks - Peak calling and Gaussian sub-peak decomposition of genome coverage",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """ZPeaks - Call significant peaks from coverage and split them into sub-peaks.

    Smooths per-base-pair coverage into a density, thresholds it against a
    Monte-Carlo background and fits Gaussian components to every peak.
    """


app.command(name="run")(run_command)
app.command(name="init")(init_command)
