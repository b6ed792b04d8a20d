"""Run command implementation."""

from __future__ import annotations

import logging
import pathlib  # noqa: TC003
from typing import Annotated, Any

import typer

from zpeaks.core.domain.config import ZPeaksConfig
from zpeaks.core.shared.exceptions import ZPeaksError
from zpeaks.io.config import load_config
from zpeaks.services.run import RunConfig, run
from zpeaks.ui import (
    VERSION,
    ConsoleReporter,
    close_logging,
    error,
    print_summary,
    setup_logging,
    show_header,
)


def _apply_overrides(settings: ZPeaksConfig, overrides: dict[str, dict[str, Any]]) -> ZPeaksConfig:
    """Return ``settings`` with every non-None CLI value applied, revalidated."""
    data = settings.model_dump()
    for section, values in overrides.items():
        for key, value in values.items():
            if value is None:
                continue
            if section:
                data[section][key] = value
            else:
                data[key] = value
    return ZPeaksConfig.model_validate(data)


def run_command(
    inputs: Annotated[
        list[pathlib.Path],
        typer.Argument(
            help="Coverage files (bedGraph or bigWig)",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="How inputs are combined: single, bottom_up, top_down, replicated",
        ),
    ] = "single",
    config: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to TOML configuration file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    peaks: Annotated[
        pathlib.Path | None,
        typer.Option("--peaks", "-p", help="Output BED file for peaks"),
    ] = None,
    sub_peaks: Annotated[
        pathlib.Path | None,
        typer.Option("--sub-peaks", "-s", help="Output BED file for sub-peaks"),
    ] = None,
    signal: Annotated[
        pathlib.Path | None,
        typer.Option("--signal", help="Output signal track"),
    ] = None,
    signal_format: Annotated[
        str | None,
        typer.Option("--signal-format", help="Signal track format: bedgraph, wig, bigwig"),
    ] = None,
    signal_source: Annotated[
        str | None,
        typer.Option("--signal-source", help="Signal track content: pdf, coverage"),
    ] = None,
    bandwidth: Annotated[
        float | None,
        typer.Option("--bandwidth", "-b", help="Smoothing bandwidth in base pairs (default: 50)", min=0.0),
    ] = None,
    normalize: Annotated[
        bool | None,
        typer.Option("--normalize/--no-normalize", help="Normalize the density by total coverage"),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option("--threshold", "-t", help="Standard deviations above background (default: 6)"),
    ] = None,
    fit_mode: Annotated[
        str | None,
        typer.Option("--fit-mode", "-f", help="Sub-peak Gaussian family: skew, standard"),
    ] = None,
    chrom_filter: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--chrom-filter",
            help="Chromosome filter file ('chrom' or 'chrom start-end' per line)",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", help="Worker threads (default: CPU count)", min=1),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed for the background model", min=0),
    ] = None,
    log_file: Annotated[
        pathlib.Path | None,
        typer.Option("--log-file", help="Write a log file (.json for JSON lines)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show progress logging"),
    ] = False,
) -> None:
    """Call peaks and fit sub-peaks on coverage tracks.

    Examples
    --------
    Peaks and skew sub-peaks of one track:
        $ zpeaks run sample.bedGraph --peaks peaks.bed --sub-peaks sub_peaks.bed

    Consensus peaks of replicates:
        $ zpeaks run rep1.bedGraph rep2.bedGraph --mode replicated -s sub_peaks.bed

    Using a configuration file:
        $ zpeaks run sample.bedGraph --config zpeaks.toml
    """
    try:
        settings = load_config(config) if config is not None else ZPeaksConfig()
        settings = _apply_overrides(
            settings,
            {
                "": {"workers": workers},
                "pdf": {"bandwidth": bandwidth, "normalize": normalize, "seed": seed},
                "peaks": {"threshold": threshold},
                "sub_peaks": {"mode": fit_mode},
                "output": {
                    "peaks": peaks,
                    "sub_peaks": sub_peaks,
                    "signal": signal,
                    "signal_format": signal_format,
                    "signal_source": signal_source,
                },
            },
        )
        run_config = RunConfig(inputs=inputs, mode=mode, chrom_filter=chrom_filter, settings=settings)
    except (ZPeaksError, ValueError) as e:
        error(str(e))
        raise typer.Exit(1) from e

    show_header(f"ZPeaks v{VERSION}")
    setup_logging(
        log_file,
        verbose=verbose,
        level=logging.DEBUG if verbose else logging.INFO,
        log_format=settings.output.log_format,
    )
    try:
        summary = run(run_config, ConsoleReporter())
    except ZPeaksError as e:
        error(str(e))
        raise typer.Exit(1) from e
    finally:
        close_logging()

    print_summary(
        {
            "Chromosomes processed": len(summary.processed),
            "Chromosomes skipped": len(summary.skipped),
            "Peaks": summary.n_peaks,
            "Sub-peaks": summary.n_sub_peaks,
            **{f"Output ({name})": path for name, path in summary.outputs.items()},
        },
        title="ZPeaks run",
    )
