"""Configuration models for ZPeaks runs."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from zpeaks.core.constants import ACCEPTABLE_ERROR, SUB_PEAKS_HARD_MAX, SUB_PEAKS_SOFT_MAX

FitMode = Literal["standard", "skew"]
SignalFormat = Literal["bedgraph", "wig", "bigwig"]
SignalSource = Literal["pdf", "coverage"]
LogFormat = Literal["text", "json"]


def _default_workers() -> int:
    return os.cpu_count() or 1


class PdfConfig(BaseModel):
    """Kernel-density smoothing of the raw coverage.

    Example TOML configuration:
        [pdf]
        bandwidth = 50.0
        normalize = false
        seed = 42
    """

    model_config = ConfigDict(extra="forbid")

    bandwidth: Annotated[float, Field(gt=0)] = Field(
        default=50.0,
        description="Standard deviation of the smoothing kernel, in base pairs.",
    )
    normalize: bool = Field(
        default=False,
        description="Scale the kernel to unit area and divide by the coverage sum.",
    )
    seed: Annotated[int, Field(ge=0)] | None = Field(
        default=None,
        description="Seed for the Monte-Carlo background model. Random if unset.",
    )


class PeakConfig(BaseModel):
    """Thresholding of the density against its background."""

    model_config = ConfigDict(extra="forbid")

    threshold: Annotated[float, Field(gt=0)] = Field(
        default=6.0,
        description="Standard deviations above the background average.",
    )


class SubPeakConfig(BaseModel):
    """Gaussian decomposition of called peaks."""

    model_config = ConfigDict(extra="forbid")

    mode: FitMode = Field(default="skew", description="Gaussian family used for sub-peaks.")
    soft_max: Annotated[int, Field(gt=0)] = Field(
        default=SUB_PEAKS_SOFT_MAX,
        description="Regions longer than this are split while their interior stays busy.",
    )
    hard_max: Annotated[int, Field(gt=0)] = Field(
        default=SUB_PEAKS_HARD_MAX,
        description="Regions longer than this are always split.",
    )
    acceptable_error: Annotated[float, Field(ge=0)] = Field(
        default=ACCEPTABLE_ERROR,
        description="RMS error on the scaled curve that ends the component search.",
    )

    @model_validator(mode="after")
    def check_limits(self) -> SubPeakConfig:
        if self.soft_max > self.hard_max:
            msg = f"soft_max ({self.soft_max}) cannot exceed hard_max ({self.hard_max})"
            raise ValueError(msg)
        return self


class OutputConfig(BaseModel):
    """Destinations for the results of a run.

    At least one of ``peaks``, ``sub_peaks`` or ``signal`` must be set for a
    run to produce anything.
    """

    model_config = ConfigDict(extra="forbid")

    peaks: Path | None = Field(default=None, description="BED file for called peaks.")
    sub_peaks: Path | None = Field(default=None, description="BED file for fitted sub-peaks.")
    signal: Path | None = Field(default=None, description="Signal track file.")
    signal_source: SignalSource = Field(
        default="pdf",
        description="Write the smoothed density or the raw coverage as the signal track.",
    )
    signal_format: SignalFormat = Field(default="bedgraph", description="Signal track format.")
    log_format: LogFormat = Field(
        default="text",
        description="Format for log file: text (human-readable) or json (structured).",
    )

    def has_outputs(self) -> bool:
        return any(path is not None for path in (self.peaks, self.sub_peaks, self.signal))


class ZPeaksConfig(BaseModel):
    """Top-level ZPeaks configuration.

    Example TOML configuration:
        workers = 8

        [pdf]
        bandwidth = 50.0

        [peaks]
        threshold = 6.0

        [sub_peaks]
        mode = "skew"

        [output]
        peaks = "peaks.bed"
        sub_peaks = "sub_peaks.bed"
    """

    model_config = ConfigDict(extra="forbid")

    pdf: PdfConfig = Field(default_factory=PdfConfig)
    peaks: PeakConfig = Field(default_factory=PeakConfig)
    sub_peaks: SubPeakConfig = Field(default_factory=SubPeakConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    workers: Annotated[int, Field(ge=1)] = Field(
        default_factory=_default_workers,
        description="Worker threads for per-chromosome and per-peak work.",
    )


__all__ = [
    "FitMode",
    "LogFormat",
    "OutputConfig",
    "PdfConfig",
    "PeakConfig",
    "SignalFormat",
    "SignalSource",
    "SubPeakConfig",
    "ZPeaksConfig",
]
