"""Run-level configuration: inputs, aggregation strategy and settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from zpeaks.core.domain.config import ZPeaksConfig
from zpeaks.core.shared.exceptions import ConfigError

RunMode = Literal["single", "bottom_up", "top_down", "replicated"]


class RunConfig(BaseModel):
    """Everything a runner needs to process a set of coverage files.

    Attributes
    ----------
        inputs: bedGraph or bigWig coverage files
        mode: How multiple inputs are aggregated
        chrom_filter: Optional chromosome filter file
        settings: Smoothing, thresholding, fitting and output settings
    """

    model_config = ConfigDict(extra="forbid")

    inputs: list[Path] = Field(min_length=1, description="Coverage files (bedGraph or bigWig).")
    mode: RunMode = Field(default="single", description="Aggregation strategy for the inputs.")
    chrom_filter: Path | None = Field(default=None, description="Chromosome filter file.")
    settings: ZPeaksConfig = Field(default_factory=ZPeaksConfig)

    def check(self) -> None:
        """Fail fast on structurally unusable runs.

        Raises
        ------
            ConfigError: If no output is configured or the inputs do not fit the mode
        """
        if not self.settings.output.has_outputs():
            msg = "No output configured: set at least one of peaks, sub_peaks or signal"
            raise ConfigError(msg)
        if self.mode == "single" and len(self.inputs) != 1:
            msg = f"Single-file runs take exactly one input, got {len(self.inputs)}"
            raise ConfigError(msg)
        if self.mode == "replicated" and len(self.inputs) < 2:
            msg = "Replicated runs need at least two inputs"
            raise ConfigError(msg)


__all__ = ["RunConfig", "RunMode"]
