"""Dense per-chromosome signal containers: raw coverage and smoothed density."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

from zpeaks.core.shared.typing import FloatArray


class SignalData(Protocol):
    """Anything indexable by chromosome position with a known length."""

    chr_length: int

    @property
    def values(self) -> FloatArray: ...


@dataclass(frozen=True)
class Coverage:
    """Raw pile-up values for one chromosome.

    Attributes
    ----------
        chrom: Chromosome name
        values: One value per base pair, 0-based
        chr_length: Chromosome length (defaults to ``len(values)``)
    """

    chrom: str
    values: FloatArray
    chr_length: int = -1
    sum: float = field(init=False)

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        values.setflags(write=False)
        object.__setattr__(self, "values", values)
        if self.chr_length < 0:
            object.__setattr__(self, "chr_length", len(values))
        object.__setattr__(self, "sum", float(values.sum()))

    def __getitem__(self, position: int) -> float:
        return float(self.values[position])

    def __len__(self) -> int:
        return self.chr_length


@dataclass(frozen=True)
class Background:
    """Null-model summary statistics used as the significance reference."""

    average: float
    std_dev: float

    @property
    def is_degenerate(self) -> bool:
        """Zero average or spread means the unit has no usable signal."""
        return self.average == 0.0 or self.std_dev == 0.0


@dataclass(frozen=True)
class PDF:
    """Smoothed coverage ("density") of one chromosome plus its background."""

    values: FloatArray
    background: Background
    chr_length: int

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    def __getitem__(self, position: int) -> float:
        return float(self.values[position])

    def __len__(self) -> int:
        return self.chr_length

    def z_scores(self) -> FloatArray:
        """Number of background standard deviations above the background mean."""
        return (self.values - self.background.average) / self.background.std_dev


__all__ = ["PDF", "Background", "Coverage", "SignalData"]
