"""Results of the sub-peak decomposition."""

from __future__ import annotations

from dataclasses import dataclass, field

from zpeaks.core.domain.regions import Region
from zpeaks.core.domain.parameters import GaussianParameters


@dataclass(frozen=True, slots=True)
class SubPeak:
    """One fitted component in absolute chromosome coordinates."""

    region: Region
    score: float
    parameters: GaussianParameters


@dataclass(frozen=True, slots=True)
class ReplicatedSubPeak:
    """Sub-peak with the average SSE increase across replicates on removal."""

    region: Region
    score: float
    parameters: GaussianParameters
    replication_score: float


@dataclass(frozen=True, slots=True)
class Fit:
    """Decomposition of one (possibly split) peak region.

    Attributes
    ----------
        region: Absolute region covered by the fitted curve
        sub_peaks: Components sorted by mean
        background: Value subtracted from the curve before fitting
        error: RMS residual on the scaled curve
    """

    region: Region
    sub_peaks: list[SubPeak] = field(default_factory=list)
    background: float = 0.0
    error: float = 0.0


@dataclass(frozen=True, slots=True)
class ReplicatedFit:
    region: Region
    sub_peaks: list[ReplicatedSubPeak] = field(default_factory=list)
    background: float = 0.0
    error: float = 0.0


__all__ = ["Fit", "ReplicatedFit", "ReplicatedSubPeak", "SubPeak"]
