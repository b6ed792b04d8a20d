"""Gaussian component parameters for the two supported families."""

from __future__ import annotations

from dataclasses import dataclass

from zpeaks.core.domain.regions import Region


@dataclass(frozen=True, slots=True)
class StandardGaussianParameters:
    """Symmetric Gaussian component.

    ``amplitude`` is a square-root scale: the curve height at ``mean`` is
    ``amplitude**2 / std_dev``.
    """

    amplitude: float
    mean: float
    std_dev: float

    @property
    def height(self) -> float:
        return self.amplitude**2 / self.std_dev


@dataclass(frozen=True, slots=True)
class SkewGaussianParameters:
    """Skew-normal component; ``shape == 0`` is the symmetric Gaussian."""

    amplitude: float
    mean: float
    std_dev: float
    shape: float = 0.0

    @property
    def height(self) -> float:
        return self.amplitude**2 / self.std_dev


GaussianParameters = StandardGaussianParameters | SkewGaussianParameters


@dataclass(frozen=True, slots=True)
class CandidateGaussian:
    """Proposed component before nonlinear refinement."""

    region: Region
    parameters: GaussianParameters


__all__ = [
    "CandidateGaussian",
    "GaussianParameters",
    "SkewGaussianParameters",
    "StandardGaussianParameters",
]
