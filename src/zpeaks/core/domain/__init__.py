"""Domain models representing core ZPeaks entities."""

from zpeaks.core.domain.config import (
    OutputConfig,
    PdfConfig,
    PeakConfig,
    SubPeakConfig,
    ZPeaksConfig,
)
from zpeaks.core.domain.coverage import PDF, Background, Coverage
from zpeaks.core.domain.fits import Fit, ReplicatedFit, ReplicatedSubPeak, SubPeak
from zpeaks.core.domain.parameters import (
    CandidateGaussian,
    GaussianParameters,
    SkewGaussianParameters,
    StandardGaussianParameters,
)
from zpeaks.core.domain.regions import Peak, Region, ReplicatedRegion

__all__ = [
    "PDF",
    "Background",
    "CandidateGaussian",
    "Coverage",
    "Fit",
    "GaussianParameters",
    "OutputConfig",
    "PdfConfig",
    "Peak",
    "PeakConfig",
    "Region",
    "ReplicatedFit",
    "ReplicatedRegion",
    "ReplicatedSubPeak",
    "SkewGaussianParameters",
    "StandardGaussianParameters",
    "SubPeak",
    "SubPeakConfig",
    "ZPeaksConfig",
]
