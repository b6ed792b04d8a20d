"""Core module for ZPeaks - density smoothing, peak calling and sub-peak fitting."""

from zpeaks.core.domain.config import (
    OutputConfig,
    PdfConfig,
    PeakConfig,
    SubPeakConfig,
    ZPeaksConfig,
)

__all__ = [
    "OutputConfig",
    "PdfConfig",
    "PeakConfig",
    "SubPeakConfig",
    "ZPeaksConfig",
]
