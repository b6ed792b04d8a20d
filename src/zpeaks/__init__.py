"""ZPeaks - Peak calling and Gaussian sub-peak decomposition of genome coverage.

Public API:
    - run: Run a configured aggregation strategy end to end
    - RunConfig, RunSummary: Run inputs and results

Configuration:
    - ZPeaksConfig: Main configuration object
    - PdfConfig, PeakConfig, SubPeakConfig, OutputConfig: Sub-configurations

Domain Objects:
    - Coverage, PDF, Region, Peak, SubPeak, Fit
"""

import contextlib
from importlib import metadata

__version__ = "0.1.0"

with contextlib.suppress(metadata.PackageNotFoundError):
    __version__ = metadata.version(__name__)

from zpeaks.core.domain import (  # noqa: E402
    PDF,
    Coverage,
    Fit,
    OutputConfig,
    PdfConfig,
    Peak,
    PeakConfig,
    Region,
    SubPeak,
    SubPeakConfig,
    ZPeaksConfig,
)
from zpeaks.services import RunConfig, RunSummary, run  # noqa: E402

__all__ = [
    # Version
    "__version__",
    # Services
    "RunConfig",
    "RunSummary",
    "run",
    # Configuration
    "OutputConfig",
    "PdfConfig",
    "PeakConfig",
    "SubPeakConfig",
    "ZPeaksConfig",
    # Domain objects
    "PDF",
    "Coverage",
    "Fit",
    "Peak",
    "Region",
    "SubPeak",
]
