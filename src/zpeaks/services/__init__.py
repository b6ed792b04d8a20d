"""Service layer for ZPeaks.

This package provides the API that the CLI and other adapters use to run the
pipeline without reaching into core internals.
"""

from zpeaks.services.run import RunConfig, RunSummary, run

__all__ = ["RunConfig", "RunSummary", "run"]
