"""Shared foundational utilities for ZPeaks."""

from zpeaks.core.shared.exceptions import (
    ConfigError,
    DataIOError,
    NumericsError,
    OptimizationError,
    ZPeaksError,
)
from zpeaks.core.shared.reporter import LoggingReporter, NullReporter, Reporter

__all__ = [
    "ConfigError",
    "DataIOError",
    "LoggingReporter",
    "NullReporter",
    "NumericsError",
    "OptimizationError",
    "Reporter",
    "ZPeaksError",
]
