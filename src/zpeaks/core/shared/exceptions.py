"""Exception taxonomy for ZPeaks.

A small hierarchy so callers can tell configuration mistakes apart from bad
input data and from numerical failures inside a single peak fit.
"""

from __future__ import annotations


class ZPeaksError(Exception):
    """Base class for all ZPeaks-specific exceptions."""


class ConfigError(ZPeaksError):
    """Configuration-related errors (invalid/missing options, no output configured)."""


class DataIOError(ZPeaksError):
    """Data loading/saving errors (files, formats, malformed lines)."""


class OptimizationError(ZPeaksError):
    """Errors occurring while decomposing a peak into sub-peaks."""


class NumericsError(ZPeaksError):
    """Numeric instability or invalid arithmetic conditions (NaNs, singular systems)."""


__all__ = [
    "ConfigError",
    "DataIOError",
    "NumericsError",
    "OptimizationError",
    "ZPeaksError",
]
