"""Gaussian curve evaluation.

Pure NumPy functions; every argument may be a scalar or an array and the
usual broadcasting rules apply.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.special import erf

if TYPE_CHECKING:
    from zpeaks.core.shared.typing import ArrayLike, FloatArray


def _check_std_dev(std_dev: float) -> None:
    if np.any(np.asarray(std_dev) <= 0):
        msg = f"std_dev must be positive, got {std_dev}"
        raise ValueError(msg)


def gaussian_value(a: ArrayLike, x: ArrayLike, mean: ArrayLike, std_dev: float) -> FloatArray:
    """Unnormalised Gaussian ``a * exp(-(x - mean)**2 / (2 * std_dev**2))``."""
    _check_std_dev(std_dev)
    dx = np.asarray(x, dtype=np.float64) - mean
    return np.asarray(a * np.exp(-(dx**2) / (2.0 * std_dev**2)), dtype=np.float64)


def gaussian_distribution(a: float, mean: float, std_dev: float, length: int) -> FloatArray:
    """Sample :func:`gaussian_value` at the integer positions ``0..length``.

    The end point is included, so the result holds ``length + 1`` values.
    """
    return gaussian_value(a, np.arange(length + 1, dtype=np.float64), mean, std_dev)


def skew_gaussian_value(
    amplitude: ArrayLike,
    x: ArrayLike,
    mean: ArrayLike,
    std_dev: ArrayLike,
    shape: ArrayLike,
) -> FloatArray:
    """Skew-normal curve in the square-root amplitude parameterisation.

    ``amplitude**2 / std_dev * exp(-z**2 / 2) * (1 + erf(shape * z / sqrt(2)))``
    with ``z = (x - mean) / std_dev``. ``shape == 0`` is a Gaussian of height
    ``amplitude**2 / std_dev``.
    """
    _check_std_dev(std_dev)  # type: ignore[arg-type]
    z = (np.asarray(x, dtype=np.float64) - mean) / std_dev
    amplitude = np.asarray(amplitude, dtype=np.float64)
    return amplitude**2 / std_dev * np.exp(-0.5 * z**2) * (1.0 + erf(shape * z / np.sqrt(2.0)))


__all__ = ["gaussian_distribution", "gaussian_value", "skew_gaussian_value"]
