"""Second-derivative kernels and centred convolution for scale-space analysis."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from zpeaks.core.constants import KERNEL_HALF_WIDTH_FACTOR, SQRT2PI

if TYPE_CHECKING:
    from zpeaks.core.shared.typing import ArrayLike, FloatArray


def sampled_kernel(std_dev: float, half_width: int) -> FloatArray:
    """Sample the second derivative of a unit-area Gaussian.

    Args:
        std_dev: Kernel width (must be positive)
        half_width: Number of samples on each side of the centre

    Returns
    -------
        Symmetric array of length ``2 * half_width + 1``; the centre is negative
        and the tails positive, so the convolution of a bump is negative over
        the bump's core.
    """
    if std_dev <= 0:
        msg = f"std_dev must be positive, got {std_dev}"
        raise ValueError(msg)
    if half_width < 0:
        msg = f"half_width must be non-negative, got {half_width}"
        raise ValueError(msg)
    i = np.arange(-half_width, half_width + 1, dtype=np.float64)
    variance = std_dev * std_dev
    a = 1.0 / (std_dev * SQRT2PI)
    return a * np.exp(-(i**2) / (2.0 * variance)) * (i**2 - variance) / (variance * variance)


def convolve(signal: ArrayLike, kernel: ArrayLike) -> FloatArray:
    """Centred convolution returning an array the length of ``signal``.

    ``output[i] = sum_k signal[i + k - c] * kernel[k]`` with ``c = len(kernel) // 2``;
    kernel taps that fall outside the signal are dropped.
    """
    signal = np.asarray(signal, dtype=np.float64)
    kernel = np.asarray(kernel, dtype=np.float64)
    n, k = len(signal), len(kernel)
    if n == 0 or k == 0:
        return np.zeros(n, dtype=np.float64)
    full = np.convolve(signal, kernel[::-1])
    start = k - 1 - k // 2
    return full[start : start + n]


def scale_space_smooth(signal: ArrayLike, width: float) -> FloatArray:
    """Convolve ``signal`` with the second-derivative kernel of ``width``."""
    half_width = math.ceil(KERNEL_HALF_WIDTH_FACTOR * width)
    return convolve(signal, sampled_kernel(width, half_width))


__all__ = ["convolve", "sampled_kernel", "scale_space_smooth"]
