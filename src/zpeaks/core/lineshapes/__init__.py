"""Gaussian kernel library: curve evaluation, sampled kernels and convolution."""

from zpeaks.core.lineshapes.gaussian import (
    gaussian_distribution,
    gaussian_value,
    skew_gaussian_value,
)
from zpeaks.core.lineshapes.smoothing import convolve, sampled_kernel, scale_space_smooth

__all__ = [
    "convolve",
    "gaussian_distribution",
    "gaussian_value",
    "sampled_kernel",
    "scale_space_smooth",
    "skew_gaussian_value",
]
