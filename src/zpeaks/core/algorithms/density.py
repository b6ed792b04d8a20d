"""Kernel-density smoothing of coverage and the Monte-Carlo background model.

Every nonzero coverage position spreads its value over the neighbouring
``±window_size`` positions, weighted by a Gaussian lookup table. The
background is the distribution of density values expected if the same
number of reads were scattered uniformly over the active part of the
chromosome.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING

import numpy as np
from scipy.signal import oaconvolve

from zpeaks.core.constants import BACKGROUND_LIMIT, SQRT2PI, WINDOW_RADIUS_FACTOR
from zpeaks.core.domain.coverage import PDF, Background, Coverage
from zpeaks.core.lineshapes import gaussian_distribution
from zpeaks.core.parallel import map_units

if TYPE_CHECKING:
    from zpeaks.core.domain.config import PdfConfig
    from zpeaks.core.domain.regions import Region
    from zpeaks.core.shared.typing import FloatArray

logger = logging.getLogger(__name__)

_MAX_DRAWS_PER_CHUNK = 1 << 22


def window_size(bandwidth: float) -> int:
    """Radius beyond which the smoothing kernel underflows, in positions.

    At least 1, so narrow kernels still spread mass into a neighbour and the
    background keeps a positive spread.
    """
    if bandwidth <= 0:
        msg = f"bandwidth must be positive, got {bandwidth}"
        raise ValueError(msg)
    return max(math.floor(WINDOW_RADIUS_FACTOR * bandwidth), 1)


def lookup_table(bandwidth: float, size: int, *, normalize: bool = False, total: float = 0.0) -> FloatArray:
    """Kernel weights for the offsets ``0..size``.

    With ``normalize`` the weights integrate to one and are divided by the
    total coverage, so the density of the whole chromosome sums to about one.
    """
    if size <= 0:
        table = np.ones(1, dtype=np.float64)
    else:
        a = 1.0 / (bandwidth * SQRT2PI) if normalize else 1.0
        table = gaussian_distribution(a, 0.0, bandwidth, size)
    if normalize and total > 0:
        table = table / total
    return table


def _shards(first: int, last: int, n_shards: int) -> list[tuple[int, int]]:
    bounds = np.linspace(first, last + 1, n_shards + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:], strict=True) if b > a]


def smooth(
    values: FloatArray,
    table: FloatArray,
    *,
    first: int,
    last: int,
    n_workers: int = 1,
) -> FloatArray:
    """Scatter ``values[first..last]`` through the symmetric kernel ``table``.

    The sources are split into contiguous shards; each shard is smoothed into
    a private partial array and the partials are summed into the result. Kernel
    taps falling outside the array are dropped.
    """
    n = len(values)
    output = np.zeros(n, dtype=np.float64)
    if n == 0 or last < first:
        return output

    w = len(table) - 1
    kernel = np.concatenate([table[:0:-1], table])

    def partial(shard: tuple[int, int]) -> tuple[int, FloatArray]:
        a, b = shard
        return a - w, oaconvolve(values[a:b], kernel)

    for result in map_units(partial, _shards(first, last, n_workers), n_workers=n_workers):
        if result is None:
            msg = "Failed to smooth a coverage shard"
            raise RuntimeError(msg)
        dest, block = result
        lo, hi = max(dest, 0), min(dest + len(block), n)
        output[lo:hi] += block[lo - dest : hi - dest]

    # FFT round-off leaves tiny nonzero values outside the kernel support
    output[: max(first - w, 0)] = 0.0
    output[min(last + w + 1, n) :] = 0.0
    if values[first : last + 1].min() >= 0:
        np.maximum(output, 0.0, out=output)
    return output


def background(
    table: FloatArray,
    total: float,
    size: int,
    active_length: int,
    rng: np.random.Generator,
) -> Background:
    """Monte-Carlo null model of the density at a random position.

    Args:
        table: Kernel lookup table for offsets ``0..size``
        total: Total coverage of the unit
        size: Window size (kernel radius)
        active_length: Length of the region that received signal
        rng: Random generator used for the trials

    Returns
    -------
        Mean and population standard deviation of ``BACKGROUND_LIMIT`` trial
        sums. ``Background(0, 0)`` for an empty unit.
    """
    if active_length <= 0 or total <= 0:
        return Background(0.0, 0.0)

    average_n = total * size / active_length
    high = max(size // 2, 1)
    draws = table[:high]

    if average_n > 1:
        n_draws = math.floor(average_n)
        sums = np.empty(BACKGROUND_LIMIT, dtype=np.float64)
        chunk = max(1, _MAX_DRAWS_PER_CHUNK // n_draws)
        for start in range(0, BACKGROUND_LIMIT, chunk):
            stop = min(start + chunk, BACKGROUND_LIMIT)
            offsets = rng.integers(0, high, size=(stop - start, n_draws))
            sums[start:stop] = draws[offsets].sum(axis=1)
    else:
        included = rng.random(BACKGROUND_LIMIT) < average_n
        sums = np.where(included, draws[rng.integers(0, high, size=BACKGROUND_LIMIT)], 0.0)

    average = float(sums.mean())
    std_dev = float(sums.std())
    if std_dev == 0.0 and average_n > 0:
        average, std_dev = _analytic_background(draws, average_n)
    return Background(average, std_dev)


def _analytic_background(draws: FloatArray, average_n: float) -> tuple[float, float]:
    """Exact moments of the null model, used when every trial came out equal."""
    first = float(draws.mean())
    second = float((draws**2).mean())
    if average_n > 1:
        # Compound Poisson with rate average_n
        return average_n * first, math.sqrt(average_n * second)
    p = average_n
    return p * first, math.sqrt(max(p * second - (p * first) ** 2, 0.0))


def pdf(
    coverage: Coverage,
    bandwidth: float,
    *,
    normalize: bool = False,
    on_range: Region | None = None,
    active_length: int | None = None,
    rng: np.random.Generator | None = None,
    n_workers: int = 1,
) -> PDF:
    """Smooth ``coverage`` into a density and estimate its background.

    Args:
        coverage: Raw coverage of one chromosome
        bandwidth: Standard deviation of the smoothing kernel, in base pairs
        normalize: Use a unit-area kernel divided by the coverage sum
        on_range: Only smooth the sources inside this inclusive region
        active_length: Override for the active span used by the background
        rng: Random generator for the background trials
        n_workers: Threads used for the smoothing shards

    Returns
    -------
        Density of the same length as ``coverage`` with its background
    """
    size = window_size(bandwidth)
    table = lookup_table(bandwidth, size, normalize=normalize, total=coverage.sum)
    values = coverage.values
    n = len(values)

    lo, hi = 0, n - 1
    if on_range is not None:
        lo, hi = max(on_range.start, 0), min(on_range.end, n - 1)

    nonzero = np.flatnonzero(values[lo : hi + 1]) + lo if hi >= lo else np.empty(0, dtype=int)
    if len(nonzero) == 0:
        smoothed = np.zeros(n, dtype=np.float64)
        span = 0
    else:
        first, last = int(nonzero[0]), int(nonzero[-1])
        smoothed = smooth(values, table, first=first, last=last, n_workers=n_workers)
        w = len(table) - 1
        span = min(last + w, n - 1) - max(first - w, 0) + 1

    if active_length is not None:
        span = active_length

    total = float(values[lo : hi + 1].sum()) if on_range is not None else coverage.sum
    if rng is None:
        rng = np.random.default_rng()
    bg = background(table, total, size, span, rng)
    return PDF(smoothed, bg, coverage.chr_length)


def smooth_all(
    coverages: Mapping[str, Coverage],
    config: PdfConfig,
    *,
    n_workers: int = 1,
    rng: np.random.Generator | None = None,
) -> dict[str, PDF]:
    """Compute the density of every chromosome, skipping degenerate ones."""
    logger.info("Smoothing coverage for %d chromosomes", len(coverages))
    if rng is None:
        rng = np.random.default_rng(config.seed)

    pdfs: dict[str, PDF] = {}
    for chrom, coverage in coverages.items():
        result = pdf(
            coverage,
            config.bandwidth,
            normalize=config.normalize,
            rng=rng,
            n_workers=n_workers,
        )
        logger.debug("Chromosome %s density background %s", chrom, result.background)
        if result.background.is_degenerate:
            logger.warning("Background for chromosome %s is zero, skipping", chrom)
            continue
        pdfs[chrom] = result
    logger.info("Smoothing complete")
    return pdfs


__all__ = ["background", "lookup_table", "pdf", "smooth", "smooth_all", "window_size"]
