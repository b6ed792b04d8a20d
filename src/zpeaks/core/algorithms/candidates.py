"""Scale-space detection of candidate Gaussian components.

The curve is convolved with second-derivative-of-Gaussian kernels of
decreasing width. Every bump of the curve shows up as an interval where the
smoothed signal is negative; the interval edges are zero crossings. Intervals
found at a coarse scale are tracked down to finer scales, where they sharpen
towards the bump's inflection points, and features that only separate at a
fine scale seed new candidates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from zpeaks.core.algorithms.linear_algebra import LinearAlgebraHelper
from zpeaks.core.constants import (
    NEGLIGIBLE_CURVATURE,
    SCALE_SPACE_MIN_WIDTH,
    SCALE_SPACE_START_FACTOR,
    SPLIT_EDGE_CROSSING,
)
from zpeaks.core.domain.parameters import CandidateGaussian
from zpeaks.core.domain.regions import Region
from zpeaks.core.lineshapes import gaussian_value, scale_space_smooth

if TYPE_CHECKING:
    from collections.abc import Sequence

    from zpeaks.core.fitting.families import GaussianFamily
    from zpeaks.core.shared.typing import FloatArray

logger = logging.getLogger(__name__)


class ZeroCrossing(NamedTuple):
    index: int
    entering: bool
    """True when the smoothed signal turns negative at ``index``."""


def zero_crossings(blurred: FloatArray) -> list[ZeroCrossing]:
    """Sign changes of ``blurred``.

    Values within ``NEGLIGIBLE_CURVATURE`` of the largest magnitude count as
    non-negative, so rounding noise in flat tails does not produce crossings.
    """
    blurred = np.asarray(blurred, dtype=np.float64)
    if len(blurred) == 0:
        return []
    tolerance = NEGLIGIBLE_CURVATURE * float(np.max(np.abs(blurred)))
    negative = blurred < -tolerance
    changes = np.flatnonzero(negative[1:] != negative[:-1]) + 1
    return [ZeroCrossing(int(i), bool(negative[i])) for i in changes]


def _trim_edges(
    crossings: list[ZeroCrossing],
    values: FloatArray,
    *,
    from_split: bool,
) -> list[ZeroCrossing]:
    if len(crossings) % 2 == 1:
        # A tail cut by the region boundary; drop the crossing on the higher side
        if values[0] > values[-1]:
            return crossings[1:]
        return crossings[:-1]
    if (
        from_split
        and crossings
        and crossings[0].index <= SPLIT_EDGE_CROSSING
        and len(values) - crossings[-1].index <= SPLIT_EDGE_CROSSING
    ):
        return crossings[1:-1]
    return crossings


def regions_at_scale(values: FloatArray, width: float, *, from_split: bool = False) -> list[Region]:
    """Candidate intervals of ``values`` smoothed at one kernel width."""
    crossings = _trim_edges(
        zero_crossings(scale_space_smooth(values, width)), values, from_split=from_split
    )
    regions = []
    for first, second in zip(crossings[::2], crossings[1::2], strict=False):
        if first.entering and not second.entering and second.index > first.index:
            regions.append(Region(first.index, second.index))
    return regions


def _match(region: Region, tracked: list[Region], matched: set[int]) -> int | None:
    best: int | None = None
    best_distance = math.inf
    for i, candidate in enumerate(tracked):
        if i in matched:
            continue
        distance = max(abs(region.start - candidate.start), abs(region.end - candidate.end))
        if distance <= candidate.end - candidate.start and distance < best_distance:
            best, best_distance = i, distance
    return best


def find_candidates(
    values: FloatArray,
    *,
    cut_start: bool = False,
    cut_end: bool = False,
) -> list[Region]:
    """Track zero-crossing intervals from a coarse scale down to the finest.

    Args:
        values: Background-subtracted, scaled curve of one peak
        cut_start: Whether the curve's first position is a split point
        cut_end: Whether the curve's last position is a split point

    Returns
    -------
        Sorted, distinct candidate regions in curve coordinates. Regions
        reaching within ``SPLIT_EDGE_CROSSING`` of a cut end are split
        artifacts and are left out.
    """
    values = np.asarray(values, dtype=np.float64)
    start_width = max(math.floor(math.sqrt(len(values)) * SCALE_SPACE_START_FACTOR), SCALE_SPACE_MIN_WIDTH)
    from_split = cut_start or cut_end

    tracked: list[Region] = []
    for width in range(start_width, SCALE_SPACE_MIN_WIDTH - 1, -1):
        matched: set[int] = set()
        for region in regions_at_scale(values, width, from_split=from_split):
            index = _match(region, tracked, matched)
            if index is None:
                tracked.append(region)
                matched.add(len(tracked) - 1)
            else:
                tracked[index] = region
                matched.add(index)

    last = len(values) - 1
    candidates = sorted(
        region
        for region in set(tracked)
        if not (cut_start and region.start <= SPLIT_EDGE_CROSSING)
        and not (cut_end and last - region.end <= SPLIT_EDGE_CROSSING)
    )
    logger.debug("Found %d candidate regions in %d values", len(candidates), len(values))
    return candidates


def candidate_gaussians(
    values: FloatArray,
    regions: Sequence[Region],
    family: GaussianFamily,
) -> list[CandidateGaussian]:
    """Initial components with amplitudes from a linear least-squares fit.

    Means and widths come from the regions; the amplitudes are the
    coefficients that best reproduce ``values`` as a sum of unit-height
    Gaussians, stored as ``sign(c) * sqrt(|c| * std_dev)``.
    """
    if not regions:
        return []
    values = np.asarray(values, dtype=np.float64)
    x = np.arange(len(values), dtype=np.float64)
    initial = [family.init_parameters(region) for region in regions]
    basis = np.array([gaussian_value(1.0, x, p.mean, p.std_dev) for p in initial])

    gram, rhs = LinearAlgebraHelper.normal_equations(basis, values)
    coefficients = LinearAlgebraHelper.solve(gram, rhs)

    return [
        CandidateGaussian(
            region,
            replace(p, amplitude=float(np.sign(c) * math.sqrt(abs(c) * p.std_dev))),
        )
        for region, p, c in zip(regions, initial, coefficients, strict=True)
    ]


__all__ = [
    "ZeroCrossing",
    "candidate_gaussians",
    "find_candidates",
    "regions_at_scale",
    "zero_crossings",
]
