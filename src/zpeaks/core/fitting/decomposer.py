"""Decomposition of peak curves into Gaussian sub-peaks.

A peak's density curve is background-subtracted, split while it is too long
to fit in one go, scaled to unit average, and decomposed:

1. Candidate components are found by scale-space zero-crossing tracking.
2. Their amplitudes are initialised by a linear least-squares fit.
3. Growing subsets of the candidates, strongest first, are refined by
   Levenberg-Marquardt and the subset with the lowest RMS error wins.

Results are mapped back to unscaled values and absolute coordinates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import numpy as np

from zpeaks.core.algorithms.candidates import candidate_gaussians, find_candidates
from zpeaks.core.constants import (
    MIN_PEAK_VALUES,
    MIN_RELATIVE_SCORE,
    SPLIT_MARGIN_FRACTION,
    SUB_PEAKS_SOFT_MAX_RATIO,
)
from zpeaks.core.domain.config import SubPeakConfig
from zpeaks.core.domain.fits import Fit, ReplicatedFit, ReplicatedSubPeak, SubPeak
from zpeaks.core.domain.regions import Region
from zpeaks.core.fitting.optimizer import OptimizeResult, optimize
from zpeaks.core.parallel import map_units
from zpeaks.core.shared.exceptions import OptimizationError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from zpeaks.core.domain.coverage import PDF
    from zpeaks.core.domain.parameters import CandidateGaussian, GaussianParameters
    from zpeaks.core.fitting.families import GaussianFamily
    from zpeaks.core.shared.typing import FloatArray

logger = logging.getLogger(__name__)


def parameters_to_score(parameters: GaussianParameters) -> float:
    """Peak height of a component, ``amplitude**2 / std_dev``."""
    return parameters.height


@dataclass(slots=True)
class _Section:
    values: FloatArray
    offset: int
    cut_start: bool = False
    cut_end: bool = False


class SubPeakFitter:
    """Fit one peak curve as a sum of components of a Gaussian family."""

    def __init__(self, family: GaussianFamily, config: SubPeakConfig | None = None) -> None:
        self.family = family
        self.config = config or SubPeakConfig()

    def split_index(self, values: FloatArray) -> int | None:
        """Index at which to split a background-subtracted curve, if any.

        Curves above ``hard_max`` are always split. Curves above ``soft_max``
        are split unless their interior minimum is below
        ``SUB_PEAKS_SOFT_MAX_RATIO`` of their maximum, which marks a single
        clean peak.
        """
        n = len(values)
        if n <= self.config.soft_max:
            return None
        margin = int(n * SPLIT_MARGIN_FRACTION)
        index = int(np.argmin(values[margin : n - margin])) + margin

        if n <= self.config.hard_max:
            peak = float(np.max(values))
            ratio = float(values[index]) / peak if peak > 0 else 0.0
            if ratio < SUB_PEAKS_SOFT_MAX_RATIO:
                return None
        return index

    def fit(self, values: FloatArray, offset: int = 0) -> list[Fit]:
        """Decompose ``values`` whose index 0 sits at chromosome position ``offset``.

        Returns
        -------
            One Fit per section fitted after splitting, in coordinate order
        """
        fits: list[Fit] = []
        stack = [_Section(np.asarray(values, dtype=np.float64), offset)]
        while stack:
            section = stack.pop()
            background = float(np.min(section.values)) if len(section.values) else 0.0
            index = self.split_index(section.values - background)
            if index is not None:
                logger.debug(
                    "Splitting %d values at offset %d into %d and %d",
                    len(section.values),
                    section.offset,
                    index,
                    len(section.values) - index,
                )
                # Second half pushed first so the first half is fitted first
                stack.append(
                    _Section(
                        section.values[index:],
                        section.offset + index,
                        cut_start=True,
                        cut_end=section.cut_end,
                    )
                )
                stack.append(
                    _Section(
                        section.values[:index],
                        section.offset,
                        cut_start=section.cut_start,
                        cut_end=True,
                    )
                )
                continue
            fit = self._fit_section(section, background)
            if fit is not None:
                fits.append(fit)
        return fits

    def _fit_section(self, section: _Section, background: float) -> Fit | None:
        values = section.values - background
        if len(values) == 0:
            return None
        avg = float(np.mean(values))
        if avg <= 0:
            return None
        scaled = values / avg

        regions = find_candidates(scaled, cut_start=section.cut_start, cut_end=section.cut_end)
        candidates = candidate_gaussians(scaled, regions, self.family)
        if not candidates:
            return None
        candidates.sort(key=lambda c: parameters_to_score(c.parameters), reverse=True)

        best = self._refine(scaled, candidates)
        logger.debug(
            "Best of %d candidates: %d components, error %.4g",
            len(candidates),
            len(best.parameters),
            best.error,
        )

        top_score = max(parameters_to_score(p) for p in best.parameters)
        kept = [p for p in best.parameters if parameters_to_score(p) >= MIN_RELATIVE_SCORE * top_score]
        if len(kept) < len(best.parameters):
            logger.debug("Dropped %d negligible components", len(best.parameters) - len(kept))

        sqrt_avg = math.sqrt(avg)
        parameters = sorted(
            (replace(p, amplitude=p.amplitude * sqrt_avg, mean=p.mean + section.offset) for p in kept),
            key=lambda p: p.mean,
        )
        sub_peaks = [
            SubPeak(self.family.parameters_to_region(p), parameters_to_score(p), p)
            for p in parameters
        ]
        region = Region(0, len(values) - 1).shift(section.offset)
        return Fit(region, sub_peaks, background, best.error)

    def _refine(self, values: FloatArray, candidates: list[CandidateGaussian]) -> OptimizeResult:
        best: OptimizeResult | None = None
        for j in range(len(candidates) // 2, len(candidates)):
            result = optimize(values, candidates[: j + 1], self.family)
            logger.debug("Attempt with %d components: error %.4g", j + 1, result.error)
            if best is None or result.error < best.error:
                best = result
            if best.error < self.config.acceptable_error:
                break
        if best is None:
            msg = "No candidate subset to refine"
            raise OptimizationError(msg)
        return best


class ReplicatedSubPeakFitter:
    """Fit the mean of several replicate curves and score each component.

    The replication score of a component is the increase in sum of squared
    error against each replicate when that component is removed from the
    fitted model, averaged over the replicates.
    """

    def __init__(self, family: GaussianFamily, config: SubPeakConfig | None = None) -> None:
        self.family = family
        self.fitter = SubPeakFitter(family, config)

    def fit(self, replicates: Sequence[FloatArray], offset: int = 0) -> list[ReplicatedFit]:
        stacked = np.vstack([np.asarray(r, dtype=np.float64) for r in replicates])
        if stacked.shape[1] < MIN_PEAK_VALUES:
            return []
        fits = self.fitter.fit(stacked.mean(axis=0), offset)
        return [self._score(stacked, fit, offset) for fit in fits]

    def _score(self, replicates: FloatArray, fit: Fit, offset: int) -> ReplicatedFit:
        x = np.arange(fit.region.start, fit.region.end + 1, dtype=np.float64)
        observed = replicates[:, fit.region.start - offset : fit.region.end - offset + 1]
        curves = [
            self.family.curve(x, self.family.parameters_to_array([sp.parameters]))
            for sp in fit.sub_peaks
        ]
        model = fit.background + np.sum(curves, axis=0) if curves else np.full(len(x), fit.background)
        sse = ((observed - model) ** 2).sum(axis=1)

        sub_peaks = []
        for sub_peak, curve in zip(fit.sub_peaks, curves, strict=True):
            removed = ((observed - (model - curve)) ** 2).sum(axis=1)
            sub_peaks.append(
                ReplicatedSubPeak(
                    region=sub_peak.region,
                    score=sub_peak.score,
                    parameters=sub_peak.parameters,
                    replication_score=float(np.mean(removed - sse)),
                )
            )
        return ReplicatedFit(fit.region, sub_peaks, fit.background, fit.error)


def _describe(chrom: str) -> Callable[[Region], str]:
    def describe(region: Region) -> str:
        return f"peak {chrom}:{region.start}-{region.end}"

    return describe


def fit_peaks(
    chrom: str,
    regions: Sequence[Region],
    pdf: PDF,
    fitter: SubPeakFitter,
    *,
    n_workers: int = 1,
) -> list[SubPeak]:
    """Decompose every peak of one chromosome.

    Peaks are dispatched widest first. A peak whose fit fails is logged with
    its region and contributes no sub-peaks.

    Returns
    -------
        Sub-peaks of all peaks, sorted by region start
    """
    ordered = sorted(regions, key=lambda r: r.length, reverse=True)

    def work(region: Region) -> list[SubPeak]:
        values = pdf.values[region.start : region.end + 1]
        return [sp for fit in fitter.fit(values, region.start) for sp in fit.sub_peaks]

    results = map_units(work, ordered, n_workers=n_workers, describe=_describe(chrom))
    sub_peaks = [sp for result in results if result for sp in result]
    sub_peaks.sort(key=lambda sp: sp.region.start)
    logger.info("Chromosome %s: %d sub-peaks from %d peaks", chrom, len(sub_peaks), len(regions))
    return sub_peaks


def fit_replicated_peaks(
    chrom: str,
    regions: Sequence[Region],
    pdfs: Sequence[PDF],
    fitter: ReplicatedSubPeakFitter,
    *,
    n_workers: int = 1,
) -> list[ReplicatedSubPeak]:
    """Replicated counterpart of :func:`fit_peaks`."""
    ordered = sorted(regions, key=lambda r: r.length, reverse=True)

    def work(region: Region) -> list[ReplicatedSubPeak]:
        values = [pdf.values[region.start : region.end + 1] for pdf in pdfs]
        return [sp for fit in fitter.fit(values, region.start) for sp in fit.sub_peaks]

    results = map_units(work, ordered, n_workers=n_workers, describe=_describe(chrom))
    sub_peaks = [sp for result in results if result for sp in result]
    sub_peaks.sort(key=lambda sp: sp.region.start)
    logger.info(
        "Chromosome %s: %d replicated sub-peaks from %d peaks", chrom, len(sub_peaks), len(regions)
    )
    return sub_peaks


__all__ = [
    "ReplicatedSubPeakFitter",
    "SubPeakFitter",
    "fit_peaks",
    "fit_replicated_peaks",
    "parameters_to_score",
]
