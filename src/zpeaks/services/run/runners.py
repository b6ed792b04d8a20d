"""Run orchestrators: how coverage from one or more files becomes peaks.

Every runner follows the same outline. Coverage is read, each chromosome is
processed independently into peaks (and optionally sub-peaks and a signal
track), and the collected results are written once at the end. The runners
differ only in how multiple inputs are combined:

- ``SingleFileRunner``: one input, processed as is
- ``BottomUpRunner``: coverage summed across inputs before smoothing
- ``TopDownRunner``: peaks called per input, then merged; sub-peaks are fitted
  on the density of the inputs' coverage inside their peaks
- ``ReplicatedRunner``: consensus peaks supported by every input, with
  replicated sub-peak scoring
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

import numpy as np

from zpeaks.core.algorithms.density import pdf as compute_pdf
from zpeaks.core.algorithms.peaks import (
    call_peaks,
    merge_peaks,
    merge_replicated_peaks,
    score_peaks,
)
from zpeaks.core.domain.coverage import PDF, Background, Coverage
from zpeaks.core.fitting.decomposer import (
    ReplicatedSubPeakFitter,
    SubPeakFitter,
    fit_peaks,
    fit_replicated_peaks,
)
from zpeaks.core.fitting.families import get_family
from zpeaks.core.parallel import map_units
from zpeaks.core.shared.reporter import NullReporter, Reporter
from zpeaks.io.bed import write_peaks_bed, write_subpeaks_bed
from zpeaks.io.coverage import read_chrom_filter, read_coverage, sum_coverages
from zpeaks.io.signal import SIGNAL_WRITERS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from zpeaks.core.domain.fits import ReplicatedSubPeak, SubPeak
    from zpeaks.core.domain.regions import Peak, Region
    from zpeaks.io.coverage import ChromFilter
    from zpeaks.services.run.config import RunConfig, RunMode

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChromosomeResult:
    """Everything produced for one chromosome."""

    chrom: str
    peaks: list[Peak] = field(default_factory=list)
    sub_peaks: list[SubPeak] | list[ReplicatedSubPeak] = field(default_factory=list)
    signal: np.ndarray | None = None


@dataclass(slots=True)
class RunSummary:
    """Counts and output files of a completed run."""

    processed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    n_peaks: int = 0
    n_sub_peaks: int = 0
    outputs: dict[str, Path] = field(default_factory=dict)


class ZRunner(ABC):
    """Base class for the aggregation strategies."""

    name: ClassVar[str]

    def __init__(self, run_config: RunConfig, reporter: Reporter | None = None) -> None:
        self.run_config = run_config
        self.settings = run_config.settings
        self.reporter = reporter or NullReporter()
        self.family = get_family(self.settings.sub_peaks.mode)
        self.rng = np.random.default_rng(self.settings.pdf.seed)
        self.chrom_filter: ChromFilter | None = None

    # Hooks -----------------------------------------------------------------

    def prepare(self, sources: list[dict[str, Coverage]]) -> list[dict[str, Coverage]]:
        """Combine the per-file coverage before chromosomes are processed."""
        return sources

    @abstractmethod
    def process(self, chrom: str, coverages: list[Coverage]) -> ChromosomeResult | None:
        """Process one chromosome; ``None`` marks it as skipped."""

    # Shared steps ----------------------------------------------------------

    @property
    def wants_sub_peaks(self) -> bool:
        return self.settings.output.sub_peaks is not None

    @property
    def n_workers(self) -> int:
        return self.settings.workers

    def on_range(self, chrom: str) -> Region | None:
        if self.chrom_filter is None:
            return None
        return self.chrom_filter.get(chrom)

    def smooth(self, chrom: str, coverage: Coverage) -> PDF | None:
        """Density of ``coverage``, or ``None`` (with a warning) when degenerate."""
        pdf_config = self.settings.pdf
        result = compute_pdf(
            coverage,
            pdf_config.bandwidth,
            normalize=pdf_config.normalize,
            on_range=self.on_range(chrom),
            rng=self.rng,
            n_workers=self.n_workers,
        )
        logger.debug("Chromosome %s background %s", chrom, result.background)
        if result.background.is_degenerate:
            self.reporter.warning(f"Background for chromosome {chrom} is zero, skipping")
            return None
        return result

    def signal_of(self, coverage: Coverage, pdf: PDF) -> np.ndarray | None:
        if self.settings.output.signal is None:
            return None
        return pdf.values if self.settings.output.signal_source == "pdf" else coverage.values

    def fit(self, chrom: str, regions: Sequence[Region], pdf: PDF) -> list[SubPeak]:
        if not self.wants_sub_peaks:
            return []
        fitter = SubPeakFitter(self.family, self.settings.sub_peaks)
        return fit_peaks(chrom, regions, pdf, fitter, n_workers=self.n_workers)

    # Driver ----------------------------------------------------------------

    def read_sources(self) -> list[dict[str, Coverage]]:
        if self.run_config.chrom_filter is not None:
            self.chrom_filter = read_chrom_filter(self.run_config.chrom_filter)
        sources = []
        for path in self.run_config.inputs:
            self.reporter.action(f"Reading coverage from {path}")
            sources.append(read_coverage(path, self.chrom_filter))
        return sources

    def run(self) -> RunSummary:
        """Process every chromosome and write the configured outputs.

        Raises
        ------
            ConfigError: Before any processing, if the run cannot produce output
        """
        self.run_config.check()
        self.reporter.action(f"Running {self.name} on {len(self.run_config.inputs)} file(s)")

        sources = self.prepare(self.read_sources())
        chroms = list(dict.fromkeys(chrom for source in sources for chrom in source))

        def work(chrom: str) -> ChromosomeResult | None:
            self.reporter.action(f"Processing chromosome {chrom}")
            return self.process(chrom, aligned_coverages(sources, chrom))

        summary = RunSummary()
        results: list[ChromosomeResult] = []
        # Chromosomes run one at a time; parallelism lives inside each chromosome
        for chrom, result in zip(chroms, map_units(work, chroms, describe=_describe_chrom), strict=True):
            if result is None:
                summary.skipped.append(chrom)
                continue
            summary.processed.append(chrom)
            summary.n_peaks += len(result.peaks)
            summary.n_sub_peaks += len(result.sub_peaks)
            results.append(result)

        self.write(results, summary)
        self.reporter.success(
            f"{self.name} complete: {summary.n_peaks} peaks, {summary.n_sub_peaks} sub-peaks "
            f"on {len(summary.processed)} chromosome(s)"
        )
        return summary

    def write(self, results: list[ChromosomeResult], summary: RunSummary) -> None:
        output = self.settings.output
        if output.peaks is not None:
            write_peaks_bed(output.peaks, {r.chrom: r.peaks for r in results})
            summary.outputs["peaks"] = output.peaks
        if output.sub_peaks is not None:
            write_subpeaks_bed(output.sub_peaks, {r.chrom: r.sub_peaks for r in results})
            summary.outputs["sub_peaks"] = output.sub_peaks
        if output.signal is not None:
            signals = {r.chrom: r.signal for r in results if r.signal is not None}
            if signals:
                SIGNAL_WRITERS[output.signal_format](output.signal, signals)
                summary.outputs["signal"] = output.signal


def _describe_chrom(chrom: str) -> str:
    return f"chromosome {chrom}"


def aligned_coverages(sources: Sequence[dict[str, Coverage]], chrom: str) -> list[Coverage]:
    """Coverage of ``chrom`` from every source, zero-padded to a common length."""
    length = max((s[chrom].chr_length for s in sources if chrom in s), default=0)
    aligned = []
    for source in sources:
        coverage = source.get(chrom)
        if coverage is not None and coverage.chr_length == length:
            aligned.append(coverage)
            continue
        values = np.zeros(length, dtype=np.float64)
        if coverage is not None:
            values[: len(coverage.values)] = coverage.values
        aligned.append(Coverage(chrom, values, length))
    return aligned


class SingleFileRunner(ZRunner):
    """Peaks and sub-peaks of a single coverage track."""

    name = "single-file"

    def process(self, chrom: str, coverages: list[Coverage]) -> ChromosomeResult | None:
        coverage = coverages[0]
        pdf = self.smooth(chrom, coverage)
        if pdf is None:
            return None
        regions = call_peaks(pdf, self.settings.peaks.threshold)
        logger.info("Chromosome %s: %d peaks", chrom, len(regions))
        return ChromosomeResult(
            chrom,
            peaks=score_peaks(pdf, regions),
            sub_peaks=self.fit(chrom, regions, pdf),
            signal=self.signal_of(coverage, pdf),
        )


class BottomUpRunner(SingleFileRunner):
    """Sum the coverage of all inputs, then process it as a single track."""

    name = "bottom-up"

    def prepare(self, sources: list[dict[str, Coverage]]) -> list[dict[str, Coverage]]:
        self.reporter.action(f"Summing coverage of {len(sources)} files")
        return [sum_coverages(sources)]


class TopDownRunner(ZRunner):
    """Call peaks per input, then refine on a peaks-only aggregate.

    The aggregate holds, at every position inside at least one input's peak,
    the average coverage of the inputs whose peaks cover it. The final peaks
    are the merge of all per-input peaks.
    """

    name = "top-down"

    def process(self, chrom: str, coverages: list[Coverage]) -> ChromosomeResult | None:
        length = coverages[0].chr_length
        aggregate = np.zeros(length, dtype=np.float64)
        sources = np.zeros(length, dtype=np.int64)
        all_regions: list[list[Region]] = []

        for coverage in coverages:
            pdf = self.smooth(chrom, coverage)
            if pdf is None:
                continue
            regions = call_peaks(pdf, self.settings.peaks.threshold)
            all_regions.append(regions)
            for region in regions:
                aggregate[region.start : region.end + 1] += coverage.values[region.start : region.end + 1]
                sources[region.start : region.end + 1] += 1

        if not all_regions:
            return None
        covered = sources > 0
        aggregate[covered] /= sources[covered]
        aggregate_coverage = Coverage(chrom, aggregate, length)

        pdf = self.smooth(chrom, aggregate_coverage)
        if pdf is None:
            return None
        regions = merge_peaks(all_regions)
        logger.info("Chromosome %s: %d merged peaks from %d inputs", chrom, len(regions), len(all_regions))
        return ChromosomeResult(
            chrom,
            peaks=score_peaks(pdf, regions),
            sub_peaks=self.fit(chrom, regions, pdf),
            signal=self.signal_of(aggregate_coverage, pdf),
        )


class ReplicatedRunner(ZRunner):
    """Consensus peaks across replicates with replicated sub-peak scores."""

    name = "replicated"

    def process(self, chrom: str, coverages: list[Coverage]) -> ChromosomeResult | None:
        pdfs = []
        for coverage in coverages:
            pdf = self.smooth(chrom, coverage)
            if pdf is None:
                return None
            pdfs.append(pdf)

        threshold = self.settings.peaks.threshold
        regions = merge_replicated_peaks([call_peaks(pdf, threshold) for pdf in pdfs])
        logger.info("Chromosome %s: %d consensus peaks", chrom, len(regions))

        mean_pdf = PDF(
            np.mean([pdf.values for pdf in pdfs], axis=0),
            Background(
                float(np.mean([pdf.background.average for pdf in pdfs])),
                float(np.mean([pdf.background.std_dev for pdf in pdfs])),
            ),
            pdfs[0].chr_length,
        )
        sub_peaks: list[ReplicatedSubPeak] = []
        if self.wants_sub_peaks:
            fitter = ReplicatedSubPeakFitter(self.family, self.settings.sub_peaks)
            sub_peaks = fit_replicated_peaks(chrom, regions, pdfs, fitter, n_workers=self.n_workers)

        mean_coverage = Coverage(chrom, np.mean([c.values for c in coverages], axis=0))
        return ChromosomeResult(
            chrom,
            peaks=score_peaks(mean_pdf, regions),
            sub_peaks=sub_peaks,
            signal=self.signal_of(mean_coverage, mean_pdf),
        )


RUNNERS: dict[str, type[ZRunner]] = {
    "single": SingleFileRunner,
    "bottom_up": BottomUpRunner,
    "top_down": TopDownRunner,
    "replicated": ReplicatedRunner,
}


def get_runner(mode: RunMode) -> type[ZRunner]:
    return RUNNERS[mode]


def run(run_config: RunConfig, reporter: Reporter | None = None) -> RunSummary:
    """Run the strategy selected by ``run_config.mode``."""
    return get_runner(run_config.mode)(run_config, reporter).run()


__all__ = [
    "RUNNERS",
    "BottomUpRunner",
    "ChromosomeResult",
    "ReplicatedRunner",
    "RunSummary",
    "SingleFileRunner",
    "TopDownRunner",
    "ZRunner",
    "aligned_coverages",
    "get_runner",
    "run",
]
