"""Threshold peak calling on a density and merging of region lists."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from zpeaks.core.domain.coverage import PDF
from zpeaks.core.domain.regions import Peak, Region, ReplicatedRegion


def call_peaks(pdf: PDF, threshold: float) -> list[Region]:
    """Find the maximal runs where the density is ``threshold`` deviations above background.

    A run opens at the first position with ``z > threshold`` and closes
    (inclusive of the previous position) at the first position with
    ``z <= threshold``. A run still open at the last position is closed there.
    """
    above = pdf.z_scores() > threshold
    if not above.any():
        return []
    edges = np.diff(above.astype(np.int8), prepend=0, append=0)
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1) - 1
    return [Region(int(s), int(e)) for s, e in zip(starts, ends, strict=True)]


def score_peaks(pdf: PDF, regions: Sequence[Region]) -> list[Peak]:
    """Attach the maximum density inside each region."""
    return [Peak(region, float(pdf.values[region.start : region.end + 1].max())) for region in regions]


def merge_peaks(all_peaks: Sequence[Sequence[Region]]) -> list[Region]:
    """Merge several region lists into one sorted list without overlaps.

    The lowest-start remaining region across all lists seeds a merged region;
    every list is then scanned repeatedly and any region starting at or before
    the merged end is absorbed, until a full pass absorbs nothing.
    """
    queues = [sorted(peaks, key=lambda r: r.start) for peaks in all_peaks]
    cursors = [0] * len(queues)
    merged: list[Region] = []

    while True:
        lowest = _lowest(queues, cursors)
        if lowest is None:
            return merged
        current = queues[lowest][cursors[lowest]]
        cursors[lowest] += 1
        start, end = current.start, current.end

        absorbed = True
        while absorbed:
            absorbed = False
            for i, queue in enumerate(queues):
                if cursors[i] < len(queue) and queue[cursors[i]].start <= end:
                    end = max(end, queue[cursors[i]].end)
                    cursors[i] += 1
                    absorbed = True
        merged.append(Region(start, end))


def merge_replicated_peaks(all_peaks: Sequence[Sequence[Region]]) -> list[Region]:
    """Merge region lists, keeping only merged regions supported by every list."""
    if not all_peaks:
        return []
    required = frozenset(range(len(all_peaks)))
    queues = [sorted(peaks, key=lambda r: r.start) for peaks in all_peaks]
    cursors = [0] * len(queues)
    consensus: list[Region] = []

    while True:
        lowest = _lowest(queues, cursors)
        if lowest is None:
            return consensus
        seed = queues[lowest][cursors[lowest]]
        cursors[lowest] += 1
        current = ReplicatedRegion(seed.start, seed.end, frozenset({lowest}))

        absorbed = True
        while absorbed:
            absorbed = False
            for i, queue in enumerate(queues):
                if cursors[i] < len(queue) and queue[cursors[i]].start <= current.end:
                    nxt = queue[cursors[i]]
                    cursors[i] += 1
                    current = ReplicatedRegion(
                        current.start,
                        max(current.end, nxt.end),
                        current.replicates | {i},
                    )
                    absorbed = True
        if current.replicates == required:
            consensus.append(current.to_region())


def _lowest(queues: list[list[Region]], cursors: list[int]) -> int | None:
    lowest: int | None = None
    for i, queue in enumerate(queues):
        if cursors[i] >= len(queue):
            continue
        if lowest is None or queue[cursors[i]].start < queues[lowest][cursors[lowest]].start:
            lowest = i
    return lowest


__all__ = ["call_peaks", "merge_peaks", "merge_replicated_peaks", "score_peaks"]
