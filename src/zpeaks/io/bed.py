"""BED writers for peaks and sub-peaks."""

from __future__ import annotations

import base64
import logging
import struct
from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from zpeaks.core.domain.fits import ReplicatedSubPeak, SubPeak
    from zpeaks.core.domain.regions import Peak, Region

logger = logging.getLogger(__name__)


def bed_peak_name(chrom: str, region: Region) -> str:
    """Short deterministic name for a region.

    The chromosome followed by the unpadded base64 encoding of the big-endian
    32-bit start and end.
    """
    packed = struct.pack(">ii", region.start, region.end)
    return chrom + base64.b64encode(packed).decode("ascii").strip("=")


def _bed_line(chrom: str, region: Region, score: str) -> str:
    # Sub-peak regions of components near position 0 can start before it
    if region.start < 0:
        region = replace(region, start=0, end=max(region.end, 0))
    # BED intervals are half-open; regions are inclusive
    return f"{chrom}\t{region.start}\t{region.end + 1}\t{bed_peak_name(chrom, region)}\t{score}\n"


def write_peaks_bed(path: Path, peaks: Mapping[str, Iterable[Peak]]) -> int:
    """Write called peaks with their maximum density as the score.

    Returns
    -------
        Number of records written
    """
    logger.info("Writing peaks to %s", path)
    count = 0
    with path.open("w") as f:
        for chrom, chrom_peaks in peaks.items():
            for peak in chrom_peaks:
                f.write(_bed_line(chrom, peak.region, f"{peak.score:g}"))
                count += 1
    return count


def subpeak_score(sub_peak: SubPeak | ReplicatedSubPeak) -> str:
    """Encode a sub-peak's parameters as ``amplitude[#shape][#replication_score]``."""
    parameters = sub_peak.parameters
    fields = [f"{parameters.amplitude:g}"]
    shape = getattr(parameters, "shape", None)
    if shape is not None:
        fields.append(f"{shape:g}")
    replication_score = getattr(sub_peak, "replication_score", None)
    if replication_score is not None:
        fields.append(f"{replication_score:g}")
    return "#".join(fields)


def write_subpeaks_bed(path: Path, sub_peaks: Mapping[str, Iterable[SubPeak | ReplicatedSubPeak]]) -> int:
    """Write fitted sub-peaks; see :func:`subpeak_score` for the score column."""
    logger.info("Writing sub-peaks to %s", path)
    count = 0
    with path.open("w") as f:
        for chrom, chrom_sub_peaks in sub_peaks.items():
            for sub_peak in chrom_sub_peaks:
                f.write(_bed_line(chrom, sub_peak.region, subpeak_score(sub_peak)))
                count += 1
    return count


__all__ = ["bed_peak_name", "subpeak_score", "write_peaks_bed", "write_subpeaks_bed"]
