"""Signal track writers (bedGraph, variableStep wiggle and bigWig).

All formats share one run-length encoding of the dense signal: consecutive
positions holding the same positive value collapse into one section.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, NamedTuple

import numpy as np
import pyBigWig

if TYPE_CHECKING:
    from pathlib import Path

    from zpeaks.core.domain.coverage import SignalData
    from zpeaks.core.shared.typing import ArrayLike

logger = logging.getLogger(__name__)


class SignalSection(NamedTuple):
    start: int
    span: int
    value: float

    @property
    def end(self) -> int:
        return self.start + self.span


def iterate_signal_sections(values: ArrayLike) -> Iterator[SignalSection]:
    """Yield runs of equal positive values in position order.

    Zero and negative positions are gaps; they never appear in a section.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return
    boundaries = np.flatnonzero(values[1:] != values[:-1]) + 1
    starts = np.concatenate(([0], boundaries))
    ends = np.concatenate((boundaries, [values.size]))
    for start, end in zip(starts, ends, strict=True):
        value = float(values[start])
        if value > 0:
            yield SignalSection(int(start), int(end - start), value)


def _signal_values(data: SignalData | ArrayLike) -> ArrayLike:
    return getattr(data, "values", data)


def write_bedgraph(path: Path, data: Mapping[str, SignalData | ArrayLike]) -> None:
    """Write one bedGraph record per signal section.

    ``data`` maps chromosome names to arrays or to objects with ``values``
    (coverage or density).
    """
    logger.info("Writing signal to bedGraph file %s", path)
    with path.open("w") as f:
        f.write("track type=bedGraph\n")
        for chrom, track in data.items():
            for section in iterate_signal_sections(_signal_values(track)):
                f.write(f"{chrom}\t{section.start}\t{section.end}\t{section.value:g}\n")


def write_wig(path: Path, data: Mapping[str, SignalData | ArrayLike]) -> None:
    """Write a variableStep wiggle file; a new header starts whenever the span changes."""
    logger.info("Writing signal to wig file %s", path)
    with path.open("w") as f:
        f.write("track type=wiggle_0\n")
        for chrom, track in data.items():
            last_span: int | None = None
            for section in iterate_signal_sections(_signal_values(track)):
                if section.span != last_span:
                    f.write(f"variableStep chrom={chrom} span={section.span}\n")
                    last_span = section.span
                # wiggle positions are 1-based
                f.write(f"{section.start + 1} {section.value:g}\n")


def write_bigwig(path: Path, data: Mapping[str, SignalData | ArrayLike]) -> None:
    """Write a bigWig file holding the same sections as :func:`write_bedgraph`.

    Chromosome sizes in the header come from ``chr_length`` when the track
    has one, otherwise from the array length.
    """
    logger.info("Writing signal to bigWig file %s", path)
    tracks = {chrom: (np.asarray(_signal_values(track)), track) for chrom, track in data.items()}
    header = [
        (chrom, max(int(getattr(track, "chr_length", None) or len(values)), 1))
        for chrom, (values, track) in tracks.items()
    ]
    bw = pyBigWig.open(str(path), "w")
    try:
        bw.addHeader(header)
        for chrom, (values, _) in tracks.items():
            sections = list(iterate_signal_sections(values))
            if not sections:
                continue
            bw.addEntries(
                [chrom] * len(sections),
                [s.start for s in sections],
                ends=[s.end for s in sections],
                values=[s.value for s in sections],
            )
    finally:
        bw.close()


SIGNAL_WRITERS = {"bedgraph": write_bedgraph, "wig": write_wig, "bigwig": write_bigwig}


__all__ = [
    "SIGNAL_WRITERS",
    "SignalSection",
    "iterate_signal_sections",
    "write_bedgraph",
    "write_bigwig",
    "write_wig",
]
