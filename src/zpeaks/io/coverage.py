"""Coverage readers: bedGraph and bigWig tracks and chromosome filters."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from io import StringIO
from pathlib import Path

import numpy as np
import pandas as pd
import pyBigWig

from zpeaks.core.domain.coverage import Coverage
from zpeaks.core.domain.regions import Region
from zpeaks.core.shared.exceptions import DataIOError

logger = logging.getLogger(__name__)

ChromFilter = dict[str, Region | None]

_HEADER_PREFIXES = ("track", "browser", "#")

_BIGWIG_MAGICS = (0x888FFC26, 0x26FC8F88)


def read_chrom_filter(path: Path) -> ChromFilter:
    """Read a chromosome filter file.

    Each line is either ``chrom`` (keep the whole chromosome) or
    ``chrom start-end`` (keep the half-open range ``[start, end)``).

    Raises
    ------
        DataIOError: If a line cannot be parsed
    """
    chrom_filter: ChromFilter = {}
    with path.open() as f:
        for number, line in enumerate(f, start=1):
            fields = line.split()
            if not fields:
                continue
            if len(fields) == 1:
                chrom_filter[fields[0]] = None
                continue
            try:
                start, end = (int(v) for v in fields[1].split("-"))
                chrom_filter[fields[0]] = Region(start, end - 1)
            except ValueError as e:
                msg = f"Invalid chromosome filter entry on line {number} of {path}: {line.rstrip()}"
                raise DataIOError(msg) from e
    return chrom_filter


def read_bedgraph(path: Path, chrom_filter: Mapping[str, Region | None] | None = None) -> dict[str, Coverage]:
    """Read a bedGraph file into dense per-chromosome coverage.

    Args:
        path: bedGraph file with ``chrom start end value`` records
        chrom_filter: Only chromosomes named here are kept, when given

    Returns
    -------
        Coverage per chromosome, in file order; each chromosome is as long as
        its last interval end

    Raises
    ------
        DataIOError: If the file is missing or malformed
    """
    if not path.exists():
        msg = f"Coverage file not found: {path}"
        raise DataIOError(msg)

    with path.open() as f:
        text = "".join(line for line in f if not line.startswith(_HEADER_PREFIXES))
    if not text.strip():
        logger.warning("No coverage records in %s", path)
        return {}

    try:
        records = pd.read_table(
            StringIO(text),
            sep=r"\s+",
            header=None,
            names=["chrom", "start", "end", "value"],
            usecols=range(4),
            dtype={"chrom": str, "start": np.int64, "end": np.int64, "value": np.float64},
        )
    except (ValueError, pd.errors.ParserError) as e:
        msg = f"Malformed bedGraph file {path}: {e}"
        raise DataIOError(msg) from e

    if ((records["end"] < records["start"]) | (records["start"] < 0)).any():
        msg = f"bedGraph file {path} has intervals with invalid coordinates"
        raise DataIOError(msg)

    coverages: dict[str, Coverage] = {}
    for chrom, group in records.groupby("chrom", sort=False):
        if chrom_filter is not None and chrom not in chrom_filter:
            continue
        values = np.zeros(int(group["end"].max()), dtype=np.float64)
        for start, end, value in group[["start", "end", "value"]].itertuples(index=False, name=None):
            values[start:end] = value
        coverages[str(chrom)] = Coverage(str(chrom), values)

    logger.info("Read %d chromosomes from %s", len(coverages), path)
    return coverages


def is_bigwig(path: Path) -> bool:
    """Whether ``path`` starts with the bigWig magic number, in either byte order."""
    with path.open("rb") as f:
        head = f.read(4)
    return len(head) == 4 and int.from_bytes(head, "big") in _BIGWIG_MAGICS


def read_bigwig(path: Path, chrom_filter: Mapping[str, Region | None] | None = None) -> dict[str, Coverage]:
    """Read a bigWig file into dense per-chromosome coverage.

    Chromosomes take their length from the file header. Chromosomes without
    intervals are skipped.

    Raises
    ------
        DataIOError: If the file is missing or cannot be opened as a bigWig
    """
    if not path.exists():
        msg = f"Coverage file not found: {path}"
        raise DataIOError(msg)

    try:
        bw = pyBigWig.open(str(path))
    except RuntimeError as e:
        msg = f"Cannot open bigWig file {path}: {e}"
        raise DataIOError(msg) from e
    if bw is None or not bw.isBigWig():
        msg = f"Not a bigWig file: {path}"
        raise DataIOError(msg)

    coverages: dict[str, Coverage] = {}
    try:
        for chrom, length in bw.chroms().items():
            if chrom_filter is not None and chrom not in chrom_filter:
                continue
            intervals = bw.intervals(chrom)
            if not intervals:
                continue
            values = np.zeros(int(length), dtype=np.float64)
            for start, end, value in intervals:
                values[start:end] = value
            coverages[chrom] = Coverage(chrom, values)
    finally:
        bw.close()

    logger.info("Read %d chromosomes from %s", len(coverages), path)
    return coverages


def read_coverage(path: Path, chrom_filter: Mapping[str, Region | None] | None = None) -> dict[str, Coverage]:
    """Read a bigWig or bedGraph coverage file, detected from its first bytes."""
    if not path.exists():
        msg = f"Coverage file not found: {path}"
        raise DataIOError(msg)
    if is_bigwig(path):
        return read_bigwig(path, chrom_filter)
    return read_bedgraph(path, chrom_filter)


def sum_coverages(sources: Sequence[Mapping[str, Coverage]]) -> dict[str, Coverage]:
    """Add coverage across sources, chromosome by chromosome.

    Arrays of different lengths are zero-padded to the longest.
    """
    chroms: dict[str, list[Coverage]] = {}
    for source in sources:
        for chrom, coverage in source.items():
            chroms.setdefault(chrom, []).append(coverage)

    summed: dict[str, Coverage] = {}
    for chrom, parts in chroms.items():
        length = max(part.chr_length for part in parts)
        values = np.zeros(length, dtype=np.float64)
        for part in parts:
            values[: len(part.values)] += part.values
        summed[chrom] = Coverage(chrom, values, length)
    return summed


__all__ = [
    "ChromFilter",
    "is_bigwig",
    "read_bedgraph",
    "read_bigwig",
    "read_chrom_filter",
    "read_coverage",
    "sum_coverages",
]
