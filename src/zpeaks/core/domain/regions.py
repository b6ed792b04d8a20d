"""Genomic interval value types produced by peak calling and fitting."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, order=True)
class Region:
    """Interval on a chromosome; ``start <= end``.

    Called peaks are inclusive on both ends. Ordering is by ``(start, end)``.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            msg = f"Region start {self.start} is after end {self.end}"
            raise ValueError(msg)

    @property
    def length(self) -> int:
        """Number of positions covered, counting both ends."""
        return self.end - self.start + 1

    @property
    def center(self) -> float:
        return (self.start + self.end) / 2.0

    def shift(self, offset: int) -> Region:
        return Region(self.start + offset, self.end + offset)


@dataclass(frozen=True, slots=True)
class ReplicatedRegion:
    """Region tagged with the indices of the sources that called it."""

    start: int
    end: int
    replicates: frozenset[int] = field(default_factory=frozenset)

    def to_region(self) -> Region:
        return Region(self.start, self.end)


@dataclass(frozen=True, slots=True)
class Peak:
    """Called peak with the maximum density observed inside it."""

    region: Region
    score: float


__all__ = ["Peak", "Region", "ReplicatedRegion"]
