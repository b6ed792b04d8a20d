"""Test domain value types."""

import dataclasses

import numpy as np
import pytest

from zpeaks.core.domain import (
    PDF,
    Background,
    Coverage,
    Region,
    ReplicatedRegion,
    SkewGaussianParameters,
    StandardGaussianParameters,
)


class TestRegion:
    """Tests for inclusive regions."""

    def test_length_counts_both_ends(self):
        assert Region(5, 5).length == 1
        assert Region(10, 19).length == 10

    def test_start_after_end(self):
        with pytest.raises(ValueError, match="after end"):
            Region(10, 9)

    def test_ordering(self):
        assert sorted([Region(5, 9), Region(1, 20), Region(5, 6)]) == [
            Region(1, 20),
            Region(5, 6),
            Region(5, 9),
        ]

    def test_shift_and_center(self):
        assert Region(3, 4).shift(100) == Region(103, 104)
        assert Region(3, 4).center == 3.5

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Region(1, 2).start = 0

    def test_replicated_region(self):
        region = ReplicatedRegion(1, 5, frozenset({0, 2}))
        assert region.to_region() == Region(1, 5)


class TestCoverage:
    """Tests for raw coverage."""

    def test_sum_and_length(self):
        coverage = Coverage("chr1", [1, 2, 3])
        assert coverage.sum == 6.0
        assert coverage.chr_length == 3
        assert len(coverage) == 3
        assert coverage[1] == 2.0

    def test_values_read_only(self):
        coverage = Coverage("chr1", np.ones(4))
        with pytest.raises(ValueError, match="read-only"):
            coverage.values[0] = 5.0


class TestPdf:
    """Tests for densities and backgrounds."""

    def test_degenerate_background(self):
        assert Background(0.0, 1.0).is_degenerate
        assert Background(1.0, 0.0).is_degenerate
        assert not Background(1.0, 1.0).is_degenerate

    def test_z_scores(self):
        density = PDF(np.array([1.0, 3.0, 5.0]), Background(1.0, 2.0), 3)
        np.testing.assert_allclose(density.z_scores(), [0.0, 1.0, 2.0])


class TestGaussianParameters:
    """Tests for component parameters."""

    def test_height(self):
        assert StandardGaussianParameters(3.0, 10.0, 2.0).height == 4.5
        assert SkewGaussianParameters(2.0, 10.0, 4.0, 1.0).height == 1.0
