"""Test kernel-density smoothing and the Monte-Carlo background."""

import math

import numpy as np
import pytest

from zpeaks.core.algorithms.density import (
    background,
    lookup_table,
    pdf,
    smooth,
    smooth_all,
    window_size,
)
from zpeaks.core.constants import SQRT2PI, WINDOW_RADIUS_FACTOR
from zpeaks.core.domain import Background, Coverage, PdfConfig, Region


def scatter_add(values, table):
    """Reference smoothing: every source adds its kernel to its neighbours."""
    n, w = len(values), len(table) - 1
    output = np.zeros(n)
    for i in np.flatnonzero(values):
        for j in range(max(i - w, 0), min(i + w + 1, n)):
            output[j] += values[i] * table[abs(j - i)]
    return output


class TestWindow:
    """Tests for the window size and lookup table."""

    def test_window_size(self):
        assert window_size(1.0) == math.floor(WINDOW_RADIUS_FACTOR)
        assert window_size(50.0) == math.floor(WINDOW_RADIUS_FACTOR * 50.0)

    def test_window_size_is_at_least_one(self):
        assert window_size(0.01) == 1

    def test_narrow_bandwidth_keeps_positive_background(self):
        coverage = Coverage("chr1", np.array([0.0, 0.0, 5.0, 0.0, 0.0]))
        result = pdf(coverage, 0.01, rng=np.random.default_rng(3))
        assert result.background.average > 0
        assert result.background.std_dev > 0
        assert not result.background.is_degenerate

    def test_window_size_rejects_non_positive(self):
        with pytest.raises(ValueError, match="bandwidth"):
            window_size(0.0)

    def test_lookup_table(self):
        table = lookup_table(5.0, 30)
        assert len(table) == 31
        assert table[0] == pytest.approx(1.0)
        assert table[5] == pytest.approx(math.exp(-0.5))

    def test_normalized_lookup_table(self):
        table = lookup_table(5.0, 30, normalize=True, total=200.0)
        assert table[0] == pytest.approx(1.0 / (5.0 * SQRT2PI) / 200.0)


class TestSmooth:
    """Tests for the sharded smoothing."""

    @pytest.mark.parametrize("n_workers", [1, 3])
    def test_matches_scatter_add(self, rng, n_workers):
        values = np.where(rng.random(400) < 0.1, rng.integers(1, 20, 400), 0).astype(float)
        table = lookup_table(3.0, window_size(3.0))
        nonzero = np.flatnonzero(values)

        result = smooth(values, table, first=nonzero[0], last=nonzero[-1], n_workers=n_workers)

        np.testing.assert_allclose(result, scatter_add(values, table), rtol=1e-9, atol=1e-9)

    def test_zero_outside_support(self):
        values = np.zeros(500)
        values[250] = 10.0
        table = lookup_table(1.0, 10)
        result = smooth(values, table, first=250, last=250)
        assert np.all(result[:240] == 0)
        assert np.all(result[261:] == 0)
        assert result[250] == pytest.approx(10.0)


class TestBackground:
    """Tests for the background null model."""

    def test_empty_unit(self, rng):
        assert background(np.ones(5), 0.0, 4, 100, rng) == Background(0.0, 0.0)
        assert background(np.ones(5), 10.0, 4, 0, rng) == Background(0.0, 0.0)

    def test_dense_branch(self, rng):
        table = lookup_table(5.0, window_size(5.0))
        result = background(table, 5000.0, window_size(5.0), 2000, rng)
        assert result.average > 0
        assert result.std_dev > 0

    def test_sparse_branch(self, rng):
        """Fewer than one expected contribution per position uses Bernoulli trials."""
        table = lookup_table(5.0, window_size(5.0))
        result = background(table, 1.0, window_size(5.0), 5000, rng)
        assert 0 < result.average < 1
        assert result.std_dev > 0

    def test_deterministic_with_seed(self):
        table = lookup_table(5.0, window_size(5.0))
        a = background(table, 800.0, window_size(5.0), 1000, np.random.default_rng(7))
        b = background(table, 800.0, window_size(5.0), 1000, np.random.default_rng(7))
        assert a == b

    def test_constant_draws_fall_back_to_moments(self, rng):
        """Identical trial sums would give zero spread; exact moments replace them."""
        result = background(np.ones(5), 100.0, 4, 4, rng)
        assert result.average == pytest.approx(100.0)
        assert result.std_dev == pytest.approx(10.0)


class TestPdf:
    """Tests for the density of a coverage track."""

    def test_all_zero_coverage(self, rng):
        result = pdf(Coverage("chr1", np.zeros(100)), 5.0, rng=rng)
        assert result.background == Background(0.0, 0.0)
        assert result.background.is_degenerate
        assert not result.values.any()

    def test_density_and_background(self, rng, bump_coverage):
        result = pdf(Coverage("chr1", bump_coverage), 5.0, rng=rng)
        assert len(result.values) == len(bump_coverage)
        assert result.chr_length == len(bump_coverage)
        assert np.all(result.values >= 0)
        assert np.argmax(result.values) == pytest.approx(2000, abs=2)
        assert result.background.average > 0
        assert result.background.std_dev > 0

    def test_values_are_read_only(self, rng):
        result = pdf(Coverage("chr1", np.ones(50)), 2.0, rng=rng)
        with pytest.raises(ValueError, match="read-only"):
            result.values[0] = 1.0

    def test_on_range_ignores_outside_sources(self, rng):
        values = np.zeros(2000)
        values[100] = 10.0
        values[1500] = 10.0
        result = pdf(Coverage("chr1", values), 3.0, on_range=Region(0, 999), rng=rng)
        assert result.values[100] > 0
        assert result.values[1500] == 0

    def test_active_length_override(self, bump_coverage):
        coverage = Coverage("chr1", bump_coverage)
        short = pdf(coverage, 5.0, active_length=1000, rng=np.random.default_rng(1))
        long = pdf(coverage, 5.0, active_length=100_000, rng=np.random.default_rng(1))
        assert short.background.average > long.background.average

    def test_normalized_density_sums_to_one(self, rng):
        values = np.zeros(3000)
        values[1000:2000] = 3.0
        result = pdf(Coverage("chr1", values), 10.0, normalize=True, rng=rng)
        assert result.values.sum() == pytest.approx(1.0, rel=1e-6)


class TestSmoothAll:
    """Tests for per-chromosome smoothing."""

    def test_skips_degenerate_chromosomes(self, bump_coverage, caplog):
        coverages = {
            "chr1": Coverage("chr1", bump_coverage),
            "chrEmpty": Coverage("chrEmpty", np.zeros(1000)),
        }
        pdfs = smooth_all(coverages, PdfConfig(bandwidth=5.0, seed=3))
        assert list(pdfs) == ["chr1"]
        assert "chrEmpty" in caplog.text
