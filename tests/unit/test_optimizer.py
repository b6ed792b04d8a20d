"""Test Levenberg-Marquardt refinement of Gaussian components."""

import numpy as np
import pytest

from zpeaks.core.domain import (
    CandidateGaussian,
    Region,
    SkewGaussianParameters,
    StandardGaussianParameters,
)
from zpeaks.core.fitting.families import SkewGaussianFamily, StandardGaussianFamily
from zpeaks.core.fitting.optimizer import optimize, tolerances
from zpeaks.core.shared.exceptions import OptimizationError


@pytest.fixture
def single_gaussian():
    family = StandardGaussianFamily()
    truth = StandardGaussianParameters(3.0, 40.0, 6.0)
    x = np.arange(80.0)
    values = family.curve(x, family.parameters_to_array([truth]))
    candidate = CandidateGaussian(Region(34, 46), StandardGaussianParameters(2.5, 38.0, 5.0))
    return family, truth, values, candidate


class TestTolerances:
    """Tests for average-scaled tolerances."""

    def test_scaled_by_average(self):
        ftol, xtol, gtol = tolerances(np.full(10, 2.0))
        assert ftol == pytest.approx(2e-4)
        assert xtol == pytest.approx(2e-8)
        assert gtol == pytest.approx(2e-3)

    def test_floor_for_zero_curve(self):
        eps = np.finfo(np.float64).eps
        assert tolerances(np.zeros(5)) == (eps, eps, eps)


class TestOptimize:
    """Tests for the least-squares wrapper."""

    def test_recovers_single_gaussian(self, single_gaussian):
        family, truth, values, candidate = single_gaussian
        result = optimize(values, [candidate], family)

        (fitted,) = result.parameters
        assert fitted.mean == pytest.approx(truth.mean, abs=0.1)
        assert fitted.std_dev == pytest.approx(truth.std_dev, rel=0.02)
        assert fitted.height == pytest.approx(truth.height, rel=0.02)
        assert result.error < 1e-2
        assert result.iterations >= 1

    def test_starting_at_solution(self, single_gaussian):
        family, truth, values, candidate = single_gaussian
        result = optimize(values, [candidate], family, initial=[truth])
        assert result.error < 1e-8

    def test_skew_family(self):
        family = SkewGaussianFamily()
        x = np.arange(100.0)
        values = family.curve(x, np.array([2.0, 45.0, 8.0, 2.0]))
        candidate = CandidateGaussian(Region(40, 60), SkewGaussianParameters(1.5, 50.0, 10.0, 0.0))
        result = optimize(values, [candidate], family)
        assert result.error < 0.05 * values.max()
        assert len(result.parameters) == 1

    def test_underdetermined_problem(self):
        """More parameters than values still returns a validated result."""
        family = StandardGaussianFamily()
        candidate = CandidateGaussian(Region(0, 1), StandardGaussianParameters(1.0, 0.5, 0.5))
        result = optimize(np.array([1.0, 1.0]), [candidate], family)
        assert np.isfinite(result.error)
        assert result.parameters[0].amplitude > 0

    def test_non_finite_values(self, single_gaussian):
        family, _, values, candidate = single_gaussian
        values = values.copy()
        values[3] = np.nan
        with pytest.raises(OptimizationError):
            optimize(values, [candidate], family)
