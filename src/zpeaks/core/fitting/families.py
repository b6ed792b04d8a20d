"""Gaussian families used by the sub-peak optimizer.

A family bundles everything the optimizer needs for one parameterisation:
packing components into a flat array, the model curve, its analytic
Jacobian and the validator that clamps drifting parameters back into
physical bounds on every evaluation.

Parameter arrays hold ``n_params`` consecutive values per component. All
evaluations are vectorised over positions and components.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

import numpy as np
from scipy.special import erf

from zpeaks.core.constants import MAX_SKEW, MAX_STD_DEV, MIN_AMPLITUDE
from zpeaks.core.domain.parameters import (
    CandidateGaussian,
    GaussianParameters,
    SkewGaussianParameters,
    StandardGaussianParameters,
)
from zpeaks.core.domain.regions import Region
from zpeaks.core.lineshapes import gaussian_value, skew_gaussian_value

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from zpeaks.core.shared.typing import ArrayLike, FloatArray

_SQRT2 = math.sqrt(2.0)
_SQRT_2_OVER_PI = math.sqrt(2.0 / math.pi)
_SQRT_2_OVER_PI_CUBED = _SQRT_2_OVER_PI**3
_FOUR_MINUS_PI_OVER_2 = (4.0 - math.pi) / 2.0


@runtime_checkable
class GaussianFamily(Protocol):
    """Protocol for the Gaussian parameterisations."""

    name: ClassVar[str]
    n_params: ClassVar[int]

    def init_parameters(self, region: Region) -> GaussianParameters:
        """Initial component for a candidate region (amplitude still unknown)."""
        ...

    def parameters_to_region(self, parameters: GaussianParameters) -> Region:
        """Region spanned by one standard deviation around the component's peak."""
        ...

    def parameters_to_array(self, parameters: Sequence[GaussianParameters]) -> FloatArray:
        """Pack components into a flat array."""
        ...

    def array_to_parameters(self, array: FloatArray) -> list[GaussianParameters]:
        """Unpack a flat array into components."""
        ...

    def curve(self, x: ArrayLike, array: FloatArray) -> FloatArray:
        """Sum of all components evaluated at positions ``x``."""
        ...

    def jacobian(self, x: ArrayLike, array: FloatArray) -> FloatArray:
        """Derivatives of :meth:`curve`, shape ``(len(x), len(array))``."""
        ...

    def validate(self, array: FloatArray, candidates: Sequence[CandidateGaussian]) -> FloatArray:
        """Return a copy of ``array`` with out-of-bounds parameters reset."""
        ...


# Global family registry
FAMILIES: dict[str, type[GaussianFamily]] = {}


def register_family(names: str | Iterable[str]) -> Callable[[type[GaussianFamily]], type[GaussianFamily]]:
    """Register a Gaussian family class under one or more names."""
    if isinstance(names, str):
        names = [names]

    def decorator(family_class: type[GaussianFamily]) -> type[GaussianFamily]:
        for name in names:
            FAMILIES[name] = family_class
        return family_class

    return decorator


def get_family(name: str) -> GaussianFamily:
    """Instantiate a registered family by name.

    Raises
    ------
        KeyError: If no family is registered under ``name``
    """
    return FAMILIES[name]()


def list_families() -> list[str]:
    return list(FAMILIES)


def _components(array: FloatArray, n_params: int) -> FloatArray:
    return np.asarray(array, dtype=np.float64).reshape(-1, n_params)


def _candidate_arrays(
    candidates: Sequence[CandidateGaussian],
) -> tuple[FloatArray, FloatArray, FloatArray, FloatArray, FloatArray]:
    amplitude = np.array([abs(c.parameters.amplitude) for c in candidates], dtype=np.float64)
    amplitude = np.maximum(amplitude, MIN_AMPLITUDE)
    mean = np.array([c.parameters.mean for c in candidates], dtype=np.float64)
    std_dev = np.array([c.parameters.std_dev for c in candidates], dtype=np.float64)
    std_dev = np.clip(std_dev, np.finfo(np.float64).tiny, MAX_STD_DEV)
    start = np.array([c.region.start for c in candidates], dtype=np.float64)
    end = np.array([c.region.end for c in candidates], dtype=np.float64)
    return amplitude, mean, std_dev, start, end


def skew_mode(mean: ArrayLike, std_dev: ArrayLike, shape: ArrayLike) -> FloatArray:
    """Numerical approximation of the mode of a skew-normal distribution.

    ``shape == 0`` gives the mean.
    """
    mean = np.asarray(mean, dtype=np.float64)
    std_dev = np.asarray(std_dev, dtype=np.float64)
    shape = np.asarray(shape, dtype=np.float64)

    delta = shape / np.sqrt(1.0 + shape * shape)
    uz = _SQRT_2_OVER_PI * delta
    oz = np.sqrt(1.0 - uz * uz)
    skewness = _FOUR_MINUS_PI_OVER_2 * (
        _SQRT_2_OVER_PI_CUBED * delta**3 / (1.0 - 2.0 * delta * delta / math.pi) ** 1.5
    )
    abs_shape = np.abs(shape)
    with np.errstate(divide="ignore"):
        tail = np.where(
            abs_shape > 0,
            np.sign(shape) / 2.0 * np.exp(-2.0 * math.pi / np.where(abs_shape > 0, abs_shape, 1.0)),
            0.0,
        )
    return (uz - skewness * oz / 2.0 - tail) * std_dev + mean


@register_family(["standard", "gaussian"])
class StandardGaussianFamily:
    """Symmetric Gaussian components: ``amplitude, mean, std_dev``."""

    name: ClassVar[str] = "standard"
    n_params: ClassVar[int] = 3

    def init_parameters(self, region: Region) -> StandardGaussianParameters:
        return StandardGaussianParameters(
            amplitude=0.0,
            mean=region.center,
            std_dev=(region.end - region.start) / 2.0,
        )

    def parameters_to_region(self, parameters: GaussianParameters) -> Region:
        return Region(
            int(parameters.mean - parameters.std_dev),
            int(parameters.mean + parameters.std_dev),
        )

    def parameters_to_array(self, parameters: Sequence[GaussianParameters]) -> FloatArray:
        return np.array(
            [(p.amplitude, p.mean, p.std_dev) for p in parameters], dtype=np.float64
        ).reshape(-1)

    def array_to_parameters(self, array: FloatArray) -> list[GaussianParameters]:
        return [
            StandardGaussianParameters(float(a), float(m), float(u))
            for a, m, u in _components(array, self.n_params)
        ]

    def _terms(self, x: ArrayLike, array: FloatArray) -> tuple[FloatArray, ...]:
        params = _components(array, self.n_params)
        a, m, u = params[:, 0], params[:, 1], params[:, 2]
        dx = np.asarray(x, dtype=np.float64)[:, None] - m
        e = np.exp(-(dx**2) / (2.0 * u**2))
        return a, u, dx, e

    def curve(self, x: ArrayLike, array: FloatArray) -> FloatArray:
        params = _components(array, self.n_params)
        a, m, u = params[:, 0], params[:, 1], params[:, 2]
        x = np.asarray(x, dtype=np.float64)[:, None]
        return gaussian_value(a**2 / u, x, m, u).sum(axis=1)

    def jacobian(self, x: ArrayLike, array: FloatArray) -> FloatArray:
        a, u, dx, e = self._terms(x, array)
        jac = np.empty((dx.shape[0], dx.shape[1], self.n_params), dtype=np.float64)
        jac[:, :, 0] = 2.0 * a * e / u
        jac[:, :, 1] = a**2 * dx * e / u**3
        jac[:, :, 2] = a**2 * e * (dx**2 - u**2) / u**4
        return jac.reshape(dx.shape[0], -1)

    def validate(self, array: FloatArray, candidates: Sequence[CandidateGaussian]) -> FloatArray:
        params = _components(array, self.n_params).copy()
        amplitude, mean, std_dev, start, end = _candidate_arrays(candidates)

        bad = ~(params[:, 0] > 0)
        params[bad, 0] = amplitude[bad]
        bad = ~((params[:, 1] >= start) & (params[:, 1] <= end))
        params[bad, 1] = mean[bad]
        bad = ~((params[:, 2] > 0) & (params[:, 2] <= MAX_STD_DEV))
        params[bad, 2] = std_dev[bad]
        return params.reshape(-1)


@register_family("skew")
class SkewGaussianFamily:
    """Skew-normal components: ``amplitude, mean, std_dev, shape``."""

    name: ClassVar[str] = "skew"
    n_params: ClassVar[int] = 4

    def init_parameters(self, region: Region) -> SkewGaussianParameters:
        return SkewGaussianParameters(
            amplitude=MIN_AMPLITUDE,
            mean=region.center,
            std_dev=(region.end - region.start) / 2.0,
            shape=0.0,
        )

    def parameters_to_region(self, parameters: GaussianParameters) -> Region:
        shape = getattr(parameters, "shape", 0.0)
        mode = float(skew_mode(parameters.mean, parameters.std_dev, shape))
        return Region(int(mode - parameters.std_dev), int(mode + parameters.std_dev))

    def parameters_to_array(self, parameters: Sequence[GaussianParameters]) -> FloatArray:
        return np.array(
            [(p.amplitude, p.mean, p.std_dev, getattr(p, "shape", 0.0)) for p in parameters],
            dtype=np.float64,
        ).reshape(-1)

    def array_to_parameters(self, array: FloatArray) -> list[GaussianParameters]:
        return [
            SkewGaussianParameters(float(a), float(m), float(u), float(s))
            for a, m, u, s in _components(array, self.n_params)
        ]

    def _terms(self, x: ArrayLike, array: FloatArray) -> tuple[FloatArray, ...]:
        params = _components(array, self.n_params)
        a, m, u, s = params[:, 0], params[:, 1], params[:, 2], params[:, 3]
        dx = np.asarray(x, dtype=np.float64)[:, None] - m
        e = np.exp(-(dx**2) / (2.0 * u**2))
        phi = 1.0 + erf(s * dx / (u * _SQRT2))
        # e * exp(-(s * dx / u)**2 / 2), the derivative of the erf term
        ex = np.exp(-(s**2 + 1.0) * dx**2 / (2.0 * u**2))
        return a, u, s, dx, e, phi, ex

    def curve(self, x: ArrayLike, array: FloatArray) -> FloatArray:
        params = _components(array, self.n_params)
        a, m, u, s = params[:, 0], params[:, 1], params[:, 2], params[:, 3]
        x = np.asarray(x, dtype=np.float64)[:, None]
        return skew_gaussian_value(a, x, m, u, s).sum(axis=1)

    def jacobian(self, x: ArrayLike, array: FloatArray) -> FloatArray:
        a, u, s, dx, e, phi, ex = self._terms(x, array)
        a2 = a**2
        jac = np.empty((dx.shape[0], dx.shape[1], self.n_params), dtype=np.float64)
        jac[:, :, 0] = 2.0 * a * e * phi / u
        jac[:, :, 1] = a2 * dx * e * phi / u**3 - _SQRT_2_OVER_PI * a2 * s * ex / u**2
        jac[:, :, 2] = (
            a2 * dx**2 * e * phi / u**4
            - _SQRT_2_OVER_PI * a2 * s * dx * ex / u**3
            - a2 * e * phi / u**2
        )
        jac[:, :, 3] = _SQRT_2_OVER_PI * a2 * dx * ex / u**2
        return jac.reshape(dx.shape[0], -1)

    def validate(self, array: FloatArray, candidates: Sequence[CandidateGaussian]) -> FloatArray:
        raw = _components(array, self.n_params)
        params = raw.copy()
        amplitude, mean, std_dev, start, end = _candidate_arrays(candidates)
        shape = np.array([getattr(c.parameters, "shape", 0.0) for c in candidates], dtype=np.float64)

        bad = ~(raw[:, 0] > 0)
        params[bad, 0] = amplitude[bad]

        with np.errstate(invalid="ignore", over="ignore"):
            mode = skew_mode(raw[:, 1], raw[:, 2], raw[:, 3])
        bad = ~((mode >= start) & (mode <= end))
        params[bad, 1] = mean[bad]
        params[bad, 2] = std_dev[bad]
        params[bad, 3] = shape[bad]

        bad = ~((raw[:, 2] > 0) & (raw[:, 2] <= MAX_STD_DEV))
        params[bad, 2] = std_dev[bad]
        bad = ~(np.abs(raw[:, 3]) <= MAX_SKEW)
        params[bad, 3] = 0.0
        return params.reshape(-1)


__all__ = [
    "FAMILIES",
    "GaussianFamily",
    "SkewGaussianFamily",
    "StandardGaussianFamily",
    "get_family",
    "list_families",
    "register_family",
    "skew_mode",
]
