"""Levenberg-Marquardt refinement of Gaussian components.

Wraps :func:`scipy.optimize.least_squares`. The family's validator is
applied to every point the optimizer evaluates, so parameters that drift out
of bounds are silently clamped back to their candidate values instead of
derailing the fit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.optimize import least_squares

from zpeaks.core.constants import (
    COST_RELATIVE_TOLERANCE,
    LEAST_SQUARES_MAX_NFEV,
    ORTHO_TOLERANCE,
    PARAMETER_RELATIVE_TOLERANCE,
)
from zpeaks.core.shared.exceptions import OptimizationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from zpeaks.core.domain.parameters import CandidateGaussian, GaussianParameters
    from zpeaks.core.fitting.families import GaussianFamily
    from zpeaks.core.shared.typing import FloatArray

_EPS = float(np.finfo(np.float64).eps)


@dataclass(slots=True)
class OptimizeResult:
    """Refined components with their RMS residual and evaluation count."""

    parameters: list[GaussianParameters]
    error: float
    iterations: int


def tolerances(values: FloatArray) -> tuple[float, float, float]:
    """Return ``(ftol, xtol, gtol)`` scaled by the average of ``values``."""
    avg = abs(float(np.mean(values))) if len(values) else 0.0
    return (
        max(avg * COST_RELATIVE_TOLERANCE, _EPS),
        max(avg * PARAMETER_RELATIVE_TOLERANCE, _EPS),
        max(avg * ORTHO_TOLERANCE, _EPS),
    )


def optimize(
    values: FloatArray,
    candidates: Sequence[CandidateGaussian],
    family: GaussianFamily,
    initial: Sequence[GaussianParameters] | None = None,
) -> OptimizeResult:
    """Fit the sum of ``candidates`` to ``values``.

    Args:
        values: Target curve, indexed from 0
        candidates: Components being fitted; also the validator's fallbacks
        family: Gaussian family of the components
        initial: Starting point (defaults to the candidates' parameters)

    Returns
    -------
        OptimizeResult with validated parameters

    Raises
    ------
        OptimizationError: If the solver rejects the problem
    """
    values = np.asarray(values, dtype=np.float64)
    x = np.arange(len(values), dtype=np.float64)
    start = initial if initial is not None else [c.parameters for c in candidates]
    x0 = family.validate(family.parameters_to_array(start), candidates)

    def residuals(params: FloatArray) -> FloatArray:
        return family.curve(x, family.validate(params, candidates)) - values

    def jacobian(params: FloatArray) -> FloatArray:
        return family.jacobian(x, family.validate(params, candidates))

    ftol, xtol, gtol = tolerances(values)
    method = "lm" if len(values) >= len(x0) else "trf"
    try:
        result = least_squares(
            residuals,
            x0,
            jac=jacobian,
            method=method,
            ftol=ftol,
            xtol=xtol,
            gtol=gtol,
            max_nfev=LEAST_SQUARES_MAX_NFEV,
        )
    except (ValueError, np.linalg.LinAlgError) as e:
        msg = f"Least-squares refinement of {len(candidates)} components failed: {e}"
        raise OptimizationError(msg) from e

    fitted = family.validate(result.x, candidates)
    residual = family.curve(x, fitted) - values
    error = float(np.sqrt(np.mean(residual**2)))
    if not np.isfinite(error):
        msg = f"Refinement of {len(candidates)} components produced a non-finite error"
        raise OptimizationError(msg)

    return OptimizeResult(
        parameters=family.array_to_parameters(fitted),
        error=error,
        iterations=int(result.nfev),
    )


__all__ = ["OptimizeResult", "optimize", "tolerances"]
