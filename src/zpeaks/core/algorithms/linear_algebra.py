"""Linear least-squares utilities for the initial component amplitudes."""

from __future__ import annotations

import warnings
from typing import cast

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from zpeaks.core.shared.exceptions import NumericsError


class LinearAlgebraHelper:
    """Helper class for the normal-equation solve of candidate amplitudes."""

    @staticmethod
    def normal_equations(basis: np.ndarray, data: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Build the Gram matrix and right-hand side.

        Args:
            basis: Matrix of shape (n_components, n_points)
            data: Curve of shape (n_points,)

        Returns
        -------
            Tuple of (gram, rhs) with gram[j, k] = <basis_j, basis_k> and
            rhs[j] = <basis_j, data>
        """
        return basis @ basis.T, basis @ data

    @staticmethod
    def solve(gram: np.ndarray, rhs: np.ndarray) -> np.ndarray:
        """Solve ``gram @ x = rhs`` by LU decomposition.

        Falls back to a least-squares solution when the matrix is singular.

        Raises
        ------
            NumericsError: If no finite solution exists
        """
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("error", LinAlgWarning)
                solution = lu_solve(lu_factor(gram, check_finite=False), rhs, check_finite=False)
        except (np.linalg.LinAlgError, LinAlgWarning, ValueError):
            solution = None

        if solution is None or not np.all(np.isfinite(solution)):
            solution, *_ = np.linalg.lstsq(gram, rhs, rcond=None)
        if not np.all(np.isfinite(solution)):
            msg = "Amplitude system has no finite solution"
            raise NumericsError(msg)
        return cast("np.ndarray", solution)


__all__ = ["LinearAlgebraHelper"]
