# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
import math
from typing import Optional

import numpy as np

from .exceptions import (
    ConvergenceError,
    DimensionMismatchError,
    MatrixIndexError,
    NonPositiveDefiniteMatrixError,
    NonSquareMatrixError,
    NonSymmetricMatrixError,
    SingularMatrixError,
)
from .matrix import RealMatrix, RealVector, as_array, as_vector_array
from .reduction import TriDiagonalTransformer
from .solver import DecompositionSolver
from .utils import EPS

logger = logging.getLogger(__name__)


def _tql2(
    d: np.ndarray, e: np.ndarray, V: np.ndarray, max_iterations: int, eps: float
) -> int:
    """
    Implicit-shift QL iteration on a symmetric tridiagonal matrix.

    Parameters
    ----------
    d : (n,) ndarray
        Main diagonal, overwritten with the (unsorted) eigenvalues.
    e : (n,) ndarray
        e[i] couples rows i and i+1, e[n-1] must be 0. Destroyed.
    V : (n, n) ndarray
        Receives the plane rotations from the right.
    max_iterations : int
        Budget for the total number of QL sweeps.
    eps : float
        Relative size below which an off-diagonal entry is neglected.

    Returns
    -------
    Number of sweeps performed.
    """
    n = d.size
    f = 0.0
    tst1 = 0.0
    iterations = 0

    for l in range(n):
        # find a small sub-diagonal element
        tst1 = max(tst1, abs(d[l]) + abs(e[l]))
        m = l
        while m < n - 1 and abs(e[m]) > eps * tst1:
            m += 1

        # if m == l, d[l] is already an eigenvalue
        if m > l:
            while True:
                iterations += 1
                if iterations > max_iterations:
                    raise ConvergenceError(
                        f"QL iteration did not converge in {max_iterations} sweeps",
                        iterations=max_iterations,
                    )

                # Wilkinson-type shift
                g = d[l]
                p = (d[l + 1] - g) / (2.0 * e[l])
                r = math.hypot(p, 1.0)
                if p < 0:
                    r = -r
                d[l] = e[l] / (p + r)
                d[l + 1] = e[l] * (p + r)
                dl1 = d[l + 1]
                h = g - d[l]
                d[l + 2 :] -= h
                f += h

                # implicit QL transformation
                p = d[m]
                c = c2 = c3 = 1.0
                el1 = e[l + 1]
                s = s2 = 0.0
                for i in range(m - 1, l - 1, -1):
                    c3 = c2
                    c2 = c
                    s2 = s
                    g = c * e[i]
                    h = c * p
                    r = math.hypot(p, e[i])
                    e[i + 1] = s * r
                    s = e[i] / r
                    c = p / r
                    p = c * d[i] - s * g
                    d[i + 1] = h + s * (c * g + s * d[i])

                    vi1 = V[:, i + 1].copy()
                    V[:, i + 1] = s * V[:, i] + c * vi1
                    V[:, i] = c * V[:, i] - s * vi1

                p = -s * s2 * c3 * el1 * e[l] / dl1
                e[l] = s * p
                d[l] = c * p

                if abs(e[l]) <= eps * tst1:
                    break

        d[l] += f
        e[l] = 0.0

    return iterations


class EigenDecomposition(DecompositionSolver):
    """
    Eigen decomposition A = V D Vᵀ of a real symmetric matrix.

    The matrix is first reduced to tridiagonal form, then diagonalized by
    implicit-shift QL sweeps. Eigenvalues are sorted in descending order
    and column i of V is the unit eigenvector of eigenvalue i.

    Parameters
    ----------
    matrix : RealMatrix | array-like, square and symmetric
    max_iterations : int | None
        Total QL sweep budget, 30·n² when None.
    epsilon : float
        Relative size below which an off-diagonal entry is neglected.

    Example
    -------
    >>> ed = EigenDecomposition([[59, 12], [12, 66]])
    >>> [round(x, 10) for x in ed.get_eigenvalues()]
    [75.0, 50.0]
    """

    def __init__(
        self, matrix, max_iterations: Optional[int] = None, epsilon: float = EPS
    ):
        super().__init__()
        A = as_array(matrix)
        n, cols = A.shape
        if n != cols:
            raise NonSquareMatrixError(n, cols)

        tol = 10 * n * n * EPS
        delta = np.abs(A - A.T)
        offending = np.argwhere(
            np.triu(delta > tol * np.maximum(np.abs(A), np.abs(A.T)), 1)
        )
        if offending.size:
            i, j = (int(k) for k in offending[0])
            raise NonSymmetricMatrixError(i, j, tol)

        tri = TriDiagonalTransformer(A)
        self._diagonalize(
            tri.get_main_diagonal(),
            tri.get_secondary_diagonal(),
            np.array(tri.get_q()),
            max_iterations,
            epsilon,
        )

    @classmethod
    def from_tridiagonal(
        cls,
        main,
        secondary,
        max_iterations: Optional[int] = None,
        epsilon: float = EPS,
    ) -> "EigenDecomposition":
        """
        Decompose the symmetric tridiagonal matrix given by its diagonals.

        Parameters
        ----------
        main : (n,) array-like
        secondary : (n-1,) array-like
        """
        d = as_vector_array(main)
        e = np.asarray(secondary, dtype=float).ravel()
        if e.size != d.size - 1:
            raise DimensionMismatchError(e.size, d.size - 1)
        ed = cls.__new__(cls)
        DecompositionSolver.__init__(ed)
        ed._diagonalize(d, e, np.eye(d.size), max_iterations, epsilon)
        return ed

    def _diagonalize(self, main, secondary, V, max_iterations, epsilon) -> None:
        n = main.size
        if max_iterations is None:
            max_iterations = 30 * n * n
        d = np.array(main, dtype=float)
        e = np.zeros(n)
        e[: n - 1] = secondary
        sweeps = _tql2(d, e, V, max_iterations, epsilon)
        logger.debug("eigen: %d QL sweeps for n=%d", sweeps, n)

        order = np.argsort(-d, kind="stable")
        self._eigenvalues = d[order]
        self._v = V[:, order]

    def _rhs_rows(self) -> int:
        return self._eigenvalues.size

    # ------------------------------------------------------------------
    # factors
    # ------------------------------------------------------------------
    def get_v(self) -> RealMatrix:
        return self._cached("v", lambda: self._v.copy())

    def get_vt(self) -> RealMatrix:
        return self._cached("vt", lambda: self._v.T.copy())

    def get_d(self) -> RealMatrix:
        return self._cached("d", lambda: np.diag(self._eigenvalues))

    def get_eigenvalues(self) -> np.ndarray:
        return self._eigenvalues.copy()

    def get_eigenvalue(self, i: int) -> float:
        n = self._eigenvalues.size
        if not 0 <= i < n:
            raise MatrixIndexError(f"eigenvalue index {i} out of range [0, {n - 1}]")
        return float(self._eigenvalues[i])

    def get_eigenvector(self, i: int) -> RealVector:
        n = self._eigenvalues.size
        if not 0 <= i < n:
            raise MatrixIndexError(f"eigenvector index {i} out of range [0, {n - 1}]")
        return RealVector(self._v[:, i])

    # ------------------------------------------------------------------
    # summaries
    # ------------------------------------------------------------------
    def get_determinant(self) -> float:
        return float(np.prod(self._eigenvalues))

    def get_trace(self) -> float:
        return float(np.sum(self._eigenvalues))

    def get_square_root(self) -> RealMatrix:
        """Symmetric square root V √D Vᵀ of a positive semi-definite matrix."""
        negative = np.flatnonzero(self._eigenvalues < 0.0)
        if negative.size:
            raise NonPositiveDefiniteMatrixError(int(negative[0]), 0.0)
        root = np.sqrt(self._eigenvalues)
        return RealMatrix((self._v * root) @ self._v.T, copy=False)

    def is_non_singular(self) -> bool:
        norms = np.abs(self._eigenvalues)
        largest = norms.max()
        if largest == 0.0:
            return False
        return not np.any(norms / largest <= EPS)

    def _solve(self, b: np.ndarray) -> np.ndarray:
        if not self.is_non_singular():
            raise SingularMatrixError("eigen decomposition of a singular matrix")
        return self._v @ ((self._v.T @ b) / self._eigenvalues[:, None])
