# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from typing import Optional

import numpy as np

from .exceptions import NonSquareMatrixError, SingularMatrixError
from .matrix import RealMatrix, as_array
from .solver import DecompositionSolver
from .utils import permutation_sign, scale_tol

logger = logging.getLogger(__name__)

DEFAULT_SINGULARITY_THRESHOLD = 1e-11


def forward_substitute(
    L: np.ndarray, b: np.ndarray, unit_diagonal: bool = False
) -> np.ndarray:
    """
    Solve L x = b for lower-triangular L.

    Only the lower triangle of L is read (the strictly lower one when
    `unit_diagonal` is set), so a packed LU array can be passed as is.

    Parameters
    ----------
    L : (n, n) ndarray
    b : (n,) or (n, k) ndarray

    Returns
    -------
    x : same shape as b
    """
    L = np.asarray(L, dtype=float)
    c = np.array(b, dtype=float)
    flat = c.ndim == 1
    if flat:
        c = c[:, None]
    n = c.shape[0]

    for i in range(n):
        c[i] -= L[i, :i] @ c[:i]
        if not unit_diagonal:
            if L[i, i] == 0.0:
                raise SingularMatrixError(f"zero diagonal entry at ({i}, {i})")
            c[i] /= L[i, i]

    return c.ravel() if flat else c


def back_substitute(U: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Solve U x = b for upper-triangular U.

    Parameters
    ----------
    U : (n, n) ndarray
        Only the upper triangle (diagonal included) is read.
    b : (n,) or (n, k) ndarray

    Returns
    -------
    x : same shape as b

    Raises
    ------
    SingularMatrixError : on an exactly zero diagonal entry.
    """
    U = np.asarray(U, dtype=float)
    c = np.array(b, dtype=float)
    flat = c.ndim == 1
    if flat:
        # (n,)  →  (n,1)
        c = c[:, None]
    n = c.shape[0]

    for i in reversed(range(n)):
        pivot = U[i, i]
        if pivot == 0.0:
            raise SingularMatrixError(f"zero diagonal entry at ({i}, {i})")
        c[i] = (c[i] - U[i, i + 1 : n] @ c[i + 1 :]) / pivot

    return c.ravel() if flat else c


class LUDecomposition(DecompositionSolver):
    """
    LU decomposition with partial pivoting, P A = L U.

    Columns are processed in Crout order: each column first receives the
    updates of all previous ones, then the row holding the largest
    remaining magnitude is swapped into the pivot position.

    A pivot smaller than `singularity_threshold · max(1, ‖A‖∞)` stops
    the elimination. The instance then reports itself singular: the
    factor accessors return None, the determinant is 0.0 and `solve`
    raises `SingularMatrixError`.

    Parameters
    ----------
    matrix : RealMatrix | array-like, square
    singularity_threshold : float
        Relative pivot threshold.
    copy : bool
        If False, a float64 ndarray input becomes the work array and is
        overwritten with the packed factors.

    Example
    -------
    >>> lu = LUDecomposition([[2, 3, 3], [0, 5, 7], [6, 9, 8]])
    >>> lu.get_pivot().tolist(), round(lu.get_determinant(), 12)
    ([2, 1, 0], -10.0)
    """

    def __init__(
        self,
        matrix,
        singularity_threshold: float = DEFAULT_SINGULARITY_THRESHOLD,
        copy: bool = True,
    ):
        super().__init__()
        lu = as_array(matrix, copy=copy)
        m, n = lu.shape
        if m != n:
            raise NonSquareMatrixError(m, n)

        tol = scale_tol(lu, singularity_threshold)
        pivot = np.arange(m)
        singular = False

        for col in range(m):
            # upper part: rows above the diagonal depend on earlier rows
            for row in range(col):
                lu[row, col] -= lu[row, :row] @ lu[:row, col]
            # lower part (diagonal included) in one shot
            lu[col:, col] -= lu[col:, :col] @ lu[:col, col]

            best = col + int(np.argmax(np.abs(lu[col:, col])))
            largest = abs(lu[best, col])
            if largest == 0.0 or largest < tol:
                logger.debug(
                    "LU: pivot %.3e in column %d below threshold %.3e, matrix is singular",
                    largest,
                    col,
                    tol,
                )
                singular = True
                break

            if best != col:
                lu[[col, best]] = lu[[best, col]]
                pivot[[col, best]] = pivot[[best, col]]

            lu[col + 1 :, col] /= lu[col, col]

        self._lu = lu
        self._pivot = pivot
        self._singular = singular

    def _rhs_rows(self) -> int:
        return self._lu.shape[0]

    def is_non_singular(self) -> bool:
        return not self._singular

    def get_pivot(self) -> np.ndarray:
        """Row permutation: row i of P A is row pivot[i] of A."""
        return self._pivot.copy()

    def get_l(self) -> Optional[RealMatrix]:
        """Unit lower-triangular factor, None if singular."""
        if self._singular:
            return None
        return self._cached(
            "l", lambda: np.tril(self._lu, -1) + np.eye(self._lu.shape[0])
        )

    def get_u(self) -> Optional[RealMatrix]:
        """Upper-triangular factor, None if singular."""
        if self._singular:
            return None
        return self._cached("u", lambda: np.triu(self._lu))

    def get_p(self) -> Optional[RealMatrix]:
        """Permutation matrix with P[i, pivot[i]] = 1, None if singular."""
        if self._singular:
            return None

        def build():
            m = self._pivot.size
            P = np.zeros((m, m))
            P[np.arange(m), self._pivot] = 1.0
            return P

        return self._cached("p", build)

    def get_determinant(self) -> float:
        if self._singular:
            return 0.0
        return permutation_sign(self._pivot) * float(np.prod(np.diag(self._lu)))

    def _solve(self, b: np.ndarray) -> np.ndarray:
        if self._singular:
            raise SingularMatrixError("LU decomposition found a singular matrix")
        y = forward_substitute(self._lu, b[self._pivot], unit_diagonal=True)
        return back_substitute(self._lu, y)
