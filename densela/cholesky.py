# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np

from .elimination import back_substitute, forward_substitute
from .exceptions import (
    NonPositiveDefiniteMatrixError,
    NonSquareMatrixError,
    NonSymmetricMatrixError,
)
from .matrix import RealMatrix, as_array
from .solver import DecompositionSolver

DEFAULT_RELATIVE_SYMMETRY_THRESHOLD = 1e-15
DEFAULT_ABSOLUTE_POSITIVITY_THRESHOLD = 1e-10


class CholeskyDecomposition(DecompositionSolver):
    """
    Cholesky decomposition A = L Lᵀ of a symmetric positive-definite matrix.

    The factor is computed row by row on Lᵀ: the diagonal entry of row i
    is replaced by its square root, the rest of the row is scaled by its
    inverse and the outer product of that row is removed from the
    trailing upper block.

    Raises
    ------
    NonSquareMatrixError
    NonSymmetricMatrixError
        |a_ij - a_ji| > relative_symmetry_threshold · max(|a_ij|, |a_ji|)
    NonPositiveDefiniteMatrixError
        A pivot is not above absolute_positivity_threshold.

    Example
    -------
    >>> c = CholeskyDecomposition([[4, 2], [2, 5]])
    >>> c.get_l().get_data().tolist()
    [[2.0, 0.0], [1.0, 2.0]]
    """

    def __init__(
        self,
        matrix,
        relative_symmetry_threshold: float = DEFAULT_RELATIVE_SYMMETRY_THRESHOLD,
        absolute_positivity_threshold: float = DEFAULT_ABSOLUTE_POSITIVITY_THRESHOLD,
    ):
        super().__init__()
        lt = as_array(matrix)
        n, cols = lt.shape
        if n != cols:
            raise NonSquareMatrixError(n, cols)

        # symmetry is checked on the whole matrix before any arithmetic
        delta = np.abs(lt - lt.T)
        bound = relative_symmetry_threshold * np.maximum(np.abs(lt), np.abs(lt.T))
        offending = np.argwhere(np.triu(delta > bound, 1))
        if offending.size:
            i, j = (int(k) for k in offending[0])
            raise NonSymmetricMatrixError(i, j, relative_symmetry_threshold)

        lt[np.tril_indices(n, -1)] = 0.0

        for i in range(n):
            if lt[i, i] <= absolute_positivity_threshold:
                raise NonPositiveDefiniteMatrixError(i, absolute_positivity_threshold)
            lt[i, i] = np.sqrt(lt[i, i])
            row = lt[i, i + 1 :] / lt[i, i]
            lt[i, i + 1 :] = row
            lt[i + 1 :, i + 1 :] -= np.triu(np.outer(row, row))

        self._lt = lt

    def _rhs_rows(self) -> int:
        return self._lt.shape[0]

    def get_lt(self) -> RealMatrix:
        return self._cached("lt", lambda: self._lt.copy())

    def get_l(self) -> RealMatrix:
        return self._cached("l", lambda: self._lt.T.copy())

    def get_determinant(self) -> float:
        d = np.diag(self._lt)
        return float(np.prod(d * d))

    def is_non_singular(self) -> bool:
        # construction fails for anything that is not positive definite
        return True

    def _solve(self, b: np.ndarray) -> np.ndarray:
        y = forward_substitute(self._lt.T, b)
        return back_substitute(self._lt, y)
