# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Householder reflections and the two orthogonal reductions built on them.

A reflector for x is stored as the pair (v, alpha) with v = x - alpha·e1.
The reflection H = I + v vᵀ / (alpha·v0) is symmetric, orthogonal and
maps x to alpha·e1. It is never formed explicitly: `apply_reflector_left`
and `apply_reflector_right` update the affected block in place.
"""

import logging
from typing import Tuple

import numpy as np

from .exceptions import NonSquareMatrixError
from .matrix import RealMatrix, as_array
from .solver import CachedFactors

logger = logging.getLogger(__name__)


def householder_reflector(x: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Householder vector for `x`.

    Returns
    -------
    v : ndarray
        x - alpha·e1 (all zeros when x is the zero vector)
    alpha : float
        -‖x‖ when x[0] > 0, +‖x‖ otherwise, so that v[0] never cancels.
        0.0 signals a zero vector, for which the reflection is the
        identity.
    """
    x = np.asarray(x, dtype=float)
    norm = float(np.linalg.norm(x))
    if norm == 0.0:
        return np.zeros_like(x), 0.0
    alpha = -norm if x[0] > 0 else norm
    v = x.copy()
    v[0] -= alpha
    return v, alpha


def apply_reflector_left(M: np.ndarray, v: np.ndarray, alpha: float) -> None:
    """M ← H M, in place (rows of M match the length of v)."""
    if alpha == 0.0:
        return
    M += np.outer(v, (v @ M) / (alpha * v[0]))


def apply_reflector_right(M: np.ndarray, v: np.ndarray, alpha: float) -> None:
    """M ← M H, in place (columns of M match the length of v)."""
    if alpha == 0.0:
        return
    M += np.outer((M @ v) / (alpha * v[0]), v)


class TriDiagonalTransformer(CachedFactors):
    """
    Orthogonal similarity A = Q T Qᵀ with T symmetric tridiagonal.

    The input is assumed symmetric; only its square shape is checked.
    """

    def __init__(self, matrix):
        super().__init__()
        A = as_array(matrix)
        n, cols = A.shape
        if n != cols:
            raise NonSquareMatrixError(n, cols)

        T = A
        Q = np.eye(n)
        secondary = np.zeros(max(n - 1, 0))
        reflections = 0
        for k in range(n - 1):
            x = T[k + 1 :, k]
            if not np.any(x[1:]):
                secondary[k] = x[0]
                continue
            v, alpha = householder_reflector(x)
            apply_reflector_left(T[k + 1 :, :], v, alpha)
            apply_reflector_right(T[:, k + 1 :], v, alpha)
            apply_reflector_right(Q[:, k + 1 :], v, alpha)
            secondary[k] = alpha
            reflections += 1

        logger.debug("tridiagonalized %dx%d matrix with %d reflections", n, n, reflections)
        self._n = n
        self._main = np.diag(T).copy()
        self._secondary = secondary
        self._q = Q

    def get_q(self) -> RealMatrix:
        return self._cached("q", lambda: self._q.copy())

    def get_qt(self) -> RealMatrix:
        return self._cached("qt", lambda: self._q.T.copy())

    def get_t(self) -> RealMatrix:
        def build():
            T = np.diag(self._main)
            if self._n > 1:
                T += np.diag(self._secondary, 1) + np.diag(self._secondary, -1)
            return T

        return self._cached("t", build)

    def get_main_diagonal(self) -> np.ndarray:
        return self._main.copy()

    def get_secondary_diagonal(self) -> np.ndarray:
        return self._secondary.copy()


class BiDiagonalTransformer(CachedFactors):
    """
    Orthogonal reduction A = U B Vᵀ with B bidiagonal.

    B is upper bidiagonal when m >= n (a column reflection first, then a
    row reflection, per step) and lower bidiagonal when m < n (row
    first, then column). U is m×m, B is m×n and V is n×n.
    """

    def __init__(self, matrix):
        super().__init__()
        B = as_array(matrix)
        m, n = B.shape
        U = np.eye(m)
        V = np.eye(n)

        if m >= n:
            for k in range(n):
                self._reduce_column(B, U, k, k)
                if k < n - 1:
                    self._reduce_row(B, V, k, k + 1)
            main = np.diag(B)[:n].copy()
            secondary = np.array([B[k, k + 1] for k in range(n - 1)])
        else:
            for k in range(m):
                self._reduce_row(B, V, k, k)
                if k < m - 1:
                    self._reduce_column(B, U, k + 1, k)
            main = np.diag(B)[:m].copy()
            secondary = np.array([B[k + 1, k] for k in range(m - 1)])

        self._shape = (m, n)
        self._u = U
        self._v = V
        self._main = main
        self._secondary = secondary

    @staticmethod
    def _reduce_column(B: np.ndarray, U: np.ndarray, row: int, col: int) -> None:
        """Zero B[row+1:, col] with a reflection applied from the left."""
        x = B[row:, col]
        if not np.any(x[1:]):
            return
        v, alpha = householder_reflector(x)
        apply_reflector_left(B[row:, col:], v, alpha)
        B[row + 1 :, col] = 0.0
        B[row, col] = alpha
        apply_reflector_right(U[:, row:], v, alpha)

    @staticmethod
    def _reduce_row(B: np.ndarray, V: np.ndarray, row: int, col: int) -> None:
        """Zero B[row, col+1:] with a reflection applied from the right."""
        y = B[row, col:]
        if not np.any(y[1:]):
            return
        v, alpha = householder_reflector(y)
        apply_reflector_right(B[row:, col:], v, alpha)
        B[row, col + 1 :] = 0.0
        B[row, col] = alpha
        apply_reflector_right(V[:, col:], v, alpha)

    def is_upper_bidiagonal(self) -> bool:
        return self._shape[0] >= self._shape[1]

    def get_u(self) -> RealMatrix:
        return self._cached("u", lambda: self._u.copy())

    def get_v(self) -> RealMatrix:
        return self._cached("v", lambda: self._v.copy())

    def get_b(self) -> RealMatrix:
        def build():
            m, n = self._shape
            B = np.zeros((m, n))
            p = self._main.size
            B[np.arange(p), np.arange(p)] = self._main
            idx = np.arange(p - 1)
            if self.is_upper_bidiagonal():
                B[idx, idx + 1] = self._secondary
            else:
                B[idx + 1, idx] = self._secondary
            return B

        return self._cached("b", build)

    def get_main_diagonal(self) -> np.ndarray:
        return self._main.copy()

    def get_secondary_diagonal(self) -> np.ndarray:
        return self._secondary.copy()
