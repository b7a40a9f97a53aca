# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
import math
from typing import Optional

import numpy as np

from .exceptions import ConvergenceError, SingularMatrixError, ValidationError
from .matrix import RealMatrix, as_array
from .reduction import BiDiagonalTransformer
from .solver import DecompositionSolver
from .utils import EPS, SAFE_MIN

logger = logging.getLogger(__name__)

# entries below TINY + EPS·(neighbours) are treated as zero
TINY = 2.0**-966


def _rotate(M: np.ndarray, j: int, k: int, cs: float, sn: float) -> None:
    """Plane rotation of columns j and k of M, in place."""
    mj = M[:, j].copy()
    M[:, j] = cs * mj + sn * M[:, k]
    M[:, k] = -sn * mj + cs * M[:, k]


def _golub_kahan(
    s: np.ndarray, e: np.ndarray, U: np.ndarray, V: np.ndarray, max_iterations: int
) -> int:
    """
    Diagonalize the upper bidiagonal matrix (s, e) by implicit QR sweeps.

    Parameters
    ----------
    s : (n,) ndarray
        Main diagonal, overwritten with the singular values (descending).
    e : (n,) ndarray
        e[k] couples s[k] and s[k+1], e[n-1] must be 0. Destroyed.
    U : (m, n) ndarray
        Left rotations are applied to its columns.
    V : (n, n) ndarray
        Right rotations are applied to its columns.
    max_iterations : int
        Budget for the total number of QR sweeps.

    Returns
    -------
    Number of QR sweeps performed.
    """
    n = s.size
    p = n
    pp = p - 1
    sweeps = 0

    while p > 0:
        # ---- look for a negligible e[k] ----------------------------------
        k = p - 2
        while k >= 0:
            if abs(e[k]) <= TINY + EPS * (abs(s[k]) + abs(s[k + 1])):
                e[k] = 0.0
                break
            k -= 1

        if k == p - 2:
            kase = 4  # s[p-1] has converged
        else:
            ks = p - 1
            while ks > k:
                t = abs(e[ks]) + (abs(e[ks - 1]) if ks != k + 1 else 0.0)
                if abs(s[ks]) <= TINY + EPS * t:
                    s[ks] = 0.0
                    break
                ks -= 1
            if ks == k:
                kase = 3  # QR sweep
            elif ks == p - 1:
                kase = 1  # negligible s[p-1]
            else:
                kase = 2  # split at negligible s[ks]
                k = ks
        k += 1

        if kase == 1:
            # deflate: chase e[p-2] out with rotations from the right
            f = e[p - 2]
            e[p - 2] = 0.0
            for j in range(p - 2, k - 1, -1):
                t = math.hypot(s[j], f)
                cs = s[j] / t
                sn = f / t
                s[j] = t
                if j != k:
                    f = -sn * e[j - 1]
                    e[j - 1] = cs * e[j - 1]
                _rotate(V, j, p - 1, cs, sn)

        elif kase == 2:
            # split: chase e[k-1] out with rotations from the left
            f = e[k - 1]
            e[k - 1] = 0.0
            for j in range(k, p):
                t = math.hypot(s[j], f)
                cs = s[j] / t
                sn = f / t
                s[j] = t
                f = -sn * e[j]
                e[j] = cs * e[j]
                _rotate(U, j, k - 1, cs, sn)

        elif kase == 3:
            sweeps += 1
            if sweeps > max_iterations:
                raise ConvergenceError(
                    f"SVD did not converge in {max_iterations} QR sweeps",
                    iterations=max_iterations,
                )

            # shift from the trailing 2x2 block
            scale = max(abs(s[p - 1]), abs(s[p - 2]), abs(e[p - 2]), abs(s[k]), abs(e[k]))
            sp = s[p - 1] / scale
            spm1 = s[p - 2] / scale
            epm1 = e[p - 2] / scale
            sk = s[k] / scale
            ek = e[k] / scale
            b = ((spm1 + sp) * (spm1 - sp) + epm1 * epm1) / 2.0
            c = (sp * epm1) * (sp * epm1)
            shift = 0.0
            if b != 0.0 or c != 0.0:
                shift = math.sqrt(b * b + c)
                if b < 0.0:
                    shift = -shift
                shift = c / (b + shift)
            f = (sk + sp) * (sk - sp) + shift
            g = sk * ek

            # chase the bulge
            for j in range(k, p - 1):
                t = math.hypot(f, g)
                cs = f / t
                sn = g / t
                if j != k:
                    e[j - 1] = t
                f = cs * s[j] + sn * e[j]
                e[j] = cs * e[j] - sn * s[j]
                g = sn * s[j + 1]
                s[j + 1] = cs * s[j + 1]
                _rotate(V, j, j + 1, cs, sn)

                t = math.hypot(f, g)
                cs = f / t
                sn = g / t
                s[j] = t
                f = cs * e[j] + sn * s[j + 1]
                s[j + 1] = -sn * e[j] + cs * s[j + 1]
                g = sn * e[j + 1]
                e[j + 1] = cs * e[j + 1]
                _rotate(U, j, j + 1, cs, sn)
            e[p - 2] = f

        else:
            # make the converged value non-negative
            if s[k] <= 0.0:
                s[k] = -s[k] if s[k] < 0.0 else 0.0
                V[:, k] = -V[:, k]
            # bubble it into descending order
            while k < pp and s[k] < s[k + 1]:
                s[[k, k + 1]] = s[[k + 1, k]]
                V[:, [k, k + 1]] = V[:, [k + 1, k]]
                U[:, [k, k + 1]] = U[:, [k + 1, k]]
                k += 1
            p -= 1

    return sweeps


class SingularValueDecomposition(DecompositionSolver):
    """
    Compact singular value decomposition A = U S Vᵀ.

    For an m-by-n matrix with p = min(m, n):
        U : m-by-p matrix whose columns are orthonormal
        S : p-by-p diagonal matrix, singular values in descending order
        V : n-by-p matrix whose columns are orthonormal

    Algorithm outline
    -----------------
    1.  Reduce A to upper bidiagonal form with Householder reflections.
    2.  Run implicit-shift QR sweeps on the bidiagonal pair, deflating
        and splitting at negligible entries.
    3.  Accumulate every rotation into U and V.

    Parameters
    ----------
    matrix : RealMatrix | array-like
    max_iterations : int | None
        Total QR sweep budget, 30·p² when None.
    tolerance : float | None
        Singular values at or below it do not count towards the rank.
        Defaults to max(max(m, n)·σ_max·eps, √SAFE_MIN).
    """

    def __init__(
        self,
        matrix,
        max_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
    ):
        super().__init__()
        A = as_array(matrix)
        m, n = A.shape

        # Handle the wide-matrix case by transposing and swapping the roles
        # of left and right singular vectors.
        transposed = m < n
        if transposed:
            A = A.T
        rows, cols = A.shape

        if max_iterations is None:
            max_iterations = 30 * cols * cols

        bidiag = BiDiagonalTransformer(A)
        s = bidiag.get_main_diagonal()
        e = np.zeros(cols)
        e[: cols - 1] = bidiag.get_secondary_diagonal()
        U = np.array(bidiag.get_u())[:, :cols]
        V = np.array(bidiag.get_v())

        sweeps = _golub_kahan(s, e, U, V, max_iterations)
        logger.debug("svd: %d QR sweeps for a %dx%d matrix", sweeps, m, n)

        if transposed:
            U, V = V, U
        self._shape = (m, n)
        self._s = s
        self._u = U
        self._v = V
        if tolerance is None:
            tolerance = max(max(m, n) * s[0] * EPS, math.sqrt(SAFE_MIN))
        self._tol = tolerance

    def _rhs_rows(self) -> int:
        return self._shape[0]

    # ------------------------------------------------------------------
    # factors
    # ------------------------------------------------------------------
    def get_u(self) -> RealMatrix:
        return self._cached("u", lambda: self._u.copy())

    def get_ut(self) -> RealMatrix:
        return self._cached("ut", lambda: self._u.T.copy())

    def get_s(self) -> RealMatrix:
        return self._cached("s", lambda: np.diag(self._s))

    def get_v(self) -> RealMatrix:
        return self._cached("v", lambda: self._v.copy())

    def get_vt(self) -> RealMatrix:
        return self._cached("vt", lambda: self._v.T.copy())

    def get_singular_values(self) -> np.ndarray:
        return self._s.copy()

    # ------------------------------------------------------------------
    # summaries
    # ------------------------------------------------------------------
    def get_rank(self) -> int:
        return int(np.count_nonzero(self._s > self._tol))

    def get_norm(self) -> float:
        """L2 norm, the largest singular value."""
        return float(self._s[0])

    def get_condition_number(self) -> float:
        if self._s[-1] == 0.0:
            return math.inf
        return float(self._s[0] / self._s[-1])

    def get_inverse_condition_number(self) -> float:
        if self._s[0] == 0.0:
            return 0.0
        return float(self._s[-1] / self._s[0])

    def get_covariance(self, min_singular_value: float) -> RealMatrix:
        """
        (Jᵀ J)⁻¹ for the decomposed Jacobian J, built from the singular
        values that are at least `min_singular_value`.
        """
        kept = int(np.count_nonzero(self._s >= min_singular_value))
        if kept == 0:
            raise ValidationError(
                f"cutoff {min_singular_value} is larger than the largest "
                f"singular value {self._s[0]}"
            )
        W = self._v[:, :kept].T / self._s[:kept, None]
        return RealMatrix(W.T @ W, copy=False)

    def is_non_singular(self) -> bool:
        return self.get_rank() == self._s.size

    # ------------------------------------------------------------------
    # solving
    # ------------------------------------------------------------------
    def _pinv(self) -> np.ndarray:
        r = self.get_rank()
        return (self._v[:, :r] / self._s[:r]) @ self._u[:, :r].T

    def get_pseudo_inverse(self) -> RealMatrix:
        """Moore-Penrose pseudo-inverse over the singular values above tolerance."""
        return self._cached("pinv", self._pinv)

    def _solve(self, b: np.ndarray) -> np.ndarray:
        rank = self.get_rank()
        if rank < self._s.size:
            raise SingularMatrixError(
                f"SVD: matrix is rank deficient (rank {rank} < {self._s.size})",
                rank=rank,
            )
        return np.asarray(self.get_pseudo_inverse()) @ b


def least_squares_svd(A, b) -> np.ndarray:
    """
    Minimum-norm solution of min ‖Ax – b‖₂ through the pseudo-inverse.

    Rank-deficient A is allowed.
    """
    b = np.asarray(b, dtype=float)
    return np.asarray(SingularValueDecomposition(A).get_pseudo_inverse()) @ b
