# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np

from .elimination import back_substitute
from .exceptions import DimensionMismatchError, SingularMatrixError
from .matrix import RealMatrix, as_array
from .reduction import apply_reflector_left, householder_reflector
from .solver import DecompositionSolver

logger = logging.getLogger(__name__)

DEFAULT_RANK_THRESHOLD = 1e-12


class QRDecomposition(DecompositionSolver):
    """
    Householder QR decomposition of an m-by-n matrix A (m ≥ n).

    A = QR
    H_k = I + v_k v_kᵀ / (alpha_k v_k[0])
    Q = H_1 H_2 … H_n

    With `pivoting=True` the remaining column of largest norm is moved
    to the front before each reflection, giving A P = Q R with
    |R[0, 0]| ≥ |R[1, 1]| ≥ …

    Parameters
    ----------
    matrix : RealMatrix | array-like, (m, n) with m ≥ n
    rank_threshold : float
        A diagonal entry of R counts towards the rank when its magnitude
        exceeds rank_threshold · max_j ‖A[:, j]‖₂.
    pivoting : bool
        Enable column pivoting.
    copy : bool
        If False, a float64 ndarray input is overwritten with R.
    """

    def __init__(
        self,
        matrix,
        rank_threshold: float = DEFAULT_RANK_THRESHOLD,
        pivoting: bool = False,
        copy: bool = True,
    ):
        super().__init__()
        R = as_array(matrix, copy=copy)
        m, n = R.shape
        if m < n:
            raise DimensionMismatchError(
                m, n, f"QR needs at least as many rows as columns, got {m}x{n}"
            )

        self._tol = rank_threshold * float(np.linalg.norm(R, axis=0).max())
        perm = np.arange(n)
        reflectors = []

        for k in range(n):
            if pivoting:
                remaining = np.linalg.norm(R[k:, k:], axis=0)
                best = k + int(np.argmax(remaining))
                if best != k:
                    R[:, [k, best]] = R[:, [best, k]]
                    perm[[k, best]] = perm[[best, k]]

            # ---- build and apply the reflector for column k --------------
            v, alpha = householder_reflector(R[k:, k])
            apply_reflector_left(R[k:, k:], v, alpha)
            # force exact zeros below the diagonal
            R[k + 1 :, k] = 0.0
            R[k, k] = alpha
            reflectors.append((v, alpha))

        self._r = R
        self._reflectors = reflectors
        self._perm = perm
        self._pivoting = pivoting

    def _rhs_rows(self) -> int:
        return self._r.shape[0]

    # ------------------------------------------------------------------
    # factors
    # ------------------------------------------------------------------
    def get_r(self) -> RealMatrix:
        """m×n upper-trapezoidal factor."""
        return self._cached("r", lambda: self._r.copy())

    def get_q(self) -> RealMatrix:
        """m×m orthogonal factor."""

        def build():
            m = self._r.shape[0]
            Q = np.eye(m)
            # Q = H_1 (H_2 (… (H_n I)))
            for k in reversed(range(len(self._reflectors))):
                v, alpha = self._reflectors[k]
                apply_reflector_left(Q[k:, k:], v, alpha)
            return Q

        return self._cached("q", build)

    def get_qt(self) -> RealMatrix:
        return self._cached("qt", lambda: np.asarray(self.get_q()).T.copy())

    def get_h(self) -> RealMatrix:
        """m×n lower-trapezoidal matrix of the normalized reflection vectors."""

        def build():
            m, n = self._r.shape
            H = np.zeros((m, n))
            for k, (v, alpha) in enumerate(self._reflectors):
                if alpha != 0.0:
                    H[k:, k] = v / -alpha
            return H

        return self._cached("h", build)

    def get_permutation(self) -> np.ndarray:
        """Column order: column j of A P is column perm[j] of A."""
        return self._perm.copy()

    def get_permutation_matrix(self) -> RealMatrix:
        def build():
            n = self._perm.size
            P = np.zeros((n, n))
            P[self._perm, np.arange(n)] = 1.0
            return P

        return self._cached("p", build)

    # ------------------------------------------------------------------
    # rank
    # ------------------------------------------------------------------
    def get_rank(self) -> int:
        n = self._r.shape[1]
        return int(np.count_nonzero(np.abs(np.diag(self._r)[:n]) > self._tol))

    def is_full_rank(self) -> bool:
        return self.get_rank() == self._r.shape[1]

    def is_non_singular(self) -> bool:
        return self.is_full_rank()

    # ------------------------------------------------------------------
    # solving
    # ------------------------------------------------------------------
    def _solve(self, b: np.ndarray) -> np.ndarray:
        rank = self.get_rank()
        n = self._r.shape[1]
        if rank < n:
            raise SingularMatrixError(
                f"QR: matrix is rank deficient (rank {rank} < {n})", rank=rank
            )
        y = b.copy()
        # y = Qᵀ b = H_n … H_1 b
        for k, (v, alpha) in enumerate(self._reflectors):
            apply_reflector_left(y[k:], v, alpha)
        x = back_substitute(self._r[:n, :n], y[:n])
        if self._pivoting:
            out = np.empty_like(x)
            out[self._perm] = x
            return out
        return x


def least_squares_qr(A, b) -> np.ndarray:
    """
    Solve min ‖Ax – b‖₂ using a Householder QR factorisation (A = QR).

    Returns:
    x : (n, ) or (n, k) ndarray
        The least squares solution to Ax = b
    """
    return np.asarray(QRDecomposition(A).solve(np.asarray(b, dtype=float)))
