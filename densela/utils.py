# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from typing import Sequence

import numpy as np

EPS: float = 2.0**-52
SAFE_MIN: float = float(np.finfo(float).tiny)


def scale_tol(A: np.ndarray, tol: float = 1e-12) -> float:
    """Return an absolute tolerance scaled to the matrix magnitude."""
    return tol * max(1.0, float(np.linalg.norm(A, ord=np.inf)))


def permutation_sign(perm: Sequence[int]) -> float:
    """Return +1 or –1 depending on permutation parity."""
    visited = [False] * len(perm)
    cycles = 0
    for i in range(len(perm)):
        if not visited[i]:
            cycles += 1
            j = i
            while not visited[j]:
                visited[j] = True
                j = perm[j]
    swaps = len(perm) - cycles  # n − #cycles
    return -1.0 if swaps & 1 else 1.0


def random_nonsingular_upper(n, low=-100, high=100, seed=None) -> np.ndarray:
    """
    Build a matrix U that is upper-triangular with random entries
    everywhere and put only non-zero values on its diagonal

    Returns
    -------
    Matrix with float64 dtype
    """
    rng = np.random.default_rng(seed)
    U = rng.uniform(low, high, size=(n, n))
    # enforce upper-triangular
    U = np.triu(U)
    # replace any accidental zeros on the diagonal
    diag = rng.uniform(low if low != 0 else 1, high, size=n)
    U[np.diag_indices(n)] = diag
    return np.asarray(U)


def random_orthogonal(n, seed=None) -> np.ndarray:
    """
    Random n-by-n orthogonal matrix.

    Rows are drawn uniformly in [-1, 1] and orthonormalised against the
    previous rows (Gram-Schmidt), redrawing a row whose remainder is too
    small to normalise safely.
    """
    rng = np.random.default_rng(seed)
    Q = np.zeros((n, n))
    for i in range(n):
        while True:
            row = rng.uniform(-1.0, 1.0, size=n)
            # second pass recovers orthogonality lost to cancellation
            for _ in range(2):
                row -= Q[:i].T @ (Q[:i] @ row)
            norm2 = row @ row
            if norm2 * n >= 0.01:
                break
        Q[i] = row / np.sqrt(norm2)
    return Q


def random_symmetric(eigenvalues, seed=None) -> np.ndarray:
    """
    Symmetric matrix V diag(eigenvalues) Vᵀ with a random orthogonal V.
    """
    d = np.asarray(eigenvalues, dtype=float)
    V = random_orthogonal(d.size, seed=seed)
    S = (V * d) @ V.T
    # exact symmetry, rounding can differ between (i, j) and (j, i)
    return 0.5 * (S + S.T)
