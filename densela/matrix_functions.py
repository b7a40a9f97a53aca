# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np

from .elimination import LUDecomposition
from .exceptions import NonSquareMatrixError
from .matrix import as_array
from .svd import SingularValueDecomposition

logger = logging.getLogger(__name__)


def det(A) -> float:
    """
    Calculate the determinant of n-by-n matrix A using LU elimination
    """
    return LUDecomposition(A).get_determinant()


def inverse(A) -> np.ndarray:
    """Inverse of a square matrix; raises SingularMatrixError when singular."""
    return np.asarray(LUDecomposition(A).get_inverse())


def is_singular(A) -> bool:
    return not LUDecomposition(A).is_non_singular()


def pinv(A) -> np.ndarray:
    """Moore-Penrose pseudo-inverse through the SVD."""
    return np.array(SingularValueDecomposition(A).get_pseudo_inverse())


def rank(A) -> int:
    """Numerical rank: number of singular values above the SVD tolerance."""
    return SingularValueDecomposition(A).get_rank()


def cond(A) -> float:
    """2-norm condition number σ_max / σ_min (inf when singular)."""
    return SingularValueDecomposition(A).get_condition_number()


def adj(A) -> np.ndarray:
    """
    Adjugate (classical adjoint) of a square matrix A.

    Fast path (det ≠ 0): adj(A) = det(A) · A^{-1}
    Slow path (det = 0): cofactor expansion (one determinant per entry)
    """
    A = as_array(A)
    m, n = A.shape
    if m != n:
        raise NonSquareMatrixError(m, n)
    if n == 1:
        return np.ones((1, 1))

    lu = LUDecomposition(A)
    d = lu.get_determinant()
    if d == 0.0:
        logger.warning("adj(): singular matrix, falling back to cofactor expansion")
        C = np.empty_like(A)
        for i in range(n):
            for j in range(n):
                minor = A[np.arange(n) != i][:, np.arange(n) != j]
                C[i, j] = ((-1) ** (i + j)) * det(minor)
        return C.T

    return d * np.asarray(lu.get_inverse())
