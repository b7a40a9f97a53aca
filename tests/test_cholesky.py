# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from densela.cholesky import CholeskyDecomposition
from densela.exceptions import (
    DimensionMismatchError,
    NonPositiveDefiniteMatrixError,
    NonSquareMatrixError,
    NonSymmetricMatrixError,
)
from densela.matrix import RealMatrix
from densela.utils import random_symmetric

L_REF = np.array(
    [
        [1.0, 0.0, 0.0, 0.0, 0.0],
        [2.0, 3.0, 0.0, 0.0, 0.0],
        [4.0, 5.0, 6.0, 0.0, 0.0],
        [7.0, 8.0, 9.0, 10.0, 0.0],
        [11.0, 12.0, 13.0, 14.0, 15.0],
    ]
)
A_REF = L_REF @ L_REF.T


def test_reference_matrix():
    np.testing.assert_array_equal(
        A_REF,
        [
            [1, 2, 4, 7, 11],
            [2, 13, 23, 38, 58],
            [4, 23, 77, 122, 182],
            [7, 38, 122, 294, 430],
            [11, 58, 182, 430, 855],
        ],
    )
    chol = CholeskyDecomposition(A_REF)
    L = np.asarray(chol.get_l())
    np.testing.assert_allclose(L, L_REF, atol=1e-12)
    np.testing.assert_allclose(L[:, 0], [1, 2, 4, 7, 11])
    np.testing.assert_allclose(np.asarray(chol.get_lt()), L_REF.T, atol=1e-12)
    assert chol.get_determinant() == pytest.approx(np.prod(np.diag(L_REF)) ** 2)
    assert chol.is_non_singular()


@pytest.mark.parametrize("n", [1, 2, 5, 12])
def test_random_spd(n):
    A = random_symmetric(np.linspace(0.5, 10.0, n), seed=n)
    chol = CholeskyDecomposition(A)
    L = np.asarray(chol.get_l())
    np.testing.assert_allclose(L @ L.T, A, atol=1e-12)
    assert np.all(np.triu(L, 1) == 0.0)
    assert np.all(np.diag(L) > 0.0)


def test_non_symmetric():
    A = A_REF.copy()
    A[0, 4] *= 1.2
    with pytest.raises(NonSymmetricMatrixError) as err:
        CholeskyDecomposition(A)
    assert (err.value.row, err.value.column) == (0, 4)
    assert err.value.threshold == 1e-15


def test_symmetry_checked_before_positivity():
    with pytest.raises(NonSymmetricMatrixError) as err:
        CholeskyDecomposition([[1.0, 5.0], [0.0, -1.0]])
    assert (err.value.row, err.value.column) == (0, 1)


def test_not_positive_definite():
    A = np.array(
        [
            [14.0, 11.0, 13.0, 15.0, 24.0],
            [11.0, 34.0, 13.0, 8.0, 25.0],
            [13.0, 13.0, 14.0, 15.0, 21.0],
            [15.0, 8.0, 15.0, 18.0, 23.0],
            [24.0, 25.0, 21.0, 23.0, 45.0],
        ]
    )
    with pytest.raises(NonPositiveDefiniteMatrixError):
        CholeskyDecomposition(A)


def test_negative_diagonal_reports_index():
    with pytest.raises(NonPositiveDefiniteMatrixError) as err:
        CholeskyDecomposition([[4.0, 0.0], [0.0, -1.0]])
    assert err.value.index == 1


def test_requires_square():
    with pytest.raises(NonSquareMatrixError):
        CholeskyDecomposition(np.ones((2, 3)))


def test_solve():
    chol = CholeskyDecomposition(A_REF)
    x0 = np.arange(1.0, 6.0)
    np.testing.assert_allclose(chol.solve(A_REF @ x0), x0, atol=1e-9)
    X = chol.solve(RealMatrix(A_REF @ np.eye(5)))
    np.testing.assert_allclose(np.asarray(X), np.eye(5), atol=1e-9)
    np.testing.assert_allclose(
        np.asarray(chol.get_inverse()) @ A_REF, np.eye(5), atol=1e-9
    )
    with pytest.raises(DimensionMismatchError):
        chol.solve(np.ones(4))


def test_factors_are_cached():
    chol = CholeskyDecomposition(A_REF)
    assert chol.get_l() is chol.get_l()
    assert chol.get_lt() is chol.get_lt()
