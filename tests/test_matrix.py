# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from densela.exceptions import (
    DimensionMismatchError,
    MatrixIndexError,
    NonSquareMatrixError,
    ReadOnlyMatrixError,
)
from densela.matrix import RealMatrix, RealVector


def test_construction_copies_by_default():
    data = np.array([[1.0, 2.0], [3.0, 4.0]])
    M = RealMatrix(data)
    data[0, 0] = 99.0
    assert M.get_entry(0, 0) == 1.0
    assert M.shape == (2, 2)
    assert M.get_row_dimension() == 2 and M.get_column_dimension() == 2


def test_construction_without_copy_shares_buffer():
    data = np.array([[1.0, 2.0], [3.0, 4.0]])
    M = RealMatrix(data, copy=False)
    data[0, 0] = 99.0
    assert M.get_entry(0, 0) == 99.0


@pytest.mark.parametrize(
    "bad",
    [
        [[1, 2], [3]],
        [],
        [[]],
        [1, 2, 3],
        np.zeros((2, 2, 2)),
    ],
)
def test_invalid_shapes_rejected(bad):
    with pytest.raises(DimensionMismatchError):
        RealMatrix(bad)


def test_index_checks():
    M = RealMatrix([[1, 2, 3], [4, 5, 6]])
    assert M[1, 2] == 6.0
    with pytest.raises(MatrixIndexError):
        M.get_entry(2, 0)
    with pytest.raises(MatrixIndexError):
        M.get_entry(0, 3)
    with pytest.raises(MatrixIndexError):
        M.get_entry(-1, 0)
    # MatrixIndexError is also an IndexError
    with pytest.raises(IndexError):
        M.get_column(5)


def test_setters():
    M = RealMatrix.zeros(2, 2)
    M.set_entry(0, 1, 3.0)
    M.add_to_entry(0, 1, 2.0)
    M.multiply_entry(0, 1, 2.0)
    M[1, 0] = -1.0
    np.testing.assert_array_equal(M.get_data(), [[0.0, 10.0], [-1.0, 0.0]])


def test_get_data_is_a_copy():
    M = RealMatrix([[1, 2], [3, 4]])
    d = M.get_data()
    d[0, 0] = 100.0
    assert M.get_entry(0, 0) == 1.0


def test_arithmetic():
    A = RealMatrix([[1, 2], [3, 4]])
    B = RealMatrix([[0, 1], [1, 0]])
    np.testing.assert_array_equal(np.asarray(A + B), [[1, 3], [4, 4]])
    np.testing.assert_array_equal(np.asarray(A - B), [[1, 1], [2, 4]])
    np.testing.assert_array_equal(np.asarray(A @ B), [[2, 1], [4, 3]])
    np.testing.assert_array_equal(np.asarray(2 * A), [[2, 4], [6, 8]])
    np.testing.assert_array_equal(np.asarray(-A), [[-1, -2], [-3, -4]])
    np.testing.assert_array_equal(np.asarray(A.scalar_add(1)), [[2, 3], [4, 5]])
    np.testing.assert_array_equal(np.asarray(A.transpose()), [[1, 3], [2, 4]])
    np.testing.assert_array_equal(np.asarray(A.power(2)), [[7, 10], [15, 22]])
    np.testing.assert_array_equal(np.asarray(A.power(0)), np.eye(2))


def test_operate_and_pre_multiply():
    A = RealMatrix([[1, 2, 3], [4, 5, 6]])
    v = RealVector([1, 0, -1])
    out = A.operate(v)
    assert isinstance(out, RealVector)
    np.testing.assert_array_equal(out.to_array(), [-2, -2])
    np.testing.assert_array_equal(A @ np.array([1.0, 1.0, 1.0]), [6, 15])
    np.testing.assert_array_equal(A.pre_multiply([1, 1]), [5, 7, 9])
    with pytest.raises(DimensionMismatchError):
        A.operate([1, 2])


def test_dimension_mismatch_in_arithmetic():
    A = RealMatrix([[1, 2], [3, 4]])
    B = RealMatrix([[1, 2, 3]])
    with pytest.raises(DimensionMismatchError):
        A.add(B)
    with pytest.raises(DimensionMismatchError):
        A.multiply(B)
    with pytest.raises(NonSquareMatrixError):
        B.power(2)


def test_norms_and_trace():
    A = RealMatrix([[1, -2], [-3, 4]])
    assert A.get_norm() == 6.0
    assert A.get_inf_norm() == 7.0
    assert A.get_frobenius_norm() == pytest.approx(np.sqrt(30.0))
    assert A.get_trace() == 5.0


def test_sub_matrix_inclusive_bounds():
    A = RealMatrix(np.arange(12.0).reshape(3, 4))
    S = A.get_sub_matrix(1, 2, 1, 3)
    np.testing.assert_array_equal(np.asarray(S), [[5, 6, 7], [9, 10, 11]])


def test_factories():
    np.testing.assert_array_equal(np.asarray(RealMatrix.identity(3)), np.eye(3))
    D = RealMatrix.diagonal([1, 2], rows=3, columns=2)
    np.testing.assert_array_equal(np.asarray(D), [[1, 0], [0, 2], [0, 0]])


def test_equality_and_hash():
    A = RealMatrix([[1, 2], [3, 4]])
    assert A == RealMatrix([[1.0, 2.0], [3.0, 4.0]])
    assert A != RealMatrix([[1, 2], [3, 5]])
    assert A != RealMatrix([[1, 2, 3], [3, 4, 5]])
    with pytest.raises(TypeError):
        hash(A)


def test_symmetry_predicate():
    assert RealMatrix([[1, 2], [2, 1]]).is_symmetric()
    assert not RealMatrix([[1, 2], [2.001, 1]]).is_symmetric(1e-6)
    assert RealMatrix([[1, 2], [2.001, 1]]).is_symmetric(1e-3)
    assert not RealMatrix([[1, 2, 3]]).is_symmetric()


def test_read_only_matrix():
    A = RealMatrix._wrap(np.eye(2), read_only=True)
    assert A.is_read_only()
    with pytest.raises(ReadOnlyMatrixError):
        A.set_entry(0, 0, 2.0)
    B = A.copy()
    B.set_entry(0, 0, 2.0)
    assert not B.is_read_only()
    assert A.get_entry(0, 0) == 1.0


def test_vector_basics():
    v = RealVector([3, 4])
    assert len(v) == 2 and v.get_dimension() == 2
    assert list(v) == [3.0, 4.0]
    assert v.get_norm() == 5.0
    assert v.get_l1_norm() == 7.0
    assert v.get_linf_norm() == 4.0
    assert v.dot_product([1, 1]) == 7.0
    np.testing.assert_allclose(v.unit_vector().to_array(), [0.6, 0.8])
    np.testing.assert_array_equal(
        np.asarray(v.outer_product([1, 2])), [[3, 6], [4, 8]]
    )
    np.testing.assert_array_equal((v + v).to_array(), [6, 8])
    np.testing.assert_array_equal((v * 0.5).to_array(), [1.5, 2])
    with pytest.raises(MatrixIndexError):
        v[2]
    with pytest.raises(DimensionMismatchError):
        RealVector([[1, 2]])
