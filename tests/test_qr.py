# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np
import pytest

from densela.exceptions import DimensionMismatchError, SingularMatrixError
from densela.matrix import RealMatrix, RealVector
from densela.qr import QRDecomposition, least_squares_qr
from densela.utils import random_nonsingular_upper

TEST_ITERATIONS = 20
logger = logging.getLogger(__name__)

TEST_DATA = [[12.0, -51.0, 4.0], [6.0, 167.0, -68.0], [-4.0, 24.0, -41.0]]


def test_qr_reference_factors():
    qr = QRDecomposition(TEST_DATA)
    R = np.asarray(qr.get_r())
    Q = np.asarray(qr.get_q())
    assert R[0, 0] == pytest.approx(-14.0)
    np.testing.assert_allclose(
        R, [[-14, -21, 14], [0, -175, 70], [0, 0, 35]], atol=1e-12
    )
    np.testing.assert_allclose(
        Q,
        [
            [-12 / 14, 69 / 175, -58 / 175],
            [-6 / 14, -158 / 175, 6 / 175],
            [4 / 14, -30 / 175, -165 / 175],
        ],
        atol=1e-14,
    )


@pytest.mark.parametrize("shape", [(1, 1), (3, 3), (5, 3), (8, 8), (40, 7), (6, 1)])
def test_qr_properties(shape):
    A = np.random.default_rng(3).standard_normal(shape)
    m, n = shape
    qr = QRDecomposition(A)
    Q, R, H = (np.asarray(f) for f in (qr.get_q(), qr.get_r(), qr.get_h()))
    assert Q.shape == (m, m) and R.shape == (m, n) and H.shape == (m, n)
    np.testing.assert_allclose(Q @ R, A, atol=1e-12)
    np.testing.assert_allclose(Q.T @ Q, np.eye(m), atol=1e-12)
    np.testing.assert_allclose(np.asarray(qr.get_qt()), Q.T)
    # exact zeros below the diagonal of R, above the diagonal of H
    assert np.all(np.tril(R, -1) == 0.0)
    assert np.all(np.triu(H, 1) == 0.0)
    assert qr.is_full_rank() and qr.get_rank() == n


def test_qr_h_rebuilds_q():
    A = np.random.default_rng(11).standard_normal((6, 4))
    qr = QRDecomposition(A)
    H = np.asarray(qr.get_h())
    R = np.asarray(qr.get_r())
    Q = np.eye(6)
    # each column h of H gives the reflection I - h hᵀ / h[k]
    for k in reversed(range(4)):
        h = H[:, k]
        Q = Q - np.outer(h, h @ Q) / h[k]
    np.testing.assert_allclose(Q @ R, A, atol=1e-12)


def test_qr_requires_tall_input():
    with pytest.raises(DimensionMismatchError):
        QRDecomposition(np.ones((2, 3)))


def test_qr_rank_deficient():
    A = np.array([[1.0, 2.0, 3.0], [2.0, 4.0, 6.0], [1.0, 0.0, 1.0], [0.0, 1.0, 1.0]])
    A[:, 2] = A[:, 0] + A[:, 1]
    qr = QRDecomposition(A)
    assert qr.get_rank() == 2
    assert not qr.is_full_rank()
    assert not qr.is_non_singular()
    with pytest.raises(SingularMatrixError):
        qr.solve(np.ones(4))


def test_qr_pivoting():
    rng = np.random.default_rng(5)
    A = rng.standard_normal((7, 5)) * np.array([1.0, 100.0, 0.01, 10.0, 1000.0])
    qr = QRDecomposition(A, pivoting=True)
    R = np.asarray(qr.get_r())
    Q = np.asarray(qr.get_q())
    P = np.asarray(qr.get_permutation_matrix())
    np.testing.assert_allclose(Q @ R, A @ P, atol=1e-9)
    d = np.abs(np.diag(R))
    assert np.all(d[:-1] >= d[1:])
    perm = qr.get_permutation()
    assert sorted(perm.tolist()) == list(range(5))
    np.testing.assert_allclose(A[:, perm], A @ P)
    assert perm[0] == 4


def test_qr_pivoting_solve_matches_plain():
    rng = np.random.default_rng(9)
    A = rng.standard_normal((6, 4))
    b = rng.standard_normal(6)
    x_plain = QRDecomposition(A).solve(b)
    x_piv = QRDecomposition(A, pivoting=True).solve(b)
    np.testing.assert_allclose(x_piv, x_plain, atol=1e-12)


def test_qr_solve_square_exact():
    qr = QRDecomposition(TEST_DATA)
    x0 = np.array([1.0, -1.0, 2.0])
    b = np.array(TEST_DATA) @ x0
    np.testing.assert_allclose(qr.solve(b), x0, atol=1e-12)
    xv = qr.solve(RealVector(b))
    assert isinstance(xv, RealVector)
    xm = qr.solve(RealMatrix(np.column_stack([b, 2 * b])))
    assert isinstance(xm, RealMatrix)
    np.testing.assert_allclose(np.asarray(xm)[:, 1], 2 * x0, atol=1e-12)
    with pytest.raises(DimensionMismatchError):
        qr.solve(np.ones(4))


def test_qr_inverse():
    A = np.array(TEST_DATA)
    inv = np.asarray(QRDecomposition(A).get_inverse())
    np.testing.assert_allclose(inv @ A, np.eye(3), atol=1e-12)


def test_least_squares_qr():
    for i in range(TEST_ITERATIONS):
        rng = np.random.default_rng(i)
        A = rng.standard_normal((30, 6))
        b = rng.standard_normal(30)

        x_np, *_ = np.linalg.lstsq(A, b, rcond=None)
        x_ours = least_squares_qr(A, b)

        res_np = np.linalg.norm(A @ x_np - b)
        res_ours = np.linalg.norm(A @ x_ours - b)
        assert res_ours <= res_np * (1 + 1e-8)
        np.testing.assert_allclose(x_ours, x_np, atol=1e-10)


def test_least_squares_qr_square_upper():
    n = TEST_ITERATIONS
    A = random_nonsingular_upper(n, seed=1)
    x_true = np.random.default_rng(1).random(n)
    b = A @ x_true
    x = least_squares_qr(A, b)
    res = np.linalg.norm(A @ x - b, ord=np.inf)
    res_np = np.linalg.norm(A @ np.linalg.solve(A, b) - b, ord=np.inf)
    logger.debug(f"residuals: numpy {res_np:.3e}, QR {res:.3e}")
    assert res <= max(10 * res_np, 1e-8 * np.linalg.norm(b, ord=np.inf))


def test_qr_factors_are_cached():
    qr = QRDecomposition(TEST_DATA)
    assert qr.get_q() is qr.get_q()
    assert qr.get_r() is qr.get_r()
    assert qr.get_h() is qr.get_h()
    assert qr.get_qt() is qr.get_qt()
