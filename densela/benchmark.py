#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Timing and accuracy of the decompositions against their NumPy (LAPACK)
counterparts.

    python -m densela.benchmark
"""

import logging
import time
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from .cholesky import CholeskyDecomposition
from .eigen import EigenDecomposition
from .elimination import LUDecomposition
from .qr import QRDecomposition
from .svd import SingularValueDecomposition

logger = logging.getLogger(__name__)

REPEATS = 3  # best of 3 runs
SIZES = [(50, 50), (150, 150), (300, 100)]
COLUMNS = ["kernel", "size", "sec", "sec/NumPy", "residual", "orth_err"]


def wall(f, *args, **kwargs):
    t0 = time.perf_counter()
    f(*args, **kwargs)
    return time.perf_counter() - t0


def _best(f, repeats, *args):
    return min(wall(f, *args) for _ in range(repeats))


def _orth_err(Q: np.ndarray) -> float:
    return float(np.linalg.norm(Q.T @ Q - np.eye(Q.shape[1]), np.inf))


def run_benchmark(
    sizes: Iterable[Tuple[int, int]] = SIZES,
    repeats: int = REPEATS,
    seed: Optional[int] = 0,
) -> pd.DataFrame:
    """
    Time every decomposition on random matrices of the given sizes.

    LU, Cholesky and Eigen only run on square sizes; Cholesky and Eigen
    use the symmetric positive-definite matrix AᵀA + n·I.

    Returns
    -------
    DataFrame with one row per (kernel, size) and the columns
    kernel, size, sec, sec/NumPy, residual (∞-norm of the
    reconstruction error) and orth_err (∞-norm of QᵀQ - I, NaN where no
    orthogonal factor exists).
    """
    rng = np.random.default_rng(seed)
    records = []
    for m, n in sizes:
        A = rng.standard_normal((m, n))
        label = f"{m}×{n}"
        logger.debug("benchmarking %s", label)

        # ---------- QR ----------------------------------------------------
        if m >= n:
            t_np = _best(np.linalg.qr, repeats, A)
            t = _best(QRDecomposition, repeats, A)
            qr = QRDecomposition(A)
            Q = np.asarray(qr.get_q())
            res = np.linalg.norm(Q @ np.asarray(qr.get_r()) - A, np.inf)
            records.append(("QR", label, t, t / t_np, res, _orth_err(Q)))

        # ---------- SVD ---------------------------------------------------
        t_np = _best(lambda X: np.linalg.svd(X, full_matrices=False), repeats, A)
        t = _best(SingularValueDecomposition, repeats, A)
        svd = SingularValueDecomposition(A)
        U, V = np.asarray(svd.get_u()), np.asarray(svd.get_v())
        res = np.linalg.norm((U * svd.get_singular_values()) @ V.T - A, np.inf)
        records.append(
            ("SVD", label, t, t / t_np, res, max(_orth_err(U), _orth_err(V)))
        )

        if m != n:
            continue

        # ---------- LU ----------------------------------------------------
        I = np.eye(n)
        t_np = _best(np.linalg.solve, repeats, A, I)
        t = _best(LUDecomposition, repeats, A)
        lu = LUDecomposition(A)
        res = np.linalg.norm(
            np.asarray(lu.get_l()) @ np.asarray(lu.get_u())
            - np.asarray(lu.get_p()) @ A,
            np.inf,
        )
        records.append(("LU", label, t, t / t_np, res, np.nan))

        S = A.T @ A + n * I

        # ---------- Cholesky ----------------------------------------------
        t_np = _best(np.linalg.cholesky, repeats, S)
        t = _best(CholeskyDecomposition, repeats, S)
        L = np.asarray(CholeskyDecomposition(S).get_l())
        res = np.linalg.norm(L @ L.T - S, np.inf)
        records.append(("Cholesky", label, t, t / t_np, res, np.nan))

        # ---------- Eigen -------------------------------------------------
        t_np = _best(np.linalg.eigh, repeats, S)
        t = _best(EigenDecomposition, repeats, S)
        ed = EigenDecomposition(S)
        V = np.asarray(ed.get_v())
        res = np.linalg.norm((V * ed.get_eigenvalues()) @ V.T - S, np.inf)
        records.append(("Eigen", label, t, t / t_np, res, _orth_err(V)))

    return pd.DataFrame(records, columns=COLUMNS)


def main():
    logging.basicConfig(level=logging.INFO)
    df = run_benchmark()
    print(df.to_markdown(index=False))
    df.to_csv("bench_results.csv", index=False)


if __name__ == "__main__":
    main()
