#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Projection operations
"""

import logging

import numpy as np

from .matrix import as_array
from .qr import QRDecomposition
from .svd import SingularValueDecomposition

logger = logging.getLogger(__name__)


def project_onto_colspace(A, b) -> np.ndarray:
    """
    Find p = A x, the orthogonal projection of b onto
    the column-space of A.

    Full column rank: p = Q Qᵀ b with the thin Householder Q.
    Otherwise:        p = A A⁺ b with the SVD pseudo-inverse.

    Returns
    -------
    p : ndarray, shape (m, k) if b is (m,k) or (m,)
    """
    A = as_array(A)
    b = np.asarray(b, dtype=float)
    m, n = A.shape

    if m >= n:
        qr = QRDecomposition(A)
        if qr.is_full_rank():
            Q = np.asarray(qr.get_q())[:, :n]
            return Q @ (Q.T @ b)

    logger.warning(
        "The columns of A are not independent, falling back to pseudo-inverse"
    )
    return A @ (np.asarray(SingularValueDecomposition(A).get_pseudo_inverse()) @ b)
