# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
densela
=======

Dense linear algebra: matrix factorizations built on Householder
reductions, and the solvers that use them.

Public API
~~~~~~~~~~
- Data model
    - `RealMatrix`, `RealVector`
- Decompositions
    - `LUDecomposition`, `QRDecomposition`, `CholeskyDecomposition`
    - `EigenDecomposition`, `SingularValueDecomposition`
- Orthogonal reductions
    - `TriDiagonalTransformer`, `BiDiagonalTransformer`
- Matrix utilities
    - `det`, `inverse`, `pinv`, `adj`, `rank`, `cond`, `is_singular`
- Linear systems
    - `least_squares_qr`, `least_squares_svd`, `project_onto_colspace`

Errors live in `densela.exceptions`; everything else lives in
sub-modules and is **not** considered part of the stable interface.

Example
-------
>>> import numpy as np, densela as dl
>>> A = np.random.randn(5, 3)
>>> qr = dl.QRDecomposition(A)
>>> np.allclose(np.asarray(qr.get_q()) @ np.asarray(qr.get_r()), A)
True
"""

from importlib.metadata import version as _pkg_version

from .cholesky import CholeskyDecomposition
from .eigen import EigenDecomposition
from .elimination import LUDecomposition, back_substitute, forward_substitute
from .exceptions import (
    ConvergenceError,
    DenseLinalgError,
    DimensionMismatchError,
    NonPositiveDefiniteMatrixError,
    NonSquareMatrixError,
    NonSymmetricMatrixError,
    SingularMatrixError,
)
from .matrix import RealMatrix, RealVector
from .matrix_functions import adj, cond, det, inverse, is_singular, pinv, rank
from .projections import project_onto_colspace
from .qr import QRDecomposition, least_squares_qr
from .reduction import BiDiagonalTransformer, TriDiagonalTransformer
from .svd import SingularValueDecomposition, least_squares_svd

__all__ = [
    "RealMatrix",
    "RealVector",
    "LUDecomposition",
    "QRDecomposition",
    "CholeskyDecomposition",
    "EigenDecomposition",
    "SingularValueDecomposition",
    "TriDiagonalTransformer",
    "BiDiagonalTransformer",
    "forward_substitute",
    "back_substitute",
    "least_squares_qr",
    "least_squares_svd",
    "project_onto_colspace",
    "det",
    "inverse",
    "pinv",
    "adj",
    "rank",
    "cond",
    "is_singular",
    "DenseLinalgError",
    "DimensionMismatchError",
    "NonSquareMatrixError",
    "NonSymmetricMatrixError",
    "NonPositiveDefiniteMatrixError",
    "SingularMatrixError",
    "ConvergenceError",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show densela”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Library logging stays silent unless the application configures it.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
