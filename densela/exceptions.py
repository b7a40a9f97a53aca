# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Exception hierarchy for densela.

Every error raised by the package derives from `DenseLinalgError`.
Input problems (shapes, indices) are `ValidationError`s and therefore
also `ValueError`s; problems discovered while factorizing are
`NumericalError`s.
"""

from typing import Optional


class DenseLinalgError(Exception):
    """Base exception for all densela errors."""


class ValidationError(DenseLinalgError, ValueError):
    """Input validation failed."""


class DimensionMismatchError(ValidationError):
    """
    An operand does not have the dimension the operation expects.

    Attributes:
        got: dimension that was supplied
        expected: dimension that was required
    """

    def __init__(
        self,
        got,
        expected,
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"dimension mismatch: got {got} but expected {expected}"
        super().__init__(message)
        self.got = got
        self.expected = expected


class NonSquareMatrixError(DimensionMismatchError):
    """A square matrix was required."""

    def __init__(self, rows: int, columns: int):
        super().__init__(
            columns,
            rows,
            f"a {rows}x{columns} matrix was provided instead of a square matrix",
        )
        self.rows = rows
        self.columns = columns


class MatrixIndexError(ValidationError, IndexError):
    """A row or column index is out of range."""


class ReadOnlyMatrixError(ValidationError):
    """An attempt was made to modify a read-only matrix."""


class NumericalError(DenseLinalgError, ArithmeticError):
    """A factorization failed for numerical reasons."""


class NonSymmetricMatrixError(NumericalError):
    """
    The matrix is not symmetric within the requested tolerance.

    Attributes:
        row, column: first offending entry
        threshold: relative tolerance that was exceeded
    """

    def __init__(self, row: int, column: int, threshold: float):
        super().__init__(
            f"non symmetric matrix: the difference between entries at "
            f"({row}, {column}) and ({column}, {row}) is larger than {threshold}"
        )
        self.row = row
        self.column = column
        self.threshold = threshold


class NonPositiveDefiniteMatrixError(NumericalError):
    """
    The matrix is not (strictly) positive definite.

    Attributes:
        index: diagonal position where the failure was detected
        threshold: value the diagonal element should have exceeded
    """

    def __init__(self, index: int, threshold: float):
        super().__init__(
            f"not positive definite matrix: diagonal element at ({index}, {index}) "
            f"is smaller than {threshold}"
        )
        self.index = index
        self.threshold = threshold


class SingularMatrixError(NumericalError):
    """The matrix is singular (or rank deficient) and cannot be inverted."""

    def __init__(self, message: str = "matrix is singular", rank: Optional[int] = None):
        super().__init__(message)
        self.rank = rank


class ConvergenceError(NumericalError):
    """
    An iterative algorithm did not converge.

    Attributes:
        iterations: number of iterations performed before giving up
    """

    def __init__(self, message: str, iterations: int):
        super().__init__(message)
        self.iterations = iterations
