# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Dense matrix and vector value types.

Both types are thin, bounds-checked wrappers around a float64 NumPy
array. Dimensions are fixed at construction; entries change only
through the explicit setters, every arithmetic operation returns a new
object.
"""

import numbers
from typing import Optional, Tuple

import numpy as np

from .exceptions import (
    DimensionMismatchError,
    MatrixIndexError,
    NonSquareMatrixError,
    ReadOnlyMatrixError,
)


def as_array(data, copy: bool = True) -> np.ndarray:
    """
    Validate `data` as a non-empty, non-ragged 2-D float64 array.

    Parameters
    ----------
    data : RealMatrix | ndarray | sequence of sequences
    copy : bool
        If False and `data` already is a float64 ndarray (or a
        RealMatrix), its buffer is returned as is and later writes to it
        are visible to both sides. A read-only buffer is always
        copied.
    """
    if isinstance(data, RealMatrix):
        data = data._data
    if isinstance(data, np.ndarray):
        arr = np.array(data, dtype=float) if copy else np.asarray(data, dtype=float)
        if not arr.flags.writeable:
            arr = arr.copy()
    else:
        rows = [np.asarray(row, dtype=float) for row in data]
        if not rows:
            raise DimensionMismatchError(0, 1, "matrix must have at least one row")
        width = rows[0].size
        for i, row in enumerate(rows):
            if row.ndim != 1:
                raise DimensionMismatchError(
                    row.ndim, 1, f"row {i} is not one-dimensional"
                )
            if row.size != width:
                raise DimensionMismatchError(
                    row.size, width, f"row {i} has {row.size} entries, expected {width}"
                )
        arr = np.array(rows, dtype=float)
    if arr.ndim != 2:
        raise DimensionMismatchError(
            arr.ndim, 2, f"expected a 2-D matrix, got {arr.ndim} dimension(s)"
        )
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise DimensionMismatchError(
            arr.shape, "non-empty", "matrix must have at least one row and one column"
        )
    return arr


def as_vector_array(data, copy: bool = True) -> np.ndarray:
    """Validate `data` as a non-empty 1-D float64 array."""
    if isinstance(data, RealVector):
        data = data._data
    arr = np.array(data, dtype=float) if copy else np.asarray(data, dtype=float)
    if not arr.flags.writeable:
        arr = arr.copy()
    if arr.ndim != 1:
        raise DimensionMismatchError(
            arr.ndim, 1, f"expected a 1-D vector, got {arr.ndim} dimension(s)"
        )
    if arr.size == 0:
        raise DimensionMismatchError(0, 1, "vector must have at least one entry")
    return arr


def _check_index(index, size: int, what: str) -> int:
    if not isinstance(index, numbers.Integral) or isinstance(index, bool):
        raise MatrixIndexError(f"{what} index must be an integer, got {index!r}")
    if index < 0 or index >= size:
        raise MatrixIndexError(f"{what} index {index} out of range [0, {size - 1}]")
    return int(index)


class RealMatrix:
    """
    Rectangular matrix of doubles.

    Example
    -------
    >>> A = RealMatrix([[1, 2], [3, 4]])
    >>> A.get_entry(1, 0)
    3.0
    >>> (A @ A.transpose()).get_norm()
    36.0
    """

    __slots__ = ("_data",)
    __hash__ = None  # mutable through setters

    def __init__(self, data, copy: bool = True):
        self._data = as_array(data, copy=copy)

    @classmethod
    def _wrap(cls, array: np.ndarray, read_only: bool = False) -> "RealMatrix":
        """Wrap an already validated array without copying it."""
        matrix = cls.__new__(cls)
        if read_only:
            array.flags.writeable = False
        matrix._data = array
        return matrix

    # ------------------------------------------------------------------
    # factories
    # ------------------------------------------------------------------
    @classmethod
    def zeros(cls, rows: int, columns: int) -> "RealMatrix":
        return cls(np.zeros((rows, columns)), copy=False)

    @classmethod
    def identity(cls, n: int) -> "RealMatrix":
        return cls(np.eye(n), copy=False)

    @classmethod
    def diagonal(
        cls, values, rows: Optional[int] = None, columns: Optional[int] = None
    ) -> "RealMatrix":
        """Matrix with `values` on its main diagonal (square by default)."""
        d = as_vector_array(values)
        rows = d.size if rows is None else rows
        columns = rows if columns is None else columns
        data = np.zeros((rows, columns))
        k = min(rows, columns, d.size)
        data[np.arange(k), np.arange(k)] = d[:k]
        return cls(data, copy=False)

    # ------------------------------------------------------------------
    # dimensions
    # ------------------------------------------------------------------
    def get_row_dimension(self) -> int:
        return self._data.shape[0]

    def get_column_dimension(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    def is_square(self) -> bool:
        return self._data.shape[0] == self._data.shape[1]

    def is_read_only(self) -> bool:
        return not self._data.flags.writeable

    # ------------------------------------------------------------------
    # entry access
    # ------------------------------------------------------------------
    def _check(self, row, column) -> Tuple[int, int]:
        m, n = self._data.shape
        return _check_index(row, m, "row"), _check_index(column, n, "column")

    def _check_writable(self):
        if not self._data.flags.writeable:
            raise ReadOnlyMatrixError("matrix is read-only, use copy() first")

    def get_entry(self, row: int, column: int) -> float:
        i, j = self._check(row, column)
        return float(self._data[i, j])

    def set_entry(self, row: int, column: int, value: float) -> None:
        i, j = self._check(row, column)
        self._check_writable()
        self._data[i, j] = value

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        i, j = self._check(row, column)
        self._check_writable()
        self._data[i, j] += increment

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        i, j = self._check(row, column)
        self._check_writable()
        self._data[i, j] *= factor

    def __getitem__(self, key) -> float:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("RealMatrix indices must be (row, column) pairs")
        return self.get_entry(*key)

    def __setitem__(self, key, value) -> None:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("RealMatrix indices must be (row, column) pairs")
        self.set_entry(key[0], key[1], value)

    def get_row(self, row: int) -> np.ndarray:
        i = _check_index(row, self._data.shape[0], "row")
        return self._data[i].copy()

    def get_column(self, column: int) -> np.ndarray:
        j = _check_index(column, self._data.shape[1], "column")
        return self._data[:, j].copy()

    def get_row_vector(self, row: int) -> "RealVector":
        return RealVector(self.get_row(row), copy=False)

    def get_column_vector(self, column: int) -> "RealVector":
        return RealVector(self.get_column(column), copy=False)

    def get_sub_matrix(
        self, start_row: int, end_row: int, start_column: int, end_column: int
    ) -> "RealMatrix":
        """Sub-matrix between the given (inclusive) row and column bounds."""
        m, n = self._data.shape
        r0 = _check_index(start_row, m, "row")
        r1 = _check_index(end_row, m, "row")
        c0 = _check_index(start_column, n, "column")
        c1 = _check_index(end_column, n, "column")
        if r1 < r0 or c1 < c0:
            raise MatrixIndexError(
                f"empty sub-matrix: rows {r0}..{r1}, columns {c0}..{c1}"
            )
        return RealMatrix(self._data[r0 : r1 + 1, c0 : c1 + 1])

    def get_data(self) -> np.ndarray:
        """Copy of the entries as a 2-D ndarray."""
        return self._data.copy()

    to_array = get_data

    def copy(self) -> "RealMatrix":
        return RealMatrix(self._data)

    # ------------------------------------------------------------------
    # arithmetic
    # ------------------------------------------------------------------
    def _same_shape(self, other) -> np.ndarray:
        b = as_array(other, copy=False)
        if b.shape != self._data.shape:
            raise DimensionMismatchError(b.shape, self._data.shape)
        return b

    def add(self, other) -> "RealMatrix":
        return RealMatrix(self._data + self._same_shape(other), copy=False)

    def subtract(self, other) -> "RealMatrix":
        return RealMatrix(self._data - self._same_shape(other), copy=False)

    def scalar_add(self, d: float) -> "RealMatrix":
        return RealMatrix(self._data + d, copy=False)

    def scalar_multiply(self, d: float) -> "RealMatrix":
        return RealMatrix(self._data * d, copy=False)

    def multiply(self, other) -> "RealMatrix":
        """Matrix product self × other."""
        b = as_array(other, copy=False)
        if b.shape[0] != self._data.shape[1]:
            raise DimensionMismatchError(b.shape[0], self._data.shape[1])
        return RealMatrix(self._data @ b, copy=False)

    def pre_multiply(self, vector):
        """Row-vector product vᵀ × self."""
        v = as_vector_array(vector, copy=False)
        if v.size != self._data.shape[0]:
            raise DimensionMismatchError(v.size, self._data.shape[0])
        out = v @ self._data
        return RealVector(out, copy=False) if isinstance(vector, RealVector) else out

    def operate(self, vector):
        """Matrix-vector product; RealVector in, RealVector out."""
        v = as_vector_array(vector, copy=False)
        if v.size != self._data.shape[1]:
            raise DimensionMismatchError(v.size, self._data.shape[1])
        out = self._data @ v
        return RealVector(out, copy=False) if isinstance(vector, RealVector) else out

    def transpose(self) -> "RealMatrix":
        return RealMatrix(self._data.T)

    def power(self, k: int) -> "RealMatrix":
        if not self.is_square():
            raise NonSquareMatrixError(*self._data.shape)
        if k < 0:
            raise ValueError("negative matrix powers are not supported")
        return RealMatrix(np.linalg.matrix_power(self._data, k), copy=False)

    def get_trace(self) -> float:
        if not self.is_square():
            raise NonSquareMatrixError(*self._data.shape)
        return float(np.trace(self._data))

    # ------------------------------------------------------------------
    # norms & predicates
    # ------------------------------------------------------------------
    def get_norm(self) -> float:
        """Maximum absolute column sum (the 1-norm)."""
        return float(np.abs(self._data).sum(axis=0).max())

    def get_inf_norm(self) -> float:
        """Maximum absolute row sum."""
        return float(np.abs(self._data).sum(axis=1).max())

    def get_frobenius_norm(self) -> float:
        return float(np.sqrt(np.sum(self._data * self._data)))

    def is_symmetric(self, relative_tolerance: float = 0.0) -> bool:
        if not self.is_square():
            return False
        a = self._data
        delta = np.abs(a - a.T)
        bound = relative_tolerance * np.maximum(np.abs(a), np.abs(a.T))
        return bool(np.all(delta <= bound))

    # ------------------------------------------------------------------
    # operators
    # ------------------------------------------------------------------
    def __matmul__(self, other):
        if isinstance(other, RealVector):
            return self.operate(other)
        if isinstance(other, (np.ndarray, list, tuple)) and np.ndim(other) == 1:
            return self.operate(other)
        if isinstance(other, (RealMatrix, np.ndarray, list, tuple)):
            return self.multiply(other)
        return NotImplemented

    def __add__(self, other):
        if isinstance(other, RealMatrix):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, RealMatrix):
            return self.subtract(other)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, numbers.Real):
            return self.scalar_multiply(other)
        return NotImplemented

    __rmul__ = __mul__

    def __neg__(self):
        return self.scalar_multiply(-1.0)

    def __eq__(self, other):
        if not isinstance(other, RealMatrix):
            return NotImplemented
        return self._data.shape == other._data.shape and bool(
            np.array_equal(self._data, other._data)
        )

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self._data, dtype=dtype)
        return self._data if dtype is None else self._data.astype(dtype)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._data.tolist()})"


class RealVector:
    """1-D counterpart of `RealMatrix`."""

    __slots__ = ("_data",)
    __hash__ = None

    def __init__(self, data, copy: bool = True):
        self._data = as_vector_array(data, copy=copy)

    def get_dimension(self) -> int:
        return self._data.size

    def __len__(self) -> int:
        return self._data.size

    def __iter__(self):
        return iter(self._data.tolist())

    def get_entry(self, index: int) -> float:
        return float(self._data[_check_index(index, self._data.size, "vector")])

    def set_entry(self, index: int, value: float) -> None:
        self._data[_check_index(index, self._data.size, "vector")] = value

    def __getitem__(self, index) -> float:
        return self.get_entry(index)

    def __setitem__(self, index, value) -> None:
        self.set_entry(index, value)

    def to_array(self) -> np.ndarray:
        return self._data.copy()

    def copy(self) -> "RealVector":
        return RealVector(self._data)

    def _same_size(self, other) -> np.ndarray:
        b = as_vector_array(other, copy=False)
        if b.size != self._data.size:
            raise DimensionMismatchError(b.size, self._data.size)
        return b

    def add(self, other) -> "RealVector":
        return RealVector(self._data + self._same_size(other), copy=False)

    def subtract(self, other) -> "RealVector":
        return RealVector(self._data - self._same_size(other), copy=False)

    def map_multiply(self, d: float) -> "RealVector":
        return RealVector(self._data * d, copy=False)

    def map_add(self, d: float) -> "RealVector":
        return RealVector(self._data + d, copy=False)

    def dot_product(self, other) -> float:
        return float(self._data @ self._same_size(other))

    def outer_product(self, other) -> RealMatrix:
        return RealMatrix(np.outer(self._data, as_vector_array(other, copy=False)), copy=False)

    def get_norm(self) -> float:
        """Euclidean norm."""
        return float(np.sqrt(self._data @ self._data))

    def get_l1_norm(self) -> float:
        return float(np.abs(self._data).sum())

    def get_linf_norm(self) -> float:
        return float(np.abs(self._data).max())

    def unit_vector(self) -> "RealVector":
        norm = self.get_norm()
        if norm == 0.0:
            raise ArithmeticError("cannot normalize a zero vector")
        return self.map_multiply(1.0 / norm)

    def __add__(self, other):
        if isinstance(other, RealVector):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, RealVector):
            return self.subtract(other)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, numbers.Real):
            return self.map_multiply(other)
        return NotImplemented

    __rmul__ = __mul__

    def __neg__(self):
        return self.map_multiply(-1.0)

    def __eq__(self, other):
        if not isinstance(other, RealVector):
            return NotImplemented
        return self._data.size == other._data.size and bool(
            np.array_equal(self._data, other._data)
        )

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self._data, dtype=dtype)
        return self._data if dtype is None else self._data.astype(dtype)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._data.tolist()})"
