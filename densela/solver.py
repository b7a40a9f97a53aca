# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Shared plumbing for the decomposition classes.

`DecompositionSolver` coerces right-hand sides, checks their leading
dimension and maps the result back to the caller's type. Subclasses only
implement `_solve` on a 2-D float array and report the row count they
expect through `_rhs_rows`.
"""

import threading
from typing import Callable

import numpy as np

from .exceptions import DimensionMismatchError
from .matrix import RealMatrix, RealVector, as_array, as_vector_array


class CachedFactors:
    """Write-once, lock-guarded store of read-only factor matrices."""

    def __init__(self):
        self._cache = {}
        self._lock = threading.Lock()

    def _cached(self, key: str, build: Callable[[], np.ndarray]) -> RealMatrix:
        """Return the factor stored under `key`, building it on first use."""
        factor = self._cache.get(key)
        if factor is None:
            with self._lock:
                factor = self._cache.get(key)
                if factor is None:
                    factor = RealMatrix._wrap(build(), read_only=True)
                    self._cache[key] = factor
        return factor


class DecompositionSolver(CachedFactors):
    """Base class: rhs coercion, dimension checks and `get_inverse`."""

    def _rhs_rows(self) -> int:
        raise NotImplementedError

    def _solve(self, b: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def is_non_singular(self) -> bool:
        raise NotImplementedError

    def solve(self, b):
        """
        Solve A x = b (or its least-squares / pseudo-inverse analogue).

        Parameters
        ----------
        b : RealMatrix | RealVector | array-like (1-D or 2-D)

        Returns
        -------
        Same kind as `b`: RealMatrix, RealVector or ndarray.
        """
        if isinstance(b, RealMatrix):
            B = np.asarray(b)
        elif isinstance(b, RealVector):
            B = np.asarray(b)[:, None]
        else:
            if isinstance(b, (list, tuple)):
                ndim = 2 if b and np.ndim(b[0]) > 0 else 1
            else:
                ndim = np.ndim(b)
            if ndim == 1:
                B = as_vector_array(b)[:, None]
            elif ndim == 2:
                B = as_array(b)
            else:
                raise DimensionMismatchError(
                    ndim, "1 or 2", "right-hand side must be 1-D or 2-D"
                )

        rows = self._rhs_rows()
        if B.shape[0] != rows:
            raise DimensionMismatchError(B.shape[0], rows)

        X = self._solve(np.array(B, dtype=float))

        if isinstance(b, RealMatrix):
            return RealMatrix(X, copy=False)
        if isinstance(b, RealVector):
            return RealVector(X[:, 0], copy=False)
        return X[:, 0] if ndim == 1 else X

    def get_inverse(self) -> RealMatrix:
        """Inverse (or pseudo-inverse for least-squares solvers) of A."""
        return RealMatrix(self._solve(np.eye(self._rhs_rows())), copy=False)
