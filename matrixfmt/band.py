"""
Band Matrix Format

Stores the `lower` sub-diagonals, the main diagonal and the `upper` super-diagonals
in a dense (upper + 1 + lower) x cols rectangle, in the LAPACK general-band layout:
element (row, col) lives at `values[upper + row - col, col]`.
The first storage row is the uppermost super-diagonal; the last is the lowest sub-diagonal.
Rectangle entries which map outside the matrix are padding, and always hold zero.
"""

import numpy as np

from . import element
from .base import Matrix
from .errors import BandOverflow, DimensionMismatch
from .size import Size


def _width(x) -> int:
    DimensionMismatch.assert_true(isinstance(x, (int, np.integer)) and x >= 0, f"Invalid bandwidth {x!r}")
    return int(x)


class Band(Matrix):
    def __init__(self, size, lower: int = 0, upper: int = 0, dtype=None):
        super().__init__(size, dtype)
        self.lower = _width(lower)
        self.upper = _width(upper)
        self.values: np.ndarray = np.zeros((self.diagonals, self.cols), dtype=self.dtype)

    @classmethod
    def from_arrays(cls, size, lower: int, upper: int, values, dtype=None) -> "Band":
        """ Create from an existing (upper + 1 + lower) x cols band rectangle.
        Padding entries are ignored. """
        m = cls(size, lower=lower, upper=upper, dtype=dtype)
        arr = np.asarray(values)
        DimensionMismatch.assert_eq(arr.shape, m.values.shape,
                                    f"Band rectangle of shape {arr.shape}, expected {m.values.shape}")
        m.values[:, :] = arr
        m.values[m.padding()] = 0
        return m

    @property
    def diagonals(self) -> int:
        """ Number of stored diagonals """
        return self.upper + 1 + self.lower

    def in_band(self, row: int, col: int) -> bool:
        return -self.lower <= col - row <= self.upper

    def row_range(self, col: int) -> range:
        """ Rows of column `col` which fall inside the band """
        return range(max(0, col - self.upper), min(self.rows, col + self.lower + 1))

    def padding(self) -> np.ndarray:
        """ Boolean mask of storage-rectangle entries which map outside the matrix """
        k = np.arange(self.diagonals)[:, None]
        col = np.arange(self.cols)[None, :]
        row = k - self.upper + col
        return (row < 0) | (row >= self.rows)

    def get(self, row: int, col: int):
        self.check_bounds(row, col)
        if not self.in_band(row, col): return self.zero
        return self.values[self.upper + row - col, col]

    def set(self, row: int, col: int, val) -> None:
        self.check_bounds(row, col)
        val = element.cast(self.dtype, val)
        if self.in_band(row, col):
            self.values[self.upper + row - col, col] = val
        elif val != 0:
            raise BandOverflow(f"({row}, {col}) outside band of lower={self.lower}, upper={self.upper}")

    def elements(self):
        """ Column-major iterator of (row, col, val) over all in-band positions """
        for col in range(self.cols):
            for row in self.row_range(col):
                yield row, col, self.values[self.upper + row - col, col]

    def nonzeros(self) -> int:
        return int(np.count_nonzero(self.values))

    def widen(self, lower: int, upper: int) -> "Band":
        """ Copy into a band at least `lower` / `upper` wide """
        lower, upper = max(self.lower, _width(lower)), max(self.upper, _width(upper))
        w = Band(self.size, lower=lower, upper=upper, dtype=self.dtype)
        offset = upper - self.upper
        w.values[offset:offset + self.diagonals, :] = self.values
        return w

    def transpose(self) -> "Band":
        t = Band(self.size.transposed(), lower=self.upper, upper=self.lower, dtype=self.dtype)
        for row, col, val in self.elements():
            t.values[t.upper + col - row, row] = val
        return t

    def copy(self) -> "Band":
        return Band.from_arrays(self.size, self.lower, self.upper, self.values, dtype=self.dtype)
