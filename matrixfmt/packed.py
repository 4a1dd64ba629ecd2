"""
Packed Triangular Matrix Format

Stores one triangle of a square n x n matrix, column by column, in n(n+1)/2 values.
Compatible with the LAPACK packed layout:
* lower: (row >= col) at `row - col + col * (2n - col + 1) / 2`
* upper: (row <= col) at `row + col * (col + 1) / 2`
"""

from enum import Enum, auto
from typing import Sequence

import numpy as np

from . import element
from .base import Matrix
from .errors import BandOverflow, DimensionMismatch


class Triangle(Enum):
    lower = auto()
    upper = auto()

    def __invert__(self) -> "Triangle":
        return Triangle.upper if self is Triangle.lower else Triangle.lower


class Packed(Matrix):
    def __init__(self, size, triangle: Triangle = Triangle.lower, dtype=None):
        super().__init__(size, dtype)
        DimensionMismatch.assert_eq(self.rows, self.cols, f"Packed matrices must be square, not {self.size}")
        if not isinstance(triangle, Triangle):
            raise TypeError(f"Invalid triangle {triangle!r}")
        self.triangle = triangle
        n = self.rows
        self.values: np.ndarray = np.zeros(n * (n + 1) // 2, dtype=self.dtype)

    @classmethod
    def from_values(cls, size, triangle: Triangle, values: Sequence, dtype=None) -> "Packed":
        m = cls(size, triangle=triangle, dtype=dtype)
        arr = np.asarray(values).ravel()
        DimensionMismatch.assert_eq(len(arr), len(m.values),
                                    f"{len(arr)} values for a packed {m.rows} x {m.cols} matrix")
        m.values[:] = arr
        return m

    def in_triangle(self, row: int, col: int) -> bool:
        if self.triangle is Triangle.lower: return row >= col
        return row <= col

    def offset(self, row: int, col: int) -> int:
        """ Storage offset of in-triangle position (row, col) """
        if self.triangle is Triangle.lower:
            return row - col + col * (2 * self.rows - col + 1) // 2
        return row + col * (col + 1) // 2

    def get(self, row: int, col: int):
        self.check_bounds(row, col)
        if not self.in_triangle(row, col): return self.zero
        return self.values[self.offset(row, col)]

    def set(self, row: int, col: int, val) -> None:
        self.check_bounds(row, col)
        val = element.cast(self.dtype, val)
        if self.in_triangle(row, col):
            self.values[self.offset(row, col)] = val
        elif val != 0:
            raise BandOverflow(f"({row}, {col}) outside the {self.triangle.name} triangle")

    def elements(self):
        """ Iterator of (row, col, val), in storage order """
        k = 0
        for col in range(self.cols):
            rows = range(col, self.rows) if self.triangle is Triangle.lower else range(col + 1)
            for row in rows:
                yield row, col, self.values[k]
                k += 1

    def nonzeros(self) -> int:
        return int(np.count_nonzero(self.values))

    def transpose(self) -> "Packed":
        t = Packed(self.size, triangle=~self.triangle, dtype=self.dtype)
        for row, col, val in self.elements():
            t.values[t.offset(col, row)] = val
        return t

    def copy(self) -> "Packed":
        return Packed.from_values(self.size, self.triangle, self.values, dtype=self.dtype)
