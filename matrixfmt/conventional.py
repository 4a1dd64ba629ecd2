"""
Conventional (dense) Matrix Format
"""

from typing import Callable, Sequence

import numpy as np

from . import element
from .base import Matrix
from .errors import DimensionMismatch
from .size import Size


class Conventional(Matrix):
    """ Fully materialized matrix.
    Owns a single contiguous buffer `values` of length rows*cols, stored column-major:
    the value of (row, col) lives at `values[col * rows + row]`. """

    def __init__(self, size, dtype=None):
        super().__init__(size, dtype)
        self.values: np.ndarray = np.zeros(self.size.count(), dtype=self.dtype)

    @classmethod
    def from_values(cls, size, values: Sequence, dtype=None) -> "Conventional":
        """ Create from a column-major sequence of values,
        or from a two-dimensional (rows, cols) array. """
        size = Size.of(size)
        arr = np.asarray(values)
        if arr.ndim > 1:
            DimensionMismatch.assert_eq(arr.shape, tuple(size),
                                        f"Array of shape {arr.shape} for a {size.rows} x {size.cols} matrix")
        arr = arr.ravel(order='F')
        DimensionMismatch.assert_eq(len(arr), size.count(),
                                    f"{len(arr)} values for a {size.rows} x {size.cols} matrix")
        m = cls(size, dtype=dtype)
        m.values[:] = arr
        return m

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence], dtype=None) -> "Conventional":
        """ Create from a rectangular literal of rows, in row-major reading order.
        Rows of unequal length fail before anything is constructed. """
        rows = [list(r) for r in rows]
        ncols = len(rows[0]) if rows else 0
        for n, r in enumerate(rows):
            DimensionMismatch.assert_eq(len(r), ncols, f"Row {n} has {len(r)} entries, expected {ncols}")
        m = cls((len(rows), ncols), dtype=dtype)
        if rows:
            m.array[:, :] = np.array(rows, dtype=m.dtype).reshape((len(rows), ncols))
        return m

    @property
    def array(self) -> np.ndarray:
        """ Two-dimensional (rows, cols) view of our buffer.  Writes go through to `values`. """
        return self.values.reshape((self.rows, self.cols), order='F')

    def to_numpy(self) -> np.ndarray:
        """ Independent two-dimensional copy """
        return self.array.copy()

    def get(self, row: int, col: int):
        self.check_bounds(row, col)
        return self.values[col * self.rows + row]

    def set(self, row: int, col: int, val) -> None:
        self.check_bounds(row, col)
        self.values[col * self.rows + row] = element.cast(self.dtype, val)

    def elements(self):
        """ Column-major iterator of all (row, col, val), implicit zeros included """
        k = 0
        for col in range(self.cols):
            for row in range(self.rows):
                yield row, col, self.values[k]
                k += 1

    def nonzeros(self) -> int:
        return int(np.count_nonzero(self.values))

    def nonzero_dict(self):
        rows, cols = np.nonzero(self.array)
        arr = self.array
        return {(int(r), int(c)): arr[r, c] for r, c in zip(rows, cols)}

    def elementwise(self, other: "Conventional", op: Callable) -> "Conventional":
        """ Pointwise binary operation `op(self, other)`, e.g. `np.add` """
        DimensionMismatch.assert_eq(self.size, other.size)
        vals = op(self.values, other.values)
        return Conventional.from_values(self.size, vals, dtype=vals.dtype)

    def transpose(self) -> "Conventional":
        # The row-major reading of our buffer is the column-major buffer of the transpose
        t = Conventional(self.size.transposed(), dtype=self.dtype)
        t.values[:] = self.array.ravel(order='C')
        return t

    def copy(self) -> "Conventional":
        cp = Conventional(self.size, dtype=self.dtype)
        cp.values[:] = self.values
        return cp
