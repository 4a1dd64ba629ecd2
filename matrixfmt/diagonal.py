from typing import Sequence

import numpy as np

from . import element
from .base import Matrix
from .errors import BandOverflow, DimensionMismatch
from .size import Size


class Diagonal(Matrix):
    """ Main-diagonal-only matrix.
    `values[i]` holds (i, i) for i < min(rows, cols).  Everything else reads as zero.
    Writing a nonzero off the diagonal raises `BandOverflow`. """

    def __init__(self, size, dtype=None):
        super().__init__(size, dtype)
        self.values: np.ndarray = np.zeros(self.size.diagonal, dtype=self.dtype)

    @classmethod
    def from_values(cls, size, values: Sequence, dtype=None) -> "Diagonal":
        size = Size.of(size)
        arr = np.asarray(values).ravel()
        DimensionMismatch.assert_eq(len(arr), size.diagonal,
                                    f"{len(arr)} values for a diagonal of length {size.diagonal}")
        m = cls(size, dtype=dtype)
        m.values[:] = arr
        return m

    def get(self, row: int, col: int):
        self.check_bounds(row, col)
        if row != col: return self.zero
        return self.values[row]

    def set(self, row: int, col: int, val) -> None:
        self.check_bounds(row, col)
        val = element.cast(self.dtype, val)
        if row == col:
            self.values[row] = val
        elif val != 0:
            raise BandOverflow(f"Cannot store nonzero at off-diagonal ({row}, {col})")

    def elements(self):
        for i, v in enumerate(self.values):
            yield i, i, v

    def nonzeros(self) -> int:
        return int(np.count_nonzero(self.values))

    def transpose(self) -> "Diagonal":
        return Diagonal.from_values(self.size.transposed(), self.values, dtype=self.dtype)

    def copy(self) -> "Diagonal":
        return Diagonal.from_values(self.size, self.values, dtype=self.dtype)
