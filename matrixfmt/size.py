import numbers
from typing import NamedTuple

from . import config
from .errors import DimensionMismatch, Overflow


def _dimension(x) -> int:
    if isinstance(x, bool) or not isinstance(x, numbers.Integral):
        raise DimensionMismatch(f"Invalid dimension {x!r}")
    DimensionMismatch.assert_true(x >= 0, f"Negative dimension {x}")
    return int(x)


class Size(NamedTuple):
    """ Matrix dimensions (rows, cols) """

    rows: int
    cols: int

    @classmethod
    def of(cls, size) -> "Size":
        """ Coerce `size` into a Size.
        Integers are square sizes; two-sequences are (rows, cols). """
        if isinstance(size, Size):
            return size
        if isinstance(size, numbers.Integral) and not isinstance(size, bool):
            n = _dimension(size)
            return cls(n, n)
        try:
            rows, cols = size
        except (TypeError, ValueError):
            raise DimensionMismatch(f"Invalid size {size!r}") from None
        return cls(_dimension(rows), _dimension(cols))

    @property
    def diagonal(self) -> int:
        """ Length of the main diagonal """
        return min(self.rows, self.cols)

    def count(self) -> int:
        """ Total element-count rows*cols """
        n = self.rows * self.cols
        if n > config.MAX_ELEMENTS:
            raise Overflow(f"{self.rows} x {self.cols} exceeds {config.MAX_ELEMENTS} elements")
        return n

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def transposed(self) -> "Size":
        return Size(self.cols, self.rows)


class Position(NamedTuple):
    """ Single-element address (row, col) """

    row: int
    col: int

    def transposed(self) -> "Position":
        return Position(self.col, self.row)
