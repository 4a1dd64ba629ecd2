from enum import Enum, auto
from typing import Tuple


class Axis(Enum):
    """ Major axis of a compressed layout, i.e. the dimension indexed by `pointers`.

    `Axis.cols`: one slot per column. `indices` hold row numbers, and a column's
    entries are contiguous in storage.  (CSC-like.)
    `Axis.rows`: one slot per row. `indices` hold column numbers.  (CSR-like.)
    Flipping the axis of a layout, without touching its arrays, transposes the matrix. """

    rows = auto()
    cols = auto()

    def __invert__(self) -> "Axis":
        return Axis.cols if self is Axis.rows else Axis.rows

    def split(self, row: int, col: int) -> Tuple[int, int]:
        """ Convert (row, col) into (major, minor) """
        if self is Axis.cols: return col, row
        return row, col

    def join(self, major: int, minor: int) -> Tuple[int, int]:
        """ Convert (major, minor) back into (row, col) """
        if self is Axis.cols: return minor, major
        return major, minor

    def majors(self, size) -> int:
        """ Number of slots in a layout of `size` """
        return size.cols if self is Axis.cols else size.rows

    def minors(self, size) -> int:
        """ Range of `indices` values in a layout of `size` """
        return size.rows if self is Axis.cols else size.cols
