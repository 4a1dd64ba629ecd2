from typing import Dict, Iterator, Tuple

from . import element
from .errors import OutOfBounds
from .size import Size


class Matrix(object):
    """ Base-class for every storage format.

    Sub-classes implement the common capability set:
    `get`, `set`, `elements`, `nonzeros`, `transpose` and `copy`.
    Conversions and arithmetic live in `convert` and `ops`,
    and are reachable from here through `to`, `from_matrix` and the operators. """

    def __init__(self, size, dtype=None):
        self.size: Size = Size.of(size)
        self.size.count()  # Fail early on un-representable sizes
        self.dtype = element.dtype_of(dtype)

    @property
    def rows(self) -> int:
        return self.size.rows

    @property
    def cols(self) -> int:
        return self.size.cols

    @property
    def zero(self):
        return element.zero(self.dtype)

    def check_bounds(self, row: int, col: int) -> None:
        if not self.size.contains(row, col):
            raise OutOfBounds(f"({row}, {col}) outside of {self.rows} x {self.cols} matrix")

    def get(self, row: int, col: int):
        raise NotImplementedError

    def set(self, row: int, col: int, val) -> None:
        raise NotImplementedError

    def elements(self) -> Iterator[Tuple[int, int, object]]:
        """ Iterator of stored (row, col, val) triples """
        raise NotImplementedError

    def nonzeros(self) -> int:
        return sum(1 for _, _, v in self.elements() if v != 0)

    def transpose(self) -> "Matrix":
        raise NotImplementedError

    def copy(self) -> "Matrix":
        raise NotImplementedError

    def __getitem__(self, pos):
        row, col = pos
        return self.get(row, col)

    def __setitem__(self, pos, val):
        row, col = pos
        self.set(row, col, val)

    def to(self, cls, **kwargs) -> "Matrix":
        """ Convert to storage-format `cls` """
        from .convert import convert
        return convert(self, cls, **kwargs)

    def to_conventional(self):
        from .conventional import Conventional
        return self.to(Conventional)

    @classmethod
    def from_matrix(cls, other: "Matrix", **kwargs) -> "Matrix":
        """ Create a new instance of `cls` with the content of `other`, in any format """
        from .convert import convert
        return convert(other, cls, **kwargs)

    def nonzero_dict(self) -> Dict[Tuple[int, int], object]:
        """ Dictionary of {(row, col): val} for all nonzero entries """
        return {(r, c): v for r, c, v in self.elements() if v != 0}

    def display(self) -> str:
        """ Create a string "X" versus " " display of nonzero entries. """
        grid = [[' '] * self.cols for _ in range(self.rows)]
        for r, c in self.nonzero_dict():
            grid[r][c] = 'X'
        return ''.join(''.join(row) + '\n' for row in grid)

    def __eq__(self, other):
        """ Value-wise equality, regardless of storage format """
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.size != other.size: return False
        return self.nonzero_dict() == other.nonzero_dict()

    __hash__ = None

    def __repr__(self):
        return f"<{self.__class__.__name__}(rows={self.rows}, cols={self.cols}, dtype={self.dtype}, nonzeros={self.nonzeros()})>"

    def __add__(self, other):
        from . import ops
        if not isinstance(other, Matrix): return NotImplemented
        return ops.add(self, other)

    def __sub__(self, other):
        from . import ops
        if not isinstance(other, Matrix): return NotImplemented
        return ops.subtract(self, other)

    def __neg__(self):
        from . import ops
        return ops.scale(self, -1)

    def __mul__(self, factor):
        from . import ops
        if isinstance(factor, Matrix): return NotImplemented
        return ops.scale(self, factor)

    __rmul__ = __mul__

    def __matmul__(self, other):
        from . import ops
        if isinstance(other, Matrix):
            return ops.multiply(self, other)
        return ops.mult(self, other)
