"""
Compressed Sparse Matrix Format

Stores only nonzero entries, in one of two orientations:
compressed-column (`Axis.cols`, CSC-like) or compressed-row (`Axis.rows`, CSR-like).

Three parallel lists make up the store:
* `values`   - nonzero values, in storage order
* `indices`  - minor-axis index of each value
* `pointers` - length majors+1. Slot `n` occupies `values[pointers[n]:pointers[n+1]]`.

Within each slot `indices` are strictly increasing, enabling binary search.
Insertion shifts the tail of the slot and bumps every later pointer,
so it costs O(nnz) in the worst case. Fine for building matrices, not for high-rate random writes.
"""

import bisect
from typing import Callable, List, Sequence, Tuple

import numpy as np

from . import config, element
from .axis import Axis
from .base import Matrix
from .errors import MatrixError, DimensionMismatch, OutOfBounds, Overflow
from .size import Size


class Compressed(Matrix):
    def __init__(self, size, axis: Axis = None, dtype=None):
        super().__init__(size, dtype)
        self.axis: Axis = config.DEFAULT_AXIS if axis is None else axis
        if not isinstance(self.axis, Axis):
            raise TypeError(f"Invalid axis {axis!r}")
        self.values: List = []
        self.indices: List[int] = []
        self.pointers: List[int] = [0] * (self.majors + 1)

    @classmethod
    def from_arrays(cls, size, axis: Axis, values: Sequence, indices: Sequence[int], pointers: Sequence[int],
                    dtype=None) -> "Compressed":
        """ Create from existing compressed arrays, checking all layout invariants.
        Explicitly-stored zeros are accepted; see `prune`. """
        m = cls(size, axis=axis, dtype=dtype)
        vals = [element.cast(m.dtype, v) for v in values]
        Overflow.assert_true(len(vals) <= m.size.count(),
                             f"{len(vals)} entries for a {m.rows} x {m.cols} matrix")
        m.values = vals
        m.indices = [int(i) for i in indices]
        m.pointers = [int(p) for p in pointers]
        m._checkup()
        return m

    @classmethod
    def from_triplets(cls, size, rows: Sequence[int], cols: Sequence[int], vals: Sequence,
                      axis: Axis = None, dtype=None) -> "Compressed":
        """ Create from coordinate-list (row, col, val) triples, in any order.
        Duplicate coordinates are summed; entries summing to zero are dropped. """
        m = cls(size, axis=axis, dtype=dtype)
        rows = np.asarray(rows, dtype=np.intp).ravel()
        cols = np.asarray(cols, dtype=np.intp).ravel()
        vals = np.asarray(vals, dtype=m.dtype).ravel()
        DimensionMismatch.assert_true(len(rows) == len(cols) == len(vals),
                                      f"Triplet lengths {len(rows)}, {len(cols)}, {len(vals)} differ")
        if not len(vals):
            return m
        OutOfBounds.assert_true(rows.min() >= 0 and rows.max() < m.rows, "Row index out of bounds")
        OutOfBounds.assert_true(cols.min() >= 0 and cols.max() < m.cols, "Column index out of bounds")

        major, minor = (cols, rows) if m.axis is Axis.cols else (rows, cols)
        order = np.lexsort((minor, major))
        major, minor, vals = major[order], minor[order], vals[order]

        # Sum runs of duplicate coordinates, then drop zeros
        first = np.ones(len(vals), dtype=bool)
        first[1:] = (major[1:] != major[:-1]) | (minor[1:] != minor[:-1])
        starts = np.flatnonzero(first)
        vals = np.add.reduceat(vals, starts)
        major, minor = major[starts], minor[starts]
        keep = vals != 0
        major, minor, vals = major[keep], minor[keep], vals[keep]

        pointers = np.zeros(m.majors + 1, dtype=np.intp)
        pointers[1:] = np.cumsum(np.bincount(major, minlength=m.majors))
        m.values = list(vals)
        m.indices = minor.tolist()
        m.pointers = pointers.tolist()
        return m

    @property
    def majors(self) -> int:
        return self.axis.majors(self.size)

    @property
    def minors(self) -> int:
        return self.axis.minors(self.size)

    def slot(self, major: int) -> range:
        """ Range of storage offsets holding major-slot `major` """
        return range(self.pointers[major], self.pointers[major + 1])

    def find(self, major: int, minor: int) -> Tuple[int, bool]:
        """ Binary search slot `major` for `minor`.
        Returns (offset, found), where `offset` is the insertion point if not found. """
        start, stop = self.pointers[major], self.pointers[major + 1]
        k = bisect.bisect_left(self.indices, minor, start, stop)
        return k, (k < stop and self.indices[k] == minor)

    def get(self, row: int, col: int):
        """ Get the value at (row, col).  Absent entries read as zero. """
        self.check_bounds(row, col)
        k, found = self.find(*self.axis.split(row, col))
        return self.values[k] if found else self.zero

    def set(self, row: int, col: int, val) -> None:
        """ Insert-or-overwrite the value at (row, col).
        Writing zero removes any stored entry, and never inserts one. """
        self.check_bounds(row, col)
        val = element.cast(self.dtype, val)
        major, minor = self.axis.split(row, col)
        k, found = self.find(major, minor)
        if found:
            if val == 0:
                self._delete(k, major)
            else:
                self.values[k] = val
        elif val != 0:
            self.values.insert(k, val)
            self.indices.insert(k, minor)
            for n in range(major + 1, len(self.pointers)):
                self.pointers[n] += 1

    def _delete(self, k: int, major: int) -> None:
        del self.values[k]
        del self.indices[k]
        for n in range(major + 1, len(self.pointers)):
            self.pointers[n] -= 1

    def elements(self):
        """ Iterator of (row, col, val), in storage order """
        for major in range(self.majors):
            for k in self.slot(major):
                row, col = self.axis.join(major, self.indices[k])
                yield row, col, self.values[k]

    def nonzeros(self) -> int:
        return len(self.values)

    def retain(self, condition: Callable) -> None:
        """ Keep the entries for which `condition(row, col, val)` is true, and discard the rest. """
        values, indices, pointers = [], [], [0]
        for major in range(self.majors):
            for k in self.slot(major):
                row, col = self.axis.join(major, self.indices[k])
                if condition(row, col, self.values[k]):
                    values.append(self.values[k])
                    indices.append(self.indices[k])
            pointers.append(len(values))
        self.values, self.indices, self.pointers = values, indices, pointers

    def prune(self) -> None:
        """ Remove any explicitly-stored zeros """
        self.retain(lambda row, col, val: val != 0)

    def resize(self, size) -> None:
        """ Change our size.  Shrinking discards entries outside the new bounds. """
        size = Size.of(size)
        size.count()
        if size.rows < self.rows or size.cols < self.cols:
            self.retain(lambda row, col, val: row < size.rows and col < size.cols)
        old, new = self.majors, self.axis.majors(size)
        if new < old:
            del self.pointers[new + 1:]
        else:
            self.pointers.extend([self.pointers[-1]] * (new - old))
        self.size = size

    def transpose(self) -> "Compressed":
        """ The transpose shares our layout exactly: same arrays, flipped axis and size. """
        t = Compressed(self.size.transposed(), axis=~self.axis, dtype=self.dtype)
        t.values = list(self.values)
        t.indices = list(self.indices)
        t.pointers = list(self.pointers)
        return t

    def copy(self) -> "Compressed":
        cp = Compressed(self.size, axis=self.axis, dtype=self.dtype)
        cp.values = list(self.values)
        cp.indices = list(self.indices)
        cp.pointers = list(self.pointers)
        return cp

    def _checkup(self) -> None:
        """ Internal consistency tests.  Linear in nonzeros. """
        MatrixError.assert_eq(len(self.pointers), self.majors + 1, "Pointer count")
        MatrixError.assert_eq(self.pointers[0], 0, "First pointer")
        MatrixError.assert_eq(self.pointers[-1], len(self.values), "Last pointer")
        MatrixError.assert_eq(len(self.indices), len(self.values), "Index count")
        MatrixError.assert_true(all(0 <= p <= len(self.values) for p in self.pointers), "Pointer out of range")
        for major in range(self.majors):
            start, stop = self.pointers[major], self.pointers[major + 1]
            MatrixError.assert_true(start <= stop, f"Decreasing pointers at slot {major}")
            prev = -1
            for k in range(start, stop):
                idx = self.indices[k]
                MatrixError.assert_true(0 <= idx < self.minors, f"Index {idx} out of range in slot {major}")
                MatrixError.assert_true(idx > prev, f"Unsorted or duplicate index {idx} in slot {major}")
                prev = idx
