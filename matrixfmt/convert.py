"""
Conversions between storage formats.

Every conversion copies into a freshly-constructed target; none alias source storage.
Direct paths are registered per (source class, target class) pair.
Pairs without one are routed through Conventional.

Lossy and rejecting paths:
* Into Diagonal: off-diagonal content is dropped.
* Into Band with explicit widths, and into Packed: any nonzero which the target
  cannot hold raises `BandOverflow`, and nothing is returned.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .axis import Axis
from .band import Band
from .base import Matrix
from .compressed import Compressed
from .conventional import Conventional
from .diagonal import Diagonal
from .errors import BandOverflow, DimensionMismatch
from .packed import Packed, Triangle

logger = logging.getLogger(__name__)

CONVERSIONS: Dict[Tuple[type, type], Callable] = {}


def conversion(src: type, dst: type):
    """ Decorator registering a direct `src` -> `dst` conversion """

    def register(fn):
        CONVERSIONS[(src, dst)] = fn
        return fn

    return register


def convert(matrix: Matrix, cls: type, **kwargs) -> Matrix:
    """ Convert `matrix` into storage-format `cls`.
    Keyword arguments configure the target, e.g. `axis` for Compressed, `lower`/`upper` for Band. """
    if not isinstance(matrix, Matrix):
        raise TypeError(f"Cannot convert {matrix!r}")
    fn = CONVERSIONS.get((type(matrix), cls))
    if fn is not None:
        logger.debug(f"Converting {type(matrix).__name__} -> {cls.__name__} ({matrix.rows} x {matrix.cols})")
        return fn(matrix, **kwargs)
    if cls is Conventional:
        logger.debug(f"Materializing {type(matrix).__name__} element-by-element")
        return materialize(matrix)
    logger.debug(f"No direct path {type(matrix).__name__} -> {cls.__name__}, converting through Conventional")
    return convert(convert(matrix, Conventional), cls, **kwargs)


def materialize(matrix: Matrix) -> Conventional:
    """ Generic conversion to Conventional, from any format's `elements` """
    m = Conventional(matrix.size, dtype=matrix.dtype)
    for row, col, val in matrix.elements():
        m.values[col * m.rows + row] = val
    return m


def bandwidth(matrix: Matrix) -> Tuple[int, int]:
    """ Smallest (lower, upper) band holding every nonzero of `matrix` """
    lower = upper = 0
    for row, col in matrix.nonzero_dict():
        lower = max(lower, row - col)
        upper = max(upper, col - row)
    return lower, upper


def _band_slices(b: Band, col: int) -> Optional[Tuple[slice, slice]]:
    """ (matrix-row slice, storage-row slice) of column `col` inside band `b`, or None if empty """
    rr = b.row_range(col)
    if not len(rr): return None
    return slice(rr.start, rr.stop), slice(b.upper + rr.start - col, b.upper + rr.stop - col)


def _check_band(positions, lower: int, upper: int) -> None:
    for row, col in positions:
        if not -lower <= col - row <= upper:
            raise BandOverflow(f"Nonzero at ({row}, {col}) outside band of lower={lower}, upper={upper}")


""" Conventional """


@conversion(Conventional, Conventional)
def conventional_to_conventional(m: Conventional) -> Conventional:
    return m.copy()


@conversion(Conventional, Compressed)
def conventional_to_compressed(m: Conventional, axis: Axis = None) -> Compressed:
    """ Scan the dense store in major order, appending nonzeros of each slot in minor order.
    Indices come out sorted by construction. """
    c = Compressed(m.size, axis=axis, dtype=m.dtype)
    arr = m.array
    for major in range(c.majors):
        slot = arr[:, major] if c.axis is Axis.cols else arr[major, :]
        nz = np.flatnonzero(slot)
        c.indices.extend(nz.tolist())
        c.values.extend(slot[nz])
        c.pointers[major + 1] = len(c.indices)
    return c


@conversion(Conventional, Diagonal)
def conventional_to_diagonal(m: Conventional) -> Diagonal:
    """ Lossy: keeps the main diagonal only """
    return Diagonal.from_values(m.size, m.array.diagonal(), dtype=m.dtype)


@conversion(Conventional, Band)
def conventional_to_band(m: Conventional, lower: int = None, upper: int = None) -> Band:
    arr = m.array
    lo, up = bandwidth(m)
    lower = lo if lower is None else lower
    upper = up if upper is None else upper
    b = Band(m.size, lower=lower, upper=upper, dtype=m.dtype)
    rows, cols = np.nonzero(arr)
    _check_band(zip(rows.tolist(), cols.tolist()), b.lower, b.upper)

    for col in range(m.cols):
        slices = _band_slices(b, col)
        if slices is None: continue
        rs, ks = slices
        b.values[ks, col] = arr[rs, col]
    return b


@conversion(Conventional, Packed)
def conventional_to_packed(m: Conventional, triangle: Triangle = Triangle.lower) -> Packed:
    DimensionMismatch.assert_eq(m.rows, m.cols, f"Packed matrices must be square, not {m.size}")
    arr = m.array
    outside = np.triu(arr, 1) if triangle is Triangle.lower else np.tril(arr, -1)
    if np.any(outside):
        row, col = (int(x[0]) for x in np.nonzero(outside))
        raise BandOverflow(f"Nonzero at ({row}, {col}) outside the {triangle.name} triangle")
    p = Packed(m.size, triangle=triangle, dtype=m.dtype)
    p.values[:] = arr.T[_packed_indices(p)]
    return p


def _packed_indices(p: Packed):
    """ Index arrays into the *transposed* dense array, in packed storage order """
    n = p.rows
    if p.triangle is Triangle.lower:
        return np.triu_indices(n)
    return np.tril_indices(n)


""" Compressed """


@conversion(Compressed, Conventional)
def compressed_to_conventional(c: Compressed) -> Conventional:
    m = Conventional(c.size, dtype=c.dtype)
    majors = np.repeat(np.arange(c.majors), np.diff(c.pointers))
    minors = np.asarray(c.indices, dtype=np.intp)
    rows, cols = (minors, majors) if c.axis is Axis.cols else (majors, minors)
    m.array[rows, cols] = np.asarray(c.values, dtype=c.dtype)
    return m


@conversion(Compressed, Compressed)
def compressed_to_compressed(c: Compressed, axis: Axis = None) -> Compressed:
    """ Copy, or flip orientation via a counting-sort transpose.

    The flip first counts the entries bound for each new major slot, prefix-sums these into pointers,
    then scatters entries slot-by-slot through per-slot cursors.
    Old majors are visited in increasing order, so the new minor indices land sorted.
    O(nnz + majors). """
    axis = c.axis if axis is None else axis
    if axis is c.axis:
        return c.copy()

    t = Compressed(c.size, axis=axis, dtype=c.dtype)
    nnz = len(c.values)
    pointers = [0] * (t.majors + 1)
    for minor in c.indices:
        pointers[minor + 1] += 1
    for n in range(t.majors):
        pointers[n + 1] += pointers[n]

    cursor = pointers[:-1]
    t.indices = [0] * nnz
    t.values = [t.zero] * nnz
    for major in range(c.majors):
        for k in c.slot(major):
            minor = c.indices[k]
            dst = cursor[minor]
            cursor[minor] += 1
            t.indices[dst] = major
            t.values[dst] = c.values[k]
    t.pointers = pointers
    return t


@conversion(Compressed, Diagonal)
def compressed_to_diagonal(c: Compressed) -> Diagonal:
    """ Lossy: keeps the main diagonal only """
    d = Diagonal(c.size, dtype=c.dtype)
    for row, col, val in c.elements():
        if row == col:
            d.values[row] = val
    return d


@conversion(Compressed, Band)
def compressed_to_band(c: Compressed, lower: int = None, upper: int = None) -> Band:
    lo, up = bandwidth(c)
    lower = lo if lower is None else lower
    upper = up if upper is None else upper
    b = Band(c.size, lower=lower, upper=upper, dtype=c.dtype)
    entries = [(row, col, val) for row, col, val in c.elements() if val != 0]
    _check_band(((row, col) for row, col, _ in entries), b.lower, b.upper)

    for row, col, val in entries:
        b.values[upper + row - col, col] = val
    return b


""" Diagonal """


@conversion(Diagonal, Diagonal)
def diagonal_to_diagonal(d: Diagonal) -> Diagonal:
    return d.copy()


@conversion(Diagonal, Conventional)
def diagonal_to_conventional(d: Diagonal) -> Conventional:
    """ Lossless: zero-fills everything off the diagonal """
    m = Conventional(d.size, dtype=d.dtype)
    idx = np.arange(len(d.values))
    m.array[idx, idx] = d.values
    return m


@conversion(Diagonal, Compressed)
def diagonal_to_compressed(d: Diagonal, axis: Axis = None) -> Compressed:
    nz = np.flatnonzero(d.values)
    return Compressed.from_triplets(d.size, nz, nz, d.values[nz], axis=axis, dtype=d.dtype)


@conversion(Diagonal, Band)
def diagonal_to_band(d: Diagonal, lower: int = None, upper: int = None) -> Band:
    b = Band(d.size, lower=lower or 0, upper=upper or 0, dtype=d.dtype)
    b.values[b.upper, :len(d.values)] = d.values
    return b


""" Band """


@conversion(Band, Band)
def band_to_band(b: Band, lower: int = None, upper: int = None) -> Band:
    lower = b.lower if lower is None else lower
    upper = b.upper if upper is None else upper
    if lower >= b.lower and upper >= b.upper:
        return b.widen(lower, upper)
    return conventional_to_band(band_to_conventional(b), lower=lower, upper=upper)


@conversion(Band, Conventional)
def band_to_conventional(b: Band) -> Conventional:
    m = Conventional(b.size, dtype=b.dtype)
    arr = m.array
    for col in range(b.cols):
        slices = _band_slices(b, col)
        if slices is None: continue
        rs, ks = slices
        arr[rs, col] = b.values[ks, col]
    return m


@conversion(Band, Compressed)
def band_to_compressed(b: Band, axis: Axis = None) -> Compressed:
    entries = [(row, col, val) for row, col, val in b.elements() if val != 0]
    rows = [e[0] for e in entries]
    cols = [e[1] for e in entries]
    vals = [e[2] for e in entries]
    return Compressed.from_triplets(b.size, rows, cols, vals, axis=axis, dtype=b.dtype)


@conversion(Band, Diagonal)
def band_to_diagonal(b: Band) -> Diagonal:
    """ Lossy: keeps the main diagonal only """
    n = b.size.diagonal
    return Diagonal.from_values(b.size, b.values[b.upper, :n], dtype=b.dtype)


""" Packed """


@conversion(Packed, Packed)
def packed_to_packed(p: Packed, triangle: Triangle = None) -> Packed:
    if triangle is None or triangle is p.triangle:
        return p.copy()
    return conventional_to_packed(packed_to_conventional(p), triangle=triangle)


@conversion(Packed, Conventional)
def packed_to_conventional(p: Packed) -> Conventional:
    m = Conventional(p.size, dtype=p.dtype)
    m.array.T[_packed_indices(p)] = p.values
    return m
