"""
Arithmetic over any pair of storage formats.

Format-specific fast paths are registered per operand-class pair.
Pairs without one are materialized to Conventional and handled densely.
Results take the numpy-promoted element type of their operands.
"""

import logging
from typing import Callable, Dict, Tuple

import numpy as np

from . import element
from .axis import Axis
from .band import Band
from .base import Matrix
from .compressed import Compressed
from .conventional import Conventional
from .diagonal import Diagonal
from .errors import DimensionMismatch
from .packed import Packed

logger = logging.getLogger(__name__)

ADD: Dict[Tuple[type, type], Callable] = {}
SUBTRACT: Dict[Tuple[type, type], Callable] = {}
MULTIPLY: Dict[Tuple[type, type], Callable] = {}
SCALE: Dict[type, Callable] = {}


def fast_path(table: dict, *key: type):
    """ Decorator registering `fn` in `table` under operand classes `key` """

    def register(fn):
        table[key if len(key) > 1 else key[0]] = fn
        return fn

    return register


def add(a: Matrix, b: Matrix) -> Matrix:
    """ Elementwise sum a + b """
    return elementwise(ADD, "add", a, b)


def subtract(a: Matrix, b: Matrix) -> Matrix:
    """ Elementwise difference a - b """
    return elementwise(SUBTRACT, "subtract", a, b)


def elementwise(table: dict, name: str, a: Matrix, b: Matrix) -> Matrix:
    DimensionMismatch.assert_eq(a.size, b.size, f"Cannot {name} {a.rows} x {a.cols} and {b.rows} x {b.cols}")
    fn = table.get((type(a), type(b)))
    if fn is None:
        logger.debug(f"No {name} fast path for ({type(a).__name__}, {type(b).__name__}), materializing")
        return table[(Conventional, Conventional)](a.to_conventional(), b.to_conventional())
    return fn(a, b)


def scale(a: Matrix, factor) -> Matrix:
    """ Multiply every element of `a` by scalar `factor` """
    if np.ndim(factor) != 0:
        raise TypeError(f"Scale factor must be a scalar, not {factor!r}")
    if isinstance(factor, int) and factor < 0 and a.dtype.kind in "bu":
        # Negative Python ints are out of range for unsigned dtypes
        factor = np.int64(factor)
    fn = SCALE.get(type(a))
    if fn is None:
        logger.debug(f"No scale fast path for {type(a).__name__}, materializing")
        return scale_conventional(a.to_conventional(), factor)
    return fn(a, factor)


def multiply(a: Matrix, b: Matrix) -> Matrix:
    """ Matrix product a @ b """
    DimensionMismatch.assert_eq(a.cols, b.rows, f"Cannot multiply {a.rows} x {a.cols} by {b.rows} x {b.cols}")
    fn = MULTIPLY.get((type(a), type(b)))
    if fn is None:
        logger.debug(f"No multiply fast path for ({type(a).__name__}, {type(b).__name__}), materializing")
        return multiply_conventional(a.to_conventional(), b.to_conventional())
    return fn(a, b)


def mult(a: Matrix, rhs) -> np.ndarray:
    """ Multiply with a dense column vector """
    x = np.asarray(rhs).ravel()
    DimensionMismatch.assert_eq(len(x), a.cols, f"Invalid rhs: length {len(x)} for matrix with {a.cols} columns")
    dtype = element.result_type(a.dtype, x.dtype)
    if isinstance(a, Compressed):
        y = np.zeros(a.rows, dtype=dtype)
        for row, col, val in a.elements():
            y[row] += val * x[col]
        return y
    if isinstance(a, Diagonal):
        y = np.zeros(a.rows, dtype=dtype)
        n = len(a.values)
        y[:n] = a.values * x[:n]
        return y
    return a.to_conventional().array.dot(x)


def transpose(a: Matrix) -> Matrix:
    return a.transpose()


""" Addition and subtraction """


def merge_compressed(a: Compressed, b: Compressed, op: Callable) -> Compressed:
    """ Merge each pair of major slots like two sorted sequences, applying `op` (`np.add` or `np.subtract`).
    Coordinates stored on one side only meet a zero on the other.
    Results equal to zero are not stored.  O(nnz_a + nnz_b). """
    if b.axis is not a.axis:
        b = b.to(Compressed, axis=a.axis)
    c = Compressed(a.size, axis=a.axis, dtype=element.result_type(a.dtype, b.dtype))
    cast = c.dtype.type
    # Zero-dimensional operands keep integer arithmetic in numpy's wrap-around array semantics
    zero = np.zeros((), dtype=c.dtype)

    def operand(val):
        return np.asarray(val, dtype=c.dtype)

    for major in range(a.majors):
        i, iend = a.pointers[major], a.pointers[major + 1]
        j, jend = b.pointers[major], b.pointers[major + 1]
        while i < iend or j < jend:
            if j >= jend or (i < iend and a.indices[i] < b.indices[j]):
                idx, val = a.indices[i], op(operand(a.values[i]), zero)
                i += 1
            elif i >= iend or b.indices[j] < a.indices[i]:
                idx, val = b.indices[j], op(zero, operand(b.values[j]))
                j += 1
            else:
                idx, val = a.indices[i], op(operand(a.values[i]), operand(b.values[j]))
                i += 1
                j += 1
            val = cast(val)
            if val != 0:
                c.indices.append(idx)
                c.values.append(val)
        c.pointers[major + 1] = len(c.values)
    return c


@fast_path(ADD, Conventional, Conventional)
def add_conventional(a: Conventional, b: Conventional) -> Conventional:
    return a.elementwise(b, np.add)


@fast_path(SUBTRACT, Conventional, Conventional)
def subtract_conventional(a: Conventional, b: Conventional) -> Conventional:
    return a.elementwise(b, np.subtract)


@fast_path(ADD, Compressed, Compressed)
def add_compressed(a: Compressed, b: Compressed) -> Compressed:
    return merge_compressed(a, b, np.add)


@fast_path(SUBTRACT, Compressed, Compressed)
def subtract_compressed(a: Compressed, b: Compressed) -> Compressed:
    return merge_compressed(a, b, np.subtract)


def combine_diagonal(a: Diagonal, b: Diagonal, op: Callable) -> Diagonal:
    vals = op(a.values, b.values)
    return Diagonal.from_values(a.size, vals, dtype=vals.dtype)


def combine_band(a: Band, b: Band, op: Callable) -> Band:
    """ Widen both bands to their union, then combine the rectangles """
    lower, upper = max(a.lower, b.lower), max(a.upper, b.upper)
    vals = op(a.widen(lower, upper).values, b.widen(lower, upper).values)
    return Band.from_arrays(a.size, lower, upper, vals, dtype=vals.dtype)


def combine_packed(a: Packed, b: Packed, op: Callable) -> Matrix:
    if a.triangle is not b.triangle:
        return a.to_conventional().elementwise(b.to_conventional(), op)
    vals = op(a.values, b.values)
    return Packed.from_values(a.size, a.triangle, vals, dtype=vals.dtype)


@fast_path(ADD, Diagonal, Diagonal)
def add_diagonal(a: Diagonal, b: Diagonal) -> Diagonal:
    return combine_diagonal(a, b, np.add)


@fast_path(SUBTRACT, Diagonal, Diagonal)
def subtract_diagonal(a: Diagonal, b: Diagonal) -> Diagonal:
    return combine_diagonal(a, b, np.subtract)


@fast_path(ADD, Band, Band)
def add_band(a: Band, b: Band) -> Band:
    return combine_band(a, b, np.add)


@fast_path(SUBTRACT, Band, Band)
def subtract_band(a: Band, b: Band) -> Band:
    return combine_band(a, b, np.subtract)


@fast_path(ADD, Packed, Packed)
def add_packed(a: Packed, b: Packed) -> Matrix:
    return combine_packed(a, b, np.add)


@fast_path(SUBTRACT, Packed, Packed)
def subtract_packed(a: Packed, b: Packed) -> Matrix:
    return combine_packed(a, b, np.subtract)


""" Scaling """


@fast_path(SCALE, Conventional)
def scale_conventional(a: Conventional, factor) -> Conventional:
    vals = a.values * factor
    return Conventional.from_values(a.size, vals, dtype=vals.dtype)


@fast_path(SCALE, Compressed)
def scale_compressed(a: Compressed, factor) -> Compressed:
    vals = np.asarray(a.values, dtype=a.dtype) * factor
    c = Compressed(a.size, axis=a.axis, dtype=vals.dtype)
    c.values = list(vals)
    c.indices = list(a.indices)
    c.pointers = list(a.pointers)
    c.prune()  # Scaling by zero, or underflow
    return c


@fast_path(SCALE, Diagonal)
def scale_diagonal(a: Diagonal, factor) -> Diagonal:
    vals = a.values * factor
    return Diagonal.from_values(a.size, vals, dtype=vals.dtype)


@fast_path(SCALE, Band)
def scale_band(a: Band, factor) -> Band:
    vals = a.values * factor
    return Band.from_arrays(a.size, a.lower, a.upper, vals, dtype=vals.dtype)


@fast_path(SCALE, Packed)
def scale_packed(a: Packed, factor) -> Packed:
    vals = a.values * factor
    return Packed.from_values(a.size, a.triangle, vals, dtype=vals.dtype)


""" Multiplication """


@fast_path(MULTIPLY, Conventional, Conventional)
def multiply_conventional(a: Conventional, b: Conventional) -> Conventional:
    arr = a.array.dot(b.array)
    return Conventional.from_values((a.rows, b.cols), arr.ravel(order='F'), dtype=arr.dtype)


@fast_path(MULTIPLY, Compressed, Conventional)
def multiply_compressed_conventional(a: Compressed, b: Conventional) -> Conventional:
    """ Each stored a[i, k] contributes a[i, k] * b[k, :] to row i """
    out = np.zeros((a.rows, b.cols), dtype=element.result_type(a.dtype, b.dtype))
    barr = b.array
    for row, col, val in a.elements():
        out[row, :] += val * barr[col, :]
    return Conventional.from_values(out.shape, out.ravel(order='F'), dtype=out.dtype)


@fast_path(MULTIPLY, Conventional, Compressed)
def multiply_conventional_compressed(a: Conventional, b: Compressed) -> Conventional:
    """ Each stored b[k, j] contributes a[:, k] * b[k, j] to column j """
    out = np.zeros((a.rows, b.cols), dtype=element.result_type(a.dtype, b.dtype))
    aarr = a.array
    for row, col, val in b.elements():
        out[:, col] += aarr[:, row] * val
    return Conventional.from_values(out.shape, out.ravel(order='F'), dtype=out.dtype)


@fast_path(MULTIPLY, Compressed, Compressed)
def multiply_compressed(a: Compressed, b: Compressed) -> Compressed:
    """ Row-by-row accumulation over compressed-row copies of both operands.
    The result takes the orientation of `a`. """
    ar = a.to(Compressed, axis=Axis.rows)
    br = b.to(Compressed, axis=Axis.rows)
    c = Compressed((a.rows, b.cols), axis=Axis.rows, dtype=element.result_type(a.dtype, b.dtype))
    cast = c.dtype.type
    for row in range(ar.rows):
        acc = {}
        for k in ar.slot(row):
            mid, aval = ar.indices[k], ar.values[k]
            for m in br.slot(mid):
                col = br.indices[m]
                acc[col] = acc.get(col, 0) + aval * br.values[m]
        for col in sorted(acc):
            val = cast(acc[col])
            if val != 0:
                c.indices.append(col)
                c.values.append(val)
        c.pointers[row + 1] = len(c.values)
    if a.axis is not Axis.rows:
        return c.to(Compressed, axis=a.axis)
    return c


@fast_path(MULTIPLY, Compressed, Diagonal)
def multiply_compressed_diagonal(a: Compressed, d: Diagonal) -> Compressed:
    """ Scale column j of `a` by d[j, j] """
    n = len(d.values)
    entries = [(row, col, val * d.values[col]) for row, col, val in a.elements() if col < n]
    return Compressed.from_triplets((a.rows, d.cols),
                                    [e[0] for e in entries], [e[1] for e in entries], [e[2] for e in entries],
                                    axis=a.axis, dtype=element.result_type(a.dtype, d.dtype))


@fast_path(MULTIPLY, Diagonal, Compressed)
def multiply_diagonal_compressed(d: Diagonal, b: Compressed) -> Compressed:
    """ Scale row i of `b` by d[i, i] """
    n = len(d.values)
    entries = [(row, col, d.values[row] * val) for row, col, val in b.elements() if row < n]
    return Compressed.from_triplets((d.rows, b.cols),
                                    [e[0] for e in entries], [e[1] for e in entries], [e[2] for e in entries],
                                    axis=b.axis, dtype=element.result_type(d.dtype, b.dtype))


@fast_path(MULTIPLY, Diagonal, Diagonal)
def multiply_diagonal(a: Diagonal, b: Diagonal) -> Diagonal:
    d = Diagonal((a.rows, b.cols), dtype=element.result_type(a.dtype, b.dtype))
    n = min(len(a.values), len(b.values))
    d.values[:n] = a.values[:n] * b.values[:n]
    return d
