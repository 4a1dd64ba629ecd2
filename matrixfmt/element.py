"""
Numeric element types.

Each matrix fixes a numpy dtype for its lifetime.
The only capabilities required of it are a zero, addition, multiplication and equality,
which restricts us to numpy's boolean, integer, floating and complex kinds.
"""

import numpy as np

from . import config

NUMERIC_KINDS = "biufc"


def dtype_of(dtype=None) -> np.dtype:
    """ Resolve `dtype`, or the configured default, into a numeric numpy dtype """
    dt = np.dtype(config.DEFAULT_DTYPE if dtype is None else dtype)
    if dt.kind not in NUMERIC_KINDS:
        raise TypeError(f"Non-numeric element type {dt}")
    return dt


def zero(dtype: np.dtype):
    """ Additive identity of `dtype` """
    return dtype.type(0)


def cast(dtype: np.dtype, val):
    """ Convert `val` to a scalar of `dtype`.
    Raises (TypeError, ValueError) for values which cannot be represented. """
    return dtype.type(val)


def result_type(*dtypes) -> np.dtype:
    return np.result_type(*dtypes)
