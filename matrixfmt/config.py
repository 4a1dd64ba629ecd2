"""
Library-wide defaults.
Read at call-time, so callers may re-assign them, e.g. `config.DEFAULT_AXIS = Axis.rows`.
"""

import numpy as np

from .axis import Axis

""" Element type of newly created matrices """
DEFAULT_DTYPE = np.float64

""" Orientation of newly created compressed matrices """
DEFAULT_AXIS = Axis.cols

""" Largest element-count (rows*cols) a matrix may declare """
MAX_ELEMENTS = int(np.iinfo(np.intp).max)
