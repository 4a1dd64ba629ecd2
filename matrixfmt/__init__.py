"""
Matrix storage formats, and lossless conversions between them.
"""

from .axis import Axis
from .size import Size, Position
from .errors import MatrixError, OutOfBounds, DimensionMismatch, BandOverflow, Overflow
from .base import Matrix
from .conventional import Conventional
from .compressed import Compressed
from .diagonal import Diagonal
from .band import Band
from .packed import Packed, Triangle
from .convert import convert, bandwidth
from .ops import add, subtract, scale, multiply, mult, transpose
