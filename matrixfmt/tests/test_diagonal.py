import pytest
import numpy as np

from ..conventional import Conventional
from ..diagonal import Diagonal
from ..errors import BandOverflow, DimensionMismatch, OutOfBounds


def test_create():
    d = Diagonal((5, 3))
    assert len(d.values) == 3
    assert d.nonzeros() == 0
    d = Diagonal((3, 5))
    assert len(d.values) == 3


def test_get_set():
    d = Diagonal.from_values(3, [1.0, 2.0, 3.0])
    assert d.get(1, 1) == 2.0
    assert d.get(0, 2) == 0
    d.set(2, 2, -3.0)
    assert d[2, 2] == -3.0
    with pytest.raises(OutOfBounds):
        d.get(3, 3)


def test_off_diagonal_rejected():
    d = Diagonal.from_values(3, [1.0, 2.0, 3.0])
    with pytest.raises(BandOverflow):
        d.set(0, 1, 5.0)
    assert d.values.tolist() == [1.0, 2.0, 3.0]
    assert d.get(0, 1) == 0


def test_off_diagonal_zero_accepted():
    d = Diagonal.from_values(3, [1.0, 2.0, 3.0])
    d.set(2, 0, 0.0)
    assert d.values.tolist() == [1.0, 2.0, 3.0]


def test_from_values_length():
    with pytest.raises(DimensionMismatch):
        Diagonal.from_values((5, 3), [1.0, 2.0])


def test_into_conventional():
    tall = Diagonal.from_values((5, 3), [1.0, 2.0, 3.0])
    assert tall.to_conventional().to_numpy().tolist() == [
        [1, 0, 0],
        [0, 2, 0],
        [0, 0, 3],
        [0, 0, 0],
        [0, 0, 0],
    ]
    wide = Diagonal.from_values((3, 5), [1.0, 2.0, 3.0])
    assert wide.to_conventional().to_numpy().tolist() == [
        [1, 0, 0, 0, 0],
        [0, 2, 0, 0, 0],
        [0, 0, 3, 0, 0],
    ]


def test_lossy_from_conventional():
    m = Conventional.from_rows([
        [1, 0, 0],
        [0, 2, 7],
        [0, 0, 3],
    ])
    d = Diagonal.from_matrix(m)
    assert d.values.tolist() == [1, 2, 3]
    back = d.to_conventional()
    diff = {pos for pos in m.nonzero_dict() if pos not in back.nonzero_dict()}
    assert diff == {(1, 2)}


def test_elements():
    d = Diagonal.from_values((2, 4), [5.0, 0.0])
    assert list(d.elements()) == [(0, 0, 5.0), (1, 1, 0.0)]
    assert d.nonzeros() == 1


def test_transpose():
    d = Diagonal.from_values((5, 3), [1.0, 2.0, 3.0])
    t = d.transpose()
    assert t.size == (3, 5)
    assert t.values.tolist() == [1.0, 2.0, 3.0]
    assert t.transpose() == d


def test_copy_is_independent():
    d = Diagonal.from_values(2, [1.0, 2.0])
    cp = d.copy()
    cp.set(0, 0, 9.0)
    assert d.get(0, 0) == 1.0


def test_dtype():
    d = Diagonal.from_values(3, [1, 2, 3], dtype=np.int64)
    assert d.values.dtype == np.int64
    assert d.zero == 0
