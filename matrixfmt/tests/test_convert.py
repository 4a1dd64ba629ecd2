import logging

import pytest
import numpy as np

from ..axis import Axis
from ..band import Band
from ..compressed import Compressed
from ..conventional import Conventional
from ..convert import convert, bandwidth, CONVERSIONS
from ..diagonal import Diagonal
from ..errors import BandOverflow
from ..packed import Packed, Triangle


def tridiagonal() -> Conventional:
    """ Helper function.  (Not a test!) """
    return Conventional.from_rows([
        [4, -1, 0, 0, 0],
        [-1, 4, -1, 0, 0],
        [0, -1, 4, -1, 0],
        [0, 0, -1, 4, -1],
        [0, 0, 0, -1, 4],
    ])


def random_dense(rows: int, cols: int, seed: int, density: float = 0.3) -> Conventional:
    """ Helper function.  (Not a test!)
    Random matrix with roughly `density` of its entries nonzero. """
    rng = np.random.default_rng(seed)
    arr = rng.integers(1, 10, size=(rows, cols)).astype(float)
    arr[rng.random((rows, cols)) > density] = 0
    return Conventional.from_values((rows, cols), arr.ravel(order='F'))


FORMATS = [
    (Conventional, {}),
    (Compressed, dict(axis=Axis.cols)),
    (Compressed, dict(axis=Axis.rows)),
    (Band, {}),
]


@pytest.mark.parametrize("cls, kwargs", FORMATS)
@pytest.mark.parametrize("shape, seed", [((5, 5), 1), ((7, 3), 2), ((3, 8), 3), ((1, 6), 4), ((0, 4), 5)])
def test_round_trip(cls, kwargs, shape, seed):
    m = random_dense(*shape, seed=seed)
    x = convert(m, cls, **kwargs)
    assert isinstance(x, cls)
    assert x == m
    back = convert(x, Conventional)
    assert np.array_equal(back.values, m.values)


@pytest.mark.parametrize("src, src_kwargs", FORMATS)
@pytest.mark.parametrize("dst, dst_kwargs", FORMATS)
def test_any_to_any(src, src_kwargs, dst, dst_kwargs):
    m = random_dense(6, 4, seed=11, density=0.5)
    x = convert(convert(m, src, **src_kwargs), dst, **dst_kwargs)
    assert isinstance(x, dst)
    assert x == m


@pytest.mark.parametrize("cls, kwargs", FORMATS)
def test_transpose_involution(cls, kwargs):
    m = convert(random_dense(4, 6, seed=21, density=0.5), cls, **kwargs)
    t = m.transpose()
    assert t.size == (6, 4)
    assert t.transpose() == m
    assert t.to_conventional() == m.to_conventional().transpose()


def test_conversion_copies():
    m = tridiagonal()
    for cls in (Conventional, Compressed, Band, Diagonal, Packed):
        kwargs = dict(lower=1, upper=1) if cls is Band else {}
        if cls is Packed:
            src = Packed.from_matrix(Conventional.from_rows([[1, 0], [2, 3]]))
        elif cls is Diagonal:
            src = Diagonal.from_values(3, [1.0, 2.0, 3.0])
        else:
            src = convert(m, cls, **kwargs)
        cp = convert(src, cls)
        assert cp is not src
        assert cp.values is not src.values
        assert cp == src


def test_from_conventional():
    m = Conventional.from_values((5, 3), [
        0.0, 1.0, 0.0, 0.0, 0.0,
        0.0, 0.0, 0.0, 2.0, 3.0,
        0.0, 0.0, 0.0, 0.0, 4.0,
    ])
    c = Compressed.from_matrix(m)
    assert c.values == [1.0, 2.0, 3.0, 4.0]
    assert c.indices == [1, 3, 4, 4]
    assert c.pointers == [0, 1, 3, 4]
    c._checkup()


def test_from_diagonal_tall():
    d = Diagonal.from_values((5, 3), [1.0, 2.0, 0.0])
    c = Compressed.from_matrix(d)
    assert c.size == (5, 3)
    assert c.values == [1.0, 2.0]
    assert c.indices == [0, 1]
    assert c.pointers == [0, 1, 2, 2]


def test_from_diagonal_wide():
    d = Diagonal.from_values((3, 5), [1.0, 0.0, 3.0])
    c = Compressed.from_matrix(d)
    assert c.values == [1.0, 3.0]
    assert c.indices == [0, 2]
    assert c.pointers == [0, 1, 1, 2, 2, 2]


def test_diagonal_into_band():
    tall = Band.from_matrix(Diagonal.from_values((5, 3), [1.0, 2.0, 3.0]))
    assert (tall.lower, tall.upper) == (0, 0)
    assert tall.values.tolist() == [[1.0, 2.0, 3.0]]
    wide = Band.from_matrix(Diagonal.from_values((3, 5), [1.0, 2.0, 3.0]))
    assert wide.values.tolist() == [[1.0, 2.0, 3.0, 0.0, 0.0]]
    padded = Band.from_matrix(Diagonal.from_values(3, [1.0, 2.0, 3.0]), lower=1, upper=2)
    assert padded.values.shape == (4, 3)
    assert padded.values[2].tolist() == [1.0, 2.0, 3.0]


@pytest.mark.parametrize("src", [Conventional, Compressed, Band])
def test_lossy_diagonal(src):
    m = tridiagonal()
    d = Diagonal.from_matrix(convert(m, src))
    assert d.values.tolist() == [4, 4, 4, 4, 4]
    dropped = set(m.nonzero_dict()) - set(d.nonzero_dict())
    assert dropped == {(r, c) for (r, c) in m.nonzero_dict() if r != c}


def test_lossy_diagonal_single_entry():
    m = Conventional.from_rows([
        [1, 0],
        [5, 2],
    ])
    d = Diagonal.from_matrix(m)
    assert set(m.nonzero_dict()) - set(d.nonzero_dict()) == {(1, 0)}


@pytest.mark.parametrize("src", [Conventional, Compressed])
def test_band_overflow(src):
    m = convert(tridiagonal(), src)
    b = Band.from_matrix(m, lower=1, upper=1)
    assert b == m
    with pytest.raises(BandOverflow):
        Band.from_matrix(m, lower=1, upper=0)
    with pytest.raises(BandOverflow):
        Band.from_matrix(m, lower=0, upper=1)


def test_band_narrowing():
    b = Band.from_matrix(tridiagonal(), lower=2, upper=2)
    n = b.to(Band, lower=1, upper=1)
    assert n.values.shape == (3, 5)
    assert n == b
    with pytest.raises(BandOverflow):
        b.to(Band, lower=0, upper=0)


@pytest.mark.parametrize("src", [Compressed, Band, Diagonal])
def test_packed_from_any(src):
    lower = Conventional.from_rows([
        [1, 0, 0],
        [0, 2, 0],
        [4, 0, 3],
    ])
    x = convert(lower, src)
    p = Packed.from_matrix(x)
    assert p == x
    if src is not Diagonal:
        with pytest.raises(BandOverflow):
            Packed.from_matrix(convert(lower, src), triangle=Triangle.upper)


def test_packed_into_formats():
    p = Packed.from_values(3, Triangle.upper, [1.0, 2.0, 3.0, 0.0, 5.0, 6.0])
    m = p.to_conventional()
    for cls in (Compressed, Band):
        x = p.to(cls)
        assert x == m
    b = p.to(Band)
    assert (b.lower, b.upper) == (0, 1)


def test_bandwidth():
    assert bandwidth(tridiagonal()) == (1, 1)
    assert bandwidth(Conventional((3, 3))) == (0, 0)
    m = Conventional.from_rows([
        [0, 0, 0, 1],
        [0, 0, 0, 0],
        [2, 0, 0, 0],
    ])
    assert bandwidth(m) == (2, 3)
    assert bandwidth(Compressed.from_matrix(m)) == (2, 3)


def test_compressed_reorient():
    m = random_dense(6, 9, seed=31, density=0.4)
    c = Compressed.from_matrix(m, axis=Axis.cols)
    r = c.to(Compressed, axis=Axis.rows)
    r._checkup()
    assert r.axis is Axis.rows
    assert r == m
    assert r == Compressed.from_matrix(m, axis=Axis.rows)
    assert r.indices == Compressed.from_matrix(m, axis=Axis.rows).indices
    back = r.to(Compressed, axis=Axis.cols)
    assert (back.values, back.indices, back.pointers) == (c.values, c.indices, c.pointers)


def test_invalid():
    with pytest.raises(TypeError):
        convert([[1, 2], [3, 4]], Conventional)


def test_registry():
    # Every format has a direct path to and from Conventional
    for cls in (Compressed, Diagonal, Band, Packed):
        assert (cls, Conventional) in CONVERSIONS
        assert (Conventional, cls) in CONVERSIONS


def test_logging(caplog):
    with caplog.at_level(logging.DEBUG, logger="matrixfmt.convert"):
        Packed.from_values(2, Triangle.lower, [1.0, 2.0, 3.0]).to(Compressed)
    messages = [r.getMessage() for r in caplog.records]
    assert any("through Conventional" in msg for msg in messages)
