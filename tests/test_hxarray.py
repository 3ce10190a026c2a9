import numpy as np
import pytest
from nmr_hx import HxArray, AllocationError, DimensionError, InvalidArgument, OutOfBoundsError
from nmr_hx.core.index import Layout


@pytest.fixture
def sample_array():
    # 2x3 complex matrix holding 0..11
    return HxArray(1, (2, 3), np.arange(12.0))


def _assert_length(a: HxArray):
    assert a.len == int(np.prod(a.sz, dtype=int)) * 2**a.d
    assert a.x.size == a.len


@pytest.mark.parametrize("d, sz", [(0, ()), (0, (5,)), (1, (4, 3)), (2, (2, 3, 4)), (3, (2, 1, 2, 2))])
def test_length_invariant(d, sz):
    a = HxArray(d, sz)
    assert a.d == d
    assert a.k == len(sz)
    assert a.n == 2**d
    _assert_length(a)
    assert np.all(a.x == 0.0)


def test_empty_array():
    a = HxArray()
    assert (a.d, a.k, a.len) == (0, 0, 1)


def test_invalid_sizes():
    with pytest.raises(InvalidArgument):
        HxArray(1, (4, 0))
    with pytest.raises(InvalidArgument):
        HxArray(-1, (4,))


def test_size_overflow():
    with pytest.raises(AllocationError):
        HxArray(0, (2**40, 2**40))


def test_data_size_mismatch():
    with pytest.raises(InvalidArgument):
        HxArray(1, (2, 3), np.arange(11.0))


def test_strides_and_offset(sample_array):
    assert sample_array.strides == (3, 1)
    assert sample_array.offset((1, 2)) == 10
    assert np.allclose(sample_array.get((1, 2)), [10.0, 11.0])


def test_get_out_of_bounds(sample_array):
    with pytest.raises(OutOfBoundsError):
        sample_array.get((2, 0))
    with pytest.raises(IndexError):
        sample_array.get((0, 3))
    with pytest.raises(OutOfBoundsError):
        sample_array.get((0,))


def test_set(sample_array):
    sample_array.set((0, 1), [7.0, -7.0])
    assert np.allclose(sample_array.get((0, 1)), [7.0, -7.0])

    sample_array.set((0, 1), 4.0)
    assert np.allclose(sample_array.get((0, 1)), [4.0, 0.0])

    with pytest.raises(InvalidArgument):
        sample_array.set((0, 1), [1.0, 2.0, 3.0])


def test_iter_offsets_is_restartable(sample_array):
    offsets = sample_array.iter_offsets()
    first = list(offsets)
    second = list(offsets)
    assert first == second == [0, 2, 4, 6, 8, 10]
    assert len(offsets) == 6


def test_copy_is_independent(sample_array):
    dup = sample_array.copy()
    dup.x[0] = 100.0
    assert sample_array.x[0] == 0.0
    assert dup.layout == sample_array.layout


def test_free(sample_array):
    sample_array.free()
    assert (sample_array.d, sample_array.k, sample_array.len) == (0, 0, 1)


def test_complex_conversion():
    data = np.array([[1 + 2j, 3 - 1j], [0.5j, -2.0]])
    a = HxArray.from_complex(data)
    assert a.d == 1 and a.sz == (2, 2)
    assert np.allclose(a.to_complex(), data)

    r = HxArray.from_real(np.arange(6.0).reshape(2, 3))
    assert r.d == 0 and r.sz == (2, 3)

    with pytest.raises(DimensionError):
        r.to_complex()


def test_resize_grow_keeps_values(sample_array):
    before = sample_array.view().copy()
    sample_array.resize(1, (3, 5))
    _assert_length(sample_array)

    view = sample_array.view()
    assert np.allclose(view[:2, :3], before)
    assert np.all(view[2, :] == 0.0)
    assert np.all(view[:, 3:] == 0.0)


def test_resize_shrink_drops_values(sample_array):
    sample_array.resize(1, (1, 2))
    _assert_length(sample_array)
    assert np.allclose(sample_array.view(), [[[0.0, 1.0], [2.0, 3.0]]])


def test_resize_algebraic_dimension(sample_array):
    sample_array.resize(2, (2, 3))
    _assert_length(sample_array)
    assert np.allclose(sample_array.get((1, 2)), [10.0, 11.0, 0.0, 0.0])

    sample_array.resize(0, (2, 3))
    _assert_length(sample_array)
    assert np.allclose(sample_array.view()[..., 0], np.arange(0.0, 12.0, 2.0).reshape(2, 3))


def test_resize_rank_change(sample_array):
    sample_array.resize(1, (2, 3, 2))
    _assert_length(sample_array)
    assert np.allclose(sample_array.get((1, 2, 0)), [10.0, 11.0])
    assert np.allclose(sample_array.get((1, 2, 1)), [0.0, 0.0])

    sample_array.resize(1, (2,))
    _assert_length(sample_array)
    assert np.allclose(sample_array.view(), [[0.0, 1.0], [6.0, 7.0]])


def test_add_and_scale(sample_array):
    other = sample_array.copy()
    sample_array.add(other, 2.0).scale(0.5)
    assert np.allclose(sample_array.x, 1.5 * np.arange(12.0))

    with pytest.raises(InvalidArgument):
        sample_array.add(HxArray(1, (3, 2)))


def test_mul_by_scalar_and_array():
    a = HxArray.from_complex([1 + 1j, 2.0])
    a.mul([0.0, 1.0])
    assert np.allclose(a.to_complex(), [-1 + 1j, 2j])

    b = HxArray.from_complex([1j, 1j])
    a.mul(b)
    assert np.allclose(a.to_complex(), [-1 - 1j, -2.0])


def test_norm_and_conj():
    a = HxArray.from_complex([3 + 4j, -1j])
    a.conj()
    assert np.allclose(a.to_complex(), [3 - 4j, 1j])
    a.norm()
    assert np.allclose(a.view(), [[5.0, 0.0], [1.0, 0.0]])
    _assert_length(a)


def test_semiconj_and_negate_basis():
    a = HxArray(2, (1,), np.ones(4))
    a.semiconj()
    assert np.allclose(a.x, [1.0, -1.0, -1.0, 1.0])
    a.negate_basis(1)
    assert np.allclose(a.x, [1.0, -1.0, 1.0, -1.0])

    with pytest.raises(DimensionError):
        a.negate_basis(2)


def test_drop_basis():
    a = HxArray(2, (2,), np.arange(8.0))
    a.drop_basis(1)
    assert a.d == 1
    _assert_length(a)
    assert np.allclose(a.view(), [[0.0, 1.0], [4.0, 5.0]])


def test_vectors_round_trip():
    a = HxArray(1, (2, 3), np.arange(12.0))
    wheres = list(a.iter_vectors(0))
    assert len(wheres) == 3

    vec = a.slice_vector(0, wheres[1])
    assert vec.sz == (2,)
    assert np.allclose(vec.view(), [[2.0, 3.0], [8.0, 9.0]])

    vec.scale(-1.0)
    a.store_vector(0, wheres[1], vec)
    assert np.allclose(a.get((1, 1)), [-8.0, -9.0])

    with pytest.raises(InvalidArgument):
        a.store_vector(1, wheres[1], vec)
    with pytest.raises(DimensionError):
        list(a.iter_vectors(2))


def test_str_has_preview(sample_array):
    text = str(sample_array)
    assert "Data Preview:" in text
    assert "d=1" in text


def test_layout_pack_unpack():
    layout = Layout(1, (3, 4, 5))
    assert layout.pack((2, 1, 3)) == 2 * 20 + 1 * 5 + 3
    assert layout.unpack(layout.pack((2, 1, 3))) == (2, 1, 3)

    with pytest.raises(OutOfBoundsError):
        layout.unpack(60)
    with pytest.raises(DimensionError):
        layout.check_axis(3)


def test_reorder_bases():
    a = HxArray(2, (2,), np.arange(8.0))
    a.reorder_bases([1, 0])
    assert np.allclose(a.view(), [[0.0, 2.0, 1.0, 3.0], [4.0, 6.0, 5.0, 7.0]])


def test_add_scalar(sample_array):
    sample_array.add_scalar(1.0)
    assert np.allclose(sample_array.view()[..., 0], np.arange(0.0, 12.0, 2.0).reshape(2, 3) + 1.0)
    assert np.allclose(sample_array.view()[..., 1], np.arange(1.0, 12.0, 2.0).reshape(2, 3))

    sample_array.add_scalar([0.0, -1.0])
    assert np.allclose(sample_array.view()[..., 1], np.arange(0.0, 11.0, 2.0).reshape(2, 3))

    with pytest.raises(InvalidArgument):
        sample_array.add_scalar([1.0, 2.0, 3.0])


def test_shift_is_circular(sample_array):
    before = sample_array.view().copy()
    sample_array.shift(1, 1)
    assert np.allclose(sample_array.view(), np.roll(before, 1, axis=1))
    assert np.allclose(sample_array.get((0, 0)), before[0, 2])

    sample_array.shift(1, -4)
    assert np.allclose(sample_array.view(), np.roll(before, -3, axis=1))

    with pytest.raises(DimensionError):
        sample_array.shift(2, 1)
