import numpy as np
import pytest
from nmr_hx import HxArray, InvalidArgument
from nmr_hx.core.baseline import baseline, baseline_weights, correct_baseline


def _peaks(size: int) -> np.ndarray:
    t = np.arange(size)
    return (
        10.0 * np.exp(-np.square((t - 40) / 1.5))
        + 6.0 * np.exp(-np.square((t - 90) / 1.5))
        + 4.0 * np.exp(-np.square((t - 200) / 1.5))
    )


@pytest.fixture
def spectrum():
    return HxArray.from_real(3.0 + _peaks(256))


def test_weights_mark_peaks(spectrum):
    w = baseline_weights(spectrum)
    assert w.shape == (256,)
    assert set(np.unique(w)) <= {0.0, 1.0}
    assert w[40] == 0.0 and w[90] == 0.0 and w[200] == 0.0
    assert np.all(w[:30] == 1.0)
    assert np.all(w[120:180] == 1.0)


def test_short_vector_weights():
    w = baseline_weights(HxArray.from_real([1.0, 5.0]))
    assert np.all(w == 1.0)


def test_constant_baseline_under_peaks(spectrum):
    first = correct_baseline(spectrum, 0)
    assert np.allclose(first.view()[..., 0], 3.0, atol=1e-2)
    assert np.allclose(spectrum.view()[..., 0], _peaks(256), atol=1e-2)

    second = correct_baseline(spectrum, 0)
    assert np.max(np.abs(second.x)) < 1e-2 * np.max(np.abs(first.x))


def test_zero_smoothness_returns_input(spectrum):
    z = baseline(spectrum, smooth=0.0)
    assert np.array_equal(z.x, spectrum.x)


def test_large_smoothness_is_flat():
    t = np.arange(128)
    y = HxArray.from_real(np.sin(2 * np.pi * t / 128))
    z = baseline(y, smooth=1.0e8, weights=np.ones(128))
    assert np.ptp(z.x) < 1e-2 * np.ptp(y.x)


def test_all_zero_weights_fall_back_to_uniform():
    y = HxArray.from_real(np.linspace(0.0, 1.0, 16))
    z0 = baseline(y, smooth=1.0, weights=np.zeros(16))
    z1 = baseline(y, smooth=1.0, weights=np.ones(16))
    assert np.allclose(z0.x, z1.x)


def test_invalid_arguments(spectrum):
    before = spectrum.x.copy()
    with pytest.raises(InvalidArgument):
        baseline(spectrum, smooth=-1.0)
    with pytest.raises(InvalidArgument):
        baseline(spectrum, weights=np.ones(10))
    with pytest.raises(InvalidArgument):
        correct_baseline(spectrum, 0, smooth=-1.0)
    with pytest.raises(InvalidArgument):
        baseline(HxArray(0, (4, 4)))
    assert np.array_equal(spectrum.x, before)


def test_correct_baseline_on_every_row():
    rows = np.stack([offset + _peaks(256) for offset in (1.0, -2.0, 5.0)])
    a = HxArray.from_complex(rows)
    estimate = correct_baseline(a, 1)

    assert estimate.sz == a.sz
    for i, offset in enumerate((1.0, -2.0, 5.0)):
        assert np.allclose(estimate.view()[i, :, 0], offset, atol=1e-2)
    assert np.allclose(a.view()[..., 0], _peaks(256), atol=1e-2)
