import logging
import numpy as np
import pytest
from nmr_hx import HxArray, DimensionError, InvalidArgument, ReconstructionResult
from nmr_hx.core import entropy, nus


SIZE = 64
PEAKS = (10, 37)


@pytest.fixture
def rng():
    return np.random.default_rng(2024)


@pytest.fixture
def schedule(rng):
    return np.sort(rng.choice(SIZE, SIZE // 2, replace=False))


def _two_spike_fid(schedule) -> HxArray:
    spectrum = np.zeros(SIZE, dtype=complex)
    spectrum[PEAKS[0]] = 1.0
    spectrum[PEAKS[1]] = 0.8 * np.exp(0.3j)

    fid = SIZE * np.fft.ifft(spectrum)
    sampled = np.zeros(SIZE, dtype=complex)
    sampled[schedule] = fid[schedule]
    return HxArray.from_complex(sampled)


RECONSTRUCTIONS = [
    (nus.ist, {}),
    (nus.irls, {}),
] + [(nus.ffm, {"entropy_name": name}) for name in entropy.ENTROPY_NAMES]


@pytest.mark.parametrize("method, kwargs", RECONSTRUCTIONS)
def test_two_spike_recovery(method, kwargs, schedule):
    a = _two_spike_fid(schedule)
    measured = a.view()[schedule].copy()

    result = method(a, 0, schedule, iterations=50, **kwargs)
    assert isinstance(result, ReconstructionResult)
    assert 1 <= result.iterations <= 50
    assert result.slices == 1

    # measured points are never altered
    assert np.array_equal(a.view()[schedule], measured)

    spectrum = np.abs(np.fft.fft(a.to_complex()))
    found = np.argsort(spectrum)[-2:]
    for peak in PEAKS:
        assert np.min(np.abs(found - peak)) <= 1


@pytest.mark.parametrize("method, kwargs", RECONSTRUCTIONS)
def test_full_schedule_is_identity(method, kwargs, rng):
    a = HxArray(1, (4, 16), rng.standard_normal(4 * 16 * 2))
    before = a.x.copy()

    result = method(a, 1, np.arange(16), iterations=10, **kwargs)
    assert np.array_equal(a.x, before)
    assert result.converged
    assert result.iterations == 1
    assert result.slices == 4


def test_multiple_nus_axes(rng):
    a = HxArray(3, (3, 8, 8), rng.standard_normal(3 * 8 * 8 * 8))
    before = a.x.copy()

    full = np.argwhere(np.ones((8, 8), dtype=bool))
    result = nus.ist(a, [1, 2], full, iterations=5)
    assert result.converged
    assert np.array_equal(a.x, before)

    partial = full[::2]
    result = nus.ist(a, [1, 2], partial, iterations=5)
    assert result.slices == 3
    view = a.view()
    for row in partial:
        assert np.array_equal(view[:, row[0], row[1]], before.reshape(3, 8, 8, 8)[:, row[0], row[1]])


def test_budget_exhaustion_is_reported(schedule, caplog):
    a = _two_spike_fid(schedule)
    with caplog.at_level(logging.WARNING):
        result = nus.ist(a, 0, schedule, iterations=2)

    assert not result.converged
    assert result.iterations == 2
    assert result.delta > 0.0
    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_schedule_validation():
    sched = nus.check_schedule((8,), [0, 3, 5])
    assert sched.shape == (3, 1)
    assert sched.dtype == np.int64

    with pytest.raises(InvalidArgument):
        nus.check_schedule((8,), [0, 8])
    with pytest.raises(InvalidArgument):
        nus.check_schedule((8,), [-1, 2])
    with pytest.raises(InvalidArgument):
        nus.check_schedule((8,), [1, 1, 2])
    with pytest.raises(InvalidArgument):
        nus.check_schedule((4,), np.arange(5))
    with pytest.raises(InvalidArgument):
        nus.check_schedule((8,), [0.5, 2.0])
    with pytest.raises(InvalidArgument):
        nus.check_schedule((8,), [])
    with pytest.raises(InvalidArgument):
        nus.check_schedule((8, 8), [0, 1])
    with pytest.raises(InvalidArgument):
        nus.check_schedule((8, 8), [[0, 1], [1, 0], [0, 1]])


def test_invalid_arguments_leave_array_unchanged(schedule):
    a = _two_spike_fid(schedule)
    before = a.x.copy()

    with pytest.raises(DimensionError):
        nus.ist(a, 1, schedule, thresh=2.0)
    with pytest.raises(DimensionError):
        nus.ist(a, 0, schedule, bases=[1])
    with pytest.raises(InvalidArgument):
        nus.ist(a, 0, schedule, thresh=1.5)
    with pytest.raises(InvalidArgument):
        nus.ist(a, 0, schedule, iterations=0)
    with pytest.raises(InvalidArgument):
        nus.irls(a, 0, schedule, pa=0.5, pb=0.8)
    with pytest.raises(InvalidArgument):
        nus.ffm(a, 0, schedule, entropy_name="renyi")
    with pytest.raises(InvalidArgument):
        nus.ffm(a, 0, schedule, mu=0.0)
    with pytest.raises(InvalidArgument):
        nus.ist(a, 0, np.arange(SIZE + 1))
    with pytest.raises(InvalidArgument):
        nus.ist(a, [0, 0], schedule)

    assert np.array_equal(a.x, before)


def test_reweighting_norm_order():
    op = nus.Reweighting(1.0, 0.5)
    op.start(np.zeros((4, 2)), 11)
    assert op.norm_order(0) == 1.0
    assert np.isclose(op.norm_order(10), 0.5)
    assert np.isclose(op.norm_order(5), 0.75)


@pytest.mark.parametrize("name", entropy.ENTROPY_NAMES)
def test_entropy_step_shrinks_every_magnitude(name, rng):
    spectrum = rng.standard_normal((32, 2))
    spectrum[5] = [40.0, 0.0]
    out = nus.MaximumEntropy(name, 1.0)(spectrum, 0, 0.0)

    before = np.hypot(spectrum[:, 0], spectrum[:, 1])
    after = np.hypot(out[:, 0], out[:, 1])
    assert np.all(after <= before + 1e-12)
    assert np.argmax(after) == 5
    # noise-level points lose proportionally more than the peak
    assert after[5] / before[5] > np.median(after / before)


def test_entropy_is_logged_at_debug(schedule, caplog):
    a = _two_spike_fid(schedule)
    with caplog.at_level(logging.DEBUG, logger="nmr_hx.core.nus"):
        nus.ffm(a, 0, schedule, entropy_name="skilling", iterations=3)

    assert any("skilling entropy" in record.getMessage() for record in caplog.records)
