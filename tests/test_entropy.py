import numpy as np
import pytest
from nmr_hx import InvalidArgument
from nmr_hx.core import entropy


@pytest.mark.parametrize("name", entropy.ENTROPY_NAMES)
def test_derivative_matches_value(name):
    r = np.array([0.5, 1.0, 2.0, 5.0])
    h = 1e-6
    numeric = (entropy.value(name, r + h) - entropy.value(name, r - h)) / (2 * h)
    assert np.allclose(entropy.derivative(name, r), numeric, rtol=1e-5)


def test_unknown_entropy():
    with pytest.raises(InvalidArgument):
        entropy.value("renyi", np.ones(3))
    with pytest.raises(InvalidArgument):
        entropy.check_name("")


def test_total():
    x = np.array([[3.0, 4.0], [0.0, 0.0]])
    assert np.isclose(entropy.total("norm", x), 5.0)
    assert np.isclose(entropy.total("skilling", x), 5.0 * np.log(5.0) - 5.0)


@pytest.mark.parametrize("name", entropy.ENTROPY_NAMES)
def test_shrinkage_is_nonnegative_and_increasing(name):
    r = np.array([0.0, 1e-6, 0.1, 1.0, 10.0])
    s = entropy.shrinkage(name, r)
    assert np.all(np.isfinite(s))
    assert np.all(s >= 0.0)
    assert np.all(np.diff(s) >= 0.0)


def test_shrinkage_of_log_functionals():
    r = np.array([0.0, 0.5, 4.0])
    assert np.allclose(entropy.shrinkage("shannon", r), np.log1p(r))
    assert np.allclose(entropy.shrinkage("skilling", r), np.log1p(r))
    assert np.allclose(entropy.shrinkage("hoch", r), np.arcsinh(r / 2.0))


def test_proximal_norm_is_soft_threshold():
    r = entropy.proximal("norm", np.array([0.5, 3.0]), 1.0)
    assert np.allclose(r, [0.0, 2.0], atol=1e-9)


@pytest.mark.parametrize("name", ["hoch", "skilling", "shannon"])
def test_proximal_solves_equation(name):
    u = np.array([2.0, 5.0, 20.0])
    r = entropy.proximal(name, u, 0.5)
    assert np.all(r > 0.0)
    assert np.allclose(r + 0.5 * entropy.shrinkage(name, r), u, atol=1e-8)


@pytest.mark.parametrize("name", entropy.ENTROPY_NAMES)
def test_proximal_never_inflates(name):
    # noise-level magnitudes must shrink, not grow toward the default level
    u = np.array([0.0, 1e-3, 0.1, 0.5, 1.0, 3.0, 50.0])
    r = entropy.proximal(name, u, 1.0)
    assert np.all(r >= 0.0)
    assert np.all(r <= u)
    assert r[0] == 0.0
    assert np.all(np.diff(r) >= 0.0)
    assert r[2] < 0.1
