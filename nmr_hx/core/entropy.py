"""
Entropy functionals of hypercomplex scalars.

Every functional depends only on the coefficient norm ``r`` of a scalar.
``value`` gives the negated entropy ``S(r)`` and ``derivative`` its
derivative ``S'(r)``.

    norm      S = r                                  S' = 1
    shannon   S = r log r                            S' = log r + 1
    skilling  S = r log r - r                        S' = log r
    hoch      S = r log(r/2 + sqrt(1 + r^2/4))
                  - sqrt(4 + r^2)                    S' = log(r/2 + sqrt(1 + r^2/4))

The reconstruction step uses ``shrinkage``, a penalty derivative that is
nonnegative and nondecreasing on ``r >= 0``. The log-based functionals
(shannon, skilling) are evaluated one unit away from zero and referenced to
their value at 1, which gives ``log(1 + r)`` for both.
"""
from __future__ import annotations
import numpy as np

from nmr_hx.core import algebra
from nmr_hx.errors import InvalidArgument


ENTROPY_NAMES = ("norm", "shannon", "skilling", "hoch")


def check_name(name: str) -> str:
    if name not in ENTROPY_NAMES:
        raise InvalidArgument(f"undefined entropy functional '{name}'")
    return name


def value(name: str, r: np.ndarray) -> np.ndarray:
    r = np.asarray(r, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        rlogr = np.where(r > 0.0, r * np.log(r), 0.0)

    match check_name(name):
        case "norm":
            return r.copy()
        case "shannon":
            return rlogr
        case "skilling":
            return rlogr - r
        case "hoch":
            return r * np.log(r / 2.0 + np.sqrt(1.0 + r * r / 4.0)) - np.sqrt(4.0 + r * r)


def derivative(name: str, r: np.ndarray) -> np.ndarray:
    r = np.asarray(r, dtype=np.float64)
    match check_name(name):
        case "norm":
            return np.ones_like(r)
        case "shannon":
            return np.log(r) + 1.0
        case "skilling":
            return np.log(r)
        case "hoch":
            return np.log(r / 2.0 + np.sqrt(1.0 + r * r / 4.0))


def shrinkage(name: str, r: np.ndarray) -> np.ndarray:
    """Penalty derivative used by :func:`proximal`, finite and ``>= 0`` at ``r = 0``."""
    r = np.asarray(r, dtype=np.float64)
    match check_name(name):
        case "norm" | "hoch":
            return derivative(name, r)
        case "shannon" | "skilling":
            return derivative(name, 1.0 + r) - derivative(name, np.ones_like(r))


def total(name: str, x: np.ndarray) -> float:
    """Summed entropy of every scalar in ``x`` (last axis holds coefficients)."""
    return float(np.sum(value(name, algebra.norm(x))))


def proximal(name: str, u: np.ndarray, mu: float, steps: int = 60) -> np.ndarray:
    """
    Solve ``r + mu * shrinkage(r) = u`` for every magnitude in ``u`` by bisection.

    The left side increases with ``r`` and is at least ``r``, so the root lies
    in ``[0, u]`` and the result never exceeds its input. Points where the
    left side already reaches ``u`` at ``r = 0`` map to 0.
    """
    u = np.asarray(u, dtype=np.float64)
    lo = np.zeros_like(u)
    hi = u.copy()

    def residual(r):
        return r + mu * shrinkage(name, r) - u

    dead = residual(lo) >= 0.0
    for _ in range(steps):
        mid = 0.5 * (lo + hi)
        above = residual(mid) > 0.0
        hi = np.where(above, mid, hi)
        lo = np.where(above, lo, mid)

    r = 0.5 * (lo + hi)
    r[dead] = 0.0
    return r
