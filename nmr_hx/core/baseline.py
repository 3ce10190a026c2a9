from __future__ import annotations
import logging
import numpy as np
from scipy.linalg import solveh_banded

from nmr_hx.config import DEFAULTS
from nmr_hx.core import algebra, blas
from nmr_hx.errors import InvalidArgument
from nmr_hx.hxarray import HxArray


logger = logging.getLogger(__name__)


def _weights(values: np.ndarray) -> np.ndarray:
    """Baseline weights of an ``(N, n)`` coefficient block."""
    N = values.shape[0]
    w = np.ones(N)
    if N < 3:
        return w

    # Squared magnitude of the first differences.
    diff = np.zeros_like(values)
    diff[1:] = values[1:] - values[:-1]
    y = np.square(algebra.norm(diff))

    W = N
    while True:
        Wprev = W
        mu = np.sum(w * y) / Wprev
        sigma = np.sqrt(np.sum(w * np.square(y - mu)) / (Wprev - 1)) if Wprev > 1 else 0.0
        th = mu + 2.0 * sigma

        w = np.where(y <= th, 1.0, 0.0)
        W = int(np.sum(w))
        if W == Wprev:
            break

    # Fill isolated gaps and drop isolated points, left to right.
    for i in range(1, N - 1):
        if w[i - 1] == 0.0 and w[i + 1] == 0.0:
            w[i] = 0.0
        if w[i - 1] == 1.0 and w[i + 1] == 1.0:
            w[i] = 1.0

    return w


def baseline_weights(vector: HxArray) -> np.ndarray:
    """
    Mark the points of a vector presumed to be pure baseline.

    The squared magnitudes of the first differences are thresholded at
    ``mean + 2 sigma`` over the currently accepted points until the accepted
    set stops changing. The resulting mask is then smoothed so that a point
    whose two neighbours agree takes their value.

    Args:
        vector (HxArray): Rank-1 array.

    Returns:
        np.ndarray: Weights of 0.0 (signal) or 1.0 (baseline), one per point.
    """
    if vector.k != 1:
        raise InvalidArgument(f"array of rank {vector.k} is not a vector")
    return _weights(vector.view())


def _smooth(values: np.ndarray, w: np.ndarray, smooth: float) -> np.ndarray:
    N = values.shape[0]
    if smooth == 0.0 or N == 1:
        return values.copy()

    if not np.any(w):
        w = np.ones(N)

    scale = smooth * np.sum(w)

    # Upper banded form of W + scale * D^T D.
    ab = np.zeros((2, N))
    ab[1] = w + 2.0 * scale
    ab[1, 0] = w[0] + scale
    ab[1, -1] = w[-1] + scale
    ab[0, 1:] = -scale

    return solveh_banded(ab, w[:, np.newaxis] * values)


def baseline(
    vector: HxArray,
    smooth: float = DEFAULTS.baseline.smooth,
    weights=None,
) -> HxArray:
    """
    Penalised least-squares (Whittaker) baseline of a rank-1 array.

    Solves ``(W + smooth * sum(w) * D^T D) z = W y`` where ``D`` is the first
    difference operator and ``W = diag(weights)``.

    Args:
        vector (HxArray): Rank-1 array ``y``.
        smooth (float): Non-negative smoothness. 0 returns ``y`` itself.
        weights (array_like, optional): Per-point weights. Estimated with
            :func:`baseline_weights` when omitted.

    Returns:
        HxArray: The baseline ``z``, same configuration as ``vector``.
    """
    if vector.k != 1:
        raise InvalidArgument(f"array of rank {vector.k} is not a vector")

    if smooth < 0.0:
        raise InvalidArgument(f"invalid smoothness {smooth}")

    if weights is None:
        w = _weights(vector.view())
    else:
        w = np.asarray(weights.view()[:, 0] if isinstance(weights, HxArray) else weights, dtype=np.float64)
        if w.shape != (vector.sz[0],):
            raise InvalidArgument(
                f"weight shape {w.shape} does not match vector size {vector.sz[0]}"
            )

    z = _smooth(vector.view(), w, smooth)
    return HxArray(vector.d, vector.sz, z)


def correct_baseline(
    array: HxArray,
    axis: int,
    smooth: float = DEFAULTS.baseline.smooth,
) -> HxArray:
    """
    Subtract an estimated baseline from every vector along ``axis``.

    Returns:
        HxArray: The removed baselines, same configuration as ``array``.
    """
    array.layout.check_axis(axis)
    if smooth < 0.0:
        raise InvalidArgument(f"invalid smoothness {smooth}")

    estimate = HxArray(array.d, array.sz)
    for where in array.iter_vectors(axis):
        vec = array.slice_vector(axis, where)
        z = baseline(vec, smooth)
        blas.axpy(-1.0, z, vec)

        array.store_vector(axis, where, vec)
        estimate.store_vector(axis, where, z)

    logger.debug(
        "baseline corrected along axis %d (norm %.3e removed)", axis, blas.nrm2(estimate)
    )
    return estimate
