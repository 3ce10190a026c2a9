"""
Reconstruction of non-uniformly sampled (NUS) dimensions.

All algorithms share one driver. For every slice over the fully sampled
axes it repeats:

    1. forward transform over the NUS axes,
    2. a nonlinearity that suppresses noise-like spectral content,
    3. inverse transform,
    4. re-imposition of the measured samples,

until the iteration budget is spent or the relative change of the slice
drops below ``tol``. Running out of iterations is reported in the returned
:class:`ReconstructionResult`, never raised.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
import numpy as np

from nmr_hx.config import DEFAULTS
from nmr_hx.core import algebra, blas, entropy
from nmr_hx.core.fourier import fft_all
from nmr_hx.core.index import Layout, scheduled
from nmr_hx.errors import InvalidArgument
from nmr_hx.hxarray import HxArray


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconstructionResult:
    """Outcome of a reconstruction, worst case over all slices."""

    iterations: int
    converged: bool
    delta: float
    slices: int = 1


def check_schedule(sizes, schedule) -> np.ndarray:
    """
    Validate a sampling schedule against the NUS grid ``sizes``.

    Args:
        sizes (sequence[int]): Sizes of the NUS axes.
        schedule (array_like): ``(nsched,)`` for a single axis or ``(nsched, m)``.

    Returns:
        np.ndarray: Integer schedule of shape ``(nsched, m)``.
    """
    sizes = tuple(int(size) for size in sizes)
    m = len(sizes)

    sched = np.asarray(schedule)
    if sched.size and not np.issubdtype(sched.dtype, np.integer):
        if not np.all(np.equal(np.mod(sched, 1), 0)):
            raise InvalidArgument("schedule holds non-integer indices")
    sched = sched.astype(np.int64)

    if sched.ndim == 1 and m == 1:
        sched = sched[:, np.newaxis]
    if sched.ndim != 2 or sched.shape[1] != m:
        raise InvalidArgument(f"schedule of shape {sched.shape} does not match {m} nus dimensions")

    nsched = sched.shape[0]
    grid = Layout(0, sizes)
    if nsched < 1:
        raise InvalidArgument("empty schedule")
    if nsched > grid.count:
        raise InvalidArgument(f"schedule length {nsched} exceeds sampled grid of {grid.count} points")

    if np.any(sched < 0) or np.any(sched >= np.asarray(sizes)):
        raise InvalidArgument(f"schedule index out of bounds for nus sizes {sizes}")

    if len(set(scheduled(sizes, sched))) != nsched:
        raise InvalidArgument("schedule contains duplicate indices")

    return sched


def _check_axes(array: HxArray, axes, bases) -> tuple[list[int], list[int]]:
    axes = [int(axis) for axis in np.atleast_1d(axes)]
    for axis in axes:
        array.layout.check_axis(axis)
    if not axes:
        raise InvalidArgument("no nus dimensions given")
    if len(set(axes)) != len(axes):
        raise InvalidArgument(f"repeated nus dimension in {axes}")

    bases = list(axes) if bases is None else [int(b) for b in np.atleast_1d(bases)]
    if len(bases) != len(axes):
        raise InvalidArgument(f"{len(bases)} bases given for {len(axes)} nus dimensions")
    for basis in bases:
        array.layout.check_basis(basis)

    return axes, bases


class Nonlinearity:
    """
    Spectral operator applied once per iteration.

    ``start`` sees the spectrum of the zero-filled data of each slice before the
    first iteration. ``__call__`` receives the current spectrum (last axis holds
    coefficients), the iteration number and the sum of squared residuals at
    the sampled points from the previous iteration.
    """

    def start(self, spectrum: np.ndarray, iterations: int) -> None:
        self.iterations = iterations

    def __call__(self, spectrum: np.ndarray, iteration: int, residual: float) -> np.ndarray:
        raise NotImplementedError


class SoftThreshold(Nonlinearity):
    def __init__(self, thresh: float):
        self.thresh = thresh

    def start(self, spectrum, iterations):
        super().start(spectrum, iterations)
        self.peak = float(np.max(algebra.norm(spectrum), initial=0.0))

    def __call__(self, spectrum, iteration, residual):
        lam = self.peak * self.thresh ** (iteration + 1)
        r = algebra.norm(spectrum)
        with np.errstate(divide="ignore", invalid="ignore"):
            scale = np.where(r > lam, (r - lam) / r, 0.0)
        return spectrum * scale[..., np.newaxis]


class Reweighting(Nonlinearity):
    EPSILON = 1.0e-4
    LAMBDA_MIN = 1.0e-3
    LAMBDA_MAX = 1.0e9

    def __init__(self, pa: float, pb: float):
        self.pa = pa
        self.pb = pb

    def norm_order(self, iteration: int) -> float:
        if self.iterations == 1:
            return self.pa
        return self.pa + (self.pb - self.pa) * iteration / (self.iterations - 1)

    def __call__(self, spectrum, iteration, residual):
        r = algebra.norm(spectrum)
        scale = float(np.max(r, initial=0.0))
        if scale == 0.0:
            return spectrum

        p = self.norm_order(iteration)
        rn = r / scale
        w = 1.0 / (np.power(rn, 2.0 - p) + self.EPSILON)

        rx = residual / scale**2
        wx = float(np.sum(np.square(w * rn)))
        lam = float(np.clip(rx / wx, self.LAMBDA_MIN, self.LAMBDA_MAX))

        logger.debug("irls iteration %d: p=%.3f lambda=%.3e", iteration, p, lam)
        return spectrum / (1.0 + lam * w)[..., np.newaxis]


class MaximumEntropy(Nonlinearity):
    """
    Proximal maximum-entropy step.

    Magnitudes are expressed in units of the noise level ``def`` (the median
    nonzero magnitude) and replaced by the solution of
    ``r + mu * shrinkage(r) = |X| / def`` for the chosen functional. The step
    never increases a magnitude.
    """

    def __init__(self, name: str, mu: float):
        self.name = entropy.check_name(name)
        self.mu = mu

    def __call__(self, spectrum, iteration, residual):
        r = algebra.norm(spectrum)
        nz = r > 0.0
        if not np.any(nz):
            return spectrum

        default = float(np.median(r[nz]))
        target = entropy.proximal(self.name, r / default, self.mu) * default

        scale = np.zeros_like(r)
        scale[nz] = target[nz] / r[nz]
        out = spectrum * scale[..., np.newaxis]

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "ffm iteration %d: %s entropy %.6e -> %.6e",
                iteration, self.name,
                entropy.total(self.name, spectrum / default),
                entropy.total(self.name, out / default),
            )
        return out


def _reconstruct_slice(
    x: HxArray,
    mask: np.ndarray,
    pairs: list[tuple[int, int]],
    nonlinearity: Nonlinearity,
    iterations: int,
    tol: float,
) -> tuple[HxArray, int, bool, float]:
    measured = x.view()[mask].copy()
    x.view()[~mask] = 0.0

    nonlinearity.start(fft_all(x.copy(), pairs).view(), iterations)

    residual = 0.0
    delta = np.inf
    for iteration in range(iterations):
        X = fft_all(x.copy(), pairs)
        X.view()[...] = nonlinearity(X.view(), iteration, residual)
        y = fft_all(X, pairs, inverse=True)

        residual = float(np.sum(np.square(y.view()[mask] - measured)))
        y.view()[mask] = measured

        change = y.copy()
        blas.axpy(-1.0, x, change)
        reference = blas.nrm2(x)
        delta = blas.nrm2(change) / reference if reference > 0.0 else blas.nrm2(change)

        x = y
        if delta < tol:
            return x, iteration + 1, True, delta

    return x, iterations, False, delta


def reconstruct(
    array: HxArray,
    axes,
    schedule,
    nonlinearity: Nonlinearity,
    iterations: int,
    bases=None,
    tol: float = DEFAULTS.nus.tol,
) -> ReconstructionResult:
    """
    Fill in the unsampled points of the NUS axes of ``array`` in place.

    Args:
        array (HxArray): Full-size array with unsampled points zero-filled.
        axes (int | sequence[int]): Topological axes that were undersampled.
        schedule (array_like): Sampled indices, ``(nsched,)`` or ``(nsched, len(axes))``.
        nonlinearity (Nonlinearity): Spectral operator of the algorithm.
        iterations (int): Iteration budget per slice, at least 1.
        bases (sequence[int], optional): Algebraic basis of each NUS axis.
            Defaults to the axis indices themselves.
        tol (float): Relative change below which a slice has converged.

    Returns:
        ReconstructionResult: Iterations used, convergence flag and final change.

    NOTE:
        Everything is validated before work starts and the result is computed
        on a copy, so the array is untouched when an error is raised.
    """
    axes, bases = _check_axes(array, axes, bases)
    if int(iterations) < 1:
        raise InvalidArgument(f"invalid iteration count {iterations}")
    iterations = int(iterations)

    nus_sizes = tuple(array.sz[axis] for axis in axes)
    sched = check_schedule(nus_sizes, schedule)

    mask = np.zeros(nus_sizes, dtype=bool)
    mask[tuple(sched.T)] = True

    m = len(axes)
    pairs = [(j, basis) for j, basis in enumerate(bases)]

    work = array.copy()
    data = np.moveaxis(work.view(), axes, list(range(array.k - m, array.k)))
    others = data.shape[:array.k - m]

    used, converged, worst, slices = 0, True, 0.0, 0
    for idx in np.ndindex(*others):
        block = data[idx]
        x = HxArray(array.d, nus_sizes, block)
        x, count, ok, delta = _reconstruct_slice(x, mask, pairs, nonlinearity, iterations, tol)
        block[...] = x.view()

        used = max(used, count)
        converged = converged and ok
        worst = max(worst, float(delta))
        slices += 1

    np.copyto(array.x, work.x)

    result = ReconstructionResult(used, converged, worst, slices)
    if converged:
        logger.info(
            "%s converged on %d slices within %d iterations (delta %.3e)",
            type(nonlinearity).__name__, slices, used, worst,
        )
    else:
        logger.warning(
            "%s exhausted %d iterations without converging (delta %.3e > tol %.1e)",
            type(nonlinearity).__name__, iterations, worst, tol,
        )
    return result


def ist(
    array: HxArray,
    axes,
    schedule,
    *,
    thresh: float = DEFAULTS.nus.ist_thresh,
    iterations: int = DEFAULTS.nus.ist_iterations,
    bases=None,
    tol: float = DEFAULTS.nus.tol,
) -> ReconstructionResult:
    """
    Iterative soft thresholding.

    Iteration ``i`` shrinks every spectral magnitude by
    ``max|X0| * thresh**(i + 1)``, where ``X0`` is the spectrum of the
    zero-filled data.
    """
    _check_axes(array, axes, bases)
    if not 0.0 < thresh < 1.0:
        raise InvalidArgument(f"threshold {thresh} out of bounds (0,1)")
    return reconstruct(array, axes, schedule, SoftThreshold(thresh), iterations, bases, tol)


def irls(
    array: HxArray,
    axes,
    schedule,
    *,
    pa: float = DEFAULTS.nus.irls_pa,
    pb: float = DEFAULTS.nus.irls_pb,
    iterations: int = DEFAULTS.nus.irls_iterations,
    bases=None,
    tol: float = DEFAULTS.nus.tol,
) -> ReconstructionResult:
    """
    Iteratively reweighted least squares.

    The norm order moves linearly from ``pa`` on the first iteration to
    ``pb`` on the last. Requires ``0 <= pb <= pa <= 1``.
    """
    _check_axes(array, axes, bases)
    if not 0.0 <= pb <= pa <= 1.0:
        raise InvalidArgument(f"norm orders pa={pa}, pb={pb} violate 0 <= pb <= pa <= 1")
    return reconstruct(array, axes, schedule, Reweighting(pa, pb), iterations, bases, tol)


def ffm(
    array: HxArray,
    axes,
    schedule,
    *,
    entropy_name: str = DEFAULTS.nus.ffm_entropy,
    iterations: int = DEFAULTS.nus.ffm_iterations,
    mu: float = DEFAULTS.nus.ffm_mu,
    bases=None,
    tol: float = DEFAULTS.nus.tol,
) -> ReconstructionResult:
    """Maximum-entropy reconstruction with one of :data:`entropy.ENTROPY_NAMES`."""
    _check_axes(array, axes, bases)
    if mu <= 0.0:
        raise InvalidArgument(f"invalid entropy weight {mu}")
    return reconstruct(
        array, axes, schedule, MaximumEntropy(entropy_name, mu), iterations, bases, tol
    )
