"""
Fourier transforms of hypercomplex arrays.

Along a quadrature axis the coefficients ``c`` and ``c | (1 << basis)`` of each
scalar are the real and imaginary parts of one complex number in the plane of
``u_basis``. Every such pair is transformed with :mod:`scipy.fft`, which
handles arbitrary lengths, and folded back into the component layout.

Forward kernel is ``exp(-2 pi i jk / N)``, the inverse is scaled by ``1/N``
and no shift is applied.
"""
from __future__ import annotations
import logging
import numpy as np
import scipy.fft as sp_fft
from scipy.signal import hilbert

from nmr_hx.core import algebra
from nmr_hx.errors import AllocationError
from nmr_hx.hxarray import HxArray


logger = logging.getLogger(__name__)


def _pairs(n: int, basis: int) -> tuple[list[int], list[int]]:
    """Coefficient indices without / with the ``u_basis`` bit, in matching order."""
    bit = 1 << basis
    low = [c for c in range(n) if not c & bit]
    return low, [c | bit for c in low]


def fft(array: HxArray, axis: int, basis: int, inverse: bool = False) -> HxArray:
    """
    Transform one topological axis in place.

    Args:
        array (HxArray): Target array.
        axis (int): Topological axis to transform.
        basis (int): Algebraic basis holding the quadrature partner of ``axis``.
        inverse (bool): Inverse transform (scaled by ``1/N``) if True.

    Returns:
        HxArray: The same array, transformed.
    """
    array.layout.check_axis(axis)
    array.layout.check_basis(basis)

    view = array.view()
    low, high = _pairs(array.n, basis)

    try:
        z = view[..., low] + 1j * view[..., high]
        z = sp_fft.ifft(z, axis=axis) if inverse else sp_fft.fft(z, axis=axis)
    except MemoryError as err:
        raise AllocationError(f"failed to allocate fft scratch for axis {axis}") from err

    view[..., low] = z.real
    view[..., high] = z.imag

    logger.debug(
        "%s fft on axis %d (basis %d, %d points)",
        "inverse" if inverse else "forward", axis, basis, array.sz[axis],
    )
    return array


def ifft(array: HxArray, axis: int, basis: int) -> HxArray:
    return fft(array, axis, basis, inverse=True)


def fft_all(array: HxArray, pairs, inverse: bool = False) -> HxArray:
    """Transform several ``(axis, basis)`` pairs in sequence."""
    pairs = [(int(axis), int(basis)) for axis, basis in pairs]
    for axis, basis in pairs:
        array.layout.check_axis(axis)
        array.layout.check_basis(basis)

    for axis, basis in pairs:
        fft(array, axis, basis, inverse=inverse)
    return array


def _expand_half_spectrum(half: np.ndarray, size: int) -> np.ndarray:
    """Full spectrum of a real signal from its ``rfft`` output along the last axis."""
    mirror = np.conj(half[..., 1:size - size // 2][..., ::-1])
    return np.concatenate([half, mirror], axis=-1)


def fft_real(array: HxArray, axis: int) -> int:
    """
    Forward transform of a real (non-quadrature) axis.

    The algebra is promoted by one new basis, ``d -> d + 1``, which receives
    the imaginary part of the spectrum. Each existing coefficient plane is
    transformed with ``rfft`` and expanded to full length with conjugate
    symmetry.

    Returns:
        int: Index of the new basis.
    """
    array.layout.check_axis(axis)

    size = array.sz[axis]
    n_old = array.n
    try:
        planes = np.moveaxis(array.view()[..., :n_old], axis, -1)
        spectrum = _expand_half_spectrum(sp_fft.rfft(planes, axis=-1), size)
        spectrum = np.moveaxis(spectrum, -1, axis)
    except MemoryError as err:
        raise AllocationError(f"failed to allocate fft scratch for axis {axis}") from err

    basis = array.d
    array.resize(array.d + 1, array.sz)

    view = array.view()
    view[..., :n_old] = spectrum.real
    view[..., n_old:] = spectrum.imag

    logger.debug("real fft on axis %d promoted to basis %d", axis, basis)
    return basis


def ht(array: HxArray, axis: int, basis: int) -> HxArray:
    """
    Hilbert transform: rebuild the ``u_basis`` partner of every coefficient
    from its real counterpart along ``axis``.
    """
    array.layout.check_axis(axis)
    array.layout.check_basis(basis)

    view = array.view()
    low, high = _pairs(array.n, basis)
    analytic = np.asarray(hilbert(view[..., low], axis=axis))

    view[..., high] = analytic.imag
    return array


def phase(
    array: HxArray,
    axis: int,
    basis: int,
    ph0: float = 0.0,
    ph1: float = 0.0,
    pivot: float = 0.0,
    inverse: bool = False,
) -> HxArray:
    """
    Zero- and first-order phase correction along one axis.

    Point ``i`` is multiplied by ``cos(phi_i) + u_basis sin(phi_i)`` with
    ``phi_i = ph0 + ph1 * (i - pivot) / N`` in degrees.
    """
    array.layout.check_axis(axis)
    array.layout.check_basis(basis)

    size = array.sz[axis]
    phi = np.deg2rad(ph0 + ph1 * (np.arange(size) - pivot) / size)
    if inverse:
        phi = -phi

    shape = [1] * array.k + [array.n]
    shape[axis] = size
    phasors = algebra.phasor(array.d, basis, phi).reshape(shape)

    view = array.view()
    view[...] = algebra.mul(view, phasors)
    return array
