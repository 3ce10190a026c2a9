"""
Finite impulse response (FIR) filtering along one quadrature axis.

Frequencies are given as fractions of the spectral width, with 0.5 at the
carrier. A filter is a Blackman-windowed sinc low-pass centred on zero
frequency. It is moved to the band of interest by modulating the data,
applied as a causal convolution, and the data is demodulated again
afterwards.
"""
from __future__ import annotations
import logging
import numpy as np
from scipy import signal

from nmr_hx.core import fourier
from nmr_hx.core.window import window
from nmr_hx.errors import InvalidArgument
from nmr_hx.hxarray import HxArray


logger = logging.getLogger(__name__)


def fir_coefficients(order: int, ft: float, stop: bool = False) -> np.ndarray:
    """
    Windowed-sinc filter coefficients.

    Args:
        order (int): Filter order ``M``. The filter has ``M + 1`` coefficients.
        ft (float): Normalized transition frequency in ``[0, 0.5]``.
        stop (bool): Build the complementary band-stop filter. Needs an even order.

    Returns:
        np.ndarray: Real coefficients ``b[0..M]``.
    """
    if order < 1:
        raise InvalidArgument(f"invalid filter order {order}")
    if stop and order % 2:
        raise InvalidArgument("band-stop filter must have even order")
    if ft < 0.0 or ft > 0.5:
        raise InvalidArgument(f"transition frequency {ft:.4f} out of bounds [0,0.5]")

    x = np.arange(order + 1) - order // 2
    b = 2.0 * ft * np.sinc(2.0 * ft * x)
    if stop:
        b = -b
        b[x == 0] = 1.0 - 2.0 * ft

    return b * window("black", order + 1).view()[:, 0]


def fir(array: HxArray, axis: int, b) -> HxArray:
    """
    Causal convolution of every vector along ``axis`` with the coefficients ``b``.

    Each coefficient plane is filtered on its own, so
    ``y[i] = sum_m b[m] x[i - m]`` with points before the start taken as zero.
    """
    array.layout.check_axis(axis)
    b = np.asarray(b, dtype=np.float64)
    if b.ndim != 1 or b.size >= array.sz[axis]:
        raise InvalidArgument(
            f"invalid fir filter of {b.size} coefficients for axis {axis} of size {array.sz[axis]}"
        )

    view = array.view()
    view[...] = signal.lfilter(b, [1.0], view, axis=axis)
    return array


def band(lowpass: float | None, highpass: float | None) -> tuple[float, float, bool]:
    """
    Centre, half-width and kind of the filter implied by its transitions.

    ``lowpass`` alone keeps ``[0, lowpass]``, ``highpass`` alone keeps
    ``[highpass, 1]``. With both, ``lowpass > highpass`` keeps the band between
    them and ``lowpass < highpass`` removes it.

    Returns:
        tuple: ``(f0, ft, stop)``, with ``f0`` relative to the carrier.
    """
    for name, value in (("low-pass", lowpass), ("high-pass", highpass)):
        if value is not None and (value < 0.0 or value > 1.0):
            raise InvalidArgument(f"{name} frequency {value:.3f} out of bounds [0,1]")

    stop = False
    if lowpass is not None and highpass is not None:
        if lowpass == highpass:
            raise InvalidArgument("unsupported filter: zero bandwidth")
        stop = lowpass < highpass
    elif lowpass is not None:
        highpass = 0.0
    elif highpass is not None:
        lowpass = 1.0
    else:
        raise InvalidArgument("filter parameters not specified")

    f0 = (lowpass + highpass) / 2.0 - 0.5
    ft = abs(highpass - lowpass) / 2.0
    return f0, ft, stop


def bandpass(
    array: HxArray,
    axis: int,
    basis: int,
    order: int,
    lowpass: float | None = None,
    highpass: float | None = None,
) -> HxArray:
    """
    Filter one quadrature axis in place.

    Args:
        array (HxArray): Target array, time domain along ``axis``.
        axis (int): Topological axis to filter.
        basis (int): Algebraic basis holding the quadrature partner of ``axis``.
        order (int): Even filter order, smaller than the axis size.
        lowpass (float, optional): Low-pass transition as a fraction of the spectral width.
        highpass (float, optional): High-pass transition as a fraction of the spectral width.

    Returns:
        HxArray: The filtered array.
    """
    array.layout.check_axis(axis)
    array.layout.check_basis(basis)
    if order < 2 or order % 2:
        raise InvalidArgument("filter order must be even")
    if order + 1 >= array.sz[axis]:
        raise InvalidArgument(f"filter order {order} too large for {array.sz[axis]} points")

    f0, ft, stop = band(lowpass, highpass)
    b = fir_coefficients(order, ft, stop)

    size = array.sz[axis]
    fourier.phase(array, axis, basis, ph1=-360.0 * f0 * size)
    fir(array, axis, b)
    # The causal filter delays the data by half its order.
    array.shift(axis, -(order // 2))
    fourier.phase(array, axis, basis, ph1=360.0 * f0 * size)

    logger.debug(
        "%s filter of order %d on axis %d: f0=%.4f ft=%.4f",
        "band-stop" if stop else "band-pass", order, axis, f0, ft,
    )
    return array
