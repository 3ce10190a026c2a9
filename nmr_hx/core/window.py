from __future__ import annotations
import logging
import numpy as np

from nmr_hx.config import DEFAULTS
from nmr_hx.errors import InvalidArgument
from nmr_hx.hxarray import HxArray


logger = logging.getLogger(__name__)

WINDOW_KINDS = ("sine", "exp", "gauss", "trap", "tri", "black")


def _check_fraction(name: str, value: float) -> None:
    if value < 0.0 or value > 1.0:
        raise InvalidArgument(f"{name} argument {value:.3f} out of bounds [0,1]")


def _fractions(length: int) -> np.ndarray:
    """Positions ``i / (length - 1)``, with a single point at 0."""
    if length == 1:
        return np.zeros(1)
    return np.arange(length) / (length - 1)


def _check_params(kind: str, start: float, end: float, order: float, center: float) -> None:
    """Bounds checks on the arguments each window kind reads."""
    match kind:
        case "sine":
            _check_fraction("start", start)
            _check_fraction("end", end)
            if order < 1.0:
                raise InvalidArgument(f"order argument {order:.3f} out of bounds [1,inf)")
        case "gauss":
            _check_fraction("center", center)
        case "trap":
            _check_fraction("start", start)
            _check_fraction("end", end)
            if start > end:
                raise InvalidArgument("start argument may not exceed end argument")
        case "tri":
            _check_fraction("center", center)
            _check_fraction("start", start)
            _check_fraction("end", end)


def _sine(fi: np.ndarray, start: float, end: float, order: float) -> np.ndarray:
    return np.power(np.sin(np.pi * (start + (end - start) * fi)), order)


def _exp(length: int, width: float, lb: float) -> np.ndarray:
    t = np.arange(length) / width
    return np.exp(-np.pi * t * lb)


def _gauss(length: int, width: float, invlb: float, lb: float, center: float) -> np.ndarray:
    t = np.arange(length) / width
    t0 = center * (length - 1) / width
    return np.exp(np.pi * t * invlb - np.square(0.6 * np.pi * lb * (t0 - t)))


def _trap(fi: np.ndarray, start: float, end: float) -> np.ndarray:
    wnd = np.ones_like(fi)
    if start > 0.0:
        rise = fi < start
        wnd[rise] = fi[rise] / start
    if end < 1.0:
        fall = fi > end
        wnd[fall] = (1.0 - fi[fall]) / (1.0 - end)
    return wnd


def _tri(fi: np.ndarray, center: float, start: float, end: float) -> np.ndarray:
    wnd = np.ones_like(fi)
    if center > 0.0:
        left = fi < center
        wnd[left] = start + (1.0 - start) * fi[left] / center
    if center < 1.0:
        right = fi > center
        wnd[right] = 1.0 + (end - 1.0) * (fi[right] - center) / (1.0 - center)
    return wnd


def _black(fi: np.ndarray) -> np.ndarray:
    return 0.42 - 0.5 * np.cos(2.0 * np.pi * fi) + 0.08 * np.cos(4.0 * np.pi * fi)


def window(
    kind: str,
    length: int,
    *,
    width: float = DEFAULTS.window.width,
    start: float = DEFAULTS.window.start,
    end: float = DEFAULTS.window.end,
    order: float = DEFAULTS.window.order,
    lb: float = DEFAULTS.window.lb,
    invlb: float = DEFAULTS.window.invlb,
    center: float = DEFAULTS.window.center,
) -> HxArray:
    """
    Build an apodization window as a real rank-1 array.

    Args:
        kind (str): One of ``sine``, ``exp``, ``gauss``, ``trap``, ``tri``, ``black``.
        length (int): Number of points along the target axis.
        width (float): Spectral width in Hz, converts point index to time for
            ``exp`` and ``gauss``. A width of 0 gives the identity window.
        start (float): Start fraction (sine, trap, tri).
        end (float): End fraction (sine, trap, tri).
        order (float): Sine exponent, at least 1.
        lb (float): Line broadening in Hz (exp, gauss).
        invlb (float): Inverse exponential broadening in Hz (gauss).
        center (float): Locus of the maximum as a fraction of the axis (gauss, tri).

    Returns:
        HxArray: Window of shape ``(length,)`` with ``d = 0``.
    """
    if kind not in WINDOW_KINDS:
        raise InvalidArgument(f"window type '{kind}' is unsupported")

    if length <= 0:
        raise InvalidArgument(f"invalid window length {length}")

    if width < 0.0:
        raise InvalidArgument(f"invalid spectral width {width}")

    _check_params(kind, start, end, order, center)
    if width == 0.0:
        return HxArray(0, (length,)).fill(1.0)

    fi = _fractions(length)
    match kind:
        case "sine":
            values = _sine(fi, start, end, order)
        case "exp":
            values = _exp(length, width, lb)
        case "gauss":
            values = _gauss(length, width, invlb, lb, center)
        case "trap":
            values = _trap(fi, start, end)
        case "tri":
            values = _tri(fi, center, start, end)
        case "black":
            values = _black(fi)

    logger.debug("built %s window of %d points", kind, length)
    return HxArray(0, (length,), values)


def apply_window(array: HxArray, axis: int, wnd: HxArray) -> HxArray:
    """
    Scale every scalar along ``axis`` by the matching window value.

    The window is broadcast over all other axes and all coefficients.
    """
    array.layout.check_axis(axis)
    if wnd.k != 1 or wnd.sz[0] != array.sz[axis]:
        raise InvalidArgument(
            f"window of size {wnd.sz} does not match axis {axis} of size {array.sz[axis]}"
        )

    shape = [1] * (array.k + 1)
    shape[axis] = array.sz[axis]
    values = wnd.view()[:, 0].reshape(shape)

    view = array.view()
    view *= values
    return array
