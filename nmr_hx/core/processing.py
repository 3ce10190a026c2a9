from __future__ import annotations
from time import perf_counter
import logging
import numpy as np

from nmr_hx.config import DEFAULTS
from nmr_hx.core import baseline as hx_baseline
from nmr_hx.core import filter as hx_filter
from nmr_hx.core import fourier as hx_fourier
from nmr_hx.core import nus as hx_nus
from nmr_hx.core import window as hx_window
from nmr_hx.datum import Datum
from nmr_hx.errors import InvalidArgument, trace


logger = logging.getLogger(__name__)


def _format_elapsed_time(elapsed: float) -> str:
    """Format elapsed time to a human readable string for the Datum processing history.

    Args:
        elapsed (float): Elapsed time in s

    Returns:
        str: Formatted elapsed time
    """
    minutes = int(elapsed // 60)
    seconds = int(elapsed % 60)
    milliseconds = int((elapsed % 1) * 1000)
    microseconds = int((elapsed % 1) * 1_000_000) % 1000

    if minutes > 0:
        return f"{minutes}m {seconds}s {milliseconds}ms {microseconds}µs"

    return f"{seconds}s {milliseconds}ms {microseconds}µs"


def _record(datum: Datum, entry: dict, start_time: float) -> None:
    elapsed = perf_counter() - start_time
    entry['time_elapsed_s'] = elapsed
    entry['time_elapsed_str'] = _format_elapsed_time(elapsed)
    datum.processing_history.append(entry)
    logger.info("%s done in %s", entry['Function'], entry['time_elapsed_str'])


def _commit(datum: Datum, result: Datum) -> None:
    """Copy a finished working datum back into ``datum``, keeping its array object."""
    datum.array.x = result.array.x
    datum.array.layout = result.array.layout
    datum.dims = result.dims
    datum.sched = result.sched


def window(
    datum: Datum,
    dim: int,
    *,
    kind: str = "sine",
    width: float | None = None,
    start: float = DEFAULTS.window.start,
    end: float = DEFAULTS.window.end,
    order: float = DEFAULTS.window.order,
    lb: float = DEFAULTS.window.lb,
    invlb: float = DEFAULTS.window.invlb,
    center: float = DEFAULTS.window.center,
    # Aliases
    type: str | None = None,
) -> Datum:
    """
    Apply an apodization window along one dimension.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int): Dimension index.
        kind (str): Window kind: sine, exp, gauss, trap, tri or black.
        width (float, optional): Spectral width in Hz (default: the dimension's width,
            or 1.0 when the dimension has none).
        start (float): Start fraction (sine, trap, tri).
        end (float): End fraction (sine, trap, tri).
        order (float): Sine exponent.
        lb (float): Line broadening in Hz (exp, gauss).
        invlb (float): Inverse exponential broadening in Hz (gauss).
        center (float): Maximum locus as a fraction of the dimension (gauss, tri).

    Aliases:
        type: Alias for kind.

    Returns:
        Datum: The windowed datum.
    """
    start_time = perf_counter()

    kind = type if type is not None else kind

    with trace(f"failed to apply {kind} window to dimension {dim}"):
        info = datum.check_dim(dim)
        if width is None:
            width = info.width if info.width > 0.0 else DEFAULTS.window.width

        wnd = hx_window.window(
            kind, datum.array.sz[info.k],
            width=width, start=start, end=end, order=order,
            lb=lb, invlb=invlb, center=center,
        )
        hx_window.apply_window(datum.array, info.k, wnd)

    _record(
        datum,
        {
            'Function': f"Apodization: {kind} window",
            'dim': dim,
            'width': width,
            'start': start,
            'end': end,
            'order': order,
            'lb': lb,
            'invlb': invlb,
            'center': center,
        },
        start_time,
    )
    return datum

# Short alias
WIN = window
WIN.__doc__ = window.__doc__  # Auto-generated
WIN.__name__ = "WIN"  # Auto-generated


def _alternate_sign(datum: Datum, axis: int) -> None:
    shape = [1] * (datum.array.k + 1)
    shape[axis] = datum.array.sz[axis]
    signs = np.ones(datum.array.sz[axis])
    signs[1::2] = -1.0
    view = datum.array.view()
    view *= signs.reshape(shape)


def fourier_transform(
    datum: Datum,
    dim: int,
    *,
    inverse: bool = False,
    alternate: bool = False,
    negate: bool = False,
    # Aliases
    inv: bool | None = None,
    alt: bool | None = None,
    neg: bool | None = None,
) -> Datum:
    """
    Fourier transform one dimension of the datum.

    A complex dimension is transformed in the plane of its algebraic basis. A real
    dimension is transformed with a real-input FFT and gains a new basis for the
    imaginary part of its spectrum.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int): Dimension index.
        inverse (bool): Inverse transform if True. Not available for real dimensions.
        alternate (bool): Multiply every other point by -1 (before a forward,
            after an inverse transform).
        negate (bool): Negate the imaginary basis of the dimension before transforming.

    Aliases:
        inv: Alias for inverse.
        alt: Alias for alternate.
        neg: Alias for negate.

    Returns:
        Datum: Fourier transformed datum.
    """
    start_time = perf_counter()

    inverse = inv if inv is not None else inverse
    alternate = alt if alt is not None else alternate
    negate = neg if neg is not None else negate

    with trace(f"failed to fourier transform dimension {dim}"):
        info = datum.check_dim(dim)
        if info.d is None and (inverse or negate):
            raise InvalidArgument(f"dimension {dim} is real")

        result = datum.copy()
        info = result.dims[dim]

        if negate:
            result.array.negate_basis(info.d)
        if alternate and not inverse:
            _alternate_sign(result, info.k)

        if info.d is None:
            info.d = hx_fourier.fft_real(result.array, info.k)
        else:
            hx_fourier.fft(result.array, info.k, info.d, inverse=inverse)

        if alternate and inverse:
            _alternate_sign(result, info.k)

        info.ft = not inverse

    _commit(datum, result)
    _record(
        datum,
        {
            'Function': 'Complex fourier transform',
            'dim': dim,
            'inverse': inverse,
            'alternate': alternate,
            'negate': negate,
        },
        start_time,
    )
    return datum

# Short alias
FT = fourier_transform
FT.__doc__ = fourier_transform.__doc__  # Auto-generated
FT.__name__ = "FT"  # Auto-generated


def hilbert_transform(datum: Datum, dim: int) -> Datum:
    """
    Rebuild the imaginary part of a complex dimension from its real part.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int): Dimension index.

    Returns:
        Datum: Hilbert transformed datum.
    """
    start_time = perf_counter()

    with trace(f"failed to hilbert transform dimension {dim}"):
        info = datum.check_dim(dim)
        if info.d is None:
            raise InvalidArgument(f"dimension {dim} is real")
        hx_fourier.ht(datum.array, info.k, info.d)

    _record(datum, {'Function': 'Hilbert transform', 'dim': dim}, start_time)
    return datum

# Short alias
HT = hilbert_transform
HT.__doc__ = hilbert_transform.__doc__  # Auto-generated
HT.__name__ = "HT"  # Auto-generated


def phase(
    datum: Datum,
    dim: int,
    *,
    ph0: float = 0.0,
    ph1: float = 0.0,
    pivot: float = 0.0,
    inverse: bool = False,
    # Aliases
    p0: float | None = None,
    p1: float | None = None,
    inv: bool | None = None,
) -> Datum:
    """
    Apply zero-order and first-order phase correction along one dimension.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int): Dimension index.
        ph0 (float): Zero-order phase in degrees.
        ph1 (float): First-order phase in degrees across the dimension.
        pivot (float): Point at which the first-order term vanishes.
        inverse (bool): Apply the negated correction, undoing a previous one.

    Aliases:
        p0: Alias for ph0.
        p1: Alias for ph1.
        inv: Alias for inverse.

    Returns:
        Datum: Phase corrected datum.
    """
    start_time = perf_counter()

    ph0 = p0 if p0 is not None else ph0
    ph1 = p1 if p1 is not None else ph1
    inverse = inv if inv is not None else inverse

    with trace(f"failed to phase dimension {dim}"):
        info = datum.check_dim(dim)
        if info.d is None:
            raise InvalidArgument(f"dimension {dim} is real")
        hx_fourier.phase(datum.array, info.k, info.d, ph0, ph1, pivot, inverse)

    _record(
        datum,
        {
            'Function': 'Phase Correction',
            'dim': dim,
            'ph0': ph0,
            'ph1': ph1,
            'pivot': pivot,
            'inverse': inverse,
        },
        start_time,
    )
    return datum

# NMRPipe alias
PS = phase
PS.__doc__ = phase.__doc__  # Auto-generated
PS.__name__ = "PS"  # Auto-generated


def baseline_correction(
    datum: Datum,
    *,
    smooth: float = DEFAULTS.baseline.smooth,
) -> Datum:
    """
    Remove a smooth baseline from every trace of the first dimension.

    Args:
        datum (Datum): Input datum, modified in place. Its first dimension must be
            in the frequency domain.
        smooth (float): Non-negative smoothness of the estimated baseline.

    Returns:
        Datum: Baseline corrected datum.
    """
    start_time = perf_counter()

    with trace("failed to apply baseline correction"):
        info = datum.check_dim(0)
        if not info.ft:
            raise InvalidArgument("first dimension is not frequency-domain")
        hx_baseline.correct_baseline(datum.array, info.k, smooth)

    _record(datum, {'Function': 'Baseline correction', 'smooth': smooth}, start_time)
    return datum

# Short alias
BASE = baseline_correction
BASE.__doc__ = baseline_correction.__doc__  # Auto-generated
BASE.__name__ = "BASE"  # Auto-generated


def _nus_axes(datum: Datum) -> tuple[list[int], list[int], list[int]]:
    nus_dims = datum.nus_dims()
    if not nus_dims:
        raise InvalidArgument("datum has no nonuniformly sampled dimensions")
    if datum.dims[0].nus:
        raise InvalidArgument("first dimension must be uniformly sampled")
    if datum.sched is None:
        raise InvalidArgument("datum contains no schedule array")
    if datum.sched.shape[1] != len(nus_dims):
        raise InvalidArgument(
            f"unexpected nus dimension count ({len(nus_dims)} != {datum.sched.shape[1]})"
        )

    for i in nus_dims:
        if not datum.dims[i].cx or datum.dims[i].d is None:
            raise InvalidArgument(f"nus dimension {i} is not complex")

    axes = [datum.dims[i].k for i in nus_dims]
    bases = [datum.dims[i].d for i in nus_dims]
    return nus_dims, axes, bases


def _reconstruct(datum: Datum, label: str, algorithm, params: dict, start_time: float) -> Datum:
    with trace(f"failed to perform {label} reconstruction"):
        nus_dims, axes, bases = _nus_axes(datum)
        result = algorithm(datum.array, axes, datum.sched, bases=bases, **params)

    for i in nus_dims:
        datum.dims[i].nus = False
        datum.dims[i].td = datum.dims[i].tdunif
    datum.sched = None

    _record(
        datum,
        {
            'Function': f"NUS reconstruction: {label}",
            **params,
            'iterations_used': result.iterations,
            'converged': result.converged,
            'delta': result.delta,
        },
        start_time,
    )
    return datum


def ist(
    datum: Datum,
    *,
    thresh: float = DEFAULTS.nus.ist_thresh,
    iterations: int = DEFAULTS.nus.ist_iterations,
    # Aliases
    iters: int | None = None,
) -> Datum:
    """
    Reconstruct the NUS dimensions by iterative soft thresholding.

    Args:
        datum (Datum): Input datum with a schedule and zero-filled NUS dimensions.
        thresh (float): Threshold decay per iteration, in (0, 1).
        iterations (int): Iteration budget.

    Aliases:
        iters: Alias for iterations.

    Returns:
        Datum: Datum with its NUS dimensions filled in and marked uniform.
    """
    start_time = perf_counter()
    iterations = iters if iters is not None else iterations
    return _reconstruct(
        datum, "IST", hx_nus.ist,
        {'thresh': thresh, 'iterations': iterations}, start_time,
    )

# Short alias
IST = ist
IST.__doc__ = ist.__doc__  # Auto-generated
IST.__name__ = "IST"  # Auto-generated


def irls(
    datum: Datum,
    *,
    pa: float = DEFAULTS.nus.irls_pa,
    pb: float = DEFAULTS.nus.irls_pb,
    iterations: int = DEFAULTS.nus.irls_iterations,
    # Aliases
    iters: int | None = None,
) -> Datum:
    """
    Reconstruct the NUS dimensions by iteratively reweighted least squares.

    Args:
        datum (Datum): Input datum with a schedule and zero-filled NUS dimensions.
        pa (float): Initial norm order.
        pb (float): Final norm order, ``0 <= pb <= pa <= 1``.
        iterations (int): Iteration budget.

    Aliases:
        iters: Alias for iterations.

    Returns:
        Datum: Datum with its NUS dimensions filled in and marked uniform.
    """
    start_time = perf_counter()
    iterations = iters if iters is not None else iterations
    return _reconstruct(
        datum, "IRLS", hx_nus.irls,
        {'pa': pa, 'pb': pb, 'iterations': iterations}, start_time,
    )

# Short alias
IRLS = irls
IRLS.__doc__ = irls.__doc__  # Auto-generated
IRLS.__name__ = "IRLS"  # Auto-generated


def _ffm_kernel(array, axes, schedule, *, bases, entropy, iterations, mu):
    return hx_nus.ffm(
        array, axes, schedule,
        entropy_name=entropy, iterations=iterations, mu=mu, bases=bases,
    )


def ffm(
    datum: Datum,
    *,
    entropy: str = DEFAULTS.nus.ffm_entropy,
    iterations: int = DEFAULTS.nus.ffm_iterations,
    mu: float = DEFAULTS.nus.ffm_mu,
    # Aliases
    iters: int | None = None,
) -> Datum:
    """
    Reconstruct the NUS dimensions by entropy regularisation.

    Args:
        datum (Datum): Input datum with a schedule and zero-filled NUS dimensions.
        entropy (str): Functional: norm, shannon, skilling or hoch.
        iterations (int): Iteration budget.
        mu (float): Weight of the entropy term.

    Aliases:
        iters: Alias for iterations.

    Returns:
        Datum: Datum with its NUS dimensions filled in and marked uniform.
    """
    start_time = perf_counter()
    iterations = iters if iters is not None else iterations
    return _reconstruct(
        datum, "FFM", _ffm_kernel,
        {'entropy': entropy, 'iterations': iterations, 'mu': mu}, start_time,
    )

# Short alias
FFM = ffm
FFM.__doc__ = ffm.__doc__  # Auto-generated
FFM.__name__ = "FFM"  # Auto-generated


def _next_pow2(n: int) -> int:
    return 1 << (n - 1).bit_length()


def _resize_datum(datum: Datum, sizes: list[int]) -> None:
    for i, size in enumerate(sizes):
        if size < 2:
            raise InvalidArgument(f"invalid size {size} along axis {i}")

    datum.array.resize(datum.array.d, sizes)
    for dim in datum.dims:
        dim.sz = sizes[dim.k]


def zero_fill(
    datum: Datum,
    dim: int | None = None,
    *,
    times: int = 0,
    # Aliases
    zf: int | None = None,
) -> Datum:
    """
    Zero fill one dimension (or all of them) to a power of two, doubled ``times`` times.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int, optional): Dimension index. All dimensions when omitted.
        times (int): Number of doublings after rounding up to a power of two.

    Aliases:
        zf: Alias for times.

    Returns:
        Datum: Zero filled datum.
    """
    start_time = perf_counter()
    times = zf if zf is not None else times

    with trace("failed to zero fill datum"):
        if times < 0:
            raise InvalidArgument(f"invalid zero fill count {times}")

        sizes = list(datum.array.sz)
        targets = range(datum.nd) if dim is None else [dim]
        for i in targets:
            k = datum.check_dim(i).k
            sizes[k] = _next_pow2(sizes[k]) * 2**times

        _resize_datum(datum, sizes)

    _record(
        datum,
        {'Function': 'Zero filling', 'dim': dim, 'times': times, 'sizes': tuple(sizes)},
        start_time,
    )
    return datum

# NMRPipe alias
ZF = zero_fill
ZF.__doc__ = zero_fill.__doc__  # Auto-generated
ZF.__name__ = "ZF"  # Auto-generated


def resize(
    datum: Datum,
    dim: int | None = None,
    *,
    size: int | None = None,
    shape: list[int] | None = None,
) -> Datum:
    """
    Resize one dimension to ``size``, or the whole array to ``shape``.

    Existing points keep their indices; new points are zero.
    """
    start_time = perf_counter()

    with trace("failed to resize datum"):
        if dim is None:
            if shape is None:
                raise InvalidArgument("expected 'shape' argument not found")
            if len(shape) != datum.array.k:
                raise InvalidArgument(f"invalid shape length ({len(shape)} != {datum.array.k})")
            sizes = [int(s) for s in shape]
        else:
            if size is None:
                raise InvalidArgument("expected 'size' argument not found")
            sizes = list(datum.array.sz)
            sizes[datum.check_dim(dim).k] = int(size)

        _resize_datum(datum, sizes)

    _record(datum, {'Function': 'Resize', 'dim': dim, 'sizes': tuple(sizes)}, start_time)
    return datum


def complex_promote(datum: Datum, dim: int | None = None) -> Datum:
    """
    Give a real dimension (or every real dimension) its own algebraic basis.

    New bases are appended after the existing ones and start at zero.
    """
    start_time = perf_counter()

    with trace("failed to complex promote datum"):
        targets = range(datum.nd) if dim is None else [dim]
        promote = [i for i in targets if datum.check_dim(i).d is None]

        if promote:
            dnew = datum.array.d
            datum.array.resize(dnew + len(promote), datum.array.sz)
            for i in promote:
                datum.dims[i].cx = True
                datum.dims[i].d = dnew
                dnew += 1

    _record(datum, {'Function': 'Complex promotion', 'dim': dim, 'promoted': promote}, start_time)
    return datum


def realize(datum: Datum, dim: int | None = None) -> Datum:
    """
    Drop the imaginary basis of one dimension (or of every dimension).
    """
    start_time = perf_counter()

    with trace("failed to drop imaginaries from datum"):
        targets = range(datum.nd) if dim is None else [dim]
        drop = [i for i in targets if datum.check_dim(i).d is not None]

        # Highest basis first so lower indices stay valid.
        for i in sorted(drop, key=lambda j: datum.dims[j].d, reverse=True):
            basis = datum.dims[i].d
            datum.array.drop_basis(basis)
            for other in datum.dims:
                if other.d is not None and other.d > basis:
                    other.d -= 1
            datum.dims[i].d = None
            datum.dims[i].cx = False

    _record(datum, {'Function': 'Delete imaginaries', 'dim': dim, 'dropped': drop}, start_time)
    return datum

# NMRPipe alias
DI = realize
DI.__doc__ = realize.__doc__  # Auto-generated
DI.__name__ = "DI"  # Auto-generated


def _to_fraction(info, value: float | None, unit: str) -> float | None:
    """Convert a frequency in ``unit`` to a fraction of the spectral width (0.5 is the carrier)."""
    if value is None:
        return None

    match unit:
        case "fraction":
            return value
        case "hz" | "ppm":
            carrier = info.carrier if info.carrier != 0.0 else 1.0
            width = info.width if info.width != 0.0 else 1.0
            hz = value * carrier if unit == "ppm" else value
            return (hz - info.offset) / width + 0.5
        case _:
            raise InvalidArgument(f"unknown frequency unit '{unit}'")


def modulus(datum: Datum) -> Datum:
    """
    Replace every element by its magnitude and drop all imaginary bases.

    Every dimension of the result is real.

    Args:
        datum (Datum): Input datum, modified in place.

    Returns:
        Datum: Real magnitude datum.
    """
    start_time = perf_counter()

    with trace("failed to compute absolute value"):
        datum.array.norm()
        datum.array.resize(0, datum.array.sz)
        for dim in datum.dims:
            dim.cx = False
            dim.d = None

    _record(datum, {'Function': 'Modulus'}, start_time)
    return datum

# NMRPipe alias
MC = modulus
MC.__doc__ = modulus.__doc__  # Auto-generated
MC.__name__ = "MC"  # Auto-generated


def _basis_scalar(datum: Datum, dim: int | None, value: float) -> np.ndarray:
    """Scalar holding ``value`` on the real unit, or on the basis of dimension ``dim``."""
    scalar = np.zeros(datum.array.n)
    if dim is None:
        scalar[0] = value
        return scalar

    info = datum.check_dim(dim)
    if info.d is None:
        raise InvalidArgument(f"dimension {dim} is real")
    scalar[1 << info.d] = value
    return scalar


def add_constant(
    datum: Datum,
    dim: int | None = None,
    *,
    constant: float = 0.0,
    other: Datum | None = None,
    scale: float = 1.0,
    subtract: bool = False,
    # Aliases
    c: float | None = None,
    sub: bool | None = None,
) -> Datum:
    """
    Add a constant, and optionally another datum, to every element.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int, optional): Add the constant to the imaginary unit of this
            dimension instead of to the real part.
        constant (float): Value to add.
        other (Datum, optional): Datum of the same array configuration, added
            after scaling by ``scale``.
        scale (float): Factor applied to ``other``.
        subtract (bool): Subtract ``other`` instead of adding it.

    Aliases:
        c: Alias for constant.
        sub: Alias for subtract.

    Returns:
        Datum: Adjusted datum.
    """
    start_time = perf_counter()

    constant = c if c is not None else constant
    subtract = sub if sub is not None else subtract

    with trace("failed to add to datum"):
        scalar = _basis_scalar(datum, dim, constant)
        factor = -scale if subtract else scale
        if other is not None:
            datum.array.add(other.array, factor)
        datum.array.add_scalar(scalar)

    _record(
        datum,
        {
            'Function': 'Add constant',
            'dim': dim,
            'constant': constant,
            'other': other is not None,
            'scale': factor,
        },
        start_time,
    )
    return datum

# NMRPipe alias
ADD = add_constant
ADD.__doc__ = add_constant.__doc__  # Auto-generated
ADD.__name__ = "ADD"  # Auto-generated


def multiply_constant(
    datum: Datum,
    dim: int | None = None,
    *,
    constant: float = 1.0,
    invert: bool = False,
    # Aliases
    c: float | None = None,
    inv: bool | None = None,
) -> Datum:
    """
    Multiply every element by a constant.

    With ``dim`` given the constant multiplies the imaginary unit of that
    dimension, so the data is also rotated by 90 degrees in its plane.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int, optional): Dimension whose imaginary unit carries the constant.
        constant (float): Factor.
        invert (bool): Multiply by ``1 / constant`` instead.

    Aliases:
        c: Alias for constant.
        inv: Alias for invert.

    Returns:
        Datum: Scaled datum.
    """
    start_time = perf_counter()

    constant = c if c is not None else constant
    invert = inv if inv is not None else invert

    with trace("failed to scale datum"):
        if invert:
            if constant == 0.0:
                raise InvalidArgument("cannot invert a zero scaling factor")
            constant = 1.0 / constant
        datum.array.mul(_basis_scalar(datum, dim, constant))

    _record(
        datum,
        {'Function': 'Multiply by constant', 'dim': dim, 'constant': constant},
        start_time,
    )
    return datum

# NMRPipe alias
MULT = multiply_constant
MULT.__doc__ = multiply_constant.__doc__  # Auto-generated
MULT.__name__ = "MULT"  # Auto-generated


def _shift_points(info, dim: int, amount: float, unit: str) -> float:
    if unit not in ("points", "sec", "hz", "ppm"):
        raise InvalidArgument(f"unknown shift unit '{unit}'")
    if unit == "points":
        return amount
    if unit == "sec" and info.ft:
        raise InvalidArgument(f"cannot shift frequency-domain dimension {dim} in seconds")
    if unit in ("hz", "ppm") and not info.ft:
        raise InvalidArgument(f"cannot shift time-domain dimension {dim} in {unit}")
    if info.width <= 0.0:
        raise InvalidArgument(f"dimension {dim} has no spectral width")

    match unit:
        case "sec":
            return amount * info.width
        case "hz":
            return amount * info.sz / info.width
        case "ppm":
            return amount * info.carrier * info.sz / info.width


def circular_shift(
    datum: Datum,
    dim: int,
    *,
    amount: float = 0,
    unit: str = "points",
    rounding: bool = False,
    # Aliases
    rs: int | None = None,
    ls: int | None = None,
    round: bool | None = None,
) -> Datum:
    """
    Circularly shift one dimension by a whole number of points.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int): Dimension index.
        amount (float): Shift toward higher indices, negative to shift back.
        unit (str): Unit of ``amount``: points, sec (time domain), hz or ppm
            (frequency domain).
        rounding (bool): Truncate a fractional point count instead of raising.

    Aliases:
        rs: Right shift by this many points.
        ls: Left shift by this many points.
        round: Alias for rounding.

    Returns:
        Datum: Shifted datum.
    """
    start_time = perf_counter()

    if rs is not None and ls is not None:
        raise InvalidArgument("specify only one of 'rs' or 'ls'")
    if rs is not None:
        amount, unit = rs, "points"
    elif ls is not None:
        amount, unit = -ls, "points"
    rounding = round if round is not None else rounding

    with trace(f"failed to shift dimension {dim}"):
        info = datum.check_dim(dim)
        points = _shift_points(info, dim, amount, unit)
        if not rounding and points != int(points):
            raise InvalidArgument(f"fractional shift by {points:.3f} points is unsupported")
        points = int(points)
        datum.array.shift(info.k, points)

    _record(
        datum,
        {'Function': 'Circular shift data', 'dim': dim, 'shift_amount': points},
        start_time,
    )
    return datum

# NMRPipe alias
CS = circular_shift
CS.__doc__ = circular_shift.__doc__  # Auto-generated
CS.__name__ = "CS"  # Auto-generated


def extract_region(
    datum: Datum,
    dim: int = 0,
    *,
    start: float = 0.0,
    end: float = 1.0,
    unit: str = "fraction",
    # Aliases
    x1: float | None = None,
    xn: float | None = None,
) -> Datum:
    """
    Keep only a region of one frequency-domain dimension.

    The bounds are widened outward to whole points. The spectral width and
    offset of the dimension are updated to describe the kept region.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int): Dimension index, frequency domain.
        start (float): Lower bound of the region.
        end (float): Upper bound of the region.
        unit (str): Unit of the bounds: fraction (of the spectral width), hz or ppm.

    Aliases:
        x1: Alias for start.
        xn: Alias for end.

    Returns:
        Datum: Cropped datum.
    """
    start_time = perf_counter()

    start = x1 if x1 is not None else start
    end = xn if xn is not None else end

    with trace(f"failed to crop dimension {dim}"):
        info = datum.check_dim(dim)
        if not info.ft:
            raise InvalidArgument(f"dimension {dim} is not frequency-domain")
        if info.sz < 2:
            raise InvalidArgument(f"dimension {dim} has a single point")

        flo = _to_fraction(info, start, unit)
        fhi = _to_fraction(info, end, unit)
        for name, value in (("lower", flo), ("upper", fhi)):
            if value < 0.0 or value > 1.0:
                raise InvalidArgument(f"{name} bound frequency {value:.3f} out of bounds [0,1]")
        if flo >= fhi:
            raise InvalidArgument("upper bound frequency must exceed the lower bound")

        last = info.sz - 1
        ilo = int(np.floor(flo * last))
        ihi = int(np.ceil(fhi * last))
        flo, fhi = ilo / last, ihi / last

        sizes = list(datum.array.sz)
        sizes[info.k] = ihi - ilo + 1
        datum.array.shift(info.k, -ilo)
        datum.array.resize(datum.array.d, sizes)

        info.sz = sizes[info.k]
        if info.width > 0.0:
            info.offset = info.width / 2.0 * (flo + fhi - 1.0) + info.offset
            info.width = info.width * (fhi - flo)

    _record(
        datum,
        {'Function': 'Extract region', 'dim': dim, 'start': ilo, 'end': ihi},
        start_time,
    )
    return datum

# NMRPipe alias
EXT = extract_region
EXT.__doc__ = extract_region.__doc__  # Auto-generated
EXT.__name__ = "EXT"  # Auto-generated


def solvent_filter(
    datum: Datum,
    dim: int = 0,
    *,
    order: int = 32,
    lowpass: float | None = None,
    highpass: float | None = None,
    unit: str = "fraction",
    # Aliases
    flo: float | None = None,
    fhi: float | None = None,
) -> Datum:
    """
    FIR filter one complex time-domain dimension.

    A ``lowpass`` transition alone keeps ``[0, lowpass]`` of the spectral width
    and ``highpass`` alone keeps ``[highpass, 1]``. With both, the band between
    them is kept when ``lowpass > highpass`` and removed otherwise, which
    suppresses a solvent line at the carrier when it straddles 0.5.

    Args:
        datum (Datum): Input datum, modified in place.
        dim (int): Dimension index, complex and time domain.
        order (int): Even filter order.
        lowpass (float, optional): Low-pass transition frequency.
        highpass (float, optional): High-pass transition frequency.
        unit (str): Unit of the transitions: fraction (of the spectral width), hz or ppm.

    Aliases:
        flo: Alias for lowpass.
        fhi: Alias for highpass.

    Returns:
        Datum: Filtered datum.
    """
    start_time = perf_counter()

    lowpass = flo if flo is not None else lowpass
    highpass = fhi if fhi is not None else highpass

    with trace(f"failed to filter dimension {dim}"):
        info = datum.check_dim(dim)
        if info.ft or info.d is None:
            raise InvalidArgument(f"dimension {dim} is not complex time-domain")

        lowpass = _to_fraction(info, lowpass, unit)
        highpass = _to_fraction(info, highpass, unit)
        hx_filter.bandpass(datum.array, info.k, info.d, order, lowpass, highpass)

    _record(
        datum,
        {
            'Function': 'Solvent filter',
            'dim': dim,
            'order': order,
            'lowpass': lowpass,
            'highpass': highpass,
        },
        start_time,
    )
    return datum

# NMRPipe alias
SOL = solvent_filter
SOL.__doc__ = solvent_filter.__doc__  # Auto-generated
SOL.__name__ = "SOL"  # Auto-generated
