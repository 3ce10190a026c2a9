import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = []

from .errors import (
    HxError,
    AllocationError,
    OutOfBoundsError,
    DimensionError,
    InvalidArgument,
    trace,
    format_trace,
)
__all__ += [
    "HxError",
    "AllocationError",
    "OutOfBoundsError",
    "DimensionError",
    "InvalidArgument",
    "trace",
    "format_trace",
]

from .config import DEFAULTS, setup_logging
__all__ += ["DEFAULTS", "setup_logging"]

from .hxarray import HxArray
__all__ += ["HxArray"]

from .datum import Datum, DatumDim
__all__ += ["Datum", "DatumDim"]

from .core.nus import ReconstructionResult
__all__ += ["ReconstructionResult"]

from .core.processing import (
    window, WIN,
    fourier_transform, FT,
    hilbert_transform, HT,
    phase, PS,
    baseline_correction, BASE,
    ist, IST,
    irls, IRLS,
    ffm, FFM,
    zero_fill, ZF,
    resize,
    complex_promote,
    realize, DI,
    modulus, MC,
    add_constant, ADD,
    multiply_constant, MULT,
    circular_shift, CS,
    extract_region, EXT,
    solvent_filter, SOL,
)

__all__ += [
    "window", "WIN",
    "fourier_transform", "FT",
    "hilbert_transform", "HT",
    "phase", "PS",
    "baseline_correction", "BASE",
    "ist", "IST",
    "irls", "IRLS",
    "ffm", "FFM",
    "zero_fill", "ZF",
    "resize",
    "complex_promote",
    "realize", "DI",
    "modulus", "MC",
    "add_constant", "ADD",
    "multiply_constant", "MULT",
    "circular_shift", "CS",
    "extract_region", "EXT",
    "solvent_filter", "SOL",
]
