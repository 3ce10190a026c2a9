from __future__ import annotations
from dataclasses import dataclass, replace
import copy
import numpy as np

from nmr_hx.errors import DimensionError, InvalidArgument
from nmr_hx.hxarray import HxArray


@dataclass
class DatumDim:
    """
    Acquisition parameters of one dimension of a datum.

    Attributes:
        sz (int): Current number of points.
        td (int): Time-domain points acquired. Defaults to ``sz``.
        tdunif (int): Uniform time-domain size of a NUS dimension.
        cx (bool): Quadrature (complex) acquisition.
        nus (bool): Non-uniformly sampled.
        ft (bool): Frequency domain.
        k (int): Topological axis of the dimension in the array.
        d (int | None): Algebraic basis of the dimension, ``None`` when real.
        carrier (float): Carrier frequency in MHz.
        width (float): Spectral width in Hz.
        offset (float): Spectral offset in Hz.
        nuc (str): Nucleus label.
        grpdelay (float): Digital filter group delay in points.
    """

    sz: int
    td: int = 0
    tdunif: int = 0
    cx: bool = False
    nus: bool = False
    ft: bool = False
    k: int = 0
    d: int | None = None
    carrier: float = 0.0
    width: float = 0.0
    offset: float = 0.0
    nuc: str = ""
    grpdelay: float = 0.0

    def __post_init__(self):
        if self.td == 0:
            self.td = self.sz
        if self.tdunif == 0:
            self.tdunif = self.td


class Datum:
    # Declare so IDE can autocomplete
    dims: list[DatumDim]
    array: HxArray
    sched: np.ndarray | None
    processing_history: list[dict]

    def __init__(
        self,
        array: HxArray,
        dims: list[DatumDim] = None, # type: ignore
        sched=None,
        processing_history: list[dict] = None, # type: ignore
    ):
        """
        Create a datum: a hypercomplex array together with its dimension parameters.

        Parameters:
            array (HxArray):
                The core array, owned by the datum from here on.

            dims (list of DatumDim, optional):
                One entry per topological axis. When omitted, dimension ``i`` maps to
                axis ``i`` and, for ``i < array.d``, to basis ``i`` as a complex dimension.

            sched (array_like, optional):
                NUS schedule of shape ``(nsched, number of NUS dimensions)``.

            processing_history (list of dict, optional):
                Entries describing each processing step applied to the data.

        Returns:
            Datum:
                A checked datum.
        """
        self.array = array
        self.dims = dims if dims is not None else self._default_dims(array)
        self.sched = None
        if sched is not None:
            sched = np.asarray(sched, dtype=np.int64)
            self.sched = sched[:, np.newaxis] if sched.ndim == 1 else sched
        self.processing_history = processing_history if processing_history is not None else []
        self.check()


    @staticmethod
    def _default_dims(array: HxArray) -> list[DatumDim]:
        dims = []
        for i, size in enumerate(array.sz):
            cx = i < array.d
            dims.append(DatumDim(sz=size, cx=cx, k=i, d=i if cx else None))
        return dims


    @property
    def nd(self) -> int:
        return len(self.dims)


    def check(self) -> None:
        """Verify that the dimension parameters agree with the array."""
        if self.nd != self.array.k:
            raise InvalidArgument(f"{self.nd} dimensions given for an array of rank {self.array.k}")

        axes = sorted(dim.k for dim in self.dims)
        if axes != list(range(self.array.k)):
            raise InvalidArgument(f"dimension axes {axes} are not a permutation of the array axes")

        for i, dim in enumerate(self.dims):
            if dim.sz != self.array.sz[dim.k]:
                raise InvalidArgument(
                    f"dimension {i} size {dim.sz} != array size {self.array.sz[dim.k]}"
                )
            if dim.d is not None and not 0 <= dim.d < self.array.d:
                raise InvalidArgument(
                    f"dimension {i} basis {dim.d} out of bounds [0,{self.array.d})"
                )

        bases = [dim.d for dim in self.dims if dim.d is not None]
        if len(set(bases)) != len(bases):
            raise InvalidArgument(f"repeated algebraic basis in {bases}")


    def check_dim(self, dim: int) -> DatumDim:
        if dim < 0 or dim >= self.nd:
            raise DimensionError(f"dimension index {dim} out of bounds [0,{self.nd})")
        return self.dims[dim]


    def nus_dims(self) -> list[int]:
        return [i for i, dim in enumerate(self.dims) if dim.nus]


    def copy(self) -> Datum:
        return Datum(
            self.array.copy(),
            [replace(dim) for dim in self.dims],
            None if self.sched is None else self.sched.copy(),
            copy.deepcopy(self.processing_history),
        )


    def __str__(self) -> str:
        lines = [
            f"<Datum nd={self.nd} d={self.array.d} sz={self.array.sz}>",
            "Dimensions:",
        ]
        for i, dim in enumerate(self.dims):
            kind = "complex" if dim.cx else "real"
            domain = "freq" if dim.ft else "time"
            flags = " nus" if dim.nus else ""
            lines.append(
                f" {i} k={dim.k} d={dim.d} {dim.nuc or '?'}: Size={dim.sz}, TD={dim.td}, "
                f"{kind}, {domain}{flags}, SW={dim.width:.2f} Hz"
            )

        if self.sched is not None:
            lines.append(f"Schedule: {self.sched.shape[0]} x {self.sched.shape[1]}")

        return "\n".join(lines)

    __repr__ = __str__
