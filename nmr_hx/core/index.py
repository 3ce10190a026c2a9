from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator
import itertools
import math

from nmr_hx.errors import AllocationError, DimensionError, InvalidArgument, OutOfBoundsError


# Upper bound on the number of reals a single array may hold.
MAX_LENGTH = 2**62


@dataclass(frozen=True)
class Layout:
    """
    Shape and stride descriptor of a hypercomplex array.

    Strides are row-major and counted in scalars: the last topological axis
    is the fastest-varying one. Multiply by ``n`` to get real offsets.
    """

    d: int
    sz: tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "d", int(self.d))
        object.__setattr__(self, "sz", tuple(int(size) for size in self.sz))
        if self.d < 0:
            raise InvalidArgument(f"invalid algebraic dimensionality {self.d}")
        for size in self.sz:
            if int(size) < 1:
                raise InvalidArgument(f"invalid dimension size {size} in {self.sz}")
        if self.length > MAX_LENGTH:
            raise AllocationError(
                f"array of {self.sz} {self.n}-coefficient scalars overflows the size limit"
            )

    @property
    def k(self) -> int:
        return len(self.sz)

    @property
    def n(self) -> int:
        return 1 << self.d

    @property
    def count(self) -> int:
        """Number of hypercomplex scalars."""
        return math.prod(self.sz)

    @property
    def length(self) -> int:
        """Number of reals."""
        return self.n * self.count

    @property
    def strides(self) -> tuple[int, ...]:
        strides = []
        acc = 1
        for size in reversed(self.sz):
            strides.append(acc)
            acc *= size
        return tuple(reversed(strides))

    def check_axis(self, axis: int) -> int:
        if axis < 0 or axis >= self.k:
            raise DimensionError(f"topological dimension {axis} out of bounds [0,{self.k})")
        return axis

    def check_basis(self, basis: int) -> int:
        if basis < 0 or basis >= self.d:
            raise DimensionError(f"algebraic dimension {basis} out of bounds [0,{self.d})")
        return basis

    def pack(self, idx) -> int:
        """Linear scalar index of a multi-index, bounds-checked."""
        idx = tuple(int(i) for i in idx)
        if len(idx) != self.k:
            raise OutOfBoundsError(f"index {idx} has {len(idx)} entries, expected {self.k}")

        pidx = 0
        for i, size, stride in zip(idx, self.sz, self.strides):
            if i < 0 or i >= size:
                raise OutOfBoundsError(f"index {idx} out of bounds for sizes {self.sz}")
            pidx += i * stride
        return pidx

    def unpack(self, pidx: int) -> tuple[int, ...]:
        """Multi-index of a linear scalar index, bounds-checked."""
        if pidx < 0 or pidx >= self.count:
            raise OutOfBoundsError(f"linear index {pidx} out of bounds [0,{self.count})")

        idx = []
        for stride in self.strides:
            idx.append(pidx // stride)
            pidx %= stride
        return tuple(idx)

    def offset(self, idx) -> int:
        """Offset of the first real coefficient of the scalar at ``idx``."""
        return self.n * self.pack(idx)


class Offsets:
    """
    Lazy, restartable sequence of real offsets of every scalar in storage order.

    Each call to ``iter()`` starts again from the first scalar.
    """

    def __init__(self, layout: Layout):
        self.layout = layout

    def __iter__(self) -> Iterator[int]:
        return iter(range(0, self.layout.length, self.layout.n))

    def __len__(self) -> int:
        return self.layout.count


def vector_indices(layout: Layout, axis: int) -> Iterator[tuple]:
    """
    Yield numpy index tuples selecting every 1-D vector along ``axis``.

    The tuples index the ``sz + (n,)`` view of an array's storage; the
    selected vector has shape ``(sz[axis], n)``.
    """
    layout.check_axis(axis)
    others = [range(size) for i, size in enumerate(layout.sz) if i != axis]
    for combo in itertools.product(*others):
        combo = list(combo)
        combo.insert(axis, slice(None))
        yield tuple(combo)


def scheduled(sizes, sched) -> list[int]:
    """Packed (row-major) indices of the schedule rows within a grid of ``sizes``."""
    grid = Layout(0, tuple(sizes))
    return [grid.pack(row) for row in sched]
