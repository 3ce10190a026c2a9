from __future__ import annotations
from typing import Iterator
import numpy as np

from nmr_hx.core import algebra
from nmr_hx.core.index import Layout, Offsets, vector_indices
from nmr_hx.errors import AllocationError, InvalidArgument


def _allocate(length: int) -> np.ndarray:
    try:
        return np.zeros(length, dtype=np.float64)
    except (MemoryError, ValueError) as err:
        raise AllocationError(f"failed to allocate {length} reals") from err


class HxArray:
    # Declare so IDE can autocomplete
    layout: Layout
    x: np.ndarray

    def __init__(self, d: int = 0, sz=(), data=None):
        """
        Create a hypercomplex n-dimensional array.

        Parameters:
            d (int, optional):
                Algebraic dimension. Every scalar holds ``2**d`` real coefficients.

            sz (sequence of int, optional):
                Size of each topological axis. An empty sequence gives a bare scalar.

            data (array_like, optional):
                Real coefficients in storage order, either flat or shaped ``sz + (2**d,)``.

        Returns:
            HxArray:
                A zero-filled array unless ``data`` is given.

        NOTE:
            Storage is one contiguous float64 buffer ``x`` of ``prod(sz) * 2**d`` reals.
            Axes are row-major: the **last axis is the fastest-varying**, and the
            coefficients of one scalar are adjacent.
        """
        self.layout = Layout(0, ())
        self.x = _allocate(1)
        self.alloc(d, sz)

        if data is not None:
            values = np.asarray(data, dtype=np.float64).ravel()
            if values.size != self.len:
                raise InvalidArgument(
                    f"data holds {values.size} reals, array needs {self.len}"
                )
            self.x[:] = values


    @classmethod
    def from_complex(cls, data) -> HxArray:
        """Build a d=1 array from complex numpy data of any rank."""
        data = np.asarray(data, dtype=np.complex128)
        out = cls(1, data.shape)
        view = out.view()
        view[..., 0] = data.real
        view[..., 1] = data.imag
        return out


    @classmethod
    def from_real(cls, data) -> HxArray:
        """Build a d=0 array from real numpy data of any rank."""
        data = np.asarray(data, dtype=np.float64)
        return cls(0, data.shape, data)


    # Layout shortcuts
    @property
    def d(self) -> int:
        return self.layout.d

    @property
    def k(self) -> int:
        return self.layout.k

    @property
    def n(self) -> int:
        return self.layout.n

    @property
    def sz(self) -> tuple[int, ...]:
        return self.layout.sz

    @property
    def len(self) -> int:
        return self.layout.length

    @property
    def strides(self) -> tuple[int, ...]:
        return self.layout.strides


    def alloc(self, d: int, sz) -> HxArray:
        """(Re)allocate zeroed storage for the given configuration."""
        layout = Layout(d, tuple(sz))
        self.x = _allocate(layout.length)
        self.layout = layout
        return self


    def free(self) -> None:
        """Release storage and return to the empty (d=0, k=0) state."""
        self.layout = Layout(0, ())
        self.x = _allocate(1)


    def copy(self) -> HxArray:
        out = HxArray.__new__(HxArray)
        out.layout = self.layout
        out.x = self.x.copy()
        return out


    def view(self) -> np.ndarray:
        """Storage as an ndarray of shape ``sz + (n,)``, sharing memory."""
        return self.x.reshape(self.sz + (self.n,))


    def to_complex(self, basis: int = 0) -> np.ndarray:
        """
        Extract the complex plane spanned by ``1`` and ``u_basis``.

        Only the real coefficient and its ``u_basis`` partner are read; all
        other coefficients are ignored.
        """
        self.layout.check_basis(basis)
        view = self.view()
        return view[..., 0] + 1j * view[..., 1 << basis]


    def offset(self, idx) -> int:
        return self.layout.offset(idx)


    def get(self, idx) -> np.ndarray:
        """Copy of the coefficients of the scalar at multi-index ``idx``."""
        off = self.offset(idx)
        return self.x[off:off + self.n].copy()


    def set(self, idx, value) -> None:
        off = self.offset(idx)
        value = np.asarray(value, dtype=np.float64)
        if value.ndim == 0:
            self.x[off:off + self.n] = 0.0
            self.x[off] = value
            return

        if value.shape != (self.n,):
            raise InvalidArgument(f"scalar needs {self.n} coefficients, got {value.shape}")
        self.x[off:off + self.n] = value


    def iter_offsets(self) -> Offsets:
        """Lazy, restartable sequence of the real offset of every scalar."""
        return Offsets(self.layout)


    def iter_vectors(self, axis: int) -> Iterator[tuple]:
        """Index tuples into :meth:`view` selecting every vector along ``axis``."""
        return vector_indices(self.layout, axis)


    def slice_vector(self, axis: int, where: tuple) -> HxArray:
        """Copy the vector selected by ``where`` (from :meth:`iter_vectors`)."""
        vector = self.view()[where]
        return HxArray(self.d, (self.sz[axis],), vector)


    def store_vector(self, axis: int, where: tuple, vector: HxArray) -> None:
        if vector.d != self.d or vector.sz != (self.sz[axis],):
            raise InvalidArgument(
                f"vector ({vector.d}, {vector.sz}) does not fit axis {axis} of ({self.d}, {self.sz})"
            )
        self.view()[where] = vector.view()


    def resize(self, d: int, sz) -> HxArray:
        """
        Change the algebraic dimension and/or topological sizes.

        Every scalar keeps its multi-index and its first ``min(n_old, n_new)``
        coefficients. New scalars and new coefficients are zero. Shrinking
        drops the scalars and coefficients that no longer fit.
        """
        layout = Layout(d, tuple(sz))
        if layout == self.layout:
            return self

        x = _allocate(layout.length)
        old = self.view()
        new = x.reshape(layout.sz + (layout.n,))

        common = min(self.k, layout.k)
        region = tuple(slice(0, min(a, b)) for a, b in zip(self.sz[:common], layout.sz[:common]))
        coeffs = slice(0, min(self.n, layout.n))

        # Axes beyond the common rank are pinned at index 0 on either side.
        src = region + (0,) * (self.k - common) + (coeffs,)
        dst = region + (0,) * (layout.k - common) + (coeffs,)
        new[dst] = old[src]

        self.x = x
        self.layout = layout
        return self


    def _check_same(self, other: HxArray) -> None:
        if other.layout != self.layout:
            raise InvalidArgument(
                f"array configuration mismatch ({self.d}, {self.sz}) != ({other.d}, {other.sz})"
            )


    def add(self, other: HxArray, scale: float = 1.0) -> HxArray:
        """In place: ``self <- self + scale * other``."""
        self._check_same(other)
        self.x += scale * other.x
        return self


    def scale(self, s: float) -> HxArray:
        self.x *= s
        return self


    def add_scalar(self, value) -> HxArray:
        """
        In place: add one scalar to every element.

        ``value`` is either ``n`` coefficients or a real number, which goes to
        the real coefficient only.
        """
        value = np.asarray(value, dtype=np.float64)
        view = self.view()
        if value.ndim == 0:
            view[..., 0] += value
            return self

        if value.shape != (self.n,):
            raise InvalidArgument(f"scalar needs {self.n} coefficients, got {value.shape}")
        view += value
        return self


    def shift(self, axis: int, amount: int) -> HxArray:
        """
        Circularly shift every vector along ``axis`` by ``amount`` points.

        Positive amounts move values toward higher indices; values pushed off
        one end come back in at the other.
        """
        self.layout.check_axis(axis)
        view = self.view()
        view[...] = np.roll(view, int(amount), axis=axis)
        return self


    def mul(self, other) -> HxArray:
        """
        In place elementwise hypercomplex product with another array of the same
        configuration, or with a single scalar given as ``n`` coefficients.
        """
        view = self.view()
        if isinstance(other, HxArray):
            self._check_same(other)
            view[...] = algebra.mul(view, other.view())
        else:
            view[...] = algebra.mul(view, np.asarray(other, dtype=np.float64))
        return self


    def zero(self) -> HxArray:
        self.x[:] = 0.0
        return self


    def fill(self, value: float) -> HxArray:
        self.x[:] = value
        return self


    def norm(self) -> HxArray:
        """Replace every scalar by its (real) coefficient norm."""
        view = self.view()
        nrm = algebra.norm(view)
        view[...] = 0.0
        view[..., 0] = nrm
        return self


    def conj(self) -> HxArray:
        self.x *= np.tile(algebra.conj_signs(self.d), self.len // self.n)
        return self


    def semiconj(self) -> HxArray:
        self.x *= np.tile(algebra.semiconj_signs(self.d), self.len // self.n)
        return self


    def negate_basis(self, basis: int) -> HxArray:
        self.layout.check_basis(basis)
        view = self.view()
        view[...] = algebra.negate_basis(view, basis)
        return self


    def drop_basis(self, basis: int) -> HxArray:
        """Discard every coefficient containing ``u_basis``, so ``d -> d - 1``."""
        self.layout.check_basis(basis)
        values = algebra.drop_basis(self.view(), basis)
        layout = Layout(self.d - 1, self.sz)
        self.x = np.ascontiguousarray(values).ravel()
        self.layout = layout
        return self


    def reorder_bases(self, order) -> HxArray:
        view = self.view()
        view[...] = algebra.reorder_bases(view, order)
        return self


    def __str__(self) -> str:
        lines = [
            f"<HxArray d={self.d} k={self.k} sz={self.sz} n={self.n} len={self.len}>",
            "Data Preview:",
            np.array2string(self.view(), threshold=5, edgeitems=3),
        ]
        return "\n".join(lines)

    __repr__ = __str__
