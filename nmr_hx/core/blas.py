"""
Element accessors and BLAS-style routines over hypercomplex arrays.

A matrix is any rank-2 array: axis 0 indexes rows, axis 1 indexes columns.
The level 2 and 3 routines are written once against an :class:`Accessor`
and behave the same for every accessor they are given.
"""
from __future__ import annotations
import numpy as np

from nmr_hx.core import algebra
from nmr_hx.errors import InvalidArgument
from nmr_hx.hxarray import HxArray


class Accessor:
    """
    Read-only strategy mapping a logical ``(row, col)`` to a matrix element.

    Args:
        name (str): Display name.
        transpose (bool): Swap row and column before indexing storage.
        conjugate (bool): Apply :func:`algebra.semiconj` to every element read.
    """

    def __init__(self, name: str, transpose: bool, conjugate: bool):
        self.name = name
        self.transpose = transpose
        self.conjugate = conjugate

    def __repr__(self) -> str:
        return self.name

    def shape(self, A: HxArray) -> tuple[int, int]:
        _assert_matrix(A)
        rows, cols = A.sz
        return (cols, rows) if self.transpose else (rows, cols)

    def offset(self, A: HxArray, row: int, col: int) -> int:
        _assert_matrix(A)
        return A.offset((col, row) if self.transpose else (row, col))

    def get(self, A: HxArray, row: int, col: int) -> np.ndarray:
        off = self.offset(A, row, col)
        value = A.x[off:off + A.n].copy()
        if self.conjugate:
            value = algebra.semiconj(value)
        return value

    def matrix(self, A: HxArray) -> np.ndarray:
        """Logical matrix as a read-only ``(rows, cols, n)`` ndarray."""
        _assert_matrix(A)
        mat = A.view()
        if self.transpose:
            mat = np.swapaxes(mat, 0, 1)
        if self.conjugate:
            mat = algebra.semiconj(mat)
        else:
            mat = mat.view()
        mat.setflags(write=False)
        return mat


NO_TRANS = Accessor("NO_TRANS", transpose=False, conjugate=False)
TRANS = Accessor("TRANS", transpose=True, conjugate=False)
CONJ_TRANS = Accessor("CONJ_TRANS", transpose=True, conjugate=True)


def _assert_matrix(A: HxArray) -> None:
    if A.k != 2:
        raise InvalidArgument(f"array of rank {A.k} is not a matrix")


def _assert_vector(x: HxArray) -> None:
    if x.k != 1:
        raise InvalidArgument(f"array of rank {x.k} is not a vector")


def _assert_same_length(x: HxArray, y: HxArray) -> None:
    if x.len != y.len:
        raise InvalidArgument(f"array length mismatch ({x.len} != {y.len})")


def _assert_same_d(*arrays: HxArray) -> None:
    dims = {a.d for a in arrays}
    if len(dims) != 1:
        raise InvalidArgument(f"algebraic dimensionality mismatch {sorted(dims)}")


# Level 1

def dot(x: HxArray, y: HxArray) -> np.ndarray:
    """Unconjugated hypercomplex inner product ``sum_i x_i * y_i``."""
    _assert_same_length(x, y)
    _assert_same_d(x, y)
    xs = x.x.reshape(-1, x.n)
    ys = y.x.reshape(-1, y.n)
    return np.einsum("si,sj,ijk->k", xs, ys, algebra.product_tensor(x.d))


def sumsq(x: HxArray) -> float:
    return float(np.dot(x.x, x.x))


def nrm2(x: HxArray) -> float:
    return float(np.sqrt(sumsq(x)))


def asum(x: HxArray) -> float:
    return float(np.sum(np.abs(x.x)))


def iamax(x: HxArray) -> int:
    """Linear index of the scalar with the largest sum of absolute coefficients."""
    return int(np.argmax(np.sum(np.abs(x.x.reshape(-1, x.n)), axis=1)))


def swap(x: HxArray, y: HxArray) -> None:
    _assert_same_length(x, y)
    tmp = x.x.copy()
    x.x[:] = y.x
    y.x[:] = tmp


def copy(x: HxArray, y: HxArray) -> None:
    """Copy the coefficients of ``x`` into ``y``."""
    _assert_same_length(x, y)
    y.x[:] = x.x


def scal(alpha: float, x: HxArray) -> None:
    x.x *= alpha


def axpy(alpha: float, x: HxArray, y: HxArray) -> None:
    """``y <- alpha * x + y``."""
    _assert_same_length(x, y)
    _assert_same_d(x, y)
    y.x += alpha * x.x


# Level 2

def gemv(
    tA: Accessor,
    alpha: float,
    A: HxArray,
    x: HxArray,
    beta: float,
    y: HxArray,
) -> None:
    """
    General matrix-vector product ``y <- alpha * op(A) x + beta * y``.

    Args:
        tA (Accessor): How ``A`` is read (``NO_TRANS``, ``TRANS`` or ``CONJ_TRANS``).
        alpha (float): Scale factor of the product.
        A (HxArray): Matrix operand.
        x (HxArray): Vector operand.
        beta (float): Scale factor of the incoming ``y``.
        y (HxArray): Output vector, updated in place.
    """
    _assert_vector(x)
    _assert_vector(y)
    _assert_same_d(A, x, y)

    rows, cols = tA.shape(A)
    if y.sz[0] != rows or x.sz[0] != cols:
        raise InvalidArgument("one or more operand size mismatches")

    # Validated: from here on ``y`` is written.
    if beta == 0.0:
        y.zero()
    elif beta != 1.0:
        scal(beta, y)

    if alpha == 0.0:
        return

    prod = np.einsum(
        "ika,kb,abc->ic", tA.matrix(A), x.view(), algebra.product_tensor(A.d)
    )
    y.view()[...] += alpha * prod


def ger(
    alpha: float,
    x: HxArray,
    y: HxArray,
    A: HxArray,
    *,
    conjugate: bool = False,
) -> None:
    """
    Rank-1 update ``A <- A + alpha * x y^T``.

    With ``conjugate=True`` every entry of ``y`` is passed through
    :func:`algebra.semiconj` first, the same conjugation ``CONJ_TRANS`` applies.
    """
    _assert_vector(x)
    _assert_vector(y)
    _assert_matrix(A)
    _assert_same_d(A, x, y)

    if x.sz[0] != A.sz[0] or y.sz[0] != A.sz[1]:
        raise InvalidArgument("one or more operand size mismatches")

    yv = algebra.semiconj(y.view()) if conjugate else y.view()
    update = np.einsum(
        "ia,jb,abc->ijc", x.view(), yv, algebra.product_tensor(A.d)
    )
    A.view()[...] += alpha * update


def geru(alpha: float, x: HxArray, y: HxArray, A: HxArray) -> None:
    ger(alpha, x, y, A, conjugate=False)


def gerc(alpha: float, x: HxArray, y: HxArray, A: HxArray) -> None:
    ger(alpha, x, y, A, conjugate=True)


# Level 3

def gemm(
    tA: Accessor,
    tB: Accessor,
    alpha: float,
    A: HxArray,
    B: HxArray,
    beta: float,
    C: HxArray,
) -> None:
    """General matrix-matrix product ``C <- alpha * op(A) op(B) + beta * C``."""
    _assert_matrix(C)
    _assert_same_d(A, B, C)

    m, ka = tA.shape(A)
    kb, n = tB.shape(B)
    if ka != kb or C.sz != (m, n):
        raise InvalidArgument("one or more operand size mismatches")

    if beta == 0.0:
        C.zero()
    elif beta != 1.0:
        scal(beta, C)

    if alpha == 0.0:
        return

    prod = np.einsum(
        "ika,kjb,abc->ijc", tA.matrix(A), tB.matrix(B), algebra.product_tensor(A.d)
    )
    C.view()[...] += alpha * prod
