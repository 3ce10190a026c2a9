"""
Hypercomplex algebra of dimension ``d``.

A scalar holds ``n = 2**d`` real coefficients. Coefficient ``c`` multiplies
the basis element whose imaginary units are the set bits of ``c``: bit ``b``
stands for the unit ``u_b`` of the b-th quadrature dimension. Units commute
and square to -1, so

    e_i * e_j = (-1)**popcount(i & j) * e_{i ^ j}

All functions accept arrays whose last axis holds the ``n`` coefficients and
broadcast over the leading axes.
"""
from __future__ import annotations
import functools
import numpy as np

from nmr_hx.errors import DimensionError, InvalidArgument


def _popcount(value: int) -> int:
    return bin(value).count("1")


def dimension_of(n: int) -> int:
    """Return ``d`` for a coefficient count ``n``, which must be a power of two."""
    if n < 1 or n & (n - 1):
        raise InvalidArgument(f"coefficient count {n} is not a power of two")
    return n.bit_length() - 1


@functools.lru_cache(maxsize=None)
def mul_table(d: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Build the multiplication table of the d-dimensional algebra.

    Args:
        d (int): Algebraic dimension.

    Returns:
        tuple[np.ndarray, np.ndarray]: ``(index, sign)``, both ``(n, n)``:
        ``e_i * e_j = sign[i, j] * e_{index[i, j]}``.
    """
    if d < 0:
        raise InvalidArgument(f"invalid algebraic dimensionality {d}")

    n = 1 << d
    i, j = np.meshgrid(np.arange(n), np.arange(n), indexing="ij")
    index = i ^ j
    sign = np.array(
        [[-1.0 if _popcount(a & b) % 2 else 1.0 for b in range(n)] for a in range(n)]
    ).reshape(n, n)

    index.setflags(write=False)
    sign.setflags(write=False)
    return index, sign


@functools.lru_cache(maxsize=None)
def product_tensor(d: int) -> np.ndarray:
    """
    Structure constants ``T[i, j, k]`` with ``(a * b)_k = sum T[i, j, k] a_i b_j``.

    Used by the vectorised matrix routines through ``np.einsum``.
    """
    index, sign = mul_table(d)
    n = 1 << d
    tensor = np.zeros((n, n, n))
    for i in range(n):
        for j in range(n):
            tensor[i, j, index[i, j]] = sign[i, j]

    tensor.setflags(write=False)
    return tensor


@functools.lru_cache(maxsize=None)
def conj_signs(d: int) -> np.ndarray:
    signs = -np.ones(1 << d)
    signs[0] = 1.0
    signs.setflags(write=False)
    return signs


@functools.lru_cache(maxsize=None)
def semiconj_signs(d: int) -> np.ndarray:
    signs = np.array([-1.0 if _popcount(c) % 2 else 1.0 for c in range(1 << d)])
    signs.setflags(write=False)
    return signs


def conj(x: np.ndarray) -> np.ndarray:
    """Negate every imaginary coefficient."""
    x = np.asarray(x, dtype=np.float64)
    return x * conj_signs(dimension_of(x.shape[-1]))


def semiconj(x: np.ndarray) -> np.ndarray:
    """
    Negate every imaginary unit: coefficient ``c`` is scaled by
    ``(-1)**popcount(c)``.

    Unlike :func:`conj` this is an automorphism of the algebra, so it
    distributes over products. The conjugate-transpose accessor uses it.
    """
    x = np.asarray(x, dtype=np.float64)
    return x * semiconj_signs(dimension_of(x.shape[-1]))


def mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hypercomplex product of two operands of matching dimension."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape[-1] != b.shape[-1]:
        raise InvalidArgument(
            f"algebraic dimension mismatch ({a.shape[-1]} != {b.shape[-1]} coefficients)"
        )

    n = a.shape[-1]
    index, sign = mul_table(dimension_of(n))
    out = np.zeros(np.broadcast_shapes(a.shape, b.shape))
    for i in range(n):
        for j in range(n):
            out[..., index[i, j]] += sign[i, j] * a[..., i] * b[..., j]

    return out


def norm(x: np.ndarray) -> np.ndarray:
    """Euclidean norm of the coefficients of each scalar."""
    return np.sqrt(np.sum(np.square(x), axis=-1))


def phasor(d: int, basis: int, phi) -> np.ndarray:
    """
    Build ``cos(phi) + u_basis * sin(phi)`` for every angle in ``phi``.

    Returns:
        np.ndarray: Shape ``np.shape(phi) + (2**d,)``.
    """
    if basis < 0 or basis >= d:
        raise DimensionError(f"algebraic dimension {basis} out of bounds [0,{d})")

    phi = np.asarray(phi, dtype=np.float64)
    out = np.zeros(phi.shape + (1 << d,))
    out[..., 0] = np.cos(phi)
    out[..., 1 << basis] = np.sin(phi)
    return out


def negate_basis(x: np.ndarray, basis: int) -> np.ndarray:
    """Negate every coefficient containing the unit ``u_basis``."""
    x = np.asarray(x, dtype=np.float64)
    d = dimension_of(x.shape[-1])
    if basis < 0 or basis >= d:
        raise DimensionError(f"algebraic dimension {basis} out of bounds [0,{d})")

    mask = (np.arange(x.shape[-1]) >> basis) & 1
    return x * np.where(mask, -1.0, 1.0)


def drop_basis(x: np.ndarray, basis: int) -> np.ndarray:
    """
    Remove the unit ``u_basis`` from the algebra, keeping only the coefficients
    that do not contain it. Higher units move down by one.
    """
    x = np.asarray(x, dtype=np.float64)
    d = dimension_of(x.shape[-1])
    if basis < 0 or basis >= d:
        raise DimensionError(f"algebraic dimension {basis} out of bounds [0,{d})")

    keep = [c for c in range(x.shape[-1]) if not c & (1 << basis)]
    return x[..., keep]


def reorder_bases(x: np.ndarray, order) -> np.ndarray:
    """
    Permute the imaginary units of every scalar.

    Args:
        x (np.ndarray): Coefficients, last axis of length ``2**d``.
        order (sequence[int]): ``order[b]`` is the new unit index of old unit ``b``.
            Must be a permutation of ``range(d)``.

    Returns:
        np.ndarray: Coefficients in the new basis ordering.
    """
    x = np.asarray(x, dtype=np.float64)
    n = x.shape[-1]
    d = dimension_of(n)
    order = [int(o) for o in order]
    if sorted(order) != list(range(d)):
        raise InvalidArgument(f"basis ordering {order} is not a permutation of [0,{d})")

    target = np.zeros(n, dtype=int)
    for c in range(n):
        for b in range(d):
            if c & (1 << b):
                target[c] |= 1 << order[b]

    out = np.empty_like(x)
    out[..., target] = x
    return out
