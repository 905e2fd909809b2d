"""Numerical helpers shared by the proximal-gradient routines.

Linear maps may be ``None`` (identity), a dense NumPy matrix, or any object
exposing ``matvec``/``rmatvec`` in the style of SciPy's ``LinearOperator``.
Adjoints always use the conjugate transpose so that complex-valued problems
are handled the same way as real ones.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

Array = np.ndarray
LinearMap = Any


def as_vector(x: Any) -> Array:
    """Return a fresh float (or complex) array copy of ``x``."""
    arr = np.array(x, copy=True)
    if np.iscomplexobj(arr):
        return arr.astype(np.result_type(arr.dtype, np.complex128), copy=False)
    return arr.astype(np.result_type(arr.dtype, np.float64), copy=False)


def real_eps(x: Array) -> float:
    """Machine epsilon of the real dtype underlying ``x``."""
    dtype = np.real(np.asarray(x)).dtype
    if not np.issubdtype(dtype, np.floating):
        dtype = np.dtype(np.float64)
    return float(np.finfo(dtype).eps)


def norm(x: Array) -> float:
    """Euclidean (Frobenius) norm as a Python float."""
    return float(np.linalg.norm(np.ravel(x)))


def real_inner(a: Array, b: Array) -> float:
    """Real part of the inner product ``<a, b>``."""
    return float(np.real(np.vdot(a, b)))


def apply_map(A: Optional[LinearMap], x: Array) -> Array:
    """Compute ``A @ x``; ``None`` is the identity and returns a copy."""
    if A is None:
        return np.array(x, copy=True)
    if hasattr(A, "matvec"):
        return np.asarray(A.matvec(x))
    return np.asarray(A @ x)


def apply_adjoint(A: Optional[LinearMap], y: Array) -> Array:
    """Compute ``A^H @ y``; ``None`` is the identity and returns a copy."""
    if A is None:
        return np.array(y, copy=True)
    if hasattr(A, "rmatvec"):
        return np.asarray(A.rmatvec(y))
    if isinstance(A, np.ndarray):
        return A.conj().T @ y
    if hasattr(A, "H"):
        return np.asarray(A.H @ y)
    raise TypeError(
        f"Cannot form the adjoint of {type(A).__name__}; "
        "provide a NumPy matrix or an object with matvec/rmatvec."
    )


def apply_map_into(out: Array, A: Optional[LinearMap], x: Array) -> Array:
    """Write ``A @ x`` into ``out`` and return it."""
    if A is None:
        if out is not x:
            out[...] = x
        return out
    out[...] = apply_map(A, x)
    return out


__all__ = [
    "Array",
    "LinearMap",
    "apply_adjoint",
    "apply_map",
    "apply_map_into",
    "as_vector",
    "norm",
    "real_eps",
    "real_inner",
]
