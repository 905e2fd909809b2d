"""Core interfaces shared by the proximal-gradient algorithms.

The smooth term ``f`` is accessed through :class:`SmoothOracle` and the
proximable term ``h`` through :class:`ProximableOracle`. :class:`ZeroSmooth`
and :class:`ZeroProx` stand in for an absent term.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import numpy as np

from .utils import Array, as_vector


@runtime_checkable
class SmoothOracle(Protocol):
    """Smooth term with a Lipschitz-continuous gradient."""

    def evaluate(self, x: Array) -> float: ...

    def gradient(self, x: Array) -> Array: ...


@runtime_checkable
class ProximableOracle(Protocol):
    """Convex term whose proximal operator is cheap to evaluate.

    ``prox(x, gamma)`` returns the minimizer ``z`` of
    ``h(u) + ||u - x||^2 / (2 gamma)`` together with ``h(z)``.
    """

    def prox(self, x: Array, gamma: float) -> tuple[Array, float]: ...


@dataclass(frozen=True)
class SmoothFunction:
    """Adapter turning plain callables into a :class:`SmoothOracle`."""

    fun: Callable[[Array], float]
    grad: Optional[Callable[[Array], Array]] = None

    def evaluate(self, x: Array) -> float:
        return float(self.fun(x))

    def gradient(self, x: Array) -> Array:
        if self.grad is None:
            raise ValueError("SmoothFunction was built without a gradient")
        return np.asarray(self.grad(x))


@dataclass(frozen=True)
class ProximableFunction:
    """Adapter turning plain callables into a :class:`ProximableOracle`."""

    prox_fun: Callable[[Array, float], tuple[Array, float]]
    fun: Optional[Callable[[Array], float]] = None

    def prox(self, x: Array, gamma: float) -> tuple[Array, float]:
        return self.prox_fun(x, gamma)

    def evaluate(self, x: Array) -> float:
        if self.fun is None:
            return 0.0
        return float(self.fun(x))


class ZeroSmooth:
    """The identically zero smooth term."""

    def evaluate(self, x: Array) -> float:
        return 0.0

    def gradient(self, x: Array) -> Array:
        return np.zeros_like(x)

    def __repr__(self) -> str:
        return "ZeroSmooth()"


class ZeroProx:
    """The identically zero proximable term; its prox is the identity."""

    def evaluate(self, x: Array) -> float:
        return 0.0

    def prox(self, x: Array, gamma: float) -> tuple[Array, float]:
        return np.array(x, copy=True), 0.0

    def __repr__(self) -> str:
        return "ZeroProx()"


def gradient(f: SmoothOracle, x: Array) -> Array:
    """Evaluate ``grad f(x)`` as a NumPy array."""
    return np.asarray(f.gradient(x))


def prox(h: ProximableOracle, x: Array, gamma: float) -> tuple[Array, float]:
    """Evaluate ``prox_{gamma h}(x)`` and return ``(z, h(z))``."""
    z, value = h.prox(x, gamma)
    return np.asarray(z), float(value)


def evaluate(term: Any, x: Array) -> float:
    """Evaluate a term that may or may not expose ``evaluate``."""
    if hasattr(term, "evaluate"):
        return float(term.evaluate(x))
    return float(term(x))


@dataclass(frozen=True)
class FistaConfig:
    """Immutable problem description for the generalized FISTA method.

    Attributes:
        y0: Initial point; must lie in the domain of ``h``.
        f: Smooth term, ``mu``-strongly convex with ``Lf``-Lipschitz gradient.
        h: Proximable term.
        Lf: Upper bound on the Lipschitz constant of ``grad f`` (required).
        mu: Strong convexity modulus of ``f``.
        adaptive: Reserved for adaptive stepsize selection; currently ignored.
    """

    y0: Array
    f: SmoothOracle = field(default_factory=ZeroSmooth)
    h: ProximableOracle = field(default_factory=ZeroProx)
    Lf: Optional[float] = None
    mu: float = 0.0
    adaptive: bool = False

    def __post_init__(self) -> None:
        if self.Lf is None:
            raise ValueError("Lf (Lipschitz constant of grad f) is required")
        Lf = float(self.Lf)
        if not math.isfinite(Lf) or Lf <= 0:
            raise ValueError(f"Lf must be a finite positive number, got {self.Lf!r}")
        mu = float(self.mu)
        if not math.isfinite(mu) or mu < 0:
            raise ValueError(f"mu must be a finite non-negative number, got {self.mu!r}")
        object.__setattr__(self, "Lf", Lf)
        object.__setattr__(self, "mu", mu)
        object.__setattr__(self, "y0", as_vector(self.y0))
        if hasattr(self.h, "evaluate"):
            h_y0 = evaluate(self.h, self.y0)
            if not math.isfinite(h_y0):
                raise ValueError("y0 must lie in the domain of h (h(y0) is not finite)")

    def override(self, **changes: Any) -> "FistaConfig":
        """Return a copy with ``changes`` applied; unknown names raise TypeError."""
        return dataclasses.replace(self, **changes)


CONFIG_FIELDS = tuple(f.name for f in dataclasses.fields(FistaConfig))


__all__ = [
    "CONFIG_FIELDS",
    "FistaConfig",
    "ProximableFunction",
    "ProximableOracle",
    "SmoothFunction",
    "SmoothOracle",
    "ZeroProx",
    "ZeroSmooth",
    "evaluate",
    "gradient",
    "prox",
]
