"""Generalized FISTA for strongly convex composite problems.

Solves ``min_x f(x) + h(x)`` where ``h`` is proper closed convex and ``f`` is
continuously differentiable, ``mu``-strongly convex (``mu >= 0``) with an
``Lf``-Lipschitz gradient. The scheme follows Nesterov's accelerated gradient
method for composite functions and Beck & Teboulle's FISTA for the convex
case.

References:
    - Nesterov, Y. (2013). Gradient methods for minimizing composite
      functions. Mathematical Programming, 140(1), 125-161.
    - Beck, A., & Teboulle, M. (2009). A fast iterative shrinkage-thresholding
      algorithm for linear inverse problems. SIAM J. Imaging Sci., 2(1).
    - Kong, W. (2021). Accelerated Inexact First-Order Methods for Solving
      Nonconvex Composite Optimization Problems. arXiv:2104.09685.
    - Kong, W., Melo, J. G., & Monteiro, R. D. (2021). FISTA and Extensions -
      Review and New Insights. arXiv:2107.01267.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

import numpy as np

from ..logging import get_logger
from .core import CONFIG_FIELDS, FistaConfig, gradient, prox
from .utils import Array, norm

logger = get_logger(__name__)

CLASSIC = ""
AIPP = "AIPP"
TERMINATION_TYPES = (CLASSIC, AIPP)

# Floor on the AIPP denominator.
_AIPP_DENOMINATOR_FLOOR = 1e-16
_APPROX_RTOL = math.sqrt(np.finfo(np.float64).eps)


@dataclass
class FistaState:
    """Mutable iteration state, overwritten in place at every step."""

    lam: float
    y_prev: Array
    y: Array
    x_prev: Array
    x: Array
    xt: Array
    gradf_xt: Array
    gradf_y: Array
    tau: float = 1.0
    a: float = 0.0
    A_prev: float = 1.0
    A: float = 0.0

    @classmethod
    def initial(cls, config: FistaConfig) -> "FistaState":
        y0 = config.y0
        return cls(
            lam=1.0 / config.Lf,
            y_prev=y0.copy(),
            y=np.zeros_like(y0),
            x_prev=y0.copy(),
            x=np.zeros_like(y0),
            xt=np.zeros_like(y0),
            gradf_xt=np.zeros_like(y0),
            gradf_y=np.zeros_like(y0),
        )


class FistaIteration:
    """Explicit state machine producing successive FISTA states.

    The state is created on the first call to :meth:`advance` and then
    mutated in place; iterating over the object yields the same state object
    forever. Create a new instance to restart from ``y0``.
    """

    def __init__(self, config: FistaConfig) -> None:
        self.config = config
        self.state: Optional[FistaState] = None
        self.iterations = 0

    def advance(self) -> FistaState:
        """Perform one accelerated proximal-gradient step."""
        cfg = self.config
        if self.state is None:
            self.state = FistaState.initial(cfg)
        s = self.state
        mu = cfg.mu

        s.tau = s.lam * (1 + mu * s.A_prev)
        s.a = (s.tau + math.sqrt(s.tau**2 + 4 * s.tau * s.A_prev)) / 2
        s.A = s.A_prev + s.a
        s.xt[...] = (s.A_prev / s.A) * s.y_prev + (s.a / s.A) * s.x_prev
        s.gradf_xt[...] = gradient(cfg.f, s.xt)
        lam2 = s.lam / (1 + s.lam * mu)

        s.y[...] = prox(cfg.h, s.xt - lam2 * s.gradf_xt, lam2)[0]
        s.gradf_y[...] = gradient(cfg.f, s.y)
        s.x[...] = s.x_prev + s.a / (1 + s.A * mu) * (
            (s.y - s.xt) / s.lam + mu * (s.y - s.x_prev)
        )

        s.y_prev[...] = s.y
        s.x_prev[...] = s.x
        s.A_prev = s.A
        self.iterations += 1
        logger.debug(
            "step %d: tau=%.3e a=%.3e A=%.3e", self.iterations, s.tau, s.a, s.A
        )
        return s

    def __iter__(self) -> Iterator[FistaState]:
        while True:
            yield self.advance()


def check_stopping_condition(
    state: FistaState,
    config: FistaConfig,
    tol: float,
    termination_type: str = CLASSIC,
) -> tuple[float, bool]:
    """Return ``(residual, converged)`` for ``state``.

    ``termination_type="AIPP"`` measures the inclusion ``r in d_eta(f + h)(y)``
    relative to the distance travelled from ``y0``. Any other value uses the
    classic approximate stationarity residual ``r in grad f(y) + dh(y)``.
    """
    if termination_type == AIPP:
        if state.A == 0:
            return math.inf, False
        r = (config.y0 - state.x) / state.A
        eta = (norm(config.y0 - state.y) ** 2 - norm(state.x - state.y) ** 2) / (
            2 * state.A
        )
        residual = (norm(r) ** 2 + max(eta, 0.0)) / max(
            norm(config.y0 - state.y + r) ** 2, _AIPP_DENOMINATOR_FLOOR
        )
    else:
        r = state.gradf_y - state.gradf_xt + config.Lf * (state.xt - state.y)
        residual = norm(r)
    converged = residual <= tol or math.isclose(residual, tol, rel_tol=_APPROX_RTOL)
    return residual, converged


def _default_freq(maxit: float) -> int:
    if math.isinf(maxit):
        return 100
    return max(int(maxit) // 100, 1)


class FistaSolver:
    """Driver running :class:`FistaIteration` until convergence or ``maxit``.

    Keyword options that are not solver settings are stored and forwarded to
    :class:`FistaConfig` on every call; keywords given at call time override
    them.

    Example
    -------
    >>> import numpy as np
    >>> from fistakit.optimize import FistaSolver, SmoothFunction
    >>> c = np.array([3.0, 4.0])
    >>> f = SmoothFunction(fun=lambda x: 0.5 * np.sum((x - c) ** 2), grad=lambda x: x - c)
    >>> solver = FistaSolver(maxit=200, tol=1e-8, f=f, Lf=1.0)
    >>> y, it = solver(np.zeros(2))
    >>> bool(np.allclose(y, c))
    True
    """

    def __init__(
        self,
        maxit: float = 1000,
        tol: float = 1e-6,
        termination_type: str = CLASSIC,
        verbose: bool = False,
        freq: Optional[int] = None,
        reporter: Optional[Callable[[str], Any]] = None,
        **options: Any,
    ) -> None:
        if maxit < 0:
            raise ValueError("maxit must be non-negative")
        if tol < 0:
            raise ValueError("tol must be non-negative")
        if freq is None:
            freq = _default_freq(maxit)
        if freq < 1:
            raise ValueError("freq must be at least 1")
        unknown = set(options) - set(CONFIG_FIELDS)
        if unknown:
            raise TypeError(f"Unrecognized FISTA options: {sorted(unknown)}")
        self.maxit = maxit
        self.tol = float(tol)
        self.termination_type = termination_type
        self.verbose = bool(verbose)
        self.freq = int(freq)
        self.reporter = reporter if reporter is not None else print
        self.options = dict(options)

    def __repr__(self) -> str:
        return (
            f"FistaSolver(maxit={self.maxit}, tol={self.tol:g}, "
            f"termination_type={self.termination_type!r}, verbose={self.verbose}, "
            f"freq={self.freq})"
        )

    def build_config(self, y0: Any, **overrides: Any) -> FistaConfig:
        return FistaConfig(**{"y0": y0, **self.options, **overrides})

    def __call__(self, y0: Any, **overrides: Any) -> tuple[Array, int]:
        config = self.build_config(y0, **overrides)
        engine = FistaIteration(config)

        if self.maxit == 0:
            return config.y0.copy(), 0

        state: Optional[FistaState] = None
        it = 0
        while it < self.maxit:
            state = engine.advance()
            it += 1
            residual, converged = check_stopping_condition(
                state, config, self.tol, self.termination_type
            )
            last = converged or it >= self.maxit
            if self.verbose and (it % self.freq == 0 or last):
                self.reporter(f"{it:5d} | {residual:.3e}")
            if converged:
                logger.info("converged after %d iterations (residual %.3e)", it, residual)
                break
        else:
            logger.info("reached maxit=%s without convergence", self.maxit)

        return state.y.copy(), it


_SOLVER_KEYS = ("maxit", "tol", "termination_type", "verbose", "freq", "reporter")


def fista(y0: Any, **kwargs: Any) -> tuple[Array, int]:
    """One-shot convenience wrapper around :class:`FistaSolver`."""
    solver_kwargs = {k: kwargs.pop(k) for k in _SOLVER_KEYS if k in kwargs}
    return FistaSolver(**solver_kwargs)(y0, **kwargs)


__all__ = [
    "AIPP",
    "CLASSIC",
    "FistaIteration",
    "FistaSolver",
    "FistaState",
    "TERMINATION_TYPES",
    "check_stopping_condition",
    "fista",
]
