"""Backtracking estimation of local smoothness constants.

The routines here work on composite models ``f(A z) + g(z)`` where ``A`` is an
optional linear map. Given a trial stepsize ``gamma`` the forward-backward
step ``z = prox_{gamma g}(x - gamma A^H grad f(Ax))`` is accepted once the
quadratic upper model

    f(Ax) - Re<A^H grad f(Ax), x - z> + (alpha / gamma) ||x - z||^2 / 2

majorizes ``f(Az)``; otherwise ``gamma`` is halved.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Optional

import numpy as np

from ..logging import get_logger
from .core import ProximableOracle, SmoothOracle, gradient, prox
from .utils import (
    Array,
    LinearMap,
    apply_adjoint,
    apply_map,
    apply_map_into,
    as_vector,
    norm,
    real_eps,
    real_inner,
)

logger = get_logger(__name__)

DEFAULT_MINIMUM_GAMMA = 1e-7


def f_model(f_x: float, grad_f_x: Array, res: Array, L: float) -> float:
    """Quadratic upper model of ``f`` at ``x - res`` built around ``x``."""
    return f_x - real_inner(grad_f_x, res) + (L / 2) * norm(res) ** 2


def eval_with_pullback(f: SmoothOracle, x: Array) -> tuple[float, Callable[[], Array]]:
    """Return ``f(x)`` and a closure computing ``grad f(x)`` on demand."""
    if hasattr(f, "eval_with_pullback"):
        value, pullback = f.eval_with_pullback(x)
        return float(value), pullback
    value = float(f.evaluate(x))
    return value, lambda: gradient(f, x)


def _tolerance(f_Az: float, x: Array) -> float:
    return 10 * real_eps(x) * (1 + abs(f_Az))


def backtrack_stepsize_inplace(
    gamma: float,
    f: SmoothOracle,
    A: Optional[LinearMap],
    g: ProximableOracle,
    x: Array,
    f_Ax: float,
    At_grad_f_Ax: Array,
    y: Array,
    z: Array,
    g_z: float,
    res: Array,
    Az: Array,
    grad_f_Az: Optional[Array] = None,
    *,
    alpha: float = 1.0,
    minimum_gamma: float = DEFAULT_MINIMUM_GAMMA,
) -> tuple[float, float, float, float]:
    """Shrink ``gamma`` until the quadratic model majorizes ``f(Az)``.

    On entry ``z`` must hold the forward-backward step for ``gamma``,
    ``res = x - z`` and ``g_z = g(z)``. The buffers ``y``, ``z``, ``res`` and
    ``Az`` are overwritten with the quantities for the accepted stepsize; when
    ``grad_f_Az`` is given it receives ``grad f(Az)`` at the accepted point.

    Returns:
        ``(gamma, g(z), f(Az), f_model)`` for the accepted stepsize.
    """
    f_Az_upp = f_model(f_Ax, At_grad_f_Ax, res, alpha / gamma)
    apply_map_into(Az, A, z)
    f_Az, pullback = eval_with_pullback(f, Az)
    if grad_f_Az is not None:
        grad_f_Az[...] = pullback()
    tol = _tolerance(f_Az, x)
    while f_Az > f_Az_upp + tol and gamma >= minimum_gamma:
        gamma /= 2
        y[...] = x - gamma * At_grad_f_Ax
        z_new, g_z = prox(g, y, gamma)
        z[...] = z_new
        res[...] = x - z
        f_Az_upp = f_model(f_Ax, At_grad_f_Ax, res, alpha / gamma)
        apply_map_into(Az, A, z)
        f_Az, pullback = eval_with_pullback(f, Az)
        if grad_f_Az is not None:
            grad_f_Az[...] = pullback()
        tol = _tolerance(f_Az, x)
    if gamma < minimum_gamma:
        logger.warning("stepsize `gamma` became too small (%g)", gamma)
    return gamma, g_z, f_Az, f_Az_upp


def backtrack_stepsize(
    gamma: float,
    f: SmoothOracle,
    A: Optional[LinearMap],
    g: ProximableOracle,
    x: Any,
    *,
    alpha: float = 1.0,
    minimum_gamma: float = DEFAULT_MINIMUM_GAMMA,
) -> tuple[float, float, float, float]:
    """Backtracking search starting from scratch at ``x``.

    Computes ``f(Ax)``, ``A^H grad f(Ax)`` and the first forward-backward step
    before delegating to :func:`backtrack_stepsize_inplace`.
    """
    if gamma <= 0:
        raise ValueError("gamma must be positive")
    x = as_vector(x)
    Ax = apply_map(A, x)
    f_Ax, pullback = eval_with_pullback(f, Ax)
    grad_f_Ax = np.array(pullback(), copy=True)
    At_grad_f_Ax = apply_adjoint(A, grad_f_Ax)
    y = x - gamma * At_grad_f_Ax
    z, g_z = prox(g, y, gamma)
    z = np.array(z, copy=True)
    return backtrack_stepsize_inplace(
        gamma,
        f,
        A,
        g,
        x,
        f_Ax,
        At_grad_f_Ax,
        y,
        z,
        g_z,
        x - z,
        Ax,
        grad_f_Ax,
        alpha=alpha,
        minimum_gamma=minimum_gamma,
    )


def lower_bound_smoothness_constant(
    f: SmoothOracle,
    A: Optional[LinearMap],
    x: Any,
    grad_f_Ax: Optional[Array] = None,
) -> float:
    """Cheap empirical lower bound on the smoothness constant of ``f(A .)``.

    Shifts ``x`` by one in every coordinate and compares gradients. Meant for
    sanity-checking an assumed ``Lf``.
    """
    x = as_vector(x)
    if grad_f_Ax is None:
        _, pullback = eval_with_pullback(f, apply_map(A, x))
        grad_f_Ax = pullback()
    x_eps = x + 1
    _, pullback = eval_with_pullback(f, apply_map(A, x_eps))
    grad_f_Ax_eps = pullback()
    diff = apply_adjoint(A, np.asarray(grad_f_Ax_eps) - np.asarray(grad_f_Ax))
    return norm(diff) / math.sqrt(x.size)


__all__ = [
    "DEFAULT_MINIMUM_GAMMA",
    "backtrack_stepsize",
    "backtrack_stepsize_inplace",
    "eval_with_pullback",
    "f_model",
    "lower_bound_smoothness_constant",
]
