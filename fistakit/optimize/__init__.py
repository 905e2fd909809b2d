"""Accelerated proximal-gradient methods for composite convex problems.

Example
-------
>>> import numpy as np
>>> from fistakit.optimize import FistaSolver, SmoothFunction
>>> c = np.array([3.0, 4.0])
>>> f = SmoothFunction(fun=lambda x: 0.5 * np.sum((x - c) ** 2), grad=lambda x: x - c)
>>> y, iterations = FistaSolver(maxit=200, tol=1e-8, f=f, Lf=1.0)(np.zeros(2))
>>> y.tolist()
[3.0, 4.0]
"""

from .backtracking import (
    DEFAULT_MINIMUM_GAMMA,
    backtrack_stepsize,
    backtrack_stepsize_inplace,
    eval_with_pullback,
    f_model,
    lower_bound_smoothness_constant,
)
from .core import (
    FistaConfig,
    ProximableFunction,
    ProximableOracle,
    SmoothFunction,
    SmoothOracle,
    ZeroProx,
    ZeroSmooth,
)
from .fista import (
    AIPP,
    CLASSIC,
    TERMINATION_TYPES,
    FistaIteration,
    FistaSolver,
    FistaState,
    check_stopping_condition,
    fista,
)

__all__ = [
    "AIPP",
    "CLASSIC",
    "DEFAULT_MINIMUM_GAMMA",
    "FistaConfig",
    "FistaIteration",
    "FistaSolver",
    "FistaState",
    "ProximableFunction",
    "ProximableOracle",
    "SmoothFunction",
    "SmoothOracle",
    "TERMINATION_TYPES",
    "ZeroProx",
    "ZeroSmooth",
    "backtrack_stepsize",
    "backtrack_stepsize_inplace",
    "check_stopping_condition",
    "eval_with_pullback",
    "f_model",
    "fista",
    "lower_bound_smoothness_constant",
]
