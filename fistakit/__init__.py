"""fistakit - generalized FISTA for strongly convex composite optimization."""

__version__ = "0.1.0"

from .logging import configure_logging, get_logger, set_log_level
from .optimize import (
    AIPP,
    CLASSIC,
    FistaConfig,
    FistaIteration,
    FistaSolver,
    FistaState,
    ProximableFunction,
    SmoothFunction,
    ZeroProx,
    ZeroSmooth,
    backtrack_stepsize,
    backtrack_stepsize_inplace,
    check_stopping_condition,
    fista,
    lower_bound_smoothness_constant,
)

__all__ = [
    "__version__",
    "AIPP",
    "CLASSIC",
    "FistaConfig",
    "FistaIteration",
    "FistaSolver",
    "FistaState",
    "ProximableFunction",
    "SmoothFunction",
    "ZeroProx",
    "ZeroSmooth",
    "backtrack_stepsize",
    "backtrack_stepsize_inplace",
    "check_stopping_condition",
    "configure_logging",
    "fista",
    "get_logger",
    "lower_bound_smoothness_constant",
    "set_log_level",
]
