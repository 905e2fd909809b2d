"""Smooth oracles whose gradients come from ``torch.autograd``."""

from __future__ import annotations

from typing import Callable

import numpy as np
import torch

from fistakit.torch.utils import as_array, as_scalar, as_tensor


class AutogradFunction:
    """
    Smooth term defined by a torch-traceable scalar objective.

    The gradient is obtained by back-propagation. For complex inputs PyTorch
    returns the conjugate Wirtinger gradient scaled so that it coincides with
    the real gradient of ``f`` viewed as a function of ``(Re x, Im x)``.

    Parameters
    ----------
    fun:
        Callable mapping a tensor to a real scalar tensor.

    Example
    -------
    >>> import numpy as np
    >>> f = AutogradFunction(lambda t: 0.5 * (t ** 2).sum())
    >>> f.gradient(np.array([1.0, -2.0]))
    array([ 1., -2.])
    """

    def __init__(self, fun: Callable[[torch.Tensor], torch.Tensor]) -> None:
        self.fun = fun

    def evaluate(self, x: np.ndarray) -> float:
        with torch.no_grad():
            return as_scalar(self.fun(as_tensor(x)))

    def eval_with_pullback(
        self, x: np.ndarray
    ) -> tuple[float, Callable[[], np.ndarray]]:
        """Run one forward pass; the returned closure back-propagates once."""
        leaf = as_tensor(x, requires_grad=True)
        out = self.fun(leaf)
        value = as_scalar(out)

        def pullback() -> np.ndarray:
            if not out.requires_grad:
                return np.zeros_like(as_array(leaf))
            (grad,) = torch.autograd.grad(
                out, leaf, retain_graph=True, allow_unused=True
            )
            if grad is None:
                return np.zeros_like(as_array(leaf))
            return as_array(grad)

        return value, pullback

    def gradient(self, x: np.ndarray) -> np.ndarray:
        _, pullback = self.eval_with_pullback(x)
        return pullback()

    def __repr__(self) -> str:
        name = getattr(self.fun, "__name__", type(self.fun).__name__)
        return f"AutogradFunction({name})"


__all__ = ["AutogradFunction"]
