"""PyTorch integration for fistakit.

Provides smooth oracles differentiated by ``torch.autograd`` so that only the
objective needs to be written.

Example:
    >>> import numpy as np
    >>> import torch
    >>> from fistakit.optimize import FistaSolver
    >>> from fistakit.torch import AutogradFunction
    >>> c = np.array([3.0, 4.0])
    >>> f = AutogradFunction(lambda t: 0.5 * ((t - torch.as_tensor(c)) ** 2).sum())
    >>> y, it = FistaSolver(tol=1e-8, f=f, Lf=1.0)(np.zeros(2))
"""

from fistakit.torch.functions import AutogradFunction
from fistakit.torch.utils import as_array, as_scalar, as_tensor

__all__ = [
    "AutogradFunction",
    "as_array",
    "as_scalar",
    "as_tensor",
]
