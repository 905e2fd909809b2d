"""Conversions between NumPy iterates and PyTorch tensors."""

from __future__ import annotations

import numpy as np
import torch


def as_tensor(x: np.ndarray, requires_grad: bool = False) -> torch.Tensor:
    """
    Copy a NumPy array into a CPU tensor of dtype float64 or complex128.

    Parameters
    ----------
    x:
        Real or complex array.
    requires_grad:
        Whether the returned leaf tensor should track gradients.

    Returns
    -------
    torch.Tensor
        A new tensor that does not share memory with ``x``.
    """
    arr = np.asarray(x)
    dtype = torch.complex128 if np.iscomplexobj(arr) else torch.float64
    t = torch.tensor(arr, dtype=dtype)
    if requires_grad:
        t.requires_grad_(True)
    return t


def as_array(t: torch.Tensor) -> np.ndarray:
    """Detach ``t`` and return it as a NumPy array."""
    return t.detach().cpu().numpy()


def as_scalar(t: torch.Tensor) -> float:
    """Return a real scalar tensor as a Python float."""
    if t.numel() != 1:
        raise ValueError(f"objective must return a scalar, got shape {tuple(t.shape)}")
    if t.is_complex():
        raise ValueError("objective must be real-valued")
    return float(t.detach().item())


__all__ = ["as_array", "as_scalar", "as_tensor"]
