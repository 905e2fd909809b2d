"""
Example: sparse regression with generalized FISTA

Solves the lasso problem

    minimize 0.5 * ||M x - b||^2 + lam * ||x||_1

with the smooth part written as a torch objective (gradients via autograd)
and the l1 term supplied through its soft-thresholding proximal operator.
The backtracking helper is used to sanity-check the Lipschitz constant.
"""

import numpy as np
import torch

from fistakit.optimize import (
    FistaSolver,
    ProximableFunction,
    backtrack_stepsize,
    lower_bound_smoothness_constant,
)
from fistakit.torch import AutogradFunction


def soft_threshold(x, gamma, lam):
    z = np.sign(x) * np.maximum(np.abs(x) - gamma * lam, 0.0)
    return z, lam * float(np.sum(np.abs(z)))


def main():
    rng = np.random.default_rng(0)
    n_samples, n_features = 40, 20
    M = rng.standard_normal((n_samples, n_features))
    x_true = np.zeros(n_features)
    x_true[[2, 7, 11]] = [1.5, -2.0, 0.8]
    b = M @ x_true + 0.01 * rng.standard_normal(n_samples)
    lam = 0.5

    Mt = torch.as_tensor(M)
    bt = torch.as_tensor(b)
    f = AutogradFunction(lambda t: 0.5 * ((Mt @ t - bt) ** 2).sum())
    h = ProximableFunction(
        prox_fun=lambda x, gamma: soft_threshold(x, gamma, lam),
        fun=lambda x: lam * float(np.sum(np.abs(x))),
    )

    Lf = float(np.linalg.norm(M, 2) ** 2)
    print("=" * 60)
    print("Smoothness constant")
    print("=" * 60)
    print(f"Spectral bound Lf:        {Lf:.4f}")
    print(f"Empirical lower bound:    {lower_bound_smoothness_constant(f, None, np.zeros(n_features)):.4f}")
    gamma, *_ = backtrack_stepsize(1.0, f, None, h, np.zeros(n_features))
    print(f"Backtracked stepsize:     {gamma:.4e} (1/Lf = {1 / Lf:.4e})")
    print()

    print("=" * 60)
    print("FISTA iterations")
    print("=" * 60)
    solver = FistaSolver(maxit=500, tol=1e-8, verbose=True, freq=50, f=f, h=h, Lf=Lf)
    x, iterations = solver(np.zeros(n_features))
    print()
    print(f"Iterations: {iterations}")
    print(f"Support found: {np.flatnonzero(np.abs(x) > 1e-6).tolist()}")
    print(f"Final estimate error: {np.linalg.norm(x - x_true):.3e}")


if __name__ == "__main__":
    main()
