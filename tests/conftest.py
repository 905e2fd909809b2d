"""Pytest configuration and shared fixtures for fistakit tests.

Provides deterministic RNG fixtures for numpy and torch, plus a few small
test problems reused across modules.
"""

import os

import numpy as np
import pytest
import torch

from fistakit.optimize import ProximableFunction, SmoothFunction


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG seeded from TEST_RNG_SEED (default 0)."""
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed the global numpy and torch generators before every test."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


def soft_threshold(x: np.ndarray, gamma: float, lam: float) -> tuple[np.ndarray, float]:
    z = np.sign(x) * np.maximum(np.abs(x) - gamma * lam, 0.0)
    return z, lam * float(np.sum(np.abs(z)))


@pytest.fixture
def l1_term():
    """Return a factory for ``lam * ||x||_1`` as a proximable term."""

    def make(lam: float) -> ProximableFunction:
        return ProximableFunction(
            prox_fun=lambda x, gamma: soft_threshold(x, gamma, lam),
            fun=lambda x: lam * float(np.sum(np.abs(x))),
        )

    return make


@pytest.fixture
def quadratic(rng: np.random.Generator):
    """Well-conditioned quadratic ``0.5 x^T Q x - b^T x`` with its data."""
    n = 5
    M = rng.standard_normal((n, n))
    Q = M @ M.T + n * np.eye(n)
    b = rng.standard_normal(n)
    f = SmoothFunction(fun=lambda x: 0.5 * x @ (Q @ x) - b @ x, grad=lambda x: Q @ x - b)
    eigvals = np.linalg.eigvalsh(Q)
    return {
        "f": f,
        "Q": Q,
        "b": b,
        "Lf": float(eigvals[-1]),
        "mu": float(eigvals[0]),
        "x_star": np.linalg.solve(Q, b),
    }
