import logging
import math
from io import StringIO

import numpy as np
import pytest

from fistakit.logging import configure_logging
from fistakit.optimize import (
    AIPP,
    FistaConfig,
    FistaSolver,
    SmoothFunction,
    fista,
)


def shifted_quadratic(c: np.ndarray) -> SmoothFunction:
    return SmoothFunction(fun=lambda x: 0.5 * np.sum((x - c) ** 2), grad=lambda x: x - c)


def test_defaults():
    solver = FistaSolver()
    assert solver.maxit == 1000
    assert solver.tol == 1e-6
    assert solver.termination_type == ""
    assert solver.verbose is False
    assert solver.freq == 10


def test_default_freq_for_unbounded_and_small_maxit():
    assert FistaSolver(maxit=math.inf).freq == 100
    assert FistaSolver(maxit=50).freq == 1
    assert FistaSolver(maxit=250).freq == 2


def test_shifted_quadratic_converges_quickly():
    c = np.array([3.0, 4.0])
    solver = FistaSolver(maxit=200, tol=1e-8, f=shifted_quadratic(c), Lf=1.0)
    y, iterations = solver(np.zeros(2))
    np.testing.assert_allclose(y, c, atol=1e-8)
    assert iterations < 200


def test_maxit_zero_returns_seed():
    y0 = np.array([1.0, 2.0])
    y, iterations = FistaSolver(maxit=0, f=shifted_quadratic(np.ones(2)), Lf=1.0)(y0)
    np.testing.assert_array_equal(y, y0)
    assert y is not y0
    assert iterations == 0


def test_iteration_cap_is_not_an_error(quadratic):
    stream = StringIO()
    configure_logging(level=logging.INFO, stream=stream)
    try:
        y, iterations = FistaSolver(
            maxit=3, tol=0.0, f=quadratic["f"], Lf=quadratic["Lf"]
        )(np.zeros(5))
    finally:
        configure_logging(level=logging.WARNING)
    assert "reached maxit=3 without convergence" in stream.getvalue()
    assert iterations == 3
    assert np.all(np.isfinite(y))


def test_error_decreases_with_more_iterations(quadratic):
    y0 = np.zeros(5)
    errors = []
    for maxit in (2, 10, 500):
        y, _ = FistaSolver(maxit=maxit, tol=0.0, f=quadratic["f"], Lf=quadratic["Lf"])(y0)
        errors.append(np.linalg.norm(y - quadratic["x_star"]))
    assert errors[0] > errors[1] >= errors[2]
    assert errors[2] < 1e-6


def test_strongly_convex_run_converges(quadratic):
    y, iterations = FistaSolver(
        maxit=1000, tol=1e-10, f=quadratic["f"], Lf=quadratic["Lf"], mu=quadratic["mu"]
    )(np.zeros(5))
    np.testing.assert_allclose(y, quadratic["x_star"], atol=1e-8)
    assert iterations < 1000


def test_lasso_matches_soft_threshold(l1_term):
    c = np.array([3.0, -0.5, 0.2, -4.0])
    lam = 1.0
    y, iterations = fista(
        np.zeros(4), f=shifted_quadratic(c), h=l1_term(lam), Lf=1.0, tol=1e-10, maxit=100
    )
    expected = np.sign(c) * np.maximum(np.abs(c) - lam, 0.0)
    np.testing.assert_allclose(y, expected, atol=1e-8)
    assert iterations < 100


def test_aipp_termination_runs(quadratic):
    solver = FistaSolver(
        maxit=2000, tol=1e-8, termination_type=AIPP, f=quadratic["f"], Lf=quadratic["Lf"]
    )
    y, iterations = solver(np.ones(5))
    assert iterations <= 2000
    assert np.linalg.norm(y - quadratic["x_star"]) < 1e-2


def test_call_time_overrides_win():
    solver = FistaSolver(maxit=100, tol=1e-10, f=shifted_quadratic(np.ones(2)), Lf=1.0)
    y, _ = solver(np.zeros(2), f=shifted_quadratic(np.array([5.0, -5.0])))
    np.testing.assert_allclose(y, [5.0, -5.0])


def test_unknown_options_rejected():
    with pytest.raises(TypeError):
        FistaSolver(Lf=1.0, stepsize=0.1)
    solver = FistaSolver(Lf=1.0)
    with pytest.raises(TypeError):
        solver(np.zeros(2), stepsize=0.1)


def test_missing_lipschitz_constant_fails_before_iterating():
    calls = []

    def grad(x):
        calls.append(x)
        return x

    solver = FistaSolver(f=SmoothFunction(fun=lambda x: 0.0, grad=grad))
    with pytest.raises(ValueError, match="Lf"):
        solver(np.zeros(2))
    assert calls == []


@pytest.mark.parametrize("kwargs", [{"maxit": -1}, {"tol": -1.0}, {"freq": 0}])
def test_invalid_solver_settings(kwargs):
    with pytest.raises(ValueError):
        FistaSolver(**kwargs)


def test_verbose_reports_every_freq_iterations(capsys, quadratic):
    solver = FistaSolver(
        maxit=6, tol=0.0, verbose=True, freq=2, f=quadratic["f"], Lf=quadratic["Lf"]
    )
    solver(np.zeros(5))
    lines = capsys.readouterr().out.splitlines()
    assert [line.split("|")[0].strip() for line in lines] == ["2", "4", "6"]
    for line in lines:
        index, residual = line.split(" | ")
        assert len(index) == 5
        float(residual)
        assert "e" in residual


def test_verbose_reports_final_iteration_on_convergence():
    messages = []
    solver = FistaSolver(
        maxit=200,
        tol=1e-8,
        verbose=True,
        freq=50,
        reporter=messages.append,
        f=shifted_quadratic(np.array([3.0, 4.0])),
        Lf=1.0,
    )
    _, iterations = solver(np.zeros(2))
    assert messages == [f"{iterations:5d} | {0.0:.3e}"]


def test_repr_mentions_settings():
    text = repr(FistaSolver(maxit=10, tol=1e-3))
    assert text.startswith("FistaSolver(")
    assert "maxit=10" in text


def test_build_config_merges_options():
    solver = FistaSolver(Lf=2.0, mu=0.5)
    config = solver.build_config([1, 2], mu=0.0)
    assert isinstance(config, FistaConfig)
    assert config.Lf == 2.0
    assert config.mu == 0.0
    assert config.y0.dtype == np.float64


def test_stored_initial_point_option_takes_precedence():
    solver = FistaSolver(maxit=0, Lf=1.0, y0=np.zeros(2))
    y, iterations = solver(np.ones(2))
    np.testing.assert_array_equal(y, np.zeros(2))
    assert iterations == 0
    y, _ = solver(np.ones(2), y0=np.full(2, 7.0))
    np.testing.assert_array_equal(y, np.full(2, 7.0))
