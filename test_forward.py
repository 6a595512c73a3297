"""
Forward mode: Dual numbers (value + Jacobian in one pass) and second-order
Taylor numbers (Hessian by directional passes).
"""

import sys
from pathlib import Path

import numpy as np
import pytest
from scipy import special

sys.path.insert(0, str(Path(__file__).parent))

from aad_evaluator import Evaluator, EvaluatorConfig
from aad_evaluator.errors import NumericalError
from aad_evaluator.forward import (
    Dual, seed_duals, dual_jacobian, TVar, taylor_grad_hessian, taylor_hessian,
)


def fd_gradient(f, x, h=1e-6):
    x = np.asarray(x, dtype=float)
    g = np.zeros_like(x)
    for i in range(x.size):
        e = np.zeros_like(x)
        e[i] = h
        g[i] = (f(x + e) - f(x - e)) / (2 * h)
    return g


def smooth(x):
    return special.erf(x[0]) + special.ndtr(x[0] * x[1]) + np.tanh(x[1]) + np.tan(0.3 * x[0]) - np.abs(x[1])


# ----------------------------------------------------------------------------
# Dual
# ----------------------------------------------------------------------------

def test_dual_arithmetic():
    x, y = seed_duals([2.0, 3.0])
    z = x * y + x / y - 1.0
    assert z.val == pytest.approx(6.0 + 2.0 / 3.0 - 1.0)
    np.testing.assert_allclose(z.grad, [3.0 + 1.0 / 3.0, 2.0 - 2.0 / 9.0])

    w = 1.0 - 2.0 / x
    assert w.val == pytest.approx(0.0)
    np.testing.assert_allclose(w.grad, [0.5, 0.0])


def test_dual_negative_base_integer_power():
    x = Dual(-2.0, [1.0])
    np.testing.assert_allclose((x ** 2).grad, [-4.0])
    y = x ** 3
    assert y.val == -8.0
    np.testing.assert_allclose(y.grad, [12.0])


def test_dual_variable_exponent():
    a, b = seed_duals([2.0, 3.0])
    y = a ** b
    assert y.val == pytest.approx(8.0)
    np.testing.assert_allclose(y.grad, [12.0, 8.0 * np.log(2.0)])
    z = 2.0 ** b
    np.testing.assert_allclose(z.grad, [0.0, 8.0 * np.log(2.0)])


def test_dual_fractional_power_of_negative_base_is_nan():
    x = Dual(-4.0, [1.0])
    with np.errstate(invalid="ignore"):
        y = x ** 0.5
        z = x ** 1.5
    assert np.isnan(y.val) and np.isnan(y.grad[0])
    assert np.isnan(z.val) and np.isnan(z.grad[0])

    ev = Evaluator(lambda v: v[0] ** 0.5, EvaluatorConfig(backend="forward"))
    with np.errstate(invalid="ignore"):
        assert np.isnan(ev.gradient([-4.0])).all()
        assert np.isnan(ev.hessian([-4.0])).all()


def test_dual_division_by_zero():
    x = Dual(1.0, [1.0])
    with pytest.raises(NumericalError):
        x / 0.0
    with pytest.raises(NumericalError):
        1.0 / Dual(0.0, [1.0])
    with pytest.raises(NumericalError):
        np.log(Dual(0.0, [1.0]))


def test_dual_ufuncs_match_finite_differences():
    x0 = np.array([0.4, -0.9])
    values, J = dual_jacobian(smooth, x0)
    assert values[0] == pytest.approx(smooth(x0))
    np.testing.assert_allclose(J[0], fd_gradient(smooth, x0), rtol=1e-7)


def test_dual_jacobian_multi_output():
    def f(x):
        return [x[0] * x[1], np.exp(x[0]), 4.0]
    values, J = dual_jacobian(f, [1.0, 2.0])
    np.testing.assert_allclose(values, [2.0, np.e, 4.0])
    np.testing.assert_allclose(J, [[2.0, 1.0], [np.e, 0.0], [0.0, 0.0]])


def test_dual_comparisons():
    x, y = seed_duals([1.0, 2.0])
    assert x < y
    assert y >= 2.0
    assert np.float64(0.5) < x


def test_dual_rejects_non_numbers():
    with pytest.raises(TypeError):
        Dual(1.0, [1.0]) + "a"


# ----------------------------------------------------------------------------
# Taylor
# ----------------------------------------------------------------------------

def test_tvar_chain_rule():
    # y = x^3 along d=1 at x=2: y'=12, y''=12
    y = TVar(2.0, 1.0, 0.0) ** 3
    assert (y.v0, y.v1, y.v2) == pytest.approx((8.0, 12.0, 12.0))
    y = np.exp(TVar(0.0, 1.0, 0.0)) * np.sin(TVar(0.0, 1.0, 0.0))
    # d/dx e^x sin x = e^x (sin x + cos x); second = 2 e^x cos x
    assert (y.v0, y.v1, y.v2) == pytest.approx((0.0, 1.0, 2.0))


def test_tvar_division_by_zero():
    with pytest.raises(NumericalError):
        TVar(1.0, 1.0) / TVar(0.0)
    with pytest.raises(NumericalError):
        2.0 / TVar(0.0, 1.0)


def test_tvar_variable_exponent():
    # x^p at (2, 3): f_xx = 6x = 12, f_xp = x^2 (1 + 3 ln x), f_pp = x^3 ln^2 x
    ln2 = np.log(2.0)
    y = TVar(2.0, 1.0) ** TVar(3.0, 1.0)
    assert y.v0 == pytest.approx(8.0)
    assert y.v1 == pytest.approx(12.0 + 8.0 * ln2)
    assert y.v2 == pytest.approx(12.0 + 8.0 * (1.0 + 3.0 * ln2) + 8.0 * ln2 ** 2)
    z = 2.0 ** TVar(3.0, 1.0)
    assert (z.v0, z.v1, z.v2) == pytest.approx((8.0, 8.0 * ln2, 8.0 * ln2 ** 2))


@pytest.mark.parametrize("x0", [[0.0, 2.0], [-2.0, 2.0]])
def test_tvar_variable_exponent_non_positive_base(x0):
    H = taylor_hessian(lambda x: x[0] ** x[1], x0)
    np.testing.assert_allclose(H, [[2.0, 0.0], [0.0, 0.0]])

    ev = Evaluator(lambda x: x[0] ** x[1], EvaluatorConfig(backend="forward"))
    np.testing.assert_allclose(ev.evaluate(x0), [x0[0] ** 2])
    np.testing.assert_allclose(ev.gradient(x0), [[2.0 * x0[0], 0.0]])
    np.testing.assert_allclose(ev.hessian(x0), [[2.0, 0.0], [0.0, 0.0]])


def test_taylor_hessian_polynomial():
    def f(x):
        return x[0] * x[0] * x[1] + np.sin(x[1])
    x = np.array([1.5, -0.7])
    g, H, f0 = taylor_grad_hessian(f, x)
    assert f0 == pytest.approx(f(x))
    np.testing.assert_allclose(g, [2 * x[0] * x[1], x[0] ** 2 + np.cos(x[1])], rtol=1e-12)
    np.testing.assert_allclose(
        H, [[2 * x[1], 2 * x[0]], [2 * x[0], -np.sin(x[1])]], rtol=1e-12,
    )


def test_taylor_hessian_selects_output():
    def f(x):
        return [x[0] * x[1], x[0] + x[1] ** 3]
    np.testing.assert_allclose(taylor_hessian(f, [2.0, 3.0], output_index=1), [[0.0, 0.0], [0.0, 18.0]])
    np.testing.assert_allclose(taylor_hessian(f, [2.0, 3.0], output_index=0), [[0.0, 1.0], [1.0, 0.0]])


def test_taylor_hessian_special_functions():
    x = np.array([0.4, -0.9])
    H = taylor_hessian(smooth, x)
    g = lambda z: dual_jacobian(smooth, z)[1][0]
    # Hessian from central differences of the exact Dual gradient
    H_fd = np.column_stack([
        (g(x + h) - g(x - h)) / 2e-6 for h in np.eye(2) * 1e-6
    ])
    np.testing.assert_allclose(H, H_fd, rtol=1e-5, atol=1e-7)
    np.testing.assert_allclose(H, H.T)


def test_taylor_constant_output():
    H = taylor_hessian(lambda x: 3.0, [1.0, 2.0])
    np.testing.assert_array_equal(H, np.zeros((2, 2)))


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
