"""
Derivative backends: every backend must agree with the hand-derived
derivatives (AD to machine precision, finite differences approximately).
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from scipy import special

sys.path.insert(0, str(Path(__file__).parent))

from aad_evaluator.methods import (
    ReverseTapeMethod, ForwardDualMethod, FiniteDifferenceMethod, AnalyticalMethod,
)
from aad_evaluator.report import compare_methods
from aad_evaluator.target import TargetFunction
from aad_evaluator.vignette import banana, banana_gradient, banana_hessian
from aad_evaluator.errors import NumericalError


def mixed(x):
    """Two outputs built from the whole primitive set."""
    a, b, c = x[0], x[1], x[2]
    y0 = np.exp(a * b) / (1.0 + c * c) + np.sqrt(b) * np.log(c) - special.erf(a - b)
    y1 = special.ndtr(a) * np.cos(b) + np.tanh(c) ** 2 + a ** b
    return [y0, y1]


X_MIXED = np.array([0.3, 1.4, 0.8])

AD_BACKENDS = [
    lambda f: ReverseTapeMethod(f, hessian_method="for"),
    lambda f: ReverseTapeMethod(f, hessian_method="edge_pushing"),
    lambda f: ForwardDualMethod(f),
]


@pytest.mark.parametrize("make", AD_BACKENDS)
def test_ad_backends_match_analytical_banana(make):
    method = make(banana)
    for x in ([-1.2, 1.0], [0.5, -0.3], [1.0, 1.0]):
        x = np.array(x)
        res = method.compute(x)
        assert res['value'][0] == pytest.approx(banana(x), rel=1e-14)
        np.testing.assert_allclose(res['gradient'], banana_gradient(x), rtol=1e-12, atol=1e-12)
        np.testing.assert_allclose(res['hessian'], banana_hessian(x), rtol=1e-12, atol=1e-12)


@pytest.mark.parametrize("output_index", [0, 1])
def test_ad_backends_agree_on_mixed(output_index):
    ref = ReverseTapeMethod(mixed).compute(X_MIXED, output_index=output_index)
    for make in AD_BACKENDS[1:]:
        res = make(mixed).compute(X_MIXED, output_index=output_index)
        np.testing.assert_allclose(res['value'], ref['value'], rtol=1e-14)
        np.testing.assert_allclose(res['jacobian'], ref['jacobian'], rtol=1e-11, atol=1e-12)
        np.testing.assert_allclose(res['hessian'], ref['hessian'], rtol=1e-9, atol=1e-10)
    np.testing.assert_allclose(ref['hessian'], ref['hessian'].T, rtol=1e-12, atol=1e-12)


def test_finite_differences_approximate_ad():
    ref = ReverseTapeMethod(mixed).compute(X_MIXED, output_index=1)
    fd = FiniteDifferenceMethod(mixed).compute(X_MIXED, output_index=1)
    np.testing.assert_allclose(fd['jacobian'], ref['jacobian'], rtol=1e-6, atol=1e-8)
    np.testing.assert_allclose(fd['hessian'], ref['hessian'], rtol=1e-4, atol=1e-5)


def test_finite_difference_error_shrinks_with_step():
    x0 = np.array([-1.2, 1.0])
    errors = [
        np.max(np.abs(FiniteDifferenceMethod(banana, step=h).jacobian(x0)[0] - banana_gradient(x0)))
        for h in (1e-2, 1e-3, 1e-4)
    ]
    assert errors[0] > errors[1] > errors[2]


def test_result_format():
    res = ReverseTapeMethod(mixed).compute(X_MIXED, output_index=1)
    assert set(res) == {
        'value', 'jacobian', 'hessian', 'gradient', 'output_index',
        'time_ms', 'n_passes', 'method',
    }
    assert res['value'].shape == (2,)
    assert res['jacobian'].shape == (2, 3)
    assert res['hessian'].shape == (3, 3)
    np.testing.assert_array_equal(res['gradient'], res['jacobian'][1])
    assert res['method'] == "Reverse-Tape"
    assert res['n_passes'] == 5
    assert res['time_ms'] >= 0.0

    res = ForwardDualMethod(mixed).compute(X_MIXED, with_hessian=False)
    assert res['hessian'] is None
    assert res['n_passes'] == 2


def test_n_passes():
    assert ReverseTapeMethod(banana, hessian_method="edge_pushing").n_passes(10, True) == 3
    assert ReverseTapeMethod(banana).n_passes(10, True) == 12
    assert ForwardDualMethod(banana).n_passes(3, True) == 2 + 3 + 3
    assert FiniteDifferenceMethod(banana).n_passes(2, False) == 5


def test_constructor_validation():
    with pytest.raises(ValueError):
        ReverseTapeMethod(banana, hessian_method="bumping")
    with pytest.raises(ValueError):
        FiniteDifferenceMethod(banana, step=0.0)
    with pytest.raises(TypeError):
        ReverseTapeMethod("banana")


def test_analytical_without_hessian():
    method = AnalyticalMethod(banana, banana_gradient)
    with pytest.raises(NotImplementedError):
        method.hessian([1.0, 1.0])
    res = method.compute([1.0, 1.0])
    assert res['hessian'] is None
    np.testing.assert_allclose(res['jacobian'], [[0.0, 0.0]])


def test_shared_target_function():
    target = TargetFunction(banana, n_inputs=2, name="banana")
    methods = [ReverseTapeMethod(target), ForwardDualMethod(target)]
    assert all(m.target is target for m in methods)
    assert repr(methods[0]) == "Reverse-Tape(banana)"


@pytest.mark.parametrize("make", AD_BACKENDS + [lambda f: FiniteDifferenceMethod(f)])
def test_division_by_zero_in_every_backend(make):
    method = make(lambda x: x[0] / x[1])
    with pytest.raises(NumericalError):
        method.evaluate([1.0, 0.0])
    with pytest.raises(NumericalError):
        method.jacobian([1.0, 0.0])


@pytest.mark.parametrize("f, x0", [
    (lambda x: x[0] ** 0.5, [-4.0]),
    (lambda x: x[0] ** 1.5 + x[1], [-4.0, 1.0]),
])
def test_fractional_power_of_negative_base_is_nan_everywhere(f, x0):
    with np.errstate(invalid="ignore"):
        for method in [make(f) for make in AD_BACKENDS] + [FiniteDifferenceMethod(f)]:
            res = method.compute(x0)
            assert np.isnan(res['value'][0]), method.method_name
            assert np.isnan(res['jacobian'][0, 0]), method.method_name
            assert np.isnan(res['hessian'][0, 0]), method.method_name


@pytest.mark.parametrize("x0", [[-2.0, 2.0], [0.0, 2.0], [-1.5, 3.0]])
def test_variable_exponent_with_non_positive_base(x0):
    # the exponent partials are 0 where log(x) is undefined; the base terms are exact
    def f(x):
        return x[0] ** x[1]

    p = x0[1]
    value = x0[0] ** p
    grad = [p * x0[0] ** (p - 1.0), 0.0]
    hess = [[p * (p - 1.0) * x0[0] ** (p - 2.0), 0.0], [0.0, 0.0]]

    for make in AD_BACKENDS:
        res = make(f).compute(x0)
        np.testing.assert_allclose(res['value'], [value], rtol=1e-14)
        np.testing.assert_allclose(res['jacobian'], [grad], rtol=1e-14)
        np.testing.assert_allclose(res['hessian'], hess, rtol=1e-14)

    # bumping the exponent (or a zero base to the left) leaves the real line
    with np.errstate(invalid="ignore"):
        fd = FiniteDifferenceMethod(f).compute(x0)
    np.testing.assert_allclose(fd['value'], [value])
    np.testing.assert_allclose(fd['jacobian'][0, 0], grad[0], rtol=1e-6, atol=1e-8)
    np.testing.assert_allclose(fd['hessian'][0, 0], hess[0][0], rtol=1e-5)
    finite = np.isfinite(fd['hessian'])
    np.testing.assert_allclose(fd['hessian'][finite], np.asarray(hess)[finite], atol=1e-5)


def test_compare_methods_table():
    x0 = [-1.2, 1.0]
    table = compare_methods(
        [
            AnalyticalMethod(banana, banana_gradient, banana_hessian),
            ReverseTapeMethod(banana),
            ReverseTapeMethod(banana, hessian_method="edge_pushing"),
            ForwardDualMethod(banana),
            FiniteDifferenceMethod(banana),
        ],
        x0,
    )
    assert isinstance(table, pd.DataFrame)
    assert list(table.index) == [
        "Analytical", "Reverse-Tape", "Reverse-EdgePushing", "Forward-Dual", "Finite-Difference",
    ]
    np.testing.assert_allclose(table['value'], 24.2)
    assert table.loc["Reverse-Tape", "max_abs_grad_diff"] < 1e-10
    assert table.loc["Reverse-EdgePushing", "max_abs_hess_diff"] < 1e-10
    assert table.loc["Finite-Difference", "max_abs_grad_diff"] < 1e-4
    with pytest.raises(ValueError):
        compare_methods([], x0)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
