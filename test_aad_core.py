"""
Reverse-mode core: ADVar, primitives, reverse sweep, FoR Hessian-vector product.
"""

import sys
from pathlib import Path

import numpy as np
import pytest
from scipy import special

sys.path.insert(0, str(Path(__file__).parent))

from aad_evaluator.aad import (
    ADVar, Tape, use_tape, current_tape, reverse, zero_adjoints,
    grad, grads, grads_list, hvp_for, value, tape_summary,
)
from aad_evaluator.aad import ops
from aad_evaluator.errors import NumericalError


def test_advar_rejects_non_real():
    with pytest.raises(TypeError):
        ADVar("1.0")
    with pytest.raises(TypeError):
        ADVar(True)
    with pytest.raises(TypeError):
        ADVar(1 + 2j)
    x = ADVar(3)
    assert isinstance(x.val, np.float64) and x.val == 3.0


def test_primitives_record_on_active_tape():
    with use_tape() as t:
        x = ADVar(2.0, name="x")
        y = ADVar(5.0, name="y")
        z = x * y + x / y
        assert current_tape() is t
        assert [n.op_tag for n in t.nodes] == ["mul", "div", "add"]
        assert z.val == pytest.approx(10.4)
    assert current_tape() is not t


def test_reverse_accumulates_gradient():
    with use_tape() as t:
        x = ADVar(2.0)
        y = ADVar(5.0)
        z = x * y + x / y
        zero_adjoints(t)
        reverse(z, tape=t)
        assert x.adj == pytest.approx(5.0 + 1.0 / 5.0)
        assert y.adj == pytest.approx(2.0 - 2.0 / 25.0)


def test_reverse_skips_constants():
    with use_tape() as t:
        x = ADVar(3.0)
        c = ADVar(4.0, requires_grad=False)
        z = x * c
        reverse(z, tape=t)
        assert x.adj == pytest.approx(4.0)
        assert c.adj == 0.0


@pytest.mark.parametrize("fn, dfn, x0", [
    (ops.exp, np.exp, 0.7),
    (ops.log, lambda v: 1.0 / v, 1.7),
    (ops.sqrt, lambda v: 0.5 / np.sqrt(v), 2.5),
    (ops.sin, np.cos, 0.3),
    (ops.cos, lambda v: -np.sin(v), 0.3),
    (ops.tan, lambda v: 1.0 / np.cos(v) ** 2, 0.4),
    (ops.tanh, lambda v: 1.0 - np.tanh(v) ** 2, -0.8),
    (ops.erf, lambda v: 2.0 / np.sqrt(np.pi) * np.exp(-v * v), 0.5),
    (ops.norm_cdf, lambda v: np.exp(-0.5 * v * v) / np.sqrt(2 * np.pi), -0.4),
    (ops.abs_, np.sign, -1.5),
])
def test_unary_derivatives(fn, dfn, x0):
    assert grad(fn, x0) == pytest.approx(dfn(x0), rel=1e-12)


def test_integer_power_of_negative_base():
    # d/dx x^3 at -2 = 12; the constant exponent keeps this well-defined
    assert grad(lambda x: x ** 3, -2.0) == pytest.approx(12.0)
    assert grad(lambda x: (x - 3.0) ** 2, 1.0) == pytest.approx(-4.0)


def test_variable_exponent():
    g = grads(lambda v: v["a"] ** v["b"], {"a": 2.0, "b": 3.0})
    assert g["a"] == pytest.approx(12.0)
    assert g["b"] == pytest.approx(8.0 * np.log(2.0))


def test_division_by_zero_raises():
    with use_tape():
        with pytest.raises(NumericalError):
            ADVar(1.0) / ADVar(0.0)
        with pytest.raises(NumericalError):
            1.0 / ADVar(0.0)
        with pytest.raises(NumericalError):
            ops.log(ADVar(0.0))


def test_domain_error_propagates_nan():
    with use_tape(), np.errstate(invalid="ignore"):
        y = ops.log(ADVar(-1.0))
        assert np.isnan(y.val)


def test_numpy_ufuncs_dispatch_to_advar():
    with use_tape() as t:
        x = ADVar(0.5)
        y = np.exp(x) * np.sin(x) + special.erf(x) + special.ndtr(x) + np.square(x)
        assert isinstance(y, ADVar)
        expected = np.exp(0.5) * np.sin(0.5) + special.erf(0.5) + special.ndtr(0.5) + 0.25
        assert y.val == pytest.approx(expected)
        tags = {n.op_tag for n in t.nodes}
        assert {"exp", "sin", "erf", "norm_cdf", "mul", "add"} <= tags


def test_numpy_scalars_mix_with_advar():
    with use_tape():
        x = ADVar(2.0)
        y = np.float64(3.0) * x - np.float64(1.0)
        assert isinstance(y, ADVar) and y.val == 5.0
        z = np.float64(2.0) ** x
        assert isinstance(z, ADVar) and z.val == pytest.approx(4.0)


def test_comparisons_use_values():
    x = ADVar(1.0)
    assert x < 2
    assert x >= 1.0
    assert np.float64(3.0) > x
    assert not (x > ADVar(5.0))


def test_seed_helpers():
    assert grad(lambda x: x * x * x, 2.0) == pytest.approx(12.0)
    assert grads_list(lambda xs: xs[0] * xs[0] + 3 * xs[1], [2.0, 4.0]) == pytest.approx([4.0, 3.0])
    g = grads(lambda v: v["a"] * v["b"], {"a": 2.0, "b": 5.0})
    assert list(g) == ["a", "b"]
    assert g == pytest.approx({"a": 5.0, "b": 2.0})
    assert value(ADVar(1.5)) == 1.5
    assert value(2.0) == 2.0


def test_constant_function_has_zero_gradient():
    assert grads_list(lambda xs: 4.0, [1.0, 2.0]) == [0.0, 0.0]


def test_hvp_for():
    # f = a^2 b  ->  H = [[2b, 2a], [2a, 0]]
    f = lambda v: v["a"] * v["a"] * v["b"]
    hv = hvp_for(f, {"a": 2.0, "b": 3.0}, {"a": 1.0, "b": 0.0})
    np.testing.assert_allclose(hv, [6.0, 4.0])
    hv = hvp_for(f, {"a": 2.0, "b": 3.0}, {"a": 0.0, "b": 1.0})
    np.testing.assert_allclose(hv, [4.0, 0.0])


def test_tape_summary():
    with use_tape() as t:
        x = ADVar(1.0)
        y = ADVar(2.0)
        z = (x * y) * (x * y) + np.exp(x)
    stats = tape_summary(t)
    assert stats["nodes"] == 5
    assert stats["edges"] == 9
    assert stats["operations"] == {"mul": 3, "exp": 1, "add": 1}
    assert stats["max_fan_in"] == 2
    assert (stats["inputs"], stats["constants"]) == (2, 0)
    assert tape_summary(Tape())["nodes"] == 0


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
