# forward/dual.py
# First-order forward mode (vector mode): one pass gives the full Jacobian.

import numbers
from typing import Callable, List, Tuple

import numpy as np
from scipy import special

from ..errors import NumericalError
from ..numeric import NumpyDispatchMixin
from ..target import as_output_list

SQRT_TWO_PI = np.sqrt(2.0 * np.pi)
TWO_OVER_SQRT_PI = 2.0 / np.sqrt(np.pi)


class Dual(NumpyDispatchMixin):
    """
    Dual number carrying a value and the vector of its partial derivatives
    with respect to the n independent inputs:

        v = val + Σ_i grad[i] ε_i,   ε_i ε_j = 0

    Every operator applies the chain rule to `grad`, so evaluating a generic
    function on seeded Duals yields value and gradient together.
    """
    __slots__ = ("val", "grad")

    def __init__(self, val, grad):
        # float64 so that domain errors (negative base, fractional power) give NaN
        self.val = np.float64(val)
        self.grad = np.asarray(grad, dtype=float)

    def __repr__(self):
        return f"Dual({float(self.val)!r}, grad={self.grad!r})"

    def _cmp_value(self):
        return self.val

    def _lift(self, other) -> "Dual":
        if isinstance(other, Dual):
            return other
        if isinstance(other, numbers.Real):
            return Dual(other, np.zeros_like(self.grad))
        raise TypeError(f"unsupported operand for Dual: {type(other)}")

    def _chain(self, val, deriv) -> "Dual":
        return Dual(val, deriv * self.grad)

    # ----- arithmetic -----
    def __add__(a, b):
        if isinstance(b, numbers.Real):
            return Dual(a.val + b, a.grad)
        b = a._lift(b)
        return Dual(a.val + b.val, a.grad + b.grad)
    __radd__ = __add__

    def __sub__(a, b):
        if isinstance(b, numbers.Real):
            return Dual(a.val - b, a.grad)
        b = a._lift(b)
        return Dual(a.val - b.val, a.grad - b.grad)

    def __rsub__(b, a):
        return Dual(a - b.val, -b.grad)

    def __mul__(a, b):
        if isinstance(b, numbers.Real):
            return Dual(a.val * b, a.grad * b)
        b = a._lift(b)
        return Dual(a.val * b.val, a.grad * b.val + a.val * b.grad)
    __rmul__ = __mul__

    def __truediv__(a, b):
        b = a._lift(b)
        if b.val == 0.0:
            raise NumericalError(f"division by zero ({a.val!r} / {b.val!r})")
        return Dual(a.val / b.val, (a.grad * b.val - a.val * b.grad) / (b.val * b.val))

    def __rtruediv__(b, a):
        return b._lift(a) / b

    def __neg__(a):
        return Dual(-a.val, -a.grad)

    def __pos__(a):
        return a

    def __abs__(a):
        return a._chain(abs(a.val), float(np.sign(a.val)))

    def __pow__(a, b):
        if isinstance(b, Dual):
            y = a.val ** b.val
            dy_da = b.val * a.val ** (b.val - 1.0) if b.val != 0 else 0.0
            dy_db = y * np.log(a.val) if a.val > 0 else 0.0
            return Dual(y, dy_da * a.grad + dy_db * b.grad)
        p = np.float64(b)
        if a.val == 0.0 and p < 0:
            raise NumericalError(f"zero raised to negative power {p!r}")
        deriv = p * a.val ** (p - 1.0) if p != 0 else 0.0
        return a._chain(a.val ** p, deriv)

    def __rpow__(b, a):
        return b._lift(a) ** b

    # ----- elementary functions -----
    def exp(a):
        e = np.exp(a.val)
        return a._chain(e, e)

    def log(a):
        if a.val == 0.0:
            raise NumericalError("log of zero")
        return a._chain(np.log(a.val), 1.0 / a.val)

    def sqrt(a):
        s = np.sqrt(a.val)
        return a._chain(s, 0.5 / s if s != 0.0 else np.inf)

    def sin(a):
        return a._chain(np.sin(a.val), np.cos(a.val))

    def cos(a):
        return a._chain(np.cos(a.val), -np.sin(a.val))

    def tan(a):
        t = np.tan(a.val)
        return a._chain(t, 1.0 + t * t)

    def tanh(a):
        t = np.tanh(a.val)
        return a._chain(t, 1.0 - t * t)

    def erf(a):
        return a._chain(special.erf(a.val), TWO_OVER_SQRT_PI * np.exp(-a.val * a.val))

    def norm_cdf(a):
        return a._chain(special.ndtr(a.val), np.exp(-0.5 * a.val * a.val) / SQRT_TWO_PI)


def seed_duals(params) -> List[Dual]:
    """Independent variables: x_i carries the unit vector e_i as its gradient."""
    x = np.asarray(params, dtype=float)
    eye = np.eye(x.size)
    return [Dual(x[i], eye[i]) for i in range(x.size)]


def dual_jacobian(f: Callable, params) -> Tuple[np.ndarray, np.ndarray]:
    """
    Value and Jacobian of f at `params` in a single forward pass.

    Args:
        f: generic target function, f(x) -> scalar or sequence
        params: 1-D parameter vector

    Returns:
        (values, J): values shape (m,), J shape (m, n)
    """
    x = np.asarray(params, dtype=float)
    n = x.size
    xs = np.empty(n, dtype=object)
    xs[:] = seed_duals(x)
    ys = as_output_list(f(xs))

    values = np.zeros(len(ys))
    J = np.zeros((len(ys), n))
    for k, y in enumerate(ys):
        if isinstance(y, Dual):
            values[k] = y.val
            J[k, :] = y.grad
        else:
            # output independent of the inputs
            values[k] = float(y)
    return values, J
