# forward/taylor.py
# Second-order forward mode along one direction (no tape involved)

import numbers
from typing import Callable, Tuple

import numpy as np
from scipy import special

from ..errors import NumericalError
from ..numeric import NumpyDispatchMixin
from ..target import as_output_list


class TVar(NumpyDispatchMixin):
    """
    Truncated Taylor expansion of a quantity along the path x + t·d:

        v(t) = v0 + v1·t + ½·v2·t²

    v1 is the directional derivative g·d and v2 the directional curvature
    dᵀHd. Seeding the inputs with TVar(x_i, d_i, 0) and evaluating f gives
    both for the output.
    """
    __slots__ = ("v0", "v1", "v2")

    def __init__(self, v0, v1=0.0, v2=0.0):
        self.v0 = np.float64(v0)
        self.v1 = float(v1)
        self.v2 = float(v2)

    def __repr__(self):
        return f"TVar({float(self.v0)!r}, {self.v1!r}, {self.v2!r})"

    def _cmp_value(self):
        return self.v0

    @staticmethod
    def _lift(x) -> "TVar":
        if isinstance(x, TVar):
            return x
        if isinstance(x, numbers.Real):
            return TVar(x)
        raise TypeError(f"unsupported operand for TVar: {type(x)}")

    # ----- arithmetic -----
    def __add__(a, b):
        b = TVar._lift(b)
        return TVar(a.v0 + b.v0, a.v1 + b.v1, a.v2 + b.v2)
    __radd__ = __add__

    def __sub__(a, b):
        return a + (-TVar._lift(b))

    def __rsub__(a, b):
        return TVar._lift(b) + (-a)

    def __mul__(a, b):
        b = TVar._lift(b)
        # Leibniz rule up to second order
        return TVar(
            a.v0 * b.v0,
            a.v1 * b.v0 + a.v0 * b.v1,
            a.v2 * b.v0 + 2.0 * a.v1 * b.v1 + a.v0 * b.v2,
        )
    __rmul__ = __mul__

    def recip(a):
        if a.v0 == 0.0:
            raise NumericalError("division by zero (reciprocal of 0)")
        r = 1.0 / a.v0
        return _compose(a, r, -r * r, 2.0 * r ** 3)

    def __truediv__(a, b):
        return a * TVar._lift(b).recip()

    def __rtruediv__(a, b):
        return TVar._lift(b) * a.recip()

    def __pow__(a, b):
        if isinstance(b, TVar):
            return tpow(a, b)
        return tpowc(a, np.float64(b))

    def __rpow__(a, b):
        return tpow(TVar._lift(b), a)

    def __neg__(a):
        return TVar(-a.v0, -a.v1, -a.v2)

    def __pos__(a):
        return a

    def __abs__(a):
        s = float(np.sign(a.v0))
        return _compose(a, abs(a.v0), s, 0.0)

    # method forms, reached through np.exp(x), scipy.special.erf(x), ...
    def exp(self): return texp(self)
    def log(self): return tlog(self)
    def sqrt(self): return tsqrt(self)
    def sin(self): return tsin(self)
    def cos(self): return tcos(self)
    def tan(self): return ttan(self)
    def tanh(self): return ttanh(self)
    def erf(self): return terf(self)
    def norm_cdf(self): return tnorm_cdf(self)


# ----- elementary functions -----
def _compose(x: TVar, f0, d1, d2) -> TVar:
    """y = g(x) with g(x0) = f0, g'(x0) = d1, g''(x0) = d2 (chain rule, 2nd order)."""
    return TVar(f0, d1 * x.v1, d2 * x.v1 * x.v1 + d1 * x.v2)


def tpowc(x: TVar, p: float) -> TVar:
    """x ** p for a constant p; integer p is fine for negative x."""
    x0 = x.v0
    if x0 == 0.0 and p < 0:
        raise NumericalError(f"zero raised to negative power {p!r}")
    d1 = p * x0 ** (p - 1.0) if p != 0 else 0.0
    d2 = p * (p - 1.0) * x0 ** (p - 2.0) if p not in (0.0, 1.0) else 0.0
    return _compose(x, x0 ** p, d1, d2)


def tpow(x: TVar, p: TVar) -> TVar:
    """
    x ** p with both operands varying, by the bivariate chain rule

        y1 = f_x·x1 + f_p·p1
        y2 = f_xx·x1² + 2·f_xp·x1·p1 + f_pp·p1² + f_x·x2 + f_p·p2

    The exponent partials need log(x); for x <= 0 they are 0, matching the
    reverse-mode "pow" primitive.
    """
    x0, p0 = x.v0, p.v0
    fx = p0 * x0 ** (p0 - 1.0) if p0 != 0 else 0.0
    fxx = p0 * (p0 - 1.0) * x0 ** (p0 - 2.0) if p0 not in (0.0, 1.0) else 0.0
    y0 = x0 ** p0
    fp = fxp = fpp = 0.0
    if x0 > 0:
        lx = np.log(x0)
        fp = y0 * lx
        fxp = x0 ** (p0 - 1.0) * (1.0 + p0 * lx)
        fpp = y0 * lx * lx
    return TVar(
        y0,
        fx * x.v1 + fp * p.v1,
        fxx * x.v1 * x.v1 + 2.0 * fxp * x.v1 * p.v1 + fpp * p.v1 * p.v1
        + fx * x.v2 + fp * p.v2,
    )


def texp(x: TVar) -> TVar:
    e = np.exp(x.v0)
    return _compose(x, e, e, e)


def tlog(x: TVar) -> TVar:
    if x.v0 == 0.0:
        raise NumericalError("log of zero")
    r = 1.0 / x.v0
    return _compose(x, np.log(x.v0), r, -r * r)


def tsqrt(x: TVar) -> TVar:
    s = np.sqrt(x.v0)
    if s == 0.0:
        return _compose(x, 0.0, np.inf, -np.inf)
    return _compose(x, s, 0.5 / s, -0.25 / (s * x.v0))


def tsin(x: TVar) -> TVar:
    s, c = np.sin(x.v0), np.cos(x.v0)
    return _compose(x, s, c, -s)


def tcos(x: TVar) -> TVar:
    s, c = np.sin(x.v0), np.cos(x.v0)
    return _compose(x, c, -s, -c)


def ttan(x: TVar) -> TVar:
    t = np.tan(x.v0)
    d1 = 1.0 + t * t
    return _compose(x, t, d1, 2.0 * t * d1)


def ttanh(x: TVar) -> TVar:
    t = np.tanh(x.v0)
    d1 = 1.0 - t * t
    return _compose(x, t, d1, -2.0 * t * d1)


def tnorm_cdf(x: TVar) -> TVar:
    """Standard normal CDF; N' = φ, N'' = -x·φ."""
    phi = np.exp(-0.5 * x.v0 * x.v0) / np.sqrt(2.0 * np.pi)
    return _compose(x, special.ndtr(x.v0), phi, -x.v0 * phi)


def terf(x: TVar) -> TVar:
    """Error function; erf' = 2/√π·exp(-x²), erf'' = -2x·erf'."""
    d1 = (2.0 / np.sqrt(np.pi)) * np.exp(-x.v0 * x.v0)
    return _compose(x, special.erf(x.v0), d1, -2.0 * x.v0 * d1)


# ----- Hessian by directional passes -----
def _taylor_directional(f: Callable, x: np.ndarray, d: np.ndarray,
                        output_index: int) -> Tuple[float, float, float]:
    """(value, g·d, dᵀHd) of one output of f at x along d."""
    xs = np.empty(x.size, dtype=object)
    xs[:] = [TVar(xi, di) for xi, di in zip(x, d)]
    y = as_output_list(f(xs))[output_index]
    if not isinstance(y, TVar):
        return float(y), 0.0, 0.0
    return y.v0, y.v1, y.v2


def taylor_grad_hessian(f: Callable, params, output_index: int = 0) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Gradient and Hessian of one output by forward-over-forward propagation.

    Along e_i a pass yields g_i and H_ii (n passes). Along e_i + e_j it yields
    H_ii + 2·H_ij + H_jj, from which H_ij follows (n(n-1)/2 passes).

    Args:
        f: generic target function, f(x) -> scalar or sequence
        params: 1-D parameter vector
        output_index: which output to differentiate

    Returns:
        (grad, H, f0)
    """
    x = np.asarray(params, dtype=float)
    n = x.size
    eye = np.eye(n)
    g = np.zeros(n)
    H = np.zeros((n, n))
    f0 = 0.0

    for i in range(n):
        f0, g[i], H[i, i] = _taylor_directional(f, x, eye[i], output_index)

    for i in range(n):
        for j in range(i + 1, n):
            _, _, curv = _taylor_directional(f, x, eye[i] + eye[j], output_index)
            H[i, j] = H[j, i] = 0.5 * (curv - H[i, i] - H[j, j])

    return g, H, f0


def taylor_hessian(f: Callable, params, output_index: int = 0) -> np.ndarray:
    """Hessian only; see taylor_grad_hessian."""
    return taylor_grad_hessian(f, params, output_index)[1]
