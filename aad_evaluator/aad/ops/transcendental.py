# aad/ops/transcendental.py
import numpy as np
from ..core.var import ADVar
from .arithmetic import _as_ad, _record
from ...errors import NumericalError

def _unary(x, val, deriv, tag):
    out = ADVar(val)
    out.dot = deriv * x.dot
    return _record(tag, out, [(x, deriv)])

def exp(x):
    x = _as_ad(x)
    ex = np.exp(x.val)
    return _unary(x, ex, ex, "exp")

def log(x):
    x = _as_ad(x)
    if x.val == 0.0:
        raise NumericalError("log of zero")
    return _unary(x, np.log(x.val), 1.0 / x.val, "log")

def sqrt(x):
    x = _as_ad(x)
    s = np.sqrt(x.val)
    return _unary(x, s, 0.5 / s if s != 0.0 else np.inf, "sqrt")

def sin(x):
    x = _as_ad(x)
    return _unary(x, np.sin(x.val), np.cos(x.val), "sin")

def cos(x):
    x = _as_ad(x)
    return _unary(x, np.cos(x.val), -np.sin(x.val), "cos")

def tan(x):
    x = _as_ad(x)
    t = np.tan(x.val)
    return _unary(x, t, 1.0 + t * t, "tan")

def tanh(x):
    x = _as_ad(x)
    t = np.tanh(x.val)
    return _unary(x, t, 1.0 - t * t, "tanh")
