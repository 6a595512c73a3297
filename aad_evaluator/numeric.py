# numeric.py
"""
NumPy dispatch for the AD number types.

Target functions are written once against a "real-number-like" capability set.
In practice that means plain operators plus numpy/scipy ufuncs such as
``np.exp`` or ``scipy.special.erf``. The mixin below routes those ufuncs to the
methods each AD type implements, so that

    def f(x):
        return np.exp(x[0]) * np.sin(x[1])

runs unchanged on np.float64, ADVar, Dual and TVar.
"""

import operator

import numpy as np
from scipy import special

# ufunc -> name of the unary method implemented by every AD type
_UNARY = {
    np.negative: "__neg__",
    np.positive: "__pos__",
    np.absolute: "__abs__",
    np.exp: "exp",
    np.log: "log",
    np.sqrt: "sqrt",
    np.sin: "sin",
    np.cos: "cos",
    np.tan: "tan",
    np.tanh: "tanh",
    special.erf: "erf",
    special.ndtr: "norm_cdf",
}

_BINARY = {
    np.add: operator.add,
    np.subtract: operator.sub,
    np.multiply: operator.mul,
    np.true_divide: operator.truediv,
    np.power: operator.pow,
    np.less: operator.lt,
    np.less_equal: operator.le,
    np.greater: operator.gt,
    np.greater_equal: operator.ge,
}


def _unwrap(x):
    # numpy scalars / 0-d arrays would re-enter the ufunc machinery
    if isinstance(x, np.generic):
        return x.item()
    if isinstance(x, np.ndarray) and x.ndim == 0:
        return x.item()
    return x


class NumpyDispatchMixin:
    """Mixin giving an AD number type support for numpy/scipy ufuncs."""

    # Make ndarray/np.float64 defer to our reflected operators
    __array_priority__ = 1000

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if method != "__call__" or kwargs.get("out") is not None:
            return NotImplemented
        if ufunc is np.square and len(inputs) == 1:
            x = inputs[0]
            return x * x
        if ufunc in _UNARY and len(inputs) == 1:
            return getattr(inputs[0], _UNARY[ufunc])()
        if ufunc in _BINARY and len(inputs) == 2:
            a, b = (_unwrap(v) for v in inputs)
            if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
                return NotImplemented
            return _BINARY[ufunc](a, b)
        return NotImplemented

    # ----- value comparisons (branching on values is allowed) -----
    def _cmp_value(self):
        raise NotImplementedError

    def __lt__(self, other):
        return self._cmp_value() < _value_of(other)

    def __le__(self, other):
        return self._cmp_value() <= _value_of(other)

    def __gt__(self, other):
        return self._cmp_value() > _value_of(other)

    def __ge__(self, other):
        return self._cmp_value() >= _value_of(other)


def _value_of(x):
    if isinstance(x, NumpyDispatchMixin):
        return x._cmp_value()
    return x
