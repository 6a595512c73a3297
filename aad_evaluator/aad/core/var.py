# aad/core/var.py
from __future__ import annotations
import numbers
import numpy as np
from typing import Any, Optional

from ...numeric import NumpyDispatchMixin


class ADVar(NumpyDispatchMixin):
    """
    Active scalar variable for reverse-mode Automatic Differentiation (AD).

    Attributes
    ----------
    val : np.float64
        Forward (primal) value of this variable.
    adj : float
        Reverse-mode adjoint (gradient accumulator).
    dot : float
        Forward tangent (directional derivative for JVP). Used in FoR.
    adj_dot : float
        Reverse-mode companion for the tangent (directional adjoint). Used in FoR.
    requires_grad : bool
        Whether this variable participates in differentiation. If False,
        the variable is treated as a constant.
    name : Optional[str]
        Optional debug/pretty-print name.
    """

    __slots__ = ("val", "adj", "dot", "adj_dot", "requires_grad", "name")

    def __init__(self, val: Any, *, requires_grad: bool = True, name: Optional[str] = None):
        # bool is an int subclass but never a meaningful parameter
        if isinstance(val, (bool, np.bool_)) or not isinstance(val, numbers.Real):
            raise TypeError(
                f"ADVar only accepts real scalars (int, float, np.floating), "
                f"but got {type(val)}"
            )
        self.val = np.float64(val)
        self.adj = 0.0
        self.dot = 0.0
        self.adj_dot = 0.0
        self.requires_grad = requires_grad
        self.name = name

    def __repr__(self):
        rg = "req" if self.requires_grad else "const"
        return f"ADVar({self.val!r}, {rg}, name={self.name!r})"

    def _cmp_value(self):
        return self.val

    # Operator overloading; primitives live in aad.ops
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __pos__(self):
        return self

    def __abs__(self):
        from ..ops.special import abs_
        return abs_(self)

    def __pow__(self, other):
        from ..ops.arithmetic import pow
        return pow(self, other)

    def __rpow__(self, other):
        from ..ops.arithmetic import pow
        return pow(other, self)

    # Elementary functions (also reached through np.exp(x), ...)
    def exp(self):
        from ..ops.transcendental import exp
        return exp(self)

    def log(self):
        from ..ops.transcendental import log
        return log(self)

    def sqrt(self):
        from ..ops.transcendental import sqrt
        return sqrt(self)

    def sin(self):
        from ..ops.transcendental import sin
        return sin(self)

    def cos(self):
        from ..ops.transcendental import cos
        return cos(self)

    def tan(self):
        from ..ops.transcendental import tan
        return tan(self)

    def tanh(self):
        from ..ops.transcendental import tanh
        return tanh(self)

    def erf(self):
        from ..ops.special import erf
        return erf(self)

    def norm_cdf(self):
        from ..ops.special import norm_cdf
        return norm_cdf(self)
