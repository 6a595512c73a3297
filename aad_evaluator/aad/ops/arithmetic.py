# aad/ops/arithmetic.py
import numpy as np
from ..core.var import ADVar
from ..core import tape as tape_mod  # Use module access for use_tape() compatibility
from ...errors import NumericalError

def _as_ad(x, requires_grad=False):
    """Ensure x is an ADVar; otherwise wrap it as a constant ADVar."""
    return x if isinstance(x, ADVar) else ADVar(x, requires_grad=requires_grad)

def _record(tag, out, parents):
    tape_mod.global_tape.push_node(op_tag=tag, out=out, parents=parents)
    return out

def _binary(x, y, f, dfdx, dfdy, tag):
    """
    Generic binary primitive:
      - computes out.val = f(x.val, y.val)
      - computes out.dot (JVP) from the local partials
      - pushes a Node with local partials (∂out/∂x, ∂out/∂y)
    """
    x = _as_ad(x)
    y = _as_ad(y)
    out = ADVar(f(x.val, y.val))
    ax = dfdx(x.val, y.val)
    ay = dfdy(x.val, y.val)
    # FoR: JVP (directional derivative)
    out.dot = ax * x.dot + ay * y.dot
    return _record(tag, out, [(x, ax), (y, ay)])

def add(x, y): return _binary(x, y, lambda a,b:a+b, lambda a,b:1.0, lambda a,b:1.0,  "add")
def sub(x, y): return _binary(x, y, lambda a,b:a-b, lambda a,b:1.0, lambda a,b:-1.0, "sub")
def mul(x, y): return _binary(x, y, lambda a,b:a*b, lambda a,b:b,   lambda a,b:a,    "mul")

def div(x, y):
    """
    Division. A zero divisor raises NumericalError instead of producing inf.
    """
    x = _as_ad(x)
    y = _as_ad(y)
    if y.val == 0.0:
        raise NumericalError(f"division by zero ({x.val!r} / {y.val!r})")
    return _binary(x, y, lambda a,b:a/b, lambda a,b:1.0/b, lambda a,b:-a/np.square(b), "div")

def neg(x):
    """
    Unary negation:
      out.val = -x.val
      JVP     : out.dot = -x.dot
    """
    x = _as_ad(x)
    out = ADVar(-x.val)
    out.dot = -x.dot
    return _record("neg", out, [(x, -1.0)])

def pow(x, y):
    """
    Power.

    A constant exponent (plain number, or ADVar with requires_grad=False) is
    recorded as "powc" with the single partial ∂out/∂x = p * x^(p-1); this is
    valid for negative bases with integer p, e.g. (x2 - x1**2)**2.

    A variable exponent is recorded as "pow" with partials
      ∂out/∂x = p * x^(p-1)
      ∂out/∂p = x^p * log(x)        (0 for x <= 0, where it is undefined)
    """
    x = _as_ad(x)
    y = _as_ad(y)
    if not y.requires_grad:
        return powc(x, y)

    xv, pv = x.val, y.val
    out = ADVar(xv ** pv)
    dfdx = pv * (xv ** (pv - 1.0)) if pv != 0 else 0.0
    dfdy = out.val * np.log(xv) if xv > 0 else 0.0
    out.dot = dfdx * x.dot + dfdy * y.dot
    return _record("pow", out, [(x, dfdx), (y, dfdy)])

def powc(x, p):
    """x ** p for a constant exponent p (p is kept on the tape as a constant parent)."""
    x = _as_ad(x)
    p = _as_ad(p)
    xv, pv = x.val, p.val
    if xv == 0.0 and pv < 0:
        raise NumericalError(f"zero raised to negative power {pv!r}")
    out = ADVar(xv ** pv)
    a = pv * (xv ** (pv - 1.0)) if pv != 0 else 0.0
    out.dot = a * x.dot
    return _record("powc", out, [(x, a), (p, 0.0)])
