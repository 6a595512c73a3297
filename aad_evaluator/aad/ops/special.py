# aad/ops/special.py
import numpy as np
from scipy import special as sp
from ..core.var import ADVar
from .arithmetic import _as_ad, _record

SQRT_TWO_PI = np.sqrt(2.0 * np.pi)
TWO_OVER_SQRT_PI = 2.0 / np.sqrt(np.pi)

def norm_pdf(x):
    return np.exp(-0.5 * x * x) / SQRT_TWO_PI

def norm_cdf(x):
    """
    Primitive: returns N(x) and records local partial dN/dx = phi(x).
    """
    x = _as_ad(x)
    out = ADVar(sp.ndtr(x.val))
    pdf = norm_pdf(x.val)
    out.dot = pdf * x.dot
    return _record("norm_cdf", out, [(x, pdf)])

def erf(x):
    """
    Error function: erf(x) = (2/√π) ∫₀ˣ e^(-t²) dt

    Derivative: d/dx erf(x) = (2/√π) * e^(-x²)
    """
    x = _as_ad(x)
    out = ADVar(sp.erf(x.val))
    deriv = TWO_OVER_SQRT_PI * np.exp(-x.val ** 2)
    out.dot = deriv * x.dot
    return _record("erf", out, [(x, deriv)])

def abs_(x):
    """
    |x| with derivative sign(x); the kink at 0 gets derivative 0.
    """
    x = _as_ad(x)
    s = float(np.sign(x.val))
    out = ADVar(np.abs(x.val))
    out.dot = s * x.dot
    return _record("abs", out, [(x, s)])
