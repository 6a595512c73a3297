# aad/ops/__init__.py

from . import arithmetic
from . import transcendental
from . import special

# Convenience re-exports so users can do: from aad_evaluator.aad.ops import mul, exp, ...
from .arithmetic import add, sub, mul, div, neg, pow, powc
from .transcendental import exp, log, sqrt, sin, cos, tan, tanh
from .special import norm_cdf, erf, abs_

# op_tag -> primitive; used to re-run a recorded tape at a new point
PRIMITIVES = {
    "add": add, "sub": sub, "mul": mul, "div": div, "neg": neg,
    "pow": pow, "powc": powc,
    "exp": exp, "log": log, "sqrt": sqrt,
    "sin": sin, "cos": cos, "tan": tan, "tanh": tanh,
    "norm_cdf": norm_cdf, "erf": erf, "abs": abs_,
}

__all__ = [
    "add", "sub", "mul", "div", "neg", "pow", "powc",
    "exp", "log", "sqrt", "sin", "cos", "tan", "tanh",
    "norm_cdf", "erf", "abs_",
    "PRIMITIVES",
]
