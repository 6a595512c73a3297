# target.py
"""
Wrapper around a user-supplied target function.

A target function maps an ordered sequence of numbers to an ordered sequence
of numbers of the same type. It must be written generically: operators plus
numpy/scipy ufuncs only, and it may branch on values but not on the numeric
type. The same function is then evaluated with np.float64 (values only),
ADVar (reverse mode), Dual (forward mode) and TVar (Taylor/Hessian).
"""

from typing import Callable, List, Optional

import numpy as np

from .boundary import as_parameter_vector
from .errors import NumericalError


def as_output_list(y) -> List:
    """Normalize a function result (scalar, sequence or ndarray) to a flat list."""
    if isinstance(y, np.ndarray):
        return list(y.ravel())
    if isinstance(y, (list, tuple)):
        return list(y)
    return [y]


class TargetFunction:
    """
    Callable wrapper that normalizes inputs/outputs and turns division errors
    raised anywhere inside the function into NumericalError.

    Args:
        func: f(x) -> outputs, x an indexable sequence of numbers
        n_inputs: expected parameter count (None = taken from each call)
        name: label used in reports
    """

    def __init__(self, func: Callable, n_inputs: Optional[int] = None, name: Optional[str] = None):
        if not callable(func):
            raise TypeError(f"target function must be callable, got {type(func)}")
        self.func = func
        self.n_inputs = n_inputs
        self.name = name or getattr(func, "__name__", "f")

    def __repr__(self):
        return f"TargetFunction({self.name}, n_inputs={self.n_inputs})"

    def params(self, params) -> np.ndarray:
        return as_parameter_vector(params, n=self.n_inputs)

    def __call__(self, xs) -> List:
        """Evaluate on already-prepared inputs (floats, ADVars, Duals, TVars)."""
        if not isinstance(xs, np.ndarray):
            arr = np.empty(len(xs), dtype=object)
            arr[:] = list(xs)
            xs = arr
        try:
            with np.errstate(divide="raise"):
                y = self.func(xs)
        except (ZeroDivisionError, FloatingPointError) as exc:
            raise NumericalError(f"{self.name}: {exc}") from exc
        return as_output_list(y)

    def values(self, params) -> np.ndarray:
        """Plain evaluation: no derivative cost."""
        x = self.params(params)
        return np.array([float(v) for v in self(x)], dtype=float)
