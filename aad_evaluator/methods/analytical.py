"""
Hand-derived derivatives.

Wraps closed-form gradient/Hessian callables so they can be compared with the
AD backends (machine-precision baseline).
"""

import numpy as np
from typing import Callable, Optional

from .base_method import DerivativeMethodBase


class AnalyticalMethod(DerivativeMethodBase):
    """
    Analytical derivatives supplied by the caller.

    Args:
        func: target function
        jacobian_fn: x -> Jacobian (m, n); a gradient (n,) is taken as one row
        hessian_fn: (x, output_index) -> Hessian (n, n), optional
    """

    def __init__(self, func, jacobian_fn: Callable, hessian_fn: Optional[Callable] = None,
                 n_inputs=None):
        super().__init__(func, n_inputs)
        self.method_name = "Analytical"
        self.jacobian_fn = jacobian_fn
        self.hessian_fn = hessian_fn

    def jacobian(self, params) -> np.ndarray:
        x = self.target.params(params)
        return np.atleast_2d(np.asarray(self.jacobian_fn(x), dtype=float))

    def hessian(self, params, output_index: int = 0) -> np.ndarray:
        if self.hessian_fn is None:
            raise NotImplementedError(f"{self.method_name}: no Hessian function supplied")
        x = self.target.params(params)
        return np.asarray(self.hessian_fn(x, output_index), dtype=float)

    def _compute_all(self, x, output_index, with_hessian):
        with_hessian = with_hessian and self.hessian_fn is not None
        return super()._compute_all(x, output_index, with_hessian)
