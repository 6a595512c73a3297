"""
Forward mode: dual numbers for the Jacobian (one vector-mode pass) and
2nd-order Taylor numbers for the Hessian (forward-over-forward,
n + n(n-1)/2 directional passes). No tape is involved.
"""

import numpy as np

from .base_method import DerivativeMethodBase
from ..forward.dual import dual_jacobian
from ..forward.taylor import taylor_hessian


class ForwardDualMethod(DerivativeMethodBase):
    """Forward-mode AD backend."""

    def __init__(self, func, n_inputs=None):
        super().__init__(func, n_inputs)
        self.method_name = "Forward-Dual"

    def jacobian(self, params) -> np.ndarray:
        x = self.target.params(params)
        _, J = dual_jacobian(self.target, x)
        return J

    def hessian(self, params, output_index: int = 0) -> np.ndarray:
        x = self.target.params(params)
        return taylor_hessian(self.target, x, output_index)

    def n_passes(self, n: int, with_hessian: bool) -> int:
        return 2 + (n + n * (n - 1) // 2 if with_hessian else 0)
