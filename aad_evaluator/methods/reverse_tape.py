"""
Reverse mode on a recorded tape.

One recording of f, then:
- Jacobian: one reverse sweep per output (cost independent of n)
- Hessian: nested differentiation of the tape, either
    "for"          : n forward-over-reverse sweeps, one Hessian column each
    "edge_pushing" : a single edge-pushing sweep
"""

import numpy as np

from .base_method import DerivativeMethodBase
from ..aad.core.recorder import ADFun, end_recording, recording

HESSIAN_METHODS = ("for", "edge_pushing")


class ReverseTapeMethod(DerivativeMethodBase):
    """Tape-based reverse-mode AD (value, Jacobian, nested Hessian)."""

    def __init__(self, func, n_inputs=None, hessian_method: str = "for"):
        super().__init__(func, n_inputs)
        if hessian_method not in HESSIAN_METHODS:
            raise ValueError(f"hessian_method must be one of {HESSIAN_METHODS}, got {hessian_method!r}")
        self.hessian_method = hessian_method
        self.method_name = "Reverse-Tape" if hessian_method == "for" else "Reverse-EdgePushing"

    def record(self, params) -> ADFun:
        """Record f once at params and return the finalized tape."""
        x = self.target.params(params)
        with recording(x) as xs:
            return end_recording(self.target(xs))

    def jacobian(self, params) -> np.ndarray:
        x = self.target.params(params)
        return self.record(x).jacobian(x)

    def hessian(self, params, output_index: int = 0) -> np.ndarray:
        x = self.target.params(params)
        return self.record(x).hessian(x, output_index, method=self.hessian_method)

    def n_passes(self, n: int, with_hessian: bool) -> int:
        # record + jacobian replay (+ one replay per FoR column, or one for edge pushing)
        if not with_hessian:
            return 2
        return 2 + (n if self.hessian_method == "for" else 1)

    def _compute_all(self, x, output_index, with_hessian):
        fun = self.record(x)
        value = fun.forward(x)
        jacobian = fun.jacobian(x)
        hessian = fun.hessian(x, output_index, method=self.hessian_method) if with_hessian else None
        return value, jacobian, hessian
