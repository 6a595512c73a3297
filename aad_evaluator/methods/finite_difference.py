"""
Finite differences (bumping).

Formulas (h_i = step * max(1, |x_i|)):
    ∂f/∂x_i       = [f(x+h_i) - f(x-h_i)] / (2h_i)
    ∂²f/∂x_i²     = [f(x+h_i) - 2f(x) + f(x-h_i)] / h_i²
    ∂²f/∂x_i∂x_j  = [f(++) - f(+-) - f(-+) + f(--)] / (4 h_i h_j)

Used as the independent cross-check of the AD backends.
"""

import numpy as np
from typing import Optional

from .base_method import DerivativeMethodBase


class FiniteDifferenceMethod(DerivativeMethodBase):
    """
    Central finite differences, no AD.
    """

    def __init__(self, func, n_inputs=None, step: float = 1e-6,
                 hessian_step: Optional[float] = None):
        super().__init__(func, n_inputs)
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self.method_name = "Finite-Difference"
        self.step = step
        # second differences need a larger bump to stay above round-off
        self.hessian_step = hessian_step if hessian_step is not None else max(step, 1e-4)

    def _h(self, x: np.ndarray, step: float) -> np.ndarray:
        return step * np.maximum(1.0, np.abs(x))

    def jacobian(self, params) -> np.ndarray:
        x = self.target.params(params)
        h = self._h(x, self.step)
        cols = []
        for i in range(x.size):
            xp = x.copy(); xp[i] += h[i]
            xm = x.copy(); xm[i] -= h[i]
            cols.append((self.evaluate(xp) - self.evaluate(xm)) / (2 * h[i]))
        return np.column_stack(cols)

    def hessian(self, params, output_index: int = 0) -> np.ndarray:
        x = self.target.params(params)
        n = x.size
        h = self._h(x, self.hessian_step)
        k = output_index

        def f(z):
            return self.evaluate(z)[k]

        f0 = f(x)
        H = np.zeros((n, n))
        for i in range(n):
            xp = x.copy(); xp[i] += h[i]
            xm = x.copy(); xm[i] -= h[i]
            H[i, i] = (f(xp) - 2 * f0 + f(xm)) / (h[i] ** 2)
            for j in range(i + 1, n):
                def bumped(si, sj):
                    z = x.copy()
                    z[i] += si * h[i]
                    z[j] += sj * h[j]
                    return f(z)
                H[i, j] = H[j, i] = (
                    bumped(1, 1) - bumped(1, -1) - bumped(-1, 1) + bumped(-1, -1)
                ) / (4 * h[i] * h[j])
        return H

    def n_passes(self, n: int, with_hessian: bool) -> int:
        passes = 1 + 2 * n
        if with_hessian:
            passes += 1 + 2 * n + 4 * (n * (n - 1) // 2)
        return passes
