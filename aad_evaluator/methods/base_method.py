"""
Base abstract class for derivative backends.

Every backend answers the same three questions about a target function f at a
parameter vector x:

    value     f(x)                      shape (m,)
    jacobian  ∂f_k/∂x_i                 shape (m, n)
    hessian   ∂²f_k/∂x_i∂x_j (one k)    shape (n, n)

Standard interface ensures consistent testing and comparison.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Dict, Optional
import time

from ..target import TargetFunction


class DerivativeMethodBase(ABC):
    """
    Abstract base class for all derivative backends.

    Attributes:
        target (TargetFunction): Wrapped target function
        method_name (str): Name of the method
    """

    def __init__(self, func, n_inputs: Optional[int] = None):
        """
        Initialize method with the target function.

        Args:
            func: Target function, or an existing TargetFunction
            n_inputs: Expected number of parameters (None = any)
        """
        self.target = func if isinstance(func, TargetFunction) else TargetFunction(func, n_inputs)
        self.method_name = "Base"

    def evaluate(self, params) -> np.ndarray:
        """Plain function values; no derivative cost."""
        return self.target.values(params)

    @abstractmethod
    def jacobian(self, params) -> np.ndarray:
        """Jacobian matrix (m x n) at params."""

    @abstractmethod
    def hessian(self, params, output_index: int = 0) -> np.ndarray:
        """Hessian matrix (n x n) of output `output_index` at params."""

    def n_passes(self, n: int, with_hessian: bool) -> int:
        """Number of function evaluations (passes) one compute() call costs."""
        return 0

    def _compute_all(self, x: np.ndarray, output_index: int, with_hessian: bool):
        value = self.evaluate(x)
        jacobian = self.jacobian(x)
        hessian = self.hessian(x, output_index) if with_hessian else None
        return value, jacobian, hessian

    def compute(self, params, output_index: int = 0, with_hessian: bool = True) -> Dict:
        """
        Compute value, Jacobian and (optionally) Hessian.

        Args:
            params: Parameter vector
            output_index: Output whose Hessian is computed
            with_hessian: Skip the Hessian when False

        Returns:
            Dictionary with standard format:
            {
                'value': np.ndarray,       # f(x), shape (m,)
                'jacobian': np.ndarray,    # shape (m, n)
                'hessian': np.ndarray,     # shape (n, n) or None
                'gradient': np.ndarray,    # jacobian[output_index]
                'output_index': int,
                'time_ms': float,          # Computation time in milliseconds
                'n_passes': int,           # Function evaluations performed
                'method': str              # Method name
            }
        """
        start_time = time.perf_counter()
        x = self.target.params(params)
        value, jacobian, hessian = self._compute_all(x, output_index, with_hessian)
        time_ms = (time.perf_counter() - start_time) * 1000

        return self._format_result(
            value=value,
            jacobian=jacobian,
            hessian=hessian,
            output_index=output_index,
            time_ms=time_ms,
            n_passes=self.n_passes(x.size, with_hessian),
        )

    def _format_result(self, value: np.ndarray, jacobian: np.ndarray,
                       hessian: Optional[np.ndarray], output_index: int,
                       time_ms: float, n_passes: int) -> Dict:
        """
        Format results into standard output dictionary.
        """
        return {
            'value': value,
            'jacobian': jacobian,
            'hessian': hessian,
            'gradient': jacobian[output_index],
            'output_index': output_index,
            'time_ms': time_ms,
            'n_passes': n_passes,
            'method': self.method_name
        }

    def __repr__(self):
        return f"{self.method_name}({self.target.name})"
