"""
Evaluator: single entry point tying the numeric types together.

    ev = Evaluator(banana)
    ev.evaluate([-1.2, 1.0])     # array([24.2])
    ev.gradient([-1.2, 1.0])     # array([[-215.6, -88.0]])
    ev.hessian([-1.2, 1.0])      # 2x2

Each call is self-contained: the reverse backend records a fresh tape per
call and drops it when the call returns, so an Evaluator holds no mutable
state between calls. The active tape is module-level, so calls are
single-threaded: two threads differentiating at once would record onto
the same tape.
"""

import warnings
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from .aad.core.recorder import ADFun
from .config import EvaluatorConfig
from .errors import NumericalError
from .methods import (
    DerivativeMethodBase,
    FiniteDifferenceMethod,
    ForwardDualMethod,
    ReverseTapeMethod,
)
from .target import TargetFunction


@dataclass
class ResultBundle:
    """Value, Jacobian and Hessian of one evaluation."""
    value: np.ndarray
    jacobian: np.ndarray
    hessian: Optional[np.ndarray]
    output_index: int
    is_finite: bool

    @property
    def gradient(self) -> np.ndarray:
        return self.jacobian[self.output_index]


def check_finite(values, what: str = "result"):
    """Raise NumericalError if `values` holds NaN or inf; return them otherwise."""
    arr = np.asarray(values, dtype=float)
    if not np.all(np.isfinite(arr)):
        bad = np.argwhere(~np.isfinite(arr))
        raise NumericalError(f"non-finite {what} at index {bad[0].tolist()}: {arr[tuple(bad[0])]!r}")
    return values


class Evaluator:
    """
    Value / Jacobian / Hessian of a generic target function.

    Args:
        func: target function f(x) -> scalar or sequence, written generically
        config: EvaluatorConfig (defaults if None)
        n_inputs: expected parameter count (None = any)
    """

    def __init__(self, func: Callable, config: Optional[EvaluatorConfig] = None,
                 n_inputs: Optional[int] = None):
        self.config = config or EvaluatorConfig()
        self.target = TargetFunction(func, n_inputs)
        self.method = self._make_method(self.config.backend)

    def _make_method(self, backend: str) -> DerivativeMethodBase:
        if backend == "reverse":
            return ReverseTapeMethod(self.target, hessian_method=self.config.hessian_method)
        if backend == "forward":
            return ForwardDualMethod(self.target)
        if backend == "finite_difference":
            return FiniteDifferenceMethod(self.target, step=self.config.fd_step)
        raise ValueError(f"Unknown backend: {backend!r}")

    def __repr__(self):
        return f"Evaluator({self.target.name}, backend={self.config.backend!r})"

    def _finish(self, values, what: str):
        if self.config.check_finite:
            check_finite(values, what)
        return values

    # ------------------------------------------------------------------ #
    def evaluate(self, params) -> np.ndarray:
        """f(params) with plain floats; no derivative cost."""
        return self._finish(self.method.evaluate(params), "value")

    def gradient(self, params) -> np.ndarray:
        """Jacobian of all outputs, shape (n_outputs, n_inputs)."""
        return self._finish(self.method.jacobian(params), "jacobian")

    def hessian(self, params, output_index: int = 0) -> np.ndarray:
        """Hessian of output `output_index`, shape (n_inputs, n_inputs)."""
        return self._finish(self.method.hessian(params, output_index), "hessian")

    def record(self, params) -> ADFun:
        """Record the tape at params (reverse backend machinery, any config)."""
        if isinstance(self.method, ReverseTapeMethod):
            return self.method.record(params)
        return ReverseTapeMethod(self.target).record(params)

    def result(self, params, output_index: int = 0, with_hessian: bool = True) -> ResultBundle:
        """Value, Jacobian and (optionally) Hessian in one call."""
        res = self.method.compute(params, output_index=output_index, with_hessian=with_hessian)
        parts = [res['value'], res['jacobian']]
        if res['hessian'] is not None:
            parts.append(res['hessian'])
        finite = all(np.all(np.isfinite(p)) for p in parts)

        if self.config.verbose:
            print(f"[{res['method']}] value={res['value']} "
                  f"({res['n_passes']} passes, {res['time_ms']:.2f} ms)")
        if not finite:
            if self.config.check_finite:
                for name, p in zip(("value", "jacobian", "hessian"), parts):
                    check_finite(p, name)
            warnings.warn(f"{self.target.name}: non-finite values in result at {params!r}")

        return ResultBundle(
            value=res['value'],
            jacobian=res['jacobian'],
            hessian=res['hessian'],
            output_index=output_index,
            is_finite=bool(finite),
        )

    # ------------------------------------------------------------------ #
    check_finite = staticmethod(check_finite)

    def is_finite(self, params) -> bool:
        """True if every output at params is finite (NaN/inf detection without scanning)."""
        return bool(np.all(np.isfinite(self.method.evaluate(params))))

    def check_derivatives(self, params, output_index: int = 0,
                          with_hessian: bool = True) -> Dict:
        """
        Cross-check this evaluator's derivatives against central finite differences.

        Returns:
            dict with max abs errors, the tolerance used and `ok`; warns when the
            derivatives disagree.
        """
        fd = FiniteDifferenceMethod(self.target, step=self.config.fd_step)
        x = self.target.params(params)

        J = self.gradient(x)
        J_fd = fd.jacobian(x)
        jac_err = float(np.max(np.abs(J - J_fd)))
        # FD truncation/round-off dominates; scale the tolerance with the bump size
        jac_tol = self.config.atol + max(self.config.rtol, np.sqrt(self.config.fd_step)) * float(np.max(np.abs(J_fd), initial=1.0))
        ok = jac_err <= jac_tol

        report = {
            'jacobian': J,
            'jacobian_fd': J_fd,
            'jacobian_max_abs_error': jac_err,
            'jacobian_tolerance': jac_tol,
        }

        if with_hessian:
            H = self.hessian(x, output_index)
            H_fd = fd.hessian(x, output_index)
            hess_err = float(np.max(np.abs(H - H_fd)))
            hess_tol = 1e-3 * float(np.max(np.abs(H_fd), initial=1.0))
            ok = ok and hess_err <= hess_tol
            report.update({
                'hessian': H,
                'hessian_fd': H_fd,
                'hessian_max_abs_error': hess_err,
                'hessian_tolerance': hess_tol,
            })

        report['ok'] = bool(ok)
        if self.config.verbose:
            print(f"Derivative check ({self.method.method_name} vs finite differences):")
            print(f"  Jacobian max |error|: {jac_err:.3e} (tol {jac_tol:.1e})")
            if with_hessian:
                print(f"  Hessian  max |error|: {report['hessian_max_abs_error']:.3e} "
                      f"(tol {report['hessian_tolerance']:.1e})")
        if not ok:
            warnings.warn(f"{self.target.name}: derivatives disagree with finite differences at {x!r}")
        return report
