"""
Quasi-Newton minimization with AD-supplied derivatives.

    ev = Evaluator(banana)
    res = minimize(ev, [-1.2, 1.0])
    res['x']    # ~ [1, 1]

The objective is one output of the evaluator's target function; its gradient
comes from the evaluator's backend (or from a caller-supplied `jac`, e.g. a
hand-derived gradient, for comparison).
"""

from typing import Callable, Dict, Optional

import numpy as np
from scipy.optimize import minimize as _scipy_minimize, OptimizeResult

from .config import MinimizeConfig
from .evaluator import Evaluator

# scipy option name for the convergence tolerance, by method
_TOL_OPTION = {
    'BFGS': 'gtol',
    'CG': 'gtol',
    'L-BFGS-B': 'ftol',
    'Newton-CG': 'xtol',
    'trust-ncg': 'gtol',
    'trust-exact': 'gtol',
    'trust-krylov': 'gtol',
    'SLSQP': 'ftol',
    'TNC': 'ftol',
}


def minimize(evaluator: Evaluator, x0, config: Optional[MinimizeConfig] = None,
             jac: Optional[Callable] = None) -> Dict:
    """
    Minimize output `config.output_index` of the evaluator's target function.

    Args:
        evaluator: Evaluator wrapping the target function
        x0: starting point
        config: MinimizeConfig (defaults if None)
        jac: optional gradient callable x -> (n,); defaults to the AD gradient

    Returns:
        Dictionary with:
            - x: Optimal parameters
            - fun: Objective value at x
            - n_iterations: Number of iterations
            - n_evaluations: Objective evaluations
            - success: Whether optimization succeeded
            - message: Optimization status message
            - history: Objective value after each iteration
    """
    config = config or MinimizeConfig()
    k = config.output_index
    x0 = evaluator.target.params(x0)
    history = []

    def objective(x):
        return float(evaluator.evaluate(x)[k])

    def gradient(x):
        return np.asarray(evaluator.gradient(x)[k], dtype=float)

    def hessian(x):
        return evaluator.hessian(x, output_index=k)

    def callback(xk, *args):
        history.append(objective(xk))
        if config.verbose:
            print(f"  iter {len(history):4d}: f = {history[-1]:.6e}")

    if config.verbose:
        print(f"\nRunning {config.method} on {evaluator.target.name} from x0 = {x0}")

    options = {'maxiter': config.max_iterations, 'disp': False}
    tol_key = _TOL_OPTION.get(config.method)
    if tol_key is not None:
        options[tol_key] = config.tolerance

    result: OptimizeResult = _scipy_minimize(
        fun=objective,
        x0=x0,
        method=config.method,
        jac=jac if jac is not None else gradient,
        hess=hessian if config.use_hessian else None,
        callback=callback,
        options=options,
    )

    if config.verbose:
        print(f"\nMinimization Complete:")
        print(f"  Status: {result.message}")
        print(f"  Iterations: {result.nit}")
        print(f"  x: {result.x}")
        print(f"  Final f: {result.fun:.6e}")

    return {
        'x': result.x,
        'fun': float(result.fun),
        'n_iterations': int(result.nit),
        'n_evaluations': int(result.nfev),
        'success': bool(result.success),
        'message': result.message,
        'history': history,
    }
