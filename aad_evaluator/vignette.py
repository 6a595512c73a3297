"""
Worked example: the banana (Rosenbrock) function.

    f(x1, x2) = 100 (x2 - x1²)² + (1 - x1)²

The function is written once, generically, and evaluated with plain floats,
reverse-mode tape variables and forward-mode dual numbers. The AD gradient is
compared with the hand-derived one, and both are handed to a quasi-Newton
minimizer starting from (-1.2, 1).

Usage:
    python -m aad_evaluator.vignette
    python -m aad_evaluator.vignette --x0 -1.2 1.0 --backend forward
"""

import argparse
from typing import Dict

import numpy as np

from .config import EvaluatorConfig, MinimizeConfig
from .evaluator import Evaluator
from .methods import AnalyticalMethod, FiniteDifferenceMethod, ForwardDualMethod, ReverseTapeMethod
from .optimize import minimize
from .report import compare_methods

BANANA_START = (-1.2, 1.0)


def banana(x):
    """Rosenbrock banana function; generic over the numeric type."""
    x1, x2 = x[0], x[1]
    return 100 * (x2 - x1 * x1) ** 2 + (1 - x1) ** 2


def banana_gradient(x) -> np.ndarray:
    """Hand-derived gradient."""
    x1, x2 = x[0], x[1]
    return np.array([
        -400 * x1 * (x2 - x1 * x1) - 2 * (1 - x1),
        200 * (x2 - x1 * x1),
    ])


def banana_hessian(x, output_index: int = 0) -> np.ndarray:
    """Hand-derived Hessian."""
    x1, x2 = x[0], x[1]
    return np.array([
        [1200 * x1 * x1 - 400 * x2 + 2, -400 * x1],
        [-400 * x1, 200.0],
    ])


def run_vignette(x0=BANANA_START, backend: str = 'reverse',
                 hessian_method: str = 'for', verbose: bool = True) -> Dict:
    """
    Reproduce the walkthrough.

    Returns:
        dict with value, gradient, exact_gradient, hessian, comparison table,
        and the minimization results with AD and with exact gradients
    """
    config = EvaluatorConfig(backend=backend, hessian_method=hessian_method, verbose=verbose)
    ev = Evaluator(banana, config=config, n_inputs=2)
    x0 = np.asarray(x0, dtype=float)

    value = float(ev.evaluate(x0)[0])
    gradient = ev.gradient(x0)[0]
    exact = banana_gradient(x0)
    hessian = ev.hessian(x0)

    if verbose:
        print("=" * 70)
        print("BANANA FUNCTION")
        print("=" * 70)
        print(f"x0             : {x0}")
        print(f"f(x0)          : {value:.6f}")
        print(f"AD gradient    : {gradient}")
        print(f"exact gradient : {exact}")
        print(f"AD Hessian     :\n{hessian}")
        fun = ev.record(x0)
        fun.summary(verbose=True)

    table = compare_methods(
        [
            AnalyticalMethod(banana, banana_gradient, banana_hessian, n_inputs=2),
            ReverseTapeMethod(banana, n_inputs=2, hessian_method='for'),
            ReverseTapeMethod(banana, n_inputs=2, hessian_method='edge_pushing'),
            ForwardDualMethod(banana, n_inputs=2),
            FiniteDifferenceMethod(banana, n_inputs=2),
        ],
        x0,
    )
    if verbose:
        print(table.to_string())

    opt_config = MinimizeConfig(verbose=verbose)
    with_ad = minimize(ev, x0, opt_config)
    with_exact = minimize(ev, x0, opt_config, jac=banana_gradient)

    if verbose:
        print(f"\nminimum (AD gradient)    : {with_ad['x']}  f = {with_ad['fun']:.3e}")
        print(f"minimum (exact gradient) : {with_exact['x']}  f = {with_exact['fun']:.3e}")

    return {
        'value': value,
        'gradient': gradient,
        'exact_gradient': exact,
        'hessian': hessian,
        'comparison': table,
        'minimize_ad': with_ad,
        'minimize_exact': with_exact,
    }


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Banana function: AD value, gradient, Hessian and minimization',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('--x0', type=float, nargs=2, default=list(BANANA_START),
                        help='Starting point (x1 x2)')
    parser.add_argument('--backend', choices=['reverse', 'forward', 'finite_difference'],
                        default='reverse', help='Derivative backend')
    parser.add_argument('--hessian-method', choices=['for', 'edge_pushing'], default='for',
                        help='Hessian algorithm of the reverse backend')
    parser.add_argument('--quiet', action='store_true', help='Only print the final minima')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    out = run_vignette(args.x0, backend=args.backend,
                       hessian_method=args.hessian_method, verbose=not args.quiet)
    if args.quiet:
        print(out['minimize_ad']['x'], out['minimize_exact']['x'])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
