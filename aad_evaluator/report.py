"""
Side-by-side comparison of derivative backends.
"""

from typing import Sequence

import numpy as np
import pandas as pd

from .methods import DerivativeMethodBase


def compare_methods(methods: Sequence[DerivativeMethodBase], params,
                    output_index: int = 0, with_hessian: bool = True) -> pd.DataFrame:
    """
    Run every backend at `params` and tabulate the results.

    The first method is the reference; the other rows report their maximum
    absolute deviation from it.

    Returns:
        DataFrame indexed by method name with columns
        value, gradient, max_abs_grad_diff, max_abs_hess_diff, n_passes, time_ms
    """
    if not methods:
        raise ValueError("compare_methods needs at least one method")

    results = [m.compute(params, output_index=output_index, with_hessian=with_hessian)
               for m in methods]
    ref = results[0]

    rows = []
    for res in results:
        grad_diff = float(np.max(np.abs(res['gradient'] - ref['gradient'])))
        if with_hessian and res['hessian'] is not None and ref['hessian'] is not None:
            hess_diff = float(np.max(np.abs(res['hessian'] - ref['hessian'])))
        else:
            hess_diff = np.nan
        rows.append({
            'method': res['method'],
            'value': float(res['value'][output_index]),
            'gradient': np.array2string(res['gradient'], precision=6),
            'max_abs_grad_diff': grad_diff,
            'max_abs_hess_diff': hess_diff,
            'n_passes': res['n_passes'],
            'time_ms': res['time_ms'],
        })
    return pd.DataFrame(rows).set_index('method')
