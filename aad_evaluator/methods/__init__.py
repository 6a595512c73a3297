"""
Methods package: interchangeable derivative backends.

1. ReverseTapeMethod: tape-based reverse mode (FoR or edge-pushing Hessian)
2. ForwardDualMethod: dual numbers + 2nd-order Taylor numbers
3. FiniteDifferenceMethod: central differences (cross-check)
4. AnalyticalMethod: hand-derived formulas (baseline)
"""

from .base_method import DerivativeMethodBase
from .reverse_tape import ReverseTapeMethod
from .forward_dual import ForwardDualMethod
from .finite_difference import FiniteDifferenceMethod
from .analytical import AnalyticalMethod

__all__ = [
    'DerivativeMethodBase',
    'ReverseTapeMethod',
    'ForwardDualMethod',
    'FiniteDifferenceMethod',
    'AnalyticalMethod',
]
