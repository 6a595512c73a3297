"""
aad_evaluator: value, Jacobian and Hessian of generically written functions.

A target function is written once against plain operators and numpy/scipy
ufuncs, and evaluated with
  - np.float64  (values only),
  - ADVar       (reverse mode on a recorded tape, aad_evaluator.aad),
  - Dual / TVar (forward mode, aad_evaluator.forward).
"""

from .errors import ADError, ConversionError, NumericalError, RecordingError
from .config import EvaluatorConfig, MinimizeConfig
from .boundary import as_parameter_vector, as_host_array
from .target import TargetFunction
from .aad import ADVar, ADFun, begin_recording, end_recording, recording
from .forward import Dual, TVar
from .methods import (
    DerivativeMethodBase,
    ReverseTapeMethod,
    ForwardDualMethod,
    FiniteDifferenceMethod,
    AnalyticalMethod,
)
from .evaluator import Evaluator, ResultBundle, check_finite
from .optimize import minimize
from .report import compare_methods

__version__ = "0.1.0"

__all__ = [
    # Errors
    'ADError', 'ConversionError', 'NumericalError', 'RecordingError',
    # Config
    'EvaluatorConfig', 'MinimizeConfig',
    # Boundary
    'as_parameter_vector', 'as_host_array',
    # Numeric types and tape
    'TargetFunction', 'ADVar', 'ADFun', 'begin_recording', 'end_recording', 'recording',
    'Dual', 'TVar',
    # Backends
    'DerivativeMethodBase', 'ReverseTapeMethod', 'ForwardDualMethod',
    'FiniteDifferenceMethod', 'AnalyticalMethod',
    # Evaluator
    'Evaluator', 'ResultBundle', 'check_finite', 'minimize', 'compare_methods',
]
