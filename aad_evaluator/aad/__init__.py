# aad/__init__.py
# Reverse-mode Automatic Adjoint Differentiation on a recorded tape

from .core.var import ADVar
from .core.tape import Tape, current_tape, use_tape
from .core.engine import (
    reverse,
    reverse_for,
    zero_adjoints,
    zero_tangents,
    hvp_for,
)
from .core.recorder import (
    ADFun,
    begin_recording,
    end_recording,
    abort_recording,
    recording,
    is_recording,
)
from .core.seeds import grad, grads, grads_list, value
from .core.graph_utils import tape_summary
from .edge_pushing import edge_push_hessian
from . import ops

__all__ = [
    # Core
    'ADVar',
    'Tape',
    'current_tape',
    'use_tape',
    # Engine
    'reverse',
    'reverse_for',
    'zero_adjoints',
    'zero_tangents',
    'hvp_for',
    'edge_push_hessian',
    # Recorder
    'ADFun',
    'begin_recording',
    'end_recording',
    'abort_recording',
    'recording',
    'is_recording',
    # Seeds
    'grad',
    'grads',
    'grads_list',
    'value',
    'tape_summary',
    'ops',
]
