# aad/core/__init__.py

"""
Core public API of the reverse-mode engine.

Exports:
    ADVar           : The differentiable scalar recorded on a tape.
    current_tape    : The tape primitives are currently recorded on.
    use_tape        : Context manager to temporarily switch the active tape.
    reverse         : Run a single reverse pass to accumulate first-order adjoints.
    zero_adjoints   : Reset all adjoints on a tape to zero.
    begin_recording : Mark inputs independent and start a recording.
    end_recording   : Finalize a recording into an ADFun.
    grad            : Convenience: derivative of a single-input function.
    value           : Convenience: extract the primal value from an ADVar.
"""

from .var import ADVar
from .tape import current_tape, use_tape
from .engine import reverse, zero_adjoints
from .recorder import ADFun, begin_recording, end_recording
from .seeds import grad, value

__all__ = [
    "ADVar",
    "current_tape", "use_tape",
    "reverse", "zero_adjoints",
    "ADFun", "begin_recording", "end_recording",
    "grad", "value",
]
