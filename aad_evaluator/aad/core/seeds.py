# aad/core/seeds.py
"""
One-shot gradients of scalar functions.

Each helper wraps the inputs as independent ADVars on a private tape, seeds
dy/dy = 1 at the output and runs a single reverse sweep. Nothing leaks onto
the caller's active tape.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Sequence

from .var import ADVar
from .tape import use_tape
from .engine import reverse


def value(x: Any) -> Any:
    """Primal value of an ADVar; plain numbers pass through."""
    return x.val if isinstance(x, ADVar) else x


def _sweep(f: Callable, arg, leaves: Sequence[ADVar]) -> List[float]:
    with use_tape() as t:
        y = f(arg)
        # an output that never touched the inputs has zero gradient
        if isinstance(y, ADVar):
            reverse(y, seed=1.0, tape=t)
    return [float(x.adj) for x in leaves]


def grad(f: Callable[[ADVar], ADVar], x0: float) -> float:
    """df/dx at x0 for a single-input function."""
    x = ADVar(x0, name="x")
    return _sweep(f, x, [x])[0]


def grads(f: Callable[[Dict[str, ADVar]], ADVar],
          inputs: Dict[str, float]) -> Dict[str, float]:
    """
    Gradient of y = f(vars) for named inputs.

    Parameters
    ----------
    f      : takes {name: ADVar}, returns a scalar
    inputs : {name: number}

    Returns
    -------
    {name: ∂y/∂name}, in the key order of `inputs`
    """
    handles = {k: ADVar(v, name=k) for k, v in inputs.items()}
    partials = _sweep(f, handles, list(handles.values()))
    return dict(zip(handles, partials))


def grads_list(f: Callable[[List[ADVar]], ADVar],
               x0_list: Iterable[float]) -> List[float]:
    """
    Positional form of grads().

        grads_list(lambda xs: xs[0]*xs[0] + 3*xs[1], [2.0, 4.0])  # [4.0, 3.0]
    """
    handles = [ADVar(v, name=f"x{i}") for i, v in enumerate(x0_list)]
    return _sweep(f, handles, handles)
