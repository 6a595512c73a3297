# aad/core/engine.py
"""
Sweeps over a recorded tape.

    reverse      first-order adjoints (gradient of one output)
    reverse_for  adjoints plus tangent adjoints (forward-over-reverse, H·v)

Every function takes an explicit `tape`; None means the active tape.
"""
from __future__ import annotations
from typing import Dict, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from . import tape as tape_mod
from .tape import Tape, use_tape
from .var import ADVar


def _active(tape: Optional[Tape]) -> Tape:
    return tape if tape is not None else tape_mod.global_tape


def _vars_on(tape: Tape) -> Iterator[ADVar]:
    """Every distinct ADVar on the tape, node outputs and operands alike."""
    seen = set()
    for node in tape.nodes:
        for v in [node.out] + [p for p, _ in node.parents]:
            if id(v) not in seen:
                seen.add(id(v))
                yield v


def zero_adjoints(tape: Optional[Tape] = None):
    """Reset `adj` and `adj_dot` of every variable on the tape."""
    for v in _vars_on(_active(tape)):
        v.adj = 0.0
        v.adj_dot = 0.0


def zero_tangents(tape: Optional[Tape] = None):
    """Reset the tangents `dot` (and `adj_dot`) of every variable on the tape."""
    for v in _vars_on(_active(tape)):
        v.dot = 0.0
        v.adj_dot = 0.0


def reverse(outputs: Union[ADVar, Sequence[ADVar]], seed=1.0, tape: Optional[Tape] = None):
    """
    One reverse sweep: p.adj += y.adj * ∂y/∂p for every node, last to first.

    Args:
        outputs: ADVar to seed with `seed`, or a list/tuple of ADVars each
                 seeded with 1.0
        seed: adjoint seed for a single output
        tape: tape to sweep (default: active tape)

    Adjoints accumulate; call zero_adjoints() first for a fresh gradient.
    """
    if isinstance(outputs, (list, tuple)):
        for y in outputs:
            y.adj += 1.0
    else:
        outputs.adj += float(seed)

    for node in reversed(_active(tape).nodes):
        ybar = node.out.adj
        if ybar == 0.0:
            continue
        for p, partial in node.parents:
            if p.requires_grad:
                p.adj = p.adj + ybar * partial


# ---------------- Forward-over-reverse: H·v ---------------- #
def reverse_for(output: ADVar, tape: Optional[Tape] = None):
    """
    Reverse sweep of forward-over-reverse (Pearlmutter's R-operator).

    The tape must have been recorded with the input tangents `.dot` set to the
    direction v; the primitives carry `.dot` forward while recording. For
    each local partial a = ∂y/∂p this propagates

        p.adj     += y.adj * a
        p.adj_dot += y.adj_dot * a + y.adj * R{a}

    where R{a} is the derivative of a along `.dot`. Afterwards each input's
    `adj` is the gradient and its `adj_dot` the matching entry of H·v.
    """
    tape = _active(tape)
    zero_adjoints(tape)
    output.adj = 1.0

    for node in reversed(tape.nodes):
        y = node.out
        if y.adj == 0.0 and y.adj_dot == 0.0:
            continue
        R = tangent_of_partials(node)
        for u, (p, a) in enumerate(node.parents):
            if not p.requires_grad:
                continue
            p.adj = p.adj + y.adj * a
            p.adj_dot = p.adj_dot + y.adj_dot * a + y.adj * R[u]


def hvp_for(f, inputs: Dict[str, float], v: Dict[str, float]) -> np.ndarray:
    """
    H·v of a scalar function of named inputs, on a private tape.

    Args:
        f: takes {name: ADVar}, returns a scalar ADVar
        inputs: {name: number}, the evaluation point
        v: {name: number}, the direction (same keys)

    Returns:
        np.ndarray [n] in the key order of `inputs`.
    """
    with use_tape() as t:
        handles = {}
        for k, x0 in inputs.items():
            x = ADVar(x0, name=k)
            x.dot = float(v[k])
            handles[k] = x

        y = f(handles)
        if not isinstance(y, ADVar):
            return np.zeros(len(handles), dtype=float)

        reverse_for(y, tape=t)
        return np.array([float(x.adj_dot) for x in handles.values()], dtype=float)


# -------- Local second derivatives of the primitives -------- #
def second_locals(node) -> Dict[Tuple[int, int], float]:
    """
    Nonzero second derivatives of a primitive w.r.t. its operands.

    Keys are operand positions (u, v) with u <= v, values ∂²y/∂p_u∂p_v at
    the recorded point. Linear primitives (add, sub, neg, abs) return {}.
    """
    tag = node.op_tag
    vals = [p.val for p, _ in node.parents]

    if tag == "mul":
        return {(0, 1): 1.0}

    if tag == "div":
        x, z = vals
        return {(0, 1): -1.0 / (z * z), (1, 1): 2.0 * x / (z ** 3)}

    if tag == "powc":
        x, p = vals
        if p in (0.0, 1.0):
            return {}
        return {(0, 0): p * (p - 1.0) * x ** (p - 2.0)}

    if tag == "pow":
        x, p = vals
        curv = {}
        if p not in (0.0, 1.0):
            curv[(0, 0)] = p * (p - 1.0) * x ** (p - 2.0)
        # exponent terms need log(x); for x <= 0 they are taken as 0
        if x > 0:
            lx = np.log(x)
            curv[(0, 1)] = x ** (p - 1.0) * (1.0 + p * lx)
            curv[(1, 1)] = x ** p * lx * lx
        return curv

    if tag not in _UNARY_CURVATURE:
        return {}
    return {(0, 0): _UNARY_CURVATURE[tag](vals[0], node.out.val, node.parents[0][1])}


# g''(x) from (x, g(x), g'(x)) for the one-operand primitives
_UNARY_CURVATURE = {
    "exp": lambda x, y, d: y,
    "log": lambda x, y, d: -d * d,
    "sqrt": lambda x, y, d: -0.5 * d / x,
    "sin": lambda x, y, d: -y,
    "cos": lambda x, y, d: -y,
    "tan": lambda x, y, d: 2.0 * y * d,
    "tanh": lambda x, y, d: -2.0 * y * d,
    "erf": lambda x, y, d: -2.0 * x * d,
    "norm_cdf": lambda x, y, d: -x * d,
}


def tangent_of_partials(node) -> list:
    """
    R{a_u} = Σ_v ∂²y/∂p_u∂p_v · p_v.dot for every operand position u.
    """
    R = [0.0] * len(node.parents)
    for (u, v), h in second_locals(node).items():
        R[u] += h * node.parents[v][0].dot
        if u != v:
            R[v] += h * node.parents[u][0].dot
    return R
