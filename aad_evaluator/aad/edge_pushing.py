# aad/edge_pushing.py
"""
Edge-Pushing Hessian (componentwise, Algorithm 4).
From "A new framework for the computation of Hessians" by Gower & Mello.

The reverse sweep visits nodes i = L…1 and for each one does
  (1) Pushing   (move second-order masses involving y_i onto its parents)
  (2) Creating  (add vbar[i] * local second derivatives of the primitive)
  (3) Adjoint   (standard first-order reverse propagation)
After the sweep, (4) Projection: masses landing on input–input pairs form H.

Masses are kept in `W` keyed by
    frozenset({id_a})        for {a}   : contributes to H[a, a]
    frozenset({id_a, id_b})  for {a,b} : contributes to H[a, b] and H[b, a]
"""
from collections import defaultdict
from typing import Sequence

import numpy as np

from .core.engine import second_locals
from .core.tape import Tape
from .core.var import ADVar


def _add_pair(W, id_a, id_b, w):
    # {a, a} collapses to the singleton {a}; both orderings land on H[a, a]
    if id_a == id_b:
        W[frozenset({id_a})] += 2.0 * w
    else:
        W[frozenset({id_a, id_b})] += w


def edge_push_hessian(tape: Tape, inputs: Sequence[ADVar], output: ADVar) -> np.ndarray:
    """
    Full Hessian ∇²y of one output with respect to `inputs`, in one sweep.

    Parameters
    ----------
    tape   : tape holding the computation of `output`
    inputs : independent ADVars (column order of the result)
    output : ADVar whose Hessian is wanted

    Returns
    -------
    np.ndarray [n, n], dense and symmetric.
    """
    n = len(inputs)
    H = np.zeros((n, n), dtype=float)

    node_index = tape.node_index()
    out_idx = node_index.get(id(output))
    if out_idx is None:
        # output is an input or a constant: no second-order terms
        return H

    input_col = {id(x): i for i, x in enumerate(inputs)}

    vbar = defaultdict(float)  # first-order adjoints on nodes (indexed by tape idx)
    W = defaultdict(float)     # second-order masses on variable pairs
    vbar[out_idx] = 1.0

    for i in range(out_idx, -1, -1):
        node = tape.nodes[i]
        y_id = id(node.out)
        parents = [(p, a) for p, a in node.parents if p.requires_grad]
        m = len(parents)

        # ===== (1) Pushing =====
        if W:
            touched = [k for k in W if y_id in k]
            for pk in touched:
                w = W.pop(pk)
                ids = list(pk)

                if len(ids) == 1:
                    # {y}: H[y,y] * a_r * a_s to every parent pair
                    for r in range(m):
                        p_r, a_r = parents[r]
                        for s in range(r + 1, m):
                            p_s, a_s = parents[s]
                            _add_pair(W, id(p_r), id(p_s), w * a_r * a_s)
                        W[frozenset({id(p_r)})] += w * (a_r * a_r)
                else:
                    # {y, q}: H[y,q] * a_r to {p_r, q}
                    ids.remove(y_id)
                    q_id = ids[0]
                    for p_r, a_r in parents:
                        _add_pair(W, id(p_r), q_id, w * a_r)

        # ===== (2) Creating =====
        vb = vbar[i]
        if vb != 0.0:
            for (u, v), d2 in second_locals(node).items():
                p_u, p_v = node.parents[u][0], node.parents[v][0]
                if not (p_u.requires_grad and p_v.requires_grad):
                    continue
                if u == v:
                    W[frozenset({id(p_u)})] += float(d2 * vb)
                else:
                    _add_pair(W, id(p_u), id(p_v), float(d2 * vb))

        # ===== (3) Adjoint =====
        if vb != 0.0:
            for p_ad, a in parents:
                p_idx = node_index.get(id(p_ad))
                if p_idx is not None:
                    vbar[p_idx] += vb * a

    # ===== (4) Projection =====
    for pair_key, w in W.items():
        ids = list(pair_key)
        if len(ids) == 1:
            col = input_col.get(ids[0])
            if col is not None:
                H[col, col] += float(w)
        else:
            ca, cb = input_col.get(ids[0]), input_col.get(ids[1])
            if ca is not None and cb is not None:
                H[ca, cb] += float(w)
                H[cb, ca] += float(w)
    return H
