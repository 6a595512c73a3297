# aad/core/recorder.py
"""
Recording a target function once and querying the recorded tape.

    xs = begin_recording([-1.2, 1.0])
    ys = f(xs)
    fun = end_recording(ys)
    fun.jacobian([0.5, 0.5])
    fun.hessian([0.5, 0.5], output_index=0)

The states are strictly sequential: recording -> finalized -> queried. Only one
recording may be active at a time. Queries never touch the recorded tape: each
one re-runs the recorded primitives at the requested point on a private tape,
so an ADFun can be queried at any number of points.

Known limitation: control flow that depends on input *values* is frozen into
the tape at the recording point. Replaying at a point where the function would
take another branch silently follows the recorded branch. Avoiding this is the
caller's responsibility; it is not detected.
"""
from __future__ import annotations
from contextlib import contextmanager
from typing import List, Optional, Sequence

import numbers
import numpy as np

from . import tape as tape_mod
from .tape import Tape, use_tape
from .var import ADVar
from .engine import reverse, reverse_for, zero_adjoints
from .graph_utils import tape_summary
from ...boundary import as_parameter_vector
from ...errors import ConversionError, RecordingError


class _Recording:
    def __init__(self, tape: Tape, independents: List[ADVar], previous: Tape):
        self.tape = tape
        self.independents = independents
        self.previous = previous


_active: Optional[_Recording] = None


def is_recording() -> bool:
    return _active is not None


def begin_recording(inputs, names: Optional[Sequence[str]] = None) -> List[ADVar]:
    """
    Mark `inputs` as independent variables and start recording on a fresh tape.

    Returns the tape-aware handles (one ADVar per input) the target function
    must be evaluated with.
    """
    global _active
    if _active is not None:
        raise RecordingError("a recording is already in progress; call end_recording() first")

    values = as_parameter_vector(inputs)
    if names is not None and len(names) != len(values):
        raise ConversionError(f"got {len(names)} names for {len(values)} inputs")

    new_tape = Tape()
    handles = [
        ADVar(v, requires_grad=True, name=(names[i] if names is not None else f"x{i}"))
        for i, v in enumerate(values)
    ]
    _active = _Recording(new_tape, handles, tape_mod.global_tape)
    tape_mod.global_tape = new_tape
    return handles


def abort_recording():
    """Drop the active recording (if any) and restore the previous tape."""
    global _active
    if _active is not None:
        tape_mod.global_tape = _active.previous
        _active = None


def end_recording(results) -> "ADFun":
    """
    Finalize the active recording against the given output handle(s).

    `results` may be a single value or a sequence. Plain real numbers are
    accepted and become constant outputs (zero derivatives).
    """
    global _active
    if _active is None:
        raise RecordingError("end_recording() called without begin_recording()")
    rec = _active
    abort_recording()

    if isinstance(results, np.ndarray):
        results = list(results.ravel())
    elif not isinstance(results, (list, tuple)):
        results = [results]

    dependents = []
    for k, y in enumerate(results):
        if isinstance(y, ADVar):
            dependents.append(y)
        elif isinstance(y, numbers.Real) and not isinstance(y, (bool, np.bool_)):
            dependents.append(ADVar(y, requires_grad=False, name=f"y{k}"))
        else:
            raise ConversionError(f"output {k} is not a real number or ADVar: {type(y)}")
    if not dependents:
        raise RecordingError("end_recording() needs at least one output")

    return ADFun(rec.tape, rec.independents, dependents)


@contextmanager
def recording(inputs, names: Optional[Sequence[str]] = None):
    """
    Context manager form. The recording is dropped on exit unless
    end_recording() was called inside the block.

        with recording([1.0, 2.0]) as xs:
            fun = end_recording(f(xs))
    """
    handles = begin_recording(inputs, names)
    try:
        yield handles
    finally:
        if _active is not None and _active.independents is handles:
            abort_recording()


class ADFun:
    """
    A finalized tape together with its independent and dependent variables.

    Attributes
    ----------
    tape : Tape
        The recorded operation sequence.
    independents : list[ADVar]
        Inputs marked by begin_recording().
    dependents : list[ADVar]
        Outputs passed to end_recording().
    """

    def __init__(self, tape: Tape, independents: List[ADVar], dependents: List[ADVar]):
        self.tape = tape
        self.independents = list(independents)
        self.dependents = list(dependents)

    @property
    def n_inputs(self) -> int:
        return len(self.independents)

    @property
    def n_outputs(self) -> int:
        return len(self.dependents)

    @property
    def size(self) -> int:
        """Number of recorded primitive operations."""
        return len(self.tape)

    def __repr__(self):
        return f"ADFun(n_inputs={self.n_inputs}, n_outputs={self.n_outputs}, size={self.size})"

    # ------------------------------------------------------------------ #
    def _point(self, point) -> np.ndarray:
        return as_parameter_vector(point, n=self.n_inputs)

    def _output_index(self, output_index: int) -> int:
        if not -self.n_outputs <= output_index < self.n_outputs:
            raise IndexError(
                f"output_index {output_index} out of range for {self.n_outputs} outputs"
            )
        return output_index % self.n_outputs

    def _replay(self, point: np.ndarray, direction: Optional[np.ndarray] = None):
        """
        Re-run the recorded primitives at `point` on a private tape.

        If `direction` is given, input tangents are seeded with it, so the
        replayed tape carries the JVP needed by forward-over-reverse.

        Returns (tape, inputs, outputs) of the replay.
        """
        from ..ops import PRIMITIVES

        mapping = {}
        inputs = []
        for i, x in enumerate(self.independents):
            nx = ADVar(point[i], requires_grad=True, name=x.name)
            if direction is not None:
                nx.dot = float(direction[i])
            mapping[id(x)] = nx
            inputs.append(nx)

        def lookup(v):
            nv = mapping.get(id(v))
            if nv is None:
                # constant captured during recording; private copy per replay
                nv = ADVar(v.val, requires_grad=v.requires_grad, name=v.name)
                mapping[id(v)] = nv
            return nv

        with use_tape() as replay_tape:
            for node in self.tape.nodes:
                args = [lookup(p) for p, _ in node.parents]
                mapping[id(node.out)] = PRIMITIVES[node.op_tag](*args)

        outputs = [lookup(y) for y in self.dependents]
        return replay_tape, inputs, outputs

    def _gradient_row(self, replay_tape, inputs, output) -> np.ndarray:
        zero_adjoints(replay_tape)
        for x in inputs:
            x.adj = 0.0
        reverse(output, seed=1.0, tape=replay_tape)
        return np.array([float(x.adj) for x in inputs], dtype=float)

    # ------------------------------------------------------------------ #
    def forward(self, point) -> np.ndarray:
        """Output values at `point`."""
        _, _, outputs = self._replay(self._point(point))
        return np.array([float(y.val) for y in outputs], dtype=float)

    def jacobian(self, point) -> np.ndarray:
        """Jacobian (n_outputs x n_inputs) at `point`, one reverse sweep per output."""
        replay_tape, inputs, outputs = self._replay(self._point(point))
        J = np.zeros((self.n_outputs, self.n_inputs), dtype=float)
        for k, y in enumerate(outputs):
            J[k, :] = self._gradient_row(replay_tape, inputs, y)
        return J

    def gradient(self, point, output_index: int = 0) -> np.ndarray:
        """Gradient of one output at `point` (a single reverse sweep)."""
        k = self._output_index(output_index)
        replay_tape, inputs, outputs = self._replay(self._point(point))
        return self._gradient_row(replay_tape, inputs, outputs[k])

    def hvp(self, point, direction, output_index: int = 0) -> np.ndarray:
        """Hessian-vector product H·v of one output (forward-over-reverse)."""
        k = self._output_index(output_index)
        v = as_parameter_vector(direction, n=self.n_inputs)
        replay_tape, inputs, outputs = self._replay(self._point(point), direction=v)
        reverse_for(outputs[k], tape=replay_tape)
        return np.array([float(x.adj_dot) for x in inputs], dtype=float)

    def hessian(self, point, output_index: int = 0, method: str = "for") -> np.ndarray:
        """
        Hessian (n_inputs x n_inputs) of one output at `point`.

        method="for"          : n forward-over-reverse passes, one column each
        method="edge_pushing" : one replay plus a single edge-pushing sweep
        """
        k = self._output_index(output_index)
        x = self._point(point)
        n = self.n_inputs

        if method == "for":
            H = np.zeros((n, n), dtype=float)
            for j in range(n):
                e_j = np.zeros(n)
                e_j[j] = 1.0
                H[:, j] = self.hvp(x, e_j, output_index=k)
            return H

        if method == "edge_pushing":
            from ..edge_pushing import edge_push_hessian
            replay_tape, inputs, outputs = self._replay(x)
            return edge_push_hessian(replay_tape, inputs, outputs[k])

        raise ValueError(f"Unknown Hessian method: {method!r} (expected 'for' or 'edge_pushing')")

    def summary(self, verbose: bool = False) -> dict:
        return tape_summary(self.tape, verbose=verbose)
