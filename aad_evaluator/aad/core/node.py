# aad/core/node.py
from dataclasses import dataclass
from typing import Any, List, Tuple


@dataclass
class Node:
    """
    A primitive operation as recorded on a tape.

    Attributes
    ----------
    op_tag : str
        Name of the primitive ("add", "powc", "norm_cdf", ...). Replay looks
        the primitive up under this name in ``aad.ops.PRIMITIVES``.
    out : ADVar
        Result of the operation.
    parents : list of (ADVar, float)
        Operands in call order, each paired with ∂out/∂operand evaluated at
        the recording point. Constant operands are kept (with
        requires_grad=False) so replay can pass them back in.
    """
    op_tag: str
    out: Any
    parents: List[Tuple[Any, float]]

    @property
    def arity(self) -> int:
        return len(self.parents)
