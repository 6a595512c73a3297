# aad/core/tape.py
from __future__ import annotations
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from .node import Node


class Tape:
    """
    Operation log of one computation, in evaluation order.

    Reverse sweeps walk `nodes` backwards; replay walks them forwards.
    """

    def __init__(self):
        self.nodes: List[Node] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __repr__(self):
        return f"Tape({len(self.nodes)} nodes)"

    def reset(self):
        self.nodes.clear()

    def push_node(self, *, op_tag: str, out, parents: List[Tuple]) -> int:
        """Record one primitive; returns its position on the tape."""
        self.nodes.append(Node(op_tag=op_tag, out=out, parents=parents))
        return len(self.nodes) - 1

    def node_index(self) -> Dict[int, int]:
        """Map id(node.out) -> tape position, for every recorded output."""
        return {id(node.out): i for i, node in enumerate(self.nodes)}


# Tape the primitives record on. Modules must look it up as
# `tape_mod.global_tape` at call time; use_tape() rebinds it.
global_tape = Tape()


def current_tape() -> Tape:
    """Return the tape primitives are currently recorded on."""
    return global_tape


@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Record on `tape` (a new empty Tape by default) inside the block and
    restore the previous tape afterwards, even on error.

        with use_tape() as t:
            y = f(x)
            reverse(y, tape=t)
    """
    global global_tape
    previous = global_tape
    global_tape = tape if tape is not None else Tape()
    try:
        yield global_tape
    finally:
        global_tape = previous
