"""
Tape inspection: size, fan-in/fan-out and operation mix of a recorded
computation graph.
"""

from collections import Counter
from typing import Dict

import numpy as np


def get_graph_stats(tape) -> Dict:
    """
    Statistics of a tape, without printing.

    Leaves are operands that no recorded node produced: independent inputs
    (requires_grad=True) and captured constants.

    Returns:
        dict with nodes, edges, inputs, constants, max/avg fan-in,
        max/avg fan-out, operations
    """
    stats = {
        'nodes': len(tape),
        'edges': 0,
        'inputs': 0,
        'constants': 0,
        'max_fan_in': 0,
        'avg_fan_in': 0.0,
        'max_fan_out': 0,
        'avg_fan_out': 0.0,
        'operations': {},
    }
    if not len(tape):
        return stats

    node_index = tape.node_index()
    fan_in = np.array([node.arity for node in tape], dtype=int)
    fan_out = np.zeros(len(tape), dtype=int)
    leaves = {}
    for node in tape:
        for parent, _ in node.parents:
            idx = node_index.get(id(parent))
            if idx is None:
                leaves[id(parent)] = parent.requires_grad
            else:
                fan_out[idx] += 1

    stats.update({
        'edges': int(fan_in.sum()),
        'inputs': sum(1 for active in leaves.values() if active),
        'constants': sum(1 for active in leaves.values() if not active),
        'max_fan_in': int(fan_in.max()),
        'avg_fan_in': float(fan_in.mean()),
        'max_fan_out': int(fan_out.max()),
        'avg_fan_out': float(fan_out.mean()),
        'operations': dict(Counter(node.op_tag for node in tape)),
    })
    return stats


def tape_summary(tape, verbose: bool = False) -> Dict:
    """
    Summarize a tape; print a report when `verbose`.

    Returns:
        Same dictionary as get_graph_stats()
    """
    stats = get_graph_stats(tape)
    if not verbose:
        return stats

    if stats['nodes'] == 0:
        print("Empty tape")
        return stats

    print("\n" + "="*70)
    print("TAPE SUMMARY")
    print("="*70)
    print(f"Recorded operations: {stats['nodes']:,}")
    print(f"Edges:               {stats['edges']:,}")
    print(f"Leaf inputs:         {stats['inputs']} (+{stats['constants']} constants)")
    print(f"Fan-in  max / avg:   {stats['max_fan_in']} / {stats['avg_fan_in']:.2f}")
    print(f"Fan-out max / avg:   {stats['max_fan_out']} / {stats['avg_fan_out']:.2f}")
    print()
    print("Operations:")
    for op_tag, count in Counter(stats['operations']).most_common():
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_tag:10s}: {count:6,} ({pct:5.1f}%)")
    print("="*70 + "\n")
    return stats
