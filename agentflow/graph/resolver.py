"""Next-step resolution shared by the compilers and the simulator.

All functions preserve declaration order: edge order for successors and
predecessors, node-list order for entry points.
"""

from collections.abc import Sequence

from agentflow.graph.edge import Edge
from agentflow.graph.node import Node


def next_steps_of(node_id: str, edges: Sequence[Edge]) -> list[str]:
    """Targets of every edge leaving ``node_id``. Several targets run as parallel branches."""
    return [edge.target for edge in edges if edge.source == node_id]


def incoming_sources(node_id: str, edges: Sequence[Edge]) -> list[str]:
    """Sources of every edge entering ``node_id``."""
    return [edge.source for edge in edges if edge.target == node_id]


def entry_nodes(nodes: Sequence[Node], edges: Sequence[Edge]) -> list[Node]:
    """Nodes with no incoming edge."""
    targets = {edge.target for edge in edges}
    return [node for node in nodes if node.id not in targets]


def branch_targets(node_id: str, edges: Sequence[Edge]) -> dict[str | None, list[str]]:
    """
    Outgoing targets grouped by the edge's ``source_handle`` label.

    Unlabelled edges are grouped under ``None``. Lets a branching node send
    each named exit to its own downstream node.
    """
    grouped: dict[str | None, list[str]] = {}
    for edge in edges:
        if edge.source == node_id:
            grouped.setdefault(edge.source_handle, []).append(edge.target)
    return grouped
