"""
Tests for next-step resolution.
"""

from agentflow.graph.edge import Edge
from agentflow.graph.node import Node, NodeType
from agentflow.graph.resolver import branch_targets, entry_nodes, incoming_sources, next_steps_of


def node(node_id):
    return Node(id=node_id, type=NodeType.MEMORY, config={"key": node_id})


def edge(source, target, handle=None):
    return Edge(id=f"{source}-{target}", source=source, target=target, source_handle=handle)


def test_next_steps_preserve_edge_order():
    edges = [edge("a", "c"), edge("b", "c"), edge("a", "b")]

    assert next_steps_of("a", edges) == ["c", "b"]
    assert next_steps_of("c", edges) == []


def test_incoming_sources():
    edges = [edge("a", "c"), edge("b", "c"), edge("a", "b")]

    assert incoming_sources("c", edges) == ["a", "b"]
    assert incoming_sources("a", edges) == []


def test_entry_nodes_follow_node_order():
    nodes = [node("z"), node("y"), node("x")]
    edges = [edge("y", "x")]

    assert [n.id for n in entry_nodes(nodes, edges)] == ["z", "y"]


def test_entry_nodes_empty_when_everything_has_a_predecessor():
    nodes = [node("a"), node("b")]

    assert entry_nodes(nodes, [edge("a", "b"), edge("b", "a")]) == []


def test_branch_targets_grouped_by_handle():
    edges = [
        edge("check", "approve", "true"),
        edge("check", "reject", "false"),
        edge("check", "audit"),
        edge("other", "x", "true"),
    ]

    assert branch_targets("check", edges) == {
        "true": ["approve"],
        "false": ["reject"],
        None: ["audit"],
    }
