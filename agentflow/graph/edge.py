"""
Edge Protocol - How nodes connect in a workflow graph.

Edges are directed links from one node's output handle to another node's
input handle. Handles are optional; when a node exposes several outputs
(a logic node's ``true``/``false`` exits, for example) the ``sourceHandle``
says which one the edge leaves from.

Examples:
    Edge(id="e1", source="classify", target="reply")

    # Labelled branch exit on a logic node
    Edge(id="e2", source="is_vip", target="escalate", source_handle="true")
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from agentflow.graph.node import Node


class Edge(BaseModel):
    """A directed link between two nodes."""

    id: str
    source: str = Field(description="Source node ID")
    target: str = Field(description="Target node ID")
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class Graph(BaseModel):
    """
    A workflow graph: the pair (nodes, edges).

    Nodes are addressed by id everywhere. The order of ``nodes`` is kept as
    given and is used as the tie-break when several entry points exist.
    """

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    name: str = ""

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Graph":
        """Load the editor's ``{"nodes": [...], "edges": [...]}`` JSON shape."""
        return cls.model_validate(data)
