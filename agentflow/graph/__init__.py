"""Graph structures: Nodes, Edges, validation and next-step resolution."""

from agentflow.graph.condition import evaluate_condition
from agentflow.graph.edge import Edge, Graph
from agentflow.graph.node import (
    IntegrationConfig,
    LogicConfig,
    MemoryConfig,
    Node,
    NodeHandle,
    NodeType,
    PromptConfig,
    ToolConfig,
)
from agentflow.graph.resolver import (
    branch_targets,
    entry_nodes,
    incoming_sources,
    next_steps_of,
)
from agentflow.graph.validator import (
    GraphValidator,
    IssueKind,
    ValidationIssue,
    ValidationResult,
    validate,
)

__all__ = [
    # Model
    "Node",
    "NodeType",
    "NodeHandle",
    "Edge",
    "Graph",
    # Typed config views
    "PromptConfig",
    "ToolConfig",
    "LogicConfig",
    "MemoryConfig",
    "IntegrationConfig",
    # Condition evaluation
    "evaluate_condition",
    # Validation
    "GraphValidator",
    "IssueKind",
    "ValidationIssue",
    "ValidationResult",
    "validate",
    # Resolution
    "next_steps_of",
    "incoming_sources",
    "entry_nodes",
    "branch_targets",
]
