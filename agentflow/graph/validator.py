"""Structural and configuration validation for workflow graphs.

Errors block compilation and simulation; warnings are informational and
are always reported next to a successful result. Every check runs, so a
caller can show all problems at once instead of the first one.
"""

import logging
from collections.abc import Sequence
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field

from agentflow.graph.edge import Edge
from agentflow.graph.node import HTTP_SERVICE, Node, NodeType

logger = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 10


class IssueKind(StrEnum):
    """What a validation or compilation issue is about."""

    # Structural
    EMPTY_GRAPH = "empty_graph"
    DUPLICATE_NODE = "duplicate_node"
    INVALID_EDGE = "invalid_edge"
    CYCLE = "cycle"
    MISSING_ENTRY = "missing_entry"
    # Configuration
    MISSING_FIELD = "missing_field"
    GENERATION_FAILED = "generation_failed"
    # Warnings
    DISCONNECTED = "disconnected"
    GRAPH_SIZE = "graph_size"
    MISSING_DESCRIPTION = "missing_description"
    MULTIPLE_ENTRIES = "multiple_entries"
    BRANCH_AMBIGUITY = "branch_ambiguity"
    ERROR_HANDLING = "error_handling"


class ValidationIssue(BaseModel):
    """One error or warning. ``node_id`` is None for graph-level issues."""

    node_id: str | None = None
    kind: IssueKind
    message: str


class ValidationResult(BaseModel):
    """Result of validating a graph."""

    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @computed_field
    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def error(self) -> str:
        """Get combined error message."""
        return "; ".join(issue.message for issue in self.errors)


class GraphValidator:
    """
    Validates a (nodes, edges) graph.

    Used by both compilers and by the simulator before they touch the graph.
    """

    def __init__(self, max_nodes: int = DEFAULT_MAX_NODES):
        self.max_nodes = max_nodes

    def validate(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
        result = ValidationResult()

        if not nodes:
            result.errors.append(
                ValidationIssue(kind=IssueKind.EMPTY_GRAPH, message="Workflow cannot be empty")
            )
            return result

        result.errors.extend(self._check_duplicate_ids(nodes))
        result.errors.extend(self._check_edge_references(nodes, edges))

        if self.has_cycle(nodes, edges):
            result.errors.append(
                ValidationIssue(
                    kind=IssueKind.CYCLE,
                    message="Workflow contains circular dependencies",
                )
            )

        result.warnings.extend(self._check_connectivity(nodes, edges))

        for node in nodes:
            result.errors.extend(self.validate_node(node))

        result.warnings.extend(self._best_practice_warnings(nodes))

        if result.errors:
            logger.debug(f"Validation found {len(result.errors)} error(s)")
        return result

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _check_duplicate_ids(self, nodes: Sequence[Node]) -> list[ValidationIssue]:
        seen: set[str] = set()
        issues = []
        for node in nodes:
            if node.id in seen:
                issues.append(
                    ValidationIssue(
                        node_id=node.id,
                        kind=IssueKind.DUPLICATE_NODE,
                        message=f"Duplicate node ID: '{node.id}'",
                    )
                )
            seen.add(node.id)
        return issues

    def _check_edge_references(
        self, nodes: Sequence[Node], edges: Sequence[Edge]
    ) -> list[ValidationIssue]:
        node_ids = {node.id for node in nodes}
        issues = []
        for edge in edges:
            if edge.source not in node_ids:
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.INVALID_EDGE,
                        message=f"Edge '{edge.id}' references missing source '{edge.source}'",
                    )
                )
            if edge.target not in node_ids:
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.INVALID_EDGE,
                        message=f"Edge '{edge.id}' references missing target '{edge.target}'",
                    )
                )
            if edge.is_self_loop:
                issues.append(
                    ValidationIssue(
                        node_id=edge.source,
                        kind=IssueKind.INVALID_EDGE,
                        message=f"Edge '{edge.id}' connects node '{edge.source}' to itself",
                    )
                )
        return issues

    @staticmethod
    def has_cycle(nodes: Sequence[Node], edges: Sequence[Edge]) -> bool:
        """
        Depth-first search with an on-stack set and a fully-explored set.

        Iterative, so graph depth is not bounded by the interpreter's
        recursion limit. Self-loops and dangling edges are reported as
        invalid edges and ignored here.
        """
        node_ids = {node.id for node in nodes}
        adjacency: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
        for edge in edges:
            if edge.is_self_loop or edge.source not in node_ids or edge.target not in node_ids:
                continue
            adjacency[edge.source].append(edge.target)

        explored: set[str] = set()
        on_stack: set[str] = set()

        for root in (node.id for node in nodes):
            if root in explored:
                continue
            stack = [(root, iter(adjacency[root]))]
            on_stack.add(root)
            while stack:
                current, successors = stack[-1]
                advanced = False
                for successor in successors:
                    if successor in on_stack:
                        return True
                    if successor not in explored:
                        on_stack.add(successor)
                        stack.append((successor, iter(adjacency[successor])))
                        advanced = True
                        break
                if not advanced:
                    stack.pop()
                    on_stack.discard(current)
                    explored.add(current)
        return False

    def _check_connectivity(
        self, nodes: Sequence[Node], edges: Sequence[Edge]
    ) -> list[ValidationIssue]:
        if len(nodes) <= 1:
            return []
        connected: set[str] = set()
        for edge in edges:
            connected.add(edge.source)
            connected.add(edge.target)
        return [
            ValidationIssue(
                node_id=node.id,
                kind=IssueKind.DISCONNECTED,
                message=f'Node "{node.display_name}" is not connected to the workflow',
            )
            for node in nodes
            if node.id not in connected
        ]

    # ------------------------------------------------------------------
    # Per-node configuration
    # ------------------------------------------------------------------

    def validate_node(self, node: Node) -> list[ValidationIssue]:
        """Check the fields a node of this type cannot run without."""
        config = node.config
        name = node.display_name
        missing: list[str] = []

        match node.type:
            case NodeType.PROMPT:
                if not _non_empty(config.get("instruction")):
                    missing.append(f'Prompt node "{name}" is missing instruction')
            case NodeType.TOOL:
                if not config.get("service"):
                    missing.append(f'Tool node "{name}" is missing service configuration')
                elif config.get("service") == HTTP_SERVICE:
                    parameters = config.get("parameters")
                    url = parameters.get("url") if isinstance(parameters, dict) else None
                    if not _non_empty(url):
                        missing.append(f'HTTP tool node "{name}" is missing URL')
            case NodeType.LOGIC:
                if not _non_empty(config.get("condition")):
                    missing.append(f'Logic node "{name}" is missing condition')
            case NodeType.MEMORY:
                if not _non_empty(config.get("key")):
                    missing.append(f'Memory node "{name}" is missing key')
            case NodeType.INTEGRATION:
                if not config.get("integrationId"):
                    missing.append(f'Integration node "{name}" is missing integration ID')

        return [
            ValidationIssue(node_id=node.id, kind=IssueKind.MISSING_FIELD, message=message)
            for message in missing
        ]

    # ------------------------------------------------------------------
    # Best practices
    # ------------------------------------------------------------------

    def _best_practice_warnings(self, nodes: Sequence[Node]) -> list[ValidationIssue]:
        warnings = []
        if len(nodes) > self.max_nodes:
            warnings.append(
                ValidationIssue(
                    kind=IssueKind.GRAPH_SIZE,
                    message=(
                        f"Workflow has {len(nodes)} nodes. Consider breaking into smaller "
                        "workflows for better maintainability."
                    ),
                )
            )

        undocumented = [node for node in nodes if not node.description.strip()]
        if undocumented:
            warnings.append(
                ValidationIssue(
                    kind=IssueKind.MISSING_DESCRIPTION,
                    message=(
                        f"{len(undocumented)} nodes are missing descriptions. "
                        "Add descriptions for better documentation."
                    ),
                )
            )
        return warnings


def _non_empty(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate(nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
    """Validate a graph with the default settings."""
    return GraphValidator().validate(nodes, edges)
