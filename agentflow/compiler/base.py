"""
Compiler Protocol - Turn a validated graph into a back-end artifact.

Every strategy follows the same pipeline:
1. Validate (any error ⇒ placeholder artifact + the validator's issues)
2. Resolve entry nodes and pick the trigger
3. Generate one descriptor per node with the per-type generators
4. Link next steps through the shared resolver
5. Attach best-practice warnings

Subclasses only decide the artifact's shape.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, computed_field

from agentflow.graph.edge import Edge
from agentflow.graph.node import Node, NodeType
from agentflow.graph.resolver import entry_nodes
from agentflow.graph.validator import (
    DEFAULT_MAX_NODES,
    GraphValidator,
    IssueKind,
    ValidationIssue,
)

logger = logging.getLogger(__name__)

DEFAULT_TARGET_NAME = "Generated Workflow"


class CompileResult(BaseModel):
    """Result of compiling a graph."""

    artifact: dict[str, Any] = Field(default_factory=dict)
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @computed_field
    @property
    def success(self) -> bool:
        return len(self.errors) == 0


class ArtifactCompiler(ABC):
    """Base class for compilation strategies."""

    name: str = ""

    def __init__(self, validator: GraphValidator | None = None, max_nodes: int = DEFAULT_MAX_NODES):
        self.validator = validator or GraphValidator(max_nodes=max_nodes)

    def compile(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        target_name: str | None = None,
    ) -> CompileResult:
        """
        Compile a graph.

        Args:
            nodes: Graph nodes, in editor order
            edges: Graph edges, in editor order
            target_name: Display name of the generated artifact

        Returns:
            CompileResult. ``errors`` is non-empty only alongside the
            placeholder artifact.
        """
        validation = self.validator.validate(nodes, edges)
        warnings = list(validation.warnings)
        if not validation.is_valid:
            logger.info(
                f"{self.name}: graph failed validation ({len(validation.errors)} errors)",
                extra={"event": "compile_rejected", "target": self.name},
            )
            return CompileResult(
                artifact=self.empty_artifact(),
                errors=list(validation.errors),
                warnings=warnings,
            )

        entries = entry_nodes(nodes, edges)
        if not entries:
            return CompileResult(
                artifact=self.empty_artifact(),
                errors=[
                    ValidationIssue(
                        kind=IssueKind.MISSING_ENTRY,
                        message="No entry point found in workflow",
                    )
                ],
                warnings=warnings,
            )
        if len(entries) > 1:
            warnings.append(
                ValidationIssue(
                    node_id=entries[0].id,
                    kind=IssueKind.MULTIPLE_ENTRIES,
                    message=(
                        f"Multiple entry points found, using '{entries[0].id}' as the trigger"
                    ),
                )
            )

        errors: list[ValidationIssue] = []
        artifact = self.build(
            nodes,
            edges,
            trigger=entries[0],
            target_name=target_name or DEFAULT_TARGET_NAME,
            errors=errors,
            warnings=warnings,
        )
        if errors:
            return CompileResult(artifact=self.empty_artifact(), errors=errors, warnings=warnings)

        warnings.extend(self._best_practice_warnings(nodes))
        logger.info(
            f"{self.name}: compiled {len(nodes)} nodes ({len(warnings)} warnings)",
            extra={"event": "compile_completed", "target": self.name},
        )
        return CompileResult(artifact=artifact, warnings=warnings)

    @abstractmethod
    def build(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        trigger: Node,
        target_name: str,
        errors: list[ValidationIssue],
        warnings: list[ValidationIssue],
    ) -> dict[str, Any]:
        """Build the artifact for a valid graph, appending any issues found."""

    @abstractmethod
    def empty_artifact(self) -> dict[str, Any]:
        """Placeholder artifact returned whenever compilation fails."""

    def _best_practice_warnings(self, nodes: Sequence[Node]) -> list[ValidationIssue]:
        return [
            ValidationIssue(
                node_id=node.id,
                kind=IssueKind.ERROR_HANDLING,
                message=(
                    f'Consider adding error handling for {node.type} node "{node.display_name}"'
                ),
            )
            for node in nodes
            if node.type in (NodeType.TOOL, NodeType.INTEGRATION)
        ]

    @staticmethod
    def generation_failed(node: Node, error: Exception) -> ValidationIssue:
        return ValidationIssue(
            node_id=node.id,
            kind=IssueKind.GENERATION_FAILED,
            message=f"Failed to convert node {node.id}: {error}",
        )
