"""
Module-list strategy.

Produces one generated script per node plus a flow listing the modules in
node order. Data flows through input-transform expressions: an entry
module reads the flow-level input, every other module reads the result of
each upstream module (``results.<source_id>``), numbered ``input``,
``input_1``, ... when several edges converge.
"""

from collections.abc import Sequence
from typing import Any

from agentflow.compiler import generators
from agentflow.compiler.base import ArtifactCompiler
from agentflow.compiler.generators import sanitize_name
from agentflow.compiler.generators.base import SCRIPT_LANGUAGE
from agentflow.graph.edge import Edge
from agentflow.graph.node import Node, NodeType
from agentflow.graph.resolver import incoming_sources
from agentflow.graph.validator import DEFAULT_MAX_NODES, GraphValidator, ValidationIssue

FLOW_INPUT = "flow_input"

FLOW_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        FLOW_INPUT: {
            "type": "object",
            "description": "Input data for the workflow",
            "properties": {
                "data": {"type": "object", "description": "Main input data"},
                "context": {"type": "object", "description": "Additional context"},
                "config": {
                    "type": "object",
                    "description": "Runtime configuration: endpoints and credentials",
                },
            },
        }
    },
    "required": [FLOW_INPUT],
}


def _expr(expression: str) -> dict[str, str]:
    return {"type": "javascript", "expr": expression}


class ModuleListCompiler(ArtifactCompiler):
    """Compiles to generated scripts wired together by input transforms."""

    name = "module-list"

    def __init__(
        self,
        workspace: str = "agentflow",
        validator: GraphValidator | None = None,
        max_nodes: int = DEFAULT_MAX_NODES,
    ):
        super().__init__(validator=validator, max_nodes=max_nodes)
        self.workspace = workspace

    def build(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        trigger: Node,
        target_name: str,
        errors: list[ValidationIssue],
        warnings: list[ValidationIssue],
    ) -> dict[str, Any]:
        agent = sanitize_name(target_name) or "workflow"
        used_names: set[str] = set()
        scripts: list[dict[str, Any]] = []
        modules: list[dict[str, Any]] = []

        for node in nodes:
            script_name = self.script_name(agent, node, used_names)
            try:
                script = generators.build_script(node, script_name, include_context=True)
            except (ValueError, TypeError) as e:
                errors.append(self.generation_failed(node, e))
                continue

            scripts.append(script.to_dict())
            modules.append(
                {
                    "id": node.id,
                    "summary": node.display_name,
                    "value": {
                        "type": "script",
                        "path": f"{self.workspace}/{script_name}",
                        "input_transforms": self.input_transforms(node, edges),
                    },
                }
            )

        return {
            "entry": trigger.id,
            "scripts": scripts,
            "flow": {
                "summary": f"{target_name} - AI Agent Workflow",
                "description": f"Generated workflow for {target_name} agent",
                "value": {
                    "modules": modules,
                    "failure_module": self._failure_module(target_name),
                },
                "schema": FLOW_SCHEMA,
            },
        }

    @staticmethod
    def script_name(agent: str, node: Node, used: set[str]) -> str:
        """``<agent>_<type>_<label>``, suffixed with the node id on collision."""
        name = f"{agent}_{node.type}_{sanitize_name(node.display_name) or sanitize_name(node.id)}"
        if name in used:
            name = f"{name}_{sanitize_name(node.id)}"
        used.add(name)
        return name

    @staticmethod
    def input_transforms(node: Node, edges: Sequence[Edge]) -> dict[str, dict[str, str]]:
        sources = incoming_sources(node.id, edges)
        transforms: dict[str, dict[str, str]] = {}
        if not sources:
            transforms["input"] = _expr(FLOW_INPUT)
        for index, source in enumerate(sources):
            key = "input" if index == 0 else f"input_{index}"
            transforms[key] = _expr(f"results.{source}")

        if node.type == NodeType.PROMPT:
            transforms["context"] = _expr(f"{FLOW_INPUT}.context")
        if node.type in (NodeType.PROMPT, NodeType.INTEGRATION):
            transforms["config"] = _expr(f"{FLOW_INPUT}.config")
        return transforms

    @staticmethod
    def _failure_module(target_name: str) -> dict[str, Any]:
        content = (
            "def main(error: dict | None = None) -> dict:\n"
            '    message = (error or {}).get("message", "Unknown error")\n'
            f'    return {{"success": False, "error": message, "workflow": {target_name!r}}}\n'
        )
        return {
            "id": "failure_handler",
            "value": {"type": "rawscript", "language": SCRIPT_LANGUAGE, "content": content},
        }

    def empty_artifact(self) -> dict[str, Any]:
        return {
            "entry": None,
            "scripts": [],
            "flow": {
                "summary": "Empty Workflow",
                "description": "Failed to generate workflow",
                "value": {"modules": []},
                "schema": {"type": "object", "properties": {}},
            },
        }
