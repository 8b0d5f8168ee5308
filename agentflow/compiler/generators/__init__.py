"""Per-node-type generators.

Each generator produces a deterministic, side-effect-free description of
one node: a branch-map action (``build_action``) and a standalone script
body (``build_script``). Nothing here executes the generated code.
"""

from typing import Any

from agentflow.compiler.generators import integration, logic, memory, prompt, tool
from agentflow.compiler.generators.base import GeneratedScript, sanitize_name
from agentflow.graph.node import Node, NodeType


def build_action(node: Node) -> dict[str, Any]:
    """Type and settings of the branch-map action for ``node``."""
    match node.type:
        case NodeType.PROMPT:
            return prompt.build_action(node)
        case NodeType.TOOL:
            return tool.build_action(node)
        case NodeType.LOGIC:
            return logic.build_action(node)
        case NodeType.MEMORY:
            return memory.build_action(node)
        case NodeType.INTEGRATION:
            return integration.build_action(node)
    raise ValueError(f"Unsupported node type: {node.type}")


def build_script(node: Node, script_name: str, include_context: bool = True) -> GeneratedScript:
    """Standalone script for ``node``."""
    match node.type:
        case NodeType.PROMPT:
            return prompt.build_script(node, script_name, include_context)
        case NodeType.TOOL:
            return tool.build_script(node, script_name, include_context)
        case NodeType.LOGIC:
            return logic.build_script(node, script_name, include_context)
        case NodeType.MEMORY:
            return memory.build_script(node, script_name, include_context)
        case NodeType.INTEGRATION:
            return integration.build_script(node, script_name, include_context)
    raise ValueError(f"Unsupported node type: {node.type}")


def branch_names(node: Node) -> list[str] | None:
    """Named exits of a branching node, None for single-exit nodes."""
    if node.type == NodeType.LOGIC:
        return logic.branch_names(node)
    return None


__all__ = [
    "GeneratedScript",
    "build_action",
    "build_script",
    "branch_names",
    "sanitize_name",
]
