"""Memory node: keyed store/retrieve/update/delete within a scope."""

from typing import Any

from agentflow.compiler.generators.base import (
    GeneratedScript,
    code_settings,
    describe,
    header,
    input_schema,
    literal,
    render,
)
from agentflow.graph.node import Node

MEMORY_OPERATIONS = ("store", "retrieve", "update", "delete")

_TEMPLATE = '''
$header
from typing import Any

OPERATION = $operation
KEY = $key
SCOPE = $scope


def main(input: Any = None) -> dict[str, Any]:
    result = {"success": True, "operation": OPERATION, "key": KEY, "scope": SCOPE}
    storage_key = f"{SCOPE}:{KEY}"
    # Persistence belongs to the host platform; this body reports what it would do.
    if OPERATION == "store":
        return {**result, "storageKey": storage_key, "stored": True}
    if OPERATION == "retrieve":
        return {**result, "storageKey": storage_key, "data": None}
    if OPERATION == "update":
        return {**result, "storageKey": storage_key, "updated": True}
    if OPERATION == "delete":
        return {**result, "storageKey": storage_key, "deleted": True}
    raise ValueError(f"Unknown memory operation: {OPERATION}")
'''


def build_script(node: Node, script_name: str, include_context: bool = True) -> GeneratedScript:
    config = node.memory_config()
    content = render(
        _TEMPLATE,
        header=header("Memory", node),
        operation=literal(config.operation),
        key=literal(config.key),
        scope=literal(config.scope),
    )
    return GeneratedScript(
        name=script_name,
        description=describe("Memory", node),
        content=content,
        schema=input_schema(input="Data to store or retrieve"),
    )


def build_action(node: Node) -> dict[str, Any]:
    config = node.memory_config()
    return {
        "type": "CODE",
        "settings": code_settings(
            build_script(node, node.id, include_context=False),
            {
                "operation": config.operation,
                "key": config.key,
                "value": config.value,
                "scope": config.scope,
            },
        ),
    }
