"""Logic node: evaluate a condition, or filter a list by it."""

from typing import Any

from agentflow.compiler.generators.base import (
    GeneratedScript,
    code_settings,
    describe,
    embed,
    header,
    input_schema,
    literal,
    render,
)
from agentflow.graph import condition
from agentflow.graph.node import Node
from agentflow.graph.templating import lookup_path

_PRELUDE = '''
$header
import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

CONDITION = $condition
LOGIC_TYPE = $logic_type


$helpers
'''

_BRANCH_MAIN = '''

def main(input: Any = None) -> dict[str, Any]:
    return {
        "type": LOGIC_TYPE,
        "condition": evaluate_condition(CONDITION, input),
        "input": input,
    }
'''

_FILTER_MAIN = '''

def main(input: Any = None) -> dict[str, Any]:
    if not isinstance(input, list):
        raise ValueError("Filter logic requires array input")
    passed = [item for item in input if evaluate_condition(CONDITION, item)]
    return {
        "type": LOGIC_TYPE,
        "result": passed,
        "inputCount": len(input),
        "outputCount": len(passed),
    }
'''

_EVALUATOR = (
    lookup_path,
    condition._parse_number,
    condition._resolve_operand,
    condition._is_number,
    condition._to_number,
    condition._strict_equals,
    condition._loose_equals,
    condition.evaluate_condition,
)


def build_script(node: Node, script_name: str, include_context: bool = True) -> GeneratedScript:
    config = node.logic_config()
    main = _FILTER_MAIN if config.logic_type == "filter" else _BRANCH_MAIN
    content = render(
        _PRELUDE + main,
        header=header("Logic", node),
        condition=literal(config.condition),
        logic_type=literal(config.logic_type),
        helpers=embed(*_EVALUATOR),
    )
    return GeneratedScript(
        name=script_name,
        description=describe("Logic", node),
        content=content,
        schema=input_schema(input="Input data for condition evaluation"),
    )


def branch_names(node: Node) -> list[str]:
    return node.logic_config().branch_names()


def build_action(node: Node) -> dict[str, Any]:
    config = node.logic_config()
    settings = code_settings(
        build_script(node, node.id, include_context=False),
        {"condition": config.condition, "type": config.logic_type},
    )
    if config.logic_type == "switch":
        settings["input"]["branches"] = [branch.model_dump() for branch in config.branches]
    return {"type": "BRANCH", "settings": settings}
