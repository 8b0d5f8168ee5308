"""
Simulated node bodies.

Each handler receives a NodeContext and returns the node's output, or
raises to fail the step. Handlers never touch the network: prompt, HTTP
tool and integration bodies await a configured latency instead and echo
what the real call would have sent.

Custom handlers follow the same signature:

    async def always_approve(ctx: NodeContext) -> dict:
        return {"approved": True, "input": ctx.input}

    simulator = ExecutionSimulator(node_registry={"review": always_approve})
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from agentflow.compiler.generators.memory import MEMORY_OPERATIONS
from agentflow.config import SimulatorConfig
from agentflow.credentials import ScriptEnvironment
from agentflow.graph.condition import evaluate_condition
from agentflow.graph.node import Node, NodeType
from agentflow.graph.templating import apply_response_mapping, render_template, render_value


@dataclass
class NodeContext:
    """Everything a simulated body may look at."""

    node: Node
    input: Any
    execution_id: str
    config: SimulatorConfig
    environment: ScriptEnvironment
    memory: dict[str, Any] = field(default_factory=dict)
    """Scratch store shared by the memory nodes of one run"""


NodeHandler = Callable[[NodeContext], Awaitable[Any]]


def _estimate_tokens(*texts: str) -> int:
    return sum(len(text.split()) for text in texts)


async def simulate_prompt(ctx: NodeContext) -> dict[str, Any]:
    config = ctx.node.prompt_config()
    await asyncio.sleep(ctx.config.prompt_latency)
    instruction = render_template(config.instruction, ctx.input)
    response = f"AI response to: {instruction}"
    return {
        "response": response,
        "model": config.model,
        "tokensUsed": min(config.max_tokens, _estimate_tokens(instruction, response)),
    }


async def simulate_tool(ctx: NodeContext) -> dict[str, Any]:
    config = ctx.node.tool_config()
    if not config.is_http:
        return {
            "service": config.service,
            "action": config.action,
            "result": "Tool execution completed",
            "input": ctx.input,
        }

    await asyncio.sleep(ctx.config.http_latency)
    params = config.parameters
    return {
        "status": 200,
        "headers": {"content-type": "application/json"},
        "data": {
            "message": "HTTP request successful",
            "method": str(params.get("method") or "GET").upper(),
            "url": render_template(params.get("url") or "", ctx.input),
            "body": render_value(params.get("body"), ctx.input),
            "input": ctx.input,
        },
    }


async def simulate_logic(ctx: NodeContext) -> dict[str, Any]:
    config = ctx.node.logic_config()
    if config.logic_type == "filter":
        if not isinstance(ctx.input, list):
            raise ValueError("Filter logic requires array input")
        passed = [item for item in ctx.input if evaluate_condition(config.condition, item)]
        return {
            "type": "filter",
            "result": passed,
            "inputCount": len(ctx.input),
            "outputCount": len(passed),
        }
    return {"condition": evaluate_condition(config.condition, ctx.input), "input": ctx.input}


async def simulate_memory(ctx: NodeContext) -> dict[str, Any]:
    config = ctx.node.memory_config()
    if config.operation not in MEMORY_OPERATIONS:
        raise ValueError(f"Unknown memory operation: {config.operation}")

    storage_key = config.storage_key
    result = {
        "success": True,
        "operation": config.operation,
        "key": config.key,
        "scope": config.scope,
    }
    match config.operation:
        case "store":
            ctx.memory[storage_key] = ctx.input
            return {**result, "stored": True, "value": ctx.input}
        case "retrieve":
            return {**result, "retrieved": ctx.memory.get(storage_key)}
        case "update":
            ctx.memory[storage_key] = ctx.input
            return {**result, "updated": True, "value": ctx.input}
        case _:
            return {**result, "deleted": ctx.memory.pop(storage_key, None) is not None}


async def simulate_integration(ctx: NodeContext) -> dict[str, Any]:
    config = ctx.node.integration_config()
    if ctx.config.require_credentials:
        ctx.environment.require(config.integration_id)

    await asyncio.sleep(ctx.config.integration_latency)
    base_url = ctx.environment.base_url(config.integration_id).rstrip("/")
    raw_response = {
        "integration": config.integration_id,
        "method": config.method.upper(),
        "url": base_url + render_template(config.endpoint, ctx.input),
        "authenticated": ctx.environment.is_available(config.integration_id),
        "body": render_value(config.body, ctx.input),
        "data": ctx.input,
    }
    return {
        "success": True,
        "data": apply_response_mapping(raw_response, config.response_mapping),
        "rawResponse": raw_response,
    }


def default_handler(node_type: NodeType) -> NodeHandler:
    """The built-in simulated body for a node type."""
    match node_type:
        case NodeType.PROMPT:
            return simulate_prompt
        case NodeType.TOOL:
            return simulate_tool
        case NodeType.LOGIC:
            return simulate_logic
        case NodeType.MEMORY:
            return simulate_memory
        case NodeType.INTEGRATION:
            return simulate_integration
    raise ValueError(f"Unknown node type: {node_type}")
