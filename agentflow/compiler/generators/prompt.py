"""Prompt node: template the instruction, then call a text-generation model."""

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
from agentflow.graph.node import Node
from agentflow.graph.templating import render_template

_TEMPLATE = '''
$header
import re
from typing import Any

import httpx

INSTRUCTION = $instruction
MODEL = $model
TEMPERATURE = $temperature
MAX_TOKENS = $max_tokens


$helpers


def call_text_generation(instruction: str, config: dict[str, Any]) -> dict[str, Any]:
    llm = config.get("llm") or {}
    api_base = (llm.get("api_base") or "").rstrip("/")
    response = httpx.post(
        f"{api_base}/chat/completions",
        headers={"Authorization": f"Bearer {llm.get('api_key') or ''}"},
        json={
            "model": MODEL,
            "messages": [{"role": "user", "content": instruction}],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        },
        timeout=60.0,
    )
    response.raise_for_status()
    return response.json()


def main($signature) -> dict[str, Any]:
    instruction = render_template(INSTRUCTION, input)
$context_block    try:
        completion = call_text_generation(instruction, config or {})
    except Exception as e:
        raise RuntimeError(f"AI processing failed: {e}") from e
    return {
        "response": completion["choices"][0]["message"]["content"],
        "model": MODEL,
        "tokensUsed": (completion.get("usage") or {}).get("total_tokens", 0),
    }
'''


def build_script(node: Node, script_name: str, include_context: bool = True) -> GeneratedScript:
    config = node.prompt_config()
    if include_context:
        signature = "input: Any = None, context: Any = None, config: dict[str, Any] | None = None"
        context_block = "    instruction = render_template(instruction, context)\n"
        schema = input_schema(
            input="Input data for the prompt",
            context="Additional context variables",
            config="Runtime configuration (text-generation endpoint and key)",
        )
    else:
        signature = "input: Any = None, config: dict[str, Any] | None = None"
        context_block = ""
        schema = input_schema(
            input="Input data for the prompt",
            config="Runtime configuration (text-generation endpoint and key)",
        )

    content = render(
        _TEMPLATE,
        header=header("AI Prompt", node),
        instruction=literal(config.instruction),
        model=literal(config.model),
        temperature=literal(config.temperature),
        max_tokens=literal(config.max_tokens),
        helpers=embed(render_template),
        signature=signature,
        context_block=context_block,
    )
    return GeneratedScript(
        name=script_name,
        description=describe("AI Prompt", node),
        content=content,
        schema=schema,
    )


def build_action(node: Node) -> dict[str, Any]:
    config = node.prompt_config()
    script = build_script(node, node.id, include_context=False)
    return {
        "type": "CODE",
        "settings": code_settings(
            script,
            {
                "instruction": config.instruction,
                "model": config.model,
                "temperature": config.temperature,
                "maxTokens": config.max_tokens,
            },
        ),
    }
