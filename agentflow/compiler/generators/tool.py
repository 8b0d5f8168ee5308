"""Tool node: the generic HTTP service, or a named service placeholder."""

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
from agentflow.graph.node import Node, ToolConfig
from agentflow.graph.templating import render_template, render_value

HTTP_PIECE = "@activepieces/piece-http"
HTTP_PIECE_VERSION = "~0.3.0"

_HTTP_TEMPLATE = '''
$header
import re
from typing import Any

import httpx

URL = $url
METHOD = $method
HEADERS = $headers
BODY = $body


$helpers


def main(input: Any = None) -> dict[str, Any]:
    url = render_template(URL, input)
    headers = {"Content-Type": "application/json", **render_value(HEADERS, input)}
    body = render_value(BODY, input)
    try:
        response = httpx.request(
            METHOD,
            url,
            headers=headers,
            json=body if METHOD != "GET" and body is not None else None,
            timeout=30.0,
        )
    except httpx.HTTPError as e:
        raise RuntimeError(f"HTTP request failed: {e}") from e

    if "application/json" in response.headers.get("content-type", ""):
        data = response.json()
    else:
        data = response.text
    return {"status": response.status_code, "headers": dict(response.headers), "data": data}
'''

_SERVICE_TEMPLATE = '''
$header
import re
from typing import Any

SERVICE = $service
ACTION = $action
PARAMETERS = $parameters


$helpers


def main(input: Any = None) -> dict[str, Any]:
    parameters = render_value(PARAMETERS, input)
    return {
        "service": SERVICE,
        "action": ACTION,
        "result": {"message": "Tool execution completed", "parameters": parameters},
        "input": input,
    }
'''


def _http_request(config: ToolConfig) -> dict[str, Any]:
    params = config.parameters
    headers = params.get("headers") or {}
    if not isinstance(headers, dict):
        raise ValueError("HTTP headers must be a mapping")
    return {
        "method": str(params.get("method") or "GET").upper(),
        "url": params.get("url") or "",
        "headers": headers,
        "body": params.get("body"),
    }


def build_script(node: Node, script_name: str, include_context: bool = True) -> GeneratedScript:
    config = node.tool_config()
    if config.is_http:
        request = _http_request(config)
        content = render(
            _HTTP_TEMPLATE,
            header=header("HTTP Request", node),
            url=literal(request["url"]),
            method=literal(request["method"]),
            headers=literal(request["headers"]),
            body=literal(request["body"]),
            helpers=embed(render_template, render_value),
        )
        return GeneratedScript(
            name=script_name,
            description=describe("HTTP Request", node),
            content=content,
            schema=input_schema(input="Input data substituted into url, headers and body"),
        )

    content = render(
        _SERVICE_TEMPLATE,
        header=header("Tool", node),
        service=literal(config.service),
        action=literal(config.action),
        parameters=literal(config.parameters),
        helpers=embed(render_template, render_value),
    )
    return GeneratedScript(
        name=script_name,
        description=describe("Tool", node),
        content=content,
        schema=input_schema(input="Input data for the tool"),
    )


def build_action(node: Node) -> dict[str, Any]:
    config = node.tool_config()
    if config.is_http:
        return {
            "type": "PIECE",
            "settings": {
                "pieceName": HTTP_PIECE,
                "pieceVersion": HTTP_PIECE_VERSION,
                "actionName": "send_request",
                "input": _http_request(config),
                "inputUiInfo": {},
            },
        }

    script = build_script(node, node.id, include_context=False)
    return {
        "type": "CODE",
        "settings": code_settings(
            script,
            {"service": config.service, "action": config.action, "parameters": config.parameters},
        ),
    }
