"""Integration node: authenticated request against a configured third-party API.

Base URLs and credentials arrive through the script's ``config`` argument
(see ``agentflow.credentials.ScriptEnvironment``); nothing environment
specific is compiled into the body.
"""

from typing import Any

from agentflow.compiler.generators.base import (
    GeneratedScript,
    describe,
    embed,
    header,
    input_schema,
    literal,
    render,
)
from agentflow.credentials import piece_for
from agentflow.graph.node import Node
from agentflow.graph.templating import (
    apply_response_mapping,
    lookup_path,
    render_template,
    render_value,
)

INTEGRATION_PIECE_VERSION = "~0.1.0"

_TEMPLATE = '''
$header
import base64
import re
from typing import Any

import httpx

INTEGRATION_ID = $integration_id
ENDPOINT = $endpoint
METHOD = $method
HEADERS = $headers
BODY = $body
RESPONSE_MAPPING = $response_mapping


$helpers


def get_integration_settings(config: dict[str, Any]) -> dict[str, Any]:
    settings = (config.get("integrations") or {}).get(INTEGRATION_ID) or {}
    if not settings.get("base_url"):
        raise RuntimeError(f"No configuration provided for integration {INTEGRATION_ID!r}")
    return settings


def get_auth_headers(credentials: dict[str, Any]) -> dict[str, str]:
    if credentials.get("api_key"):
        return {"Authorization": f"Bearer {credentials['api_key']}"}
    if credentials.get("username") and credentials.get("password"):
        pair = f"{credentials['username']}:{credentials['password']}"
        return {"Authorization": f"Basic {base64.b64encode(pair.encode()).decode()}"}
    return {}


def main(input: Any = None, config: dict[str, Any] | None = None) -> dict[str, Any]:
    settings = get_integration_settings(config or {})
    headers = {
        "Content-Type": "application/json",
        **render_value(HEADERS, input),
        **get_auth_headers(settings.get("credentials") or {}),
    }
    body = render_value(BODY, input)
    url = settings["base_url"].rstrip("/") + render_template(ENDPOINT, input)
    try:
        response = httpx.request(
            METHOD,
            url,
            headers=headers,
            json=body if METHOD != "GET" and body is not None else None,
            timeout=30.0,
        )
    except httpx.HTTPError as e:
        raise RuntimeError(f"Integration call failed: {e}") from e

    if "application/json" in response.headers.get("content-type", ""):
        raw_response = response.json()
    else:
        raw_response = response.text
    return {
        "success": response.is_success,
        "status": response.status_code,
        "data": apply_response_mapping(raw_response, RESPONSE_MAPPING),
        "rawResponse": raw_response,
    }
'''


def build_script(node: Node, script_name: str, include_context: bool = True) -> GeneratedScript:
    config = node.integration_config()
    content = render(
        _TEMPLATE,
        header=header("Integration", node),
        integration_id=literal(config.integration_id),
        endpoint=literal(config.endpoint),
        method=literal(config.method.upper()),
        headers=literal(config.headers),
        body=literal(config.body),
        response_mapping=literal(config.response_mapping),
        helpers=embed(lookup_path, render_template, render_value, apply_response_mapping),
    )
    return GeneratedScript(
        name=script_name,
        description=describe("Integration", node),
        content=content,
        schema=input_schema(
            input="Input data for the integration",
            config="Runtime configuration (integration base URLs and credentials)",
        ),
    )


def build_action(node: Node) -> dict[str, Any]:
    config = node.integration_config()
    return {
        "type": "PIECE",
        "settings": {
            "pieceName": piece_for(config.integration_id),
            "pieceVersion": INTEGRATION_PIECE_VERSION,
            "actionName": "send_request",
            "input": {
                "endpoint": config.endpoint,
                "method": config.method.upper(),
                "headers": config.headers,
                "body": config.body,
                "responseMapping": config.response_mapping,
            },
            "inputUiInfo": {},
        },
    }
