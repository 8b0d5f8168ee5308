"""Building blocks shared by the per-type generators."""

import inspect
import re
import textwrap
from collections.abc import Callable
from string import Template
from typing import Any

from pydantic import BaseModel, Field

from agentflow.graph.node import Node

SCRIPT_LANGUAGE = "python3"


class GeneratedScript(BaseModel):
    """A generated script body plus the metadata a back end needs to register it."""

    name: str
    language: str = SCRIPT_LANGUAGE
    description: str = ""
    content: str
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")

    model_config = {"populate_by_name": True}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def sanitize_name(text: str) -> str:
    """Lowercase, non-alphanumerics collapsed to single underscores, trimmed."""
    return re.sub(r"_+", "_", re.sub(r"[^a-z0-9]", "_", text.lower())).strip("_")


def literal(value: Any) -> str:
    """Python source for a JSON-like config value."""
    return repr(value)


def header(kind: str, node: Node) -> str:
    label = " ".join(node.display_name.split())
    return (
        f"# {kind} Script: {label}\n"
        f"# Generated by agentflow from node {node.id!r}. Do not edit.\n"
    )


def embed(*functions: Callable[..., Any]) -> str:
    """Source of package helpers, pasted into a script so it runs standalone."""
    return "\n\n".join(textwrap.dedent(inspect.getsource(fn)).rstrip() for fn in functions)


def render(template: str, **values: str) -> str:
    return Template(template).substitute(**values).strip() + "\n"


def input_schema(**properties: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            name: {"type": "object", "description": description}
            for name, description in properties.items()
        },
    }


def describe(kind: str, node: Node) -> str:
    return f"{kind}: {node.description.strip() or node.display_name}"


def code_settings(script: GeneratedScript, inputs: dict[str, Any]) -> dict[str, Any]:
    """Settings block of a branch-map CODE action."""
    return {
        "input": inputs,
        "inputUiInfo": {},
        "sourceCode": {"language": script.language, "code": script.content},
    }
