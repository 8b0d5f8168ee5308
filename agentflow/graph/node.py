"""
Node Protocol - The typed units of work in a workflow graph.

A node is created by the external editor and handed to the core as an
immutable value. Its ``config`` mapping is kept exactly as the editor wrote
it (camelCase keys and all); the typed views below read it with the
defaults the editor applies when a field was never touched.

Node Types:
- prompt: instruction sent to a text-generation model
- tool: call to a service (``http`` is the generic HTTP service)
- logic: condition evaluation / branching / filtering
- memory: store, retrieve, update or delete a keyed value
- integration: authenticated call to a third-party integration
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NodeType(StrEnum):
    """The closed set of node types."""

    PROMPT = "prompt"
    TOOL = "tool"
    LOGIC = "logic"
    MEMORY = "memory"
    INTEGRATION = "integration"


HTTP_SERVICE = "http"


class NodeHandle(BaseModel):
    """A named input or output connection point on a node."""

    id: str
    type: str = Field(default="source", description="'source' or 'target'")
    position: str = "bottom"
    label: str | None = None
    data_type: str | None = Field(default=None, alias="dataType")
    required: bool = False

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class NodePosition(BaseModel):
    """Canvas position. Presentation only, ignored by the core."""

    x: float = 0
    y: float = 0


class Node(BaseModel):
    """
    One typed unit of work.

    Examples:
        Node(
            id="summarize",
            type=NodeType.PROMPT,
            label="Summarize",
            config={"instruction": "Summarize {{text}}", "model": "gpt-4"},
        )

        # Editor payloads nest everything but id/type/position under "data"
        Node.model_validate({
            "id": "n1",
            "type": "memory",
            "position": {"x": 10, "y": 20},
            "data": {"label": "Remember", "config": {"key": "last_reply"}},
        })
    """

    id: str
    type: NodeType
    label: str = ""
    description: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    position: NodePosition = Field(default_factory=NodePosition)
    inputs: list[NodeHandle] = Field(default_factory=list)
    outputs: list[NodeHandle] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _flatten_editor_data(cls, value: Any) -> Any:
        if not isinstance(value, dict) or not isinstance(value.get("data"), dict):
            return value
        flattened = {k: v for k, v in value.items() if k != "data"}
        for key, item in value["data"].items():
            flattened.setdefault(key, item)
        return flattened

    @property
    def display_name(self) -> str:
        """Label if set, otherwise the node id."""
        return self.label.strip() or self.id

    def prompt_config(self) -> "PromptConfig":
        return PromptConfig.model_validate(self.config)

    def tool_config(self) -> "ToolConfig":
        return ToolConfig.model_validate(self.config)

    def logic_config(self) -> "LogicConfig":
        return LogicConfig.model_validate(self.config)

    def memory_config(self) -> "MemoryConfig":
        return MemoryConfig.model_validate(self.config)

    def integration_config(self) -> "IntegrationConfig":
        return IntegrationConfig.model_validate(self.config)


# ---------------------------------------------------------------------------
# Typed config views
# ---------------------------------------------------------------------------


class _ConfigView(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PromptConfig(_ConfigView):
    instruction: str = ""
    model: str = "gpt-4"
    temperature: float = 0.7
    max_tokens: int = Field(default=1000, alias="maxTokens")
    variables: list[dict[str, Any]] = Field(default_factory=list)


class ToolConfig(_ConfigView):
    service: str = ""
    action: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_http(self) -> bool:
        return self.service == HTTP_SERVICE


class LogicBranch(_ConfigView):
    label: str
    condition: str = ""


class LogicConfig(_ConfigView):
    condition: str = ""
    logic_type: str = Field(default="if-else", alias="type")
    branches: list[LogicBranch] = Field(default_factory=list)

    def branch_names(self) -> list[str]:
        """Named exits of the branch. ``switch`` uses its configured labels."""
        if self.logic_type == "switch" and self.branches:
            return [branch.label for branch in self.branches]
        return ["true", "false"]


class MemoryConfig(_ConfigView):
    operation: str = "store"
    key: str = ""
    value: Any = ""
    scope: str = "session"

    @property
    def storage_key(self) -> str:
        return f"{self.scope}:{self.key}"


class IntegrationConfig(_ConfigView):
    integration_id: str = Field(default="", alias="integrationId")
    endpoint: str = ""
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    response_mapping: dict[str, str] = Field(default_factory=dict, alias="responseMapping")
