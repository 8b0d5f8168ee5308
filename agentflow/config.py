"""Shared AgentFlow configuration utilities.

Centralises reading of ~/.agentflow/configuration.json so that the
compilers, the simulator and the CLI share one implementation.

Example file::

    {
        "compiler": {"workspace": "acme", "default_target": "module-list", "max_nodes": 15},
        "simulator": {"prompt_latency": 0.2, "join_inputs": false}
    }
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agentflow.graph.validator import DEFAULT_MAX_NODES

# ---------------------------------------------------------------------------
# Low-level config file access
# ---------------------------------------------------------------------------

AGENTFLOW_CONFIG_FILE = Path.home() / ".agentflow" / "configuration.json"


def get_agentflow_config() -> dict[str, Any]:
    """Load configuration from ~/.agentflow/configuration.json."""
    if not AGENTFLOW_CONFIG_FILE.exists():
        return {}
    try:
        with open(AGENTFLOW_CONFIG_FILE, encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _section(name: str) -> dict[str, Any]:
    section = get_agentflow_config().get(name, {})
    return section if isinstance(section, dict) else {}


# ---------------------------------------------------------------------------
# Derived helpers
# ---------------------------------------------------------------------------


def get_workspace() -> str:
    """Workspace prefix for generated script paths."""
    return _section("compiler").get("workspace", "agentflow")


def get_default_target() -> str:
    return _section("compiler").get("default_target", "branch-map")


def get_max_nodes() -> int:
    """Node count above which the validator warns about maintainability."""
    return _section("compiler").get("max_nodes", DEFAULT_MAX_NODES)


def _simulator_setting(key: str, default: Any) -> Any:
    return _section("simulator").get(key, default)


# ---------------------------------------------------------------------------
# Component configs
# ---------------------------------------------------------------------------


@dataclass
class CompilerConfig:
    """Compiler settings loaded from ~/.agentflow/configuration.json."""

    workspace: str = field(default_factory=get_workspace)
    default_target: str = field(default_factory=get_default_target)
    max_nodes: int = field(default_factory=get_max_nodes)


@dataclass
class SimulatorConfig:
    """
    Simulator settings.

    Latencies are in seconds and model the network round trip of the
    prompt, HTTP tool and integration bodies.
    """

    prompt_latency: float = field(default_factory=lambda: _simulator_setting("prompt_latency", 1.0))
    http_latency: float = field(default_factory=lambda: _simulator_setting("http_latency", 0.5))
    integration_latency: float = field(
        default_factory=lambda: _simulator_setting("integration_latency", 0.8)
    )
    join_inputs: bool = field(default_factory=lambda: _simulator_setting("join_inputs", False))
    require_credentials: bool = field(
        default_factory=lambda: _simulator_setting("require_credentials", False)
    )
    max_nodes: int = field(default_factory=get_max_nodes)
