"""In-process execution simulation."""

from agentflow.runtime.handlers import NodeContext, NodeHandler, default_handler
from agentflow.runtime.simulator import ExecutionSimulator, run

__all__ = [
    "ExecutionSimulator",
    "NodeContext",
    "NodeHandler",
    "default_handler",
    "run",
]
