"""Exception types raised inside the package.

Validation and compilation problems are returned as data, never raised.
These exceptions cover the places where raising is the contract: a
simulated node body failing, a required credential missing, or a graph
file that cannot be loaded.
"""


class AgentFlowError(Exception):
    """Base class for AgentFlow errors."""


class NodeExecutionError(AgentFlowError):
    """A simulated node body failed. Contained by the simulator's run()."""

    def __init__(self, node_id: str, message: str):
        super().__init__(message)
        self.node_id = node_id


class CredentialError(AgentFlowError):
    """Raised when required credentials are missing."""


class GraphLoadError(AgentFlowError):
    """Raised when a graph document cannot be read or parsed."""
