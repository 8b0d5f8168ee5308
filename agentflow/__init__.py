"""
AgentFlow core - validate, compile and simulate AI workflow graphs.

A workflow is a directed graph of typed nodes (prompt, tool, logic, memory,
integration). The core:

- validates it (structural errors, per-type config errors, warnings)
- compiles it into a branch-map or module-list artifact for a remote
  automation back end
- simulates a run in-process and returns a step-by-step trace

Example:
    from agentflow import Graph, get_compiler, run

    graph = Graph.from_dict(payload)
    result = get_compiler("branch-map").compile(graph.nodes, graph.edges, "Lead Triage")
    execution = await run(graph.nodes, graph.edges, {"name": "World"})
"""

from agentflow.compiler import (
    BranchMapCompiler,
    CompileResult,
    ModuleListCompiler,
    get_compiler,
)
from agentflow.config import CompilerConfig, SimulatorConfig
from agentflow.credentials import ScriptEnvironment
from agentflow.errors import AgentFlowError, CredentialError, GraphLoadError, NodeExecutionError
from agentflow.graph import (
    Edge,
    Graph,
    GraphValidator,
    Node,
    NodeType,
    ValidationIssue,
    ValidationResult,
    entry_nodes,
    evaluate_condition,
    next_steps_of,
    validate,
)
from agentflow.runtime import ExecutionSimulator, run
from agentflow.schemas import Execution, ExecutionStatus, ExecutionStep, StepStatus

__version__ = "0.1.0"

__all__ = [
    # Graph
    "Node",
    "NodeType",
    "Edge",
    "Graph",
    "evaluate_condition",
    "next_steps_of",
    "entry_nodes",
    # Validation
    "GraphValidator",
    "ValidationIssue",
    "ValidationResult",
    "validate",
    # Compilation
    "BranchMapCompiler",
    "ModuleListCompiler",
    "CompileResult",
    "get_compiler",
    # Simulation
    "ExecutionSimulator",
    "Execution",
    "ExecutionStatus",
    "ExecutionStep",
    "StepStatus",
    "run",
    # Configuration
    "CompilerConfig",
    "SimulatorConfig",
    "ScriptEnvironment",
    # Errors
    "AgentFlowError",
    "NodeExecutionError",
    "CredentialError",
    "GraphLoadError",
]
