"""
Command-line interface for AgentFlow.

Usage:
    agentflow validate workflow.json
    agentflow compile workflow.json --target module-list --name "Lead Triage"
    agentflow run workflow.json --input '{"name": "World"}'

Every command prints JSON on stdout. Exit status is 0 on success, 1 when
the graph has errors or the run failed, and 2 when the graph file cannot
be read.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from agentflow.compiler import COMPILERS, get_compiler
from agentflow.config import CompilerConfig, SimulatorConfig
from agentflow.errors import GraphLoadError
from agentflow.graph.edge import Graph
from agentflow.graph.validator import GraphValidator
from agentflow.observability import configure_logging
from agentflow.runtime import ExecutionSimulator
from agentflow.schemas.execution import ExecutionStatus

logger = logging.getLogger(__name__)


def load_graph(path: str) -> Graph:
    """Read a ``{"nodes": [...], "edges": [...]}`` document."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise GraphLoadError(f"Cannot read graph file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise GraphLoadError(f"Graph file '{path}' must contain a JSON object")
    try:
        return Graph.from_dict(data)
    except ValueError as e:
        raise GraphLoadError(f"Invalid graph in '{path}': {e}") from e


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_validate(args: argparse.Namespace) -> int:
    graph = load_graph(args.graph)
    result = GraphValidator(max_nodes=CompilerConfig().max_nodes).validate(
        graph.nodes, graph.edges
    )
    _print_json(result.model_dump(mode="json"))
    return 0 if result.is_valid else 1


def cmd_compile(args: argparse.Namespace) -> int:
    graph = load_graph(args.graph)
    config = CompilerConfig()
    if args.workspace:
        config.workspace = args.workspace
    try:
        compiler = get_compiler(args.target, config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    result = compiler.compile(graph.nodes, graph.edges, args.name or graph.name or None)
    payload = result.model_dump(mode="json", by_alias=True)

    if args.output and result.success:
        Path(args.output).write_text(json.dumps(result.artifact, indent=2), encoding="utf-8")
        logger.info(f"Wrote {compiler.name} artifact to {args.output}")
    _print_json(payload)
    return 0 if result.success else 1


def cmd_run(args: argparse.Namespace) -> int:
    graph = load_graph(args.graph)
    try:
        input_data = json.loads(args.input) if args.input else None
    except json.JSONDecodeError as e:
        print(f"Error: --input is not valid JSON: {e}", file=sys.stderr)
        return 2

    config = SimulatorConfig()
    if args.join_inputs:
        config.join_inputs = True

    execution = asyncio.run(
        ExecutionSimulator(config=config).run(graph.nodes, graph.edges, input_data)
    )
    _print_json(execution.model_dump(mode="json"))
    return 0 if execution.status == ExecutionStatus.COMPLETED else 1


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    validate_parser = subparsers.add_parser("validate", help="Validate a workflow graph")
    validate_parser.add_argument("graph", help="Path to the graph JSON file")
    validate_parser.set_defaults(func=cmd_validate)

    compile_parser = subparsers.add_parser("compile", help="Compile a graph into an artifact")
    compile_parser.add_argument("graph", help="Path to the graph JSON file")
    compile_parser.add_argument(
        "--target",
        choices=sorted(COMPILERS),
        default=None,
        help="Compile strategy (default from ~/.agentflow/configuration.json)",
    )
    compile_parser.add_argument("--name", help="Display name of the generated workflow")
    compile_parser.add_argument("--workspace", help="Workspace prefix for module-list scripts")
    compile_parser.add_argument("--output", "-o", help="Also write the artifact to this file")
    compile_parser.set_defaults(func=cmd_compile)

    run_parser = subparsers.add_parser("run", help="Simulate a run of a workflow graph")
    run_parser.add_argument("graph", help="Path to the graph JSON file")
    run_parser.add_argument("--input", "-i", help="Input data as a JSON string")
    run_parser.add_argument(
        "--join-inputs",
        action="store_true",
        help="Run converging nodes once with all upstream outputs",
    )
    run_parser.set_defaults(func=cmd_run)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="agentflow",
        description="AgentFlow - Validate, compile and simulate workflow graphs",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    register_commands(subparsers)

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        return args.func(args)
    except GraphLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
