"""
Execution Simulator - Interprets a workflow graph in-process.

The simulator never runs generated scripts. Each node type has a
simulated body (see handlers.py) and the graph is walked directly:

1. Validate the graph (errors fail the Execution with no steps)
2. Resolve entry nodes
3. Walk downstream in edge order, feeding each node's output to the next
4. Record one ExecutionStep per node body that runs

Two traversal modes:

- per-path (default): depth-first descent. A node reached by N paths runs
  N times, once with each upstream output.
- join (``SimulatorConfig.join_inputs``): dependency-count worklist. Each
  node runs once, after all of its predecessors, and receives
  ``{source_id: output}`` when it has more than one.

A failing body marks its step failed, stops the walk, and fails the
Execution with the body's error message. Nothing raises out of run().
"""

import logging
import uuid
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from agentflow.config import SimulatorConfig
from agentflow.credentials import ScriptEnvironment
from agentflow.errors import NodeExecutionError
from agentflow.graph.edge import Edge
from agentflow.graph.node import Node, NodeType
from agentflow.graph.resolver import entry_nodes, incoming_sources, next_steps_of
from agentflow.graph.validator import GraphValidator
from agentflow.observability import set_trace_context
from agentflow.runtime.handlers import NodeContext, NodeHandler, default_handler
from agentflow.schemas.execution import Execution

logger = logging.getLogger(__name__)


@dataclass
class _RunState:
    """Per-call state. Discarded when run() returns."""

    execution: Execution
    nodes: dict[str, Node]
    edges: Sequence[Edge]
    memory: dict[str, Any] = field(default_factory=dict)
    last_output: Any = None


class ExecutionSimulator:
    """
    Runs workflow graphs with simulated node bodies.

    Usage:
        simulator = ExecutionSimulator()
        execution = await simulator.run(nodes, edges, {"name": "World"})
        for step in execution.steps:
            print(step.node_id, step.status, step.output)

    Bodies are looked up per node id first (``node_registry``), then per
    node type (``handlers``), then fall back to the built-in simulation.
    """

    def __init__(
        self,
        config: SimulatorConfig | None = None,
        node_registry: dict[str, NodeHandler] | None = None,
        handlers: dict[NodeType, NodeHandler] | None = None,
        environment: ScriptEnvironment | None = None,
        validator: GraphValidator | None = None,
    ):
        self.config = config or SimulatorConfig()
        self.node_registry = node_registry or {}
        self.handlers = handlers or {}
        self.environment = environment or ScriptEnvironment()
        self.validator = validator or GraphValidator(max_nodes=self.config.max_nodes)

    def register_node(self, node_id: str, handler: NodeHandler) -> None:
        """Use ``handler`` as the body of one specific node."""
        self.node_registry[node_id] = handler

    def handler_for(self, node: Node) -> NodeHandler:
        if node.id in self.node_registry:
            return self.node_registry[node.id]
        if node.type in self.handlers:
            return self.handlers[node.type]
        return default_handler(node.type)

    async def run(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        input: Any = None,
    ) -> Execution:
        """
        Simulate one run of the graph.

        Args:
            nodes: Graph nodes
            edges: Graph edges
            input: Input handed to every entry node

        Returns:
            Execution trace, either completed or failed
        """
        execution = Execution(id=f"exec_{uuid.uuid4().hex[:12]}", input=input)
        set_trace_context(execution_id=execution.id, node_id=None)

        validation = self.validator.validate(nodes, edges)
        if not validation.is_valid:
            logger.error(f"❌ Graph validation failed: {validation.error}")
            execution.fail(f"Invalid workflow: {validation.error}")
            return execution

        entries = entry_nodes(nodes, edges)
        if not entries:
            execution.fail("No entry point found in workflow")
            return execution

        mode = "join" if self.config.join_inputs else "per-path"
        logger.info(f"🚀 Starting execution {execution.id} ({len(nodes)} nodes, {mode})")
        logger.info(f"   Entry nodes: {[node.id for node in entries]}")

        state = _RunState(
            execution=execution,
            nodes={node.id: node for node in nodes},
            edges=edges,
        )
        try:
            if self.config.join_inputs:
                await self._run_joined(entries, input, state)
            else:
                for entry in entries:
                    await self._run_path(entry, input, state)
        except NodeExecutionError as e:
            logger.error(f"❌ Execution failed at node '{e.node_id}': {e}")
            execution.fail(str(e))
        except Exception as e:
            logger.exception(f"❌ Execution aborted: {e}")
            execution.fail(str(e) or type(e).__name__)
        else:
            execution.complete(state.last_output)
            logger.info(
                f"✓ Execution completed: {len(execution.steps)} steps "
                f"in {execution.duration_ms}ms"
            )
        finally:
            set_trace_context(node_id=None)

        return execution

    async def _run_path(self, entry: Node, input: Any, state: _RunState) -> None:
        # Explicit stack of (node, input) frames, successors pushed in reverse edge order
        # so they pop in edge order.
        frames: list[tuple[Node, Any]] = [(entry, input)]
        while frames:
            node, node_input = frames.pop()
            output = await self._execute_node(node, node_input, state)
            for target_id in reversed(next_steps_of(node.id, state.edges)):
                frames.append((state.nodes[target_id], output))

    async def _run_joined(self, entries: list[Node], input: Any, state: _RunState) -> None:
        remaining = {node_id: 0 for node_id in state.nodes}
        for edge in state.edges:
            remaining[edge.target] += 1

        outputs: dict[str, Any] = {}
        ready = deque(entry.id for entry in entries)
        while ready:
            node_id = ready.popleft()
            sources = list(dict.fromkeys(incoming_sources(node_id, state.edges)))
            if not sources:
                node_input = input
            elif len(sources) == 1:
                node_input = outputs[sources[0]]
            else:
                node_input = {source: outputs[source] for source in sources}

            outputs[node_id] = await self._execute_node(state.nodes[node_id], node_input, state)

            for target_id in next_steps_of(node_id, state.edges):
                remaining[target_id] -= 1
                if remaining[target_id] == 0:
                    ready.append(target_id)

    async def _execute_node(self, node: Node, input: Any, state: _RunState) -> Any:
        """Run one body and record its step. Raises NodeExecutionError on failure."""
        set_trace_context(node_id=node.id)
        step = state.execution.start_step(node.id, input)
        logger.info(
            f"▶ Step {len(state.execution.steps)}: {node.display_name} ({node.type})",
            extra={"event": "step_started", "node_type": str(node.type)},
        )

        ctx = NodeContext(
            node=node,
            input=input,
            execution_id=state.execution.id,
            config=self.config,
            environment=self.environment,
            memory=state.memory,
        )
        try:
            output = await self.handler_for(node)(ctx)
        except Exception as e:
            message = str(e) or type(e).__name__
            step.fail(message)
            logger.error(
                f"   ✗ Failed: {message}",
                extra={"event": "step_failed", "node_type": str(node.type)},
            )
            raise NodeExecutionError(node.id, message) from e

        step.complete(output)
        state.last_output = output
        logger.info(
            f"   ✓ Completed in {step.duration}ms",
            extra={"event": "step_completed", "duration_ms": step.duration},
        )
        return output


async def run(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    input: Any = None,
    config: SimulatorConfig | None = None,
    **kwargs: Any,
) -> Execution:
    """Simulate one run with a fresh ExecutionSimulator."""
    return await ExecutionSimulator(config=config, **kwargs).run(nodes, edges, input)
