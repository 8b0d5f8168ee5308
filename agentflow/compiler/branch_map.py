"""
Branch-map strategy.

Produces a single flow object: a webhook trigger plus a map of named
actions, each pointing at its successor through an inline ``nextAction``
map (``{"success": id}``, or one key per branch for logic nodes).

Example artifact for ``fetch -> check -> notify``::

    {
        "displayName": "Support Triage",
        "trigger": {"name": "webhook_trigger", "type": "WEBHOOK", "nextAction": "check", ...},
        "actions": {
            "check": {"name": "check", "type": "BRANCH", "nextAction": {"true": "notify", ...}},
            "notify": {"name": "notify", "type": "PIECE", ...},
        },
    }
"""

from collections.abc import Sequence
from typing import Any

from agentflow.compiler import generators
from agentflow.compiler.base import ArtifactCompiler
from agentflow.graph.edge import Edge
from agentflow.graph.node import Node
from agentflow.graph.resolver import branch_targets, next_steps_of
from agentflow.graph.validator import IssueKind, ValidationIssue

TRIGGER_NAME = "webhook_trigger"


def _trigger(settings: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "name": TRIGGER_NAME,
        "displayName": "Webhook Trigger",
        "type": "WEBHOOK",
        "settings": settings if settings is not None else {},
    }


class BranchMapCompiler(ArtifactCompiler):
    """Compiles to a trigger + named-action flow with inline next-step maps."""

    name = "branch-map"

    def build(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        trigger: Node,
        target_name: str,
        errors: list[ValidationIssue],
        warnings: list[ValidationIssue],
    ) -> dict[str, Any]:
        trigger_descriptor = _trigger(
            {"input": {}, "inputUiInfo": {}, "sourceNodeId": trigger.id}
        )
        trigger_next = next_steps_of(trigger.id, edges)
        if trigger_next:
            trigger_descriptor["nextAction"] = trigger_next[0]
        if len(set(trigger_next)) > 1:
            warnings.append(
                ValidationIssue(
                    node_id=trigger.id,
                    kind=IssueKind.BRANCH_AMBIGUITY,
                    message=(
                        f'Trigger node "{trigger.display_name}" has {len(trigger_next)} '
                        f"outgoing edges; only '{trigger_next[0]}' is linked"
                    ),
                )
            )

        actions: dict[str, dict[str, Any]] = {}
        for node in nodes:
            if node.id == trigger.id:
                continue
            try:
                generated = generators.build_action(node)
            except (ValueError, TypeError) as e:
                errors.append(self.generation_failed(node, e))
                continue

            action = {"name": node.id, "displayName": node.display_name, **generated}
            next_action = self._link(node, edges, warnings)
            if next_action:
                action["nextAction"] = next_action
            actions[node.id] = action

        return {"displayName": target_name, "trigger": trigger_descriptor, "actions": actions}

    def _link(
        self, node: Node, edges: Sequence[Edge], warnings: list[ValidationIssue]
    ) -> dict[str, str] | None:
        targets = next_steps_of(node.id, edges)
        if not targets:
            return None

        names = generators.branch_names(node)
        if names is None:
            if len(set(targets)) > 1:
                warnings.append(
                    ValidationIssue(
                        node_id=node.id,
                        kind=IssueKind.BRANCH_AMBIGUITY,
                        message=(
                            f'Node "{node.display_name}" has {len(targets)} outgoing edges; '
                            f"only '{targets[0]}' is linked"
                        ),
                    )
                )
            return {"success": targets[0]}

        labelled = branch_targets(node.id, edges)
        fallback = labelled.get(None, targets)[0]
        linkage: dict[str, str] = {}
        aliased: list[str] = []
        for branch in names:
            if labelled.get(branch):
                linkage[branch] = labelled[branch][0]
            else:
                linkage[branch] = fallback
                aliased.append(branch)

        if aliased:
            warnings.append(
                ValidationIssue(
                    node_id=node.id,
                    kind=IssueKind.BRANCH_AMBIGUITY,
                    message=(
                        f'Branches {", ".join(aliased)} of logic node "{node.display_name}" '
                        f"have no dedicated edge and continue to '{fallback}'"
                    ),
                )
            )
        return linkage

    def empty_artifact(self) -> dict[str, Any]:
        return {"displayName": "Empty Workflow", "trigger": _trigger(), "actions": {}}
