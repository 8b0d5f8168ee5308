"""
Tests for the branch-map compile strategy.
"""

import logging

from agentflow.compiler import BranchMapCompiler, get_compiler
from agentflow.compiler.generators.tool import HTTP_PIECE
from agentflow.graph.edge import Edge
from agentflow.graph.node import Node, NodeType
from agentflow.graph.validator import IssueKind, validate


def prompt(node_id, instruction="Summarize {{text}}"):
    return Node(
        id=node_id,
        type=NodeType.PROMPT,
        label=node_id.title(),
        description=f"{node_id} step",
        config={"instruction": instruction},
    )


def logic(node_id, condition="score > 50", **config):
    return Node(
        id=node_id,
        type=NodeType.LOGIC,
        description="route",
        config={"condition": condition, **config},
    )


def edge(source, target, handle=None):
    return Edge(id=f"{source}-{target}", source=source, target=target, source_handle=handle)


def warning_kinds(result):
    return [w.kind for w in result.warnings]


class TestLinkage:
    def test_chain_links_each_action_to_its_successor(self):
        nodes = [prompt("a"), prompt("b"), prompt("c")]
        result = BranchMapCompiler().compile(nodes, [edge("a", "b"), edge("b", "c")], "Chain")

        assert result.success
        artifact = result.artifact
        assert artifact["displayName"] == "Chain"
        assert artifact["trigger"]["type"] == "WEBHOOK"
        assert artifact["trigger"]["settings"]["sourceNodeId"] == "a"
        assert artifact["trigger"]["nextAction"] == "b"
        assert list(artifact["actions"]) == ["b", "c"]
        assert artifact["actions"]["b"]["nextAction"] == {"success": "c"}
        assert "nextAction" not in artifact["actions"]["c"]

    def test_default_display_name(self):
        result = BranchMapCompiler().compile([prompt("a")], [])

        assert result.artifact["displayName"] == "Generated Workflow"
        assert "nextAction" not in result.artifact["trigger"]

    def test_prompt_becomes_code_action(self):
        nodes = [prompt("a"), prompt("b", "Hello {{name}}")]
        action = BranchMapCompiler().compile(nodes, [edge("a", "b")]).artifact["actions"]["b"]

        assert action["type"] == "CODE"
        assert action["displayName"] == "B"
        assert action["settings"]["input"]["instruction"] == "Hello {{name}}"
        assert action["settings"]["sourceCode"]["language"] == "python3"
        assert "def main(" in action["settings"]["sourceCode"]["code"]

    def test_compilation_is_deterministic(self):
        nodes = [prompt("a"), prompt("b"), prompt("c")]
        edges = [edge("a", "b"), edge("b", "c")]

        first = BranchMapCompiler().compile(nodes, edges, "Same")
        second = BranchMapCompiler().compile(nodes, edges, "Same")
        assert first.artifact == second.artifact

    def test_multiple_targets_on_plain_node_warns(self):
        nodes = [prompt("a"), prompt("b"), prompt("c")]
        result = BranchMapCompiler().compile(nodes, [edge("a", "b"), edge("a", "c")])

        assert result.success
        assert result.artifact["trigger"]["nextAction"] == "b"
        ambiguous = [w.node_id for w in result.warnings if w.kind == IssueKind.BRANCH_AMBIGUITY]
        assert ambiguous == ["a"]

        nodes = [prompt("s"), prompt("a"), prompt("b"), prompt("c")]
        edges = [edge("s", "a"), edge("a", "b"), edge("a", "c")]
        result = BranchMapCompiler().compile(nodes, edges)
        assert result.artifact["actions"]["a"]["nextAction"] == {"success": "b"}
        assert IssueKind.BRANCH_AMBIGUITY in warning_kinds(result)


class TestBranches:
    def test_labelled_branches_diverge(self):
        nodes = [prompt("start"), logic("check"), prompt("approve"), prompt("reject")]
        edges = [
            edge("start", "check"),
            edge("check", "approve", "true"),
            edge("check", "reject", "false"),
        ]
        result = BranchMapCompiler().compile(nodes, edges)

        action = result.artifact["actions"]["check"]
        assert action["type"] == "BRANCH"
        assert action["nextAction"] == {"true": "approve", "false": "reject"}
        assert IssueKind.BRANCH_AMBIGUITY not in warning_kinds(result)

    def test_unlabelled_branches_alias_first_target(self):
        nodes = [prompt("start"), logic("check"), prompt("approve"), prompt("reject")]
        edges = [edge("start", "check"), edge("check", "approve"), edge("check", "reject")]
        result = BranchMapCompiler().compile(nodes, edges)

        assert result.success
        assert result.artifact["actions"]["check"]["nextAction"] == {
            "true": "approve",
            "false": "approve",
        }
        ambiguity = [w for w in result.warnings if w.kind == IssueKind.BRANCH_AMBIGUITY]
        assert len(ambiguity) == 1
        assert ambiguity[0].node_id == "check"

    def test_partially_labelled_branch_falls_back(self):
        nodes = [prompt("start"), logic("check"), prompt("approve"), prompt("review")]
        edges = [
            edge("start", "check"),
            edge("check", "approve", "true"),
            edge("check", "review"),
        ]
        result = BranchMapCompiler().compile(nodes, edges)

        assert result.artifact["actions"]["check"]["nextAction"] == {
            "true": "approve",
            "false": "review",
        }

    def test_switch_uses_configured_labels(self):
        switch = logic(
            "route",
            type="switch",
            branches=[{"label": "high"}, {"label": "low"}],
        )
        nodes = [prompt("start"), switch, prompt("escalate"), prompt("archive")]
        edges = [
            edge("start", "route"),
            edge("route", "escalate", "high"),
            edge("route", "archive", "low"),
        ]
        action = BranchMapCompiler().compile(nodes, edges).artifact["actions"]["route"]

        assert action["nextAction"] == {"high": "escalate", "low": "archive"}
        assert action["settings"]["input"]["branches"] == [
            {"label": "high", "condition": ""},
            {"label": "low", "condition": ""},
        ]


class TestFailures:
    def test_errors_match_validator_and_artifact_is_placeholder(self):
        nodes = [prompt("a"), prompt("b")]
        edges = [edge("a", "b"), edge("b", "a")]
        compiler = BranchMapCompiler()
        result = compiler.compile(nodes, edges, "Loop")

        assert not result.success
        assert result.errors == validate(nodes, edges).errors
        assert result.artifact == compiler.empty_artifact()
        assert result.artifact["displayName"] == "Empty Workflow"

    def test_generation_failure_returns_placeholder(self):
        bad_tool = Node(
            id="fetch",
            type=NodeType.TOOL,
            description="fetch",
            config={
                "service": "http",
                "parameters": {"url": "https://example.com", "headers": "not-a-mapping"},
            },
        )
        result = BranchMapCompiler().compile([prompt("a"), bad_tool], [edge("a", "fetch")])

        assert not result.success
        assert result.errors[0].kind == IssueKind.GENERATION_FAILED
        assert result.errors[0].node_id == "fetch"
        assert result.artifact["actions"] == {}

    def test_multiple_entries_warn_and_use_first(self):
        nodes = [prompt("first"), prompt("second")]
        result = BranchMapCompiler().compile(nodes, [])

        assert result.success
        assert result.artifact["trigger"]["settings"]["sourceNodeId"] == "first"
        assert IssueKind.MULTIPLE_ENTRIES in warning_kinds(result)
        assert list(result.artifact["actions"]) == ["second"]


class TestServiceNodes:
    def test_http_tool_maps_to_http_piece(self):
        fetch = Node(
            id="fetch",
            type=NodeType.TOOL,
            description="fetch",
            config={
                "service": "http",
                "parameters": {"url": "https://example.com/{{id}}", "method": "post"},
            },
        )
        result = BranchMapCompiler().compile([prompt("a"), fetch], [edge("a", "fetch")])

        settings = result.artifact["actions"]["fetch"]["settings"]
        assert result.artifact["actions"]["fetch"]["type"] == "PIECE"
        assert settings["pieceName"] == HTTP_PIECE
        assert settings["actionName"] == "send_request"
        assert settings["input"]["method"] == "POST"
        assert settings["input"]["url"] == "https://example.com/{{id}}"
        assert IssueKind.ERROR_HANDLING in warning_kinds(result)

    def test_integration_piece_mapping(self):
        nodes = [
            prompt("a"),
            Node(
                id="notify",
                type=NodeType.INTEGRATION,
                description="post",
                config={"integrationId": "slack", "endpoint": "/chat.postMessage"},
            ),
            Node(
                id="custom",
                type=NodeType.INTEGRATION,
                description="custom",
                config={"integrationId": "acme-crm", "endpoint": "/leads"},
            ),
        ]
        edges = [edge("a", "notify"), edge("notify", "custom")]
        actions = BranchMapCompiler().compile(nodes, edges).artifact["actions"]

        assert actions["notify"]["settings"]["pieceName"] == "@activepieces/piece-slack"
        assert actions["custom"]["settings"]["pieceName"] == "@activepieces/piece-http"

    def test_get_compiler_by_name(self):
        assert isinstance(get_compiler("branch-map"), BranchMapCompiler)


class TestLogging:
    def test_compile_records_carry_target(self, caplog):
        caplog.set_level(logging.INFO, logger="agentflow.compiler.base")
        BranchMapCompiler().compile([prompt("a")], [])
        BranchMapCompiler().compile([prompt("a"), prompt("a")], [])

        events = [(r.event, r.target) for r in caplog.records if hasattr(r, "event")]
        assert events == [
            ("compile_completed", "branch-map"),
            ("compile_rejected", "branch-map"),
        ]
