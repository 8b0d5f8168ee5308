"""
Tests for the module-list compile strategy and its generated scripts.
"""

import ast

import pytest

from agentflow.compiler import ModuleListCompiler, get_compiler
from agentflow.config import CompilerConfig
from agentflow.graph.edge import Edge
from agentflow.graph.node import Node, NodeType
from agentflow.graph.validator import IssueKind, validate


def node(node_id, node_type=NodeType.PROMPT, label=None, **config):
    defaults = {
        NodeType.PROMPT: {"instruction": "Answer {{question}}"},
        NodeType.TOOL: {"service": "http", "parameters": {"url": "https://example.com"}},
        NodeType.LOGIC: {"condition": "score > 50"},
        NodeType.MEMORY: {"key": "history"},
        NodeType.INTEGRATION: {"integrationId": "notion", "endpoint": "/pages"},
    }
    return Node(
        id=node_id,
        type=node_type,
        label=label or node_id,
        description=f"{node_id} step",
        config={**defaults[node_type], **config},
    )


def edge(source, target):
    return Edge(id=f"{source}-{target}", source=source, target=target)


def module(artifact, node_id):
    return next(m for m in artifact["flow"]["value"]["modules"] if m["id"] == node_id)


def expr(artifact, node_id, key):
    return module(artifact, node_id)["value"]["input_transforms"][key]["expr"]


class TestWiring:
    def test_chain_reads_upstream_results(self):
        nodes = [node("a"), node("b"), node("c")]
        result = ModuleListCompiler().compile(nodes, [edge("a", "b"), edge("b", "c")], "Chain")

        assert result.success
        artifact = result.artifact
        assert artifact["entry"] == "a"
        assert expr(artifact, "a", "input") == "flow_input"
        assert expr(artifact, "b", "input") == "results.a"
        assert expr(artifact, "c", "input") == "results.b"

    def test_converging_edges_are_numbered(self):
        nodes = [node("a"), node("b"), node("c", NodeType.MEMORY)]
        edges = [edge("a", "c"), edge("b", "c")]
        artifact = ModuleListCompiler().compile(nodes, edges).artifact

        transforms = module(artifact, "c")["value"]["input_transforms"]
        assert transforms["input"]["expr"] == "results.a"
        assert transforms["input_1"]["expr"] == "results.b"
        assert transforms["input"]["type"] == "javascript"

    def test_prompt_and_integration_receive_runtime_config(self):
        nodes = [node("ask"), node("save", NodeType.INTEGRATION), node("mem", NodeType.MEMORY)]
        edges = [edge("ask", "save"), edge("save", "mem")]
        artifact = ModuleListCompiler().compile(nodes, edges).artifact

        assert expr(artifact, "ask", "context") == "flow_input.context"
        assert expr(artifact, "ask", "config") == "flow_input.config"
        assert expr(artifact, "save", "config") == "flow_input.config"
        assert "config" not in module(artifact, "mem")["value"]["input_transforms"]

    def test_flow_metadata(self):
        nodes = [node("a"), node("b")]
        artifact = ModuleListCompiler(workspace="acme").compile(
            nodes, [edge("a", "b")], "Lead Triage"
        ).artifact

        flow = artifact["flow"]
        assert flow["summary"] == "Lead Triage - AI Agent Workflow"
        assert flow["schema"]["required"] == ["flow_input"]
        assert flow["value"]["failure_module"]["value"]["language"] == "python3"
        assert module(artifact, "a")["value"]["path"] == "acme/lead_triage_prompt_a"
        assert [m["id"] for m in flow["value"]["modules"]] == ["a", "b"]


class TestScripts:
    def test_script_names(self):
        nodes = [
            node("n1", label="Draft Reply"),
            node("n2", label="Draft Reply"),
            node("n3", NodeType.MEMORY, label="Remember!"),
        ]
        edges = [edge("n1", "n2"), edge("n2", "n3")]
        artifact = ModuleListCompiler().compile(nodes, edges, "Support Bot").artifact

        assert [script["name"] for script in artifact["scripts"]] == [
            "support_bot_prompt_draft_reply",
            "support_bot_prompt_draft_reply_n2",
            "support_bot_memory_remember",
        ]

    def test_every_generated_script_parses(self):
        nodes = [
            node("ask"),
            node("fetch", NodeType.TOOL),
            node("check", NodeType.LOGIC),
            node("keep", NodeType.MEMORY, operation="retrieve"),
            node("notify", NodeType.INTEGRATION, responseMapping={"id": "data.id"}),
            node("other", NodeType.TOOL, service="email", action="send", parameters={}),
            node("only", NodeType.LOGIC, type="filter"),
        ]
        edges = [
            edge("ask", "fetch"),
            edge("fetch", "check"),
            edge("check", "keep"),
            edge("keep", "notify"),
            edge("notify", "other"),
            edge("other", "only"),
        ]
        result = ModuleListCompiler().compile(nodes, edges, "All Types")

        assert result.success
        assert len(result.artifact["scripts"]) == len(nodes)
        for script in result.artifact["scripts"]:
            tree = ast.parse(script["content"])
            functions = {n.name for n in tree.body if isinstance(n, ast.FunctionDef)}
            assert "main" in functions
            assert script["language"] == "python3"
            assert script["schema"]["type"] == "object"
        ast.parse(result.artifact["flow"]["value"]["failure_module"]["value"]["content"])

    def test_no_credentials_compiled_into_integration_script(self, monkeypatch):
        monkeypatch.setenv("NOTION_API_KEY", "secret-notion-key")
        nodes = [node("ask"), node("save", NodeType.INTEGRATION)]
        artifact = ModuleListCompiler().compile(nodes, [edge("ask", "save")]).artifact

        content = artifact["scripts"][1]["content"]
        assert "secret-notion-key" not in content
        assert "api.notion.com" not in content
        assert 'config.get("integrations")' in content

    def test_generated_logic_script_evaluates_like_the_simulator(self):
        nodes = [node("ask"), node("check", NodeType.LOGIC)]
        artifact = ModuleListCompiler().compile(nodes, [edge("ask", "check")]).artifact

        namespace: dict = {}
        exec(compile(artifact["scripts"][1]["content"], "check.py", "exec"), namespace)
        assert namespace["main"]({"score": 75})["condition"] is True
        assert namespace["main"]({"score": 10})["condition"] is False
        assert namespace["main"]({})["condition"] is False

    def test_generated_memory_script_rejects_unknown_operation(self):
        nodes = [node("ask"), node("mem", NodeType.MEMORY, operation="truncate")]
        artifact = ModuleListCompiler().compile(nodes, [edge("ask", "mem")]).artifact

        namespace: dict = {}
        exec(compile(artifact["scripts"][1]["content"], "mem.py", "exec"), namespace)
        with pytest.raises(ValueError, match="Unknown memory operation"):
            namespace["main"]("payload")


class TestFailures:
    def test_cycle_gives_placeholder_and_validator_errors(self):
        nodes = [node("a"), node("b")]
        edges = [edge("a", "b"), edge("b", "a")]
        result = ModuleListCompiler().compile(nodes, edges)

        assert not result.success
        assert result.errors == validate(nodes, edges).errors
        assert result.artifact["entry"] is None
        assert result.artifact["scripts"] == []
        assert result.artifact["flow"]["summary"] == "Empty Workflow"

    def test_missing_field_never_partially_compiles(self):
        nodes = [node("a"), Node(id="b", type=NodeType.MEMORY, config={})]
        result = ModuleListCompiler().compile(nodes, [edge("a", "b")])

        assert not result.success
        assert [e.kind for e in result.errors] == [IssueKind.MISSING_FIELD]
        assert result.artifact["scripts"] == []


def test_get_compiler_uses_configured_workspace():
    config = CompilerConfig(workspace="team", default_target="module-list", max_nodes=10)
    compiler = get_compiler(config=config)

    assert isinstance(compiler, ModuleListCompiler)
    assert compiler.workspace == "team"


def test_get_compiler_rejects_unknown_target():
    with pytest.raises(ValueError, match="Unknown compile target"):
        get_compiler("zapier", CompilerConfig(default_target="branch-map"))
