"""
Tests for structured logging and trace context.
"""

import json
import logging

import pytest

from agentflow.observability import (
    clear_trace_context,
    get_trace_context,
    set_trace_context,
)
from agentflow.observability.logging import HumanReadableFormatter, StructuredFormatter


@pytest.fixture(autouse=True)
def reset_context():
    clear_trace_context()
    yield
    clear_trace_context()


def make_record(message, **extra):
    record = logging.LogRecord("agentflow.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_trace_context_merges():
    set_trace_context(execution_id="exec_123")
    set_trace_context(node_id="a")

    assert get_trace_context() == {"execution_id": "exec_123", "node_id": "a"}


def test_get_trace_context_returns_copy():
    set_trace_context(execution_id="exec_1")
    get_trace_context()["execution_id"] = "changed"

    assert get_trace_context()["execution_id"] == "exec_1"


def test_structured_formatter_includes_context():
    set_trace_context(execution_id="exec_abc", node_id="fetch")
    entry = json.loads(StructuredFormatter().format(make_record("\x1b[32mok\x1b[0m", event="done")))

    assert entry["message"] == "ok"
    assert entry["level"] == "info"
    assert entry["execution_id"] == "exec_abc"
    assert entry["node_id"] == "fetch"
    assert entry["event"] == "done"


def test_human_formatter_prefix():
    set_trace_context(execution_id="exec_0123456789", node_id="fetch")
    line = HumanReadableFormatter().format(make_record("Step done"))

    assert "[exec:23456789 | node:fetch]" in line
    assert line.endswith("Step done")


def test_structured_formatter_step_fields():
    record = make_record("done", node_type="tool", duration_ms=12, target="module-list")
    entry = json.loads(StructuredFormatter().format(record))

    assert entry["node_type"] == "tool"
    assert entry["duration_ms"] == 12
    assert entry["target"] == "module-list"
