"""
Execution Schema - The trace of one simulated run of a workflow graph.

An Execution records every node body that ran, in the order it ran (not
node declaration order), with its input, output or error and timings.
It is JSON-serializable for display and history.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(UTC)


def _elapsed_ms(started_at: datetime | None, completed_at: datetime | None) -> int:
    if started_at is None or completed_at is None:
        return 0
    return int((completed_at - started_at).total_seconds() * 1000)


class StepStatus(StrEnum):
    """Status of a single node execution."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ExecutionStatus(StrEnum):
    """Status of a whole run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ExecutionStep(BaseModel):
    """One node execution."""

    node_id: str
    status: StepStatus = StepStatus.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    input: Any = None
    output: Any = None
    error: str | None = None
    duration: int | None = Field(default=None, description="Milliseconds")

    def start(self) -> None:
        self.status = StepStatus.RUNNING
        self.started_at = _now()

    def complete(self, output: Any) -> None:
        self.status = StepStatus.COMPLETED
        self.output = output
        self._finish()

    def fail(self, error: str) -> None:
        self.status = StepStatus.FAILED
        self.error = error
        self._finish()

    def _finish(self) -> None:
        self.completed_at = _now()
        self.duration = _elapsed_ms(self.started_at, self.completed_at)


class Execution(BaseModel):
    """A complete simulated run. Transitions: running -> completed | failed."""

    id: str
    workflow_id: str = "current"
    status: ExecutionStatus = ExecutionStatus.RUNNING
    started_at: datetime = Field(default_factory=_now)
    completed_at: datetime | None = None
    input: Any = None
    output: Any = None
    error: str | None = None
    steps: list[ExecutionStep] = Field(default_factory=list)

    @property
    def duration_ms(self) -> int:
        return _elapsed_ms(self.started_at, self.completed_at)

    def start_step(self, node_id: str, input: Any) -> ExecutionStep:
        step = ExecutionStep(node_id=node_id, input=input)
        step.start()
        self.steps.append(step)
        return step

    def complete(self, output: Any = None) -> None:
        self.status = ExecutionStatus.COMPLETED
        self.output = output
        self.completed_at = _now()

    def fail(self, error: str) -> None:
        self.status = ExecutionStatus.FAILED
        self.error = error
        self.completed_at = _now()

    def steps_for(self, node_id: str) -> list[ExecutionStep]:
        return [step for step in self.steps if step.node_id == node_id]

    @property
    def path(self) -> list[str]:
        """Node ids in executed order."""
        return [step.node_id for step in self.steps]
