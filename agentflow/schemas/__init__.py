from agentflow.schemas.execution import (
    Execution,
    ExecutionStatus,
    ExecutionStep,
    StepStatus,
)

__all__ = ["Execution", "ExecutionStatus", "ExecutionStep", "StepStatus"]
