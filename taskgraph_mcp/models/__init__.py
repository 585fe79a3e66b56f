"""Pydantic models for the task graph engine."""

from taskgraph_mcp.models.inputs import (
    ExecuteTaskInput,
    GetTaskInput,
    ListTasksInput,
    QueryTaskInput,
    SplitTasksInput,
    TaskDraft,
    UpdateTaskInput,
    VerifyTaskInput,
)
from taskgraph_mcp.models.results import (
    BatchResult,
    BlockingDependency,
    ComplexityAssessment,
    ComplexityMetrics,
    ExecutionCheck,
    SearchPage,
    TransitionOutcome,
    VerificationOutcome,
)
from taskgraph_mcp.models.task import RelatedFile, Task, TaskDependency

__all__ = [
    # Task models
    "Task",
    "TaskDependency",
    "RelatedFile",
    # Tool input models
    "TaskDraft",
    "SplitTasksInput",
    "ListTasksInput",
    "QueryTaskInput",
    "GetTaskInput",
    "UpdateTaskInput",
    "ExecuteTaskInput",
    "VerifyTaskInput",
    # Engine output models
    "ComplexityMetrics",
    "ComplexityAssessment",
    "BlockingDependency",
    "ExecutionCheck",
    "TransitionOutcome",
    "VerificationOutcome",
    "BatchResult",
    "SearchPage",
]
