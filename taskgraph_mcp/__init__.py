"""
MCP Server for dependency-aware task planning.

This server keeps a durable graph of tasks for an agent workflow: a goal is
split into tasks with prerequisites, a task may only start once its
prerequisites are completed, and completion is decided by a verification
score.
"""

# Re-export enums
from taskgraph_mcp.enums import (
    ComplexityLevel,
    GateCondition,
    RelatedFileType,
    ResponseFormat,
    StatusFilter,
    TaskStatus,
    UpdateMode,
)

# Re-export errors
from taskgraph_mcp.errors import (
    AlreadyCompletedError,
    CyclicDependencyError,
    DependencyNotFoundError,
    NotExecutableError,
    NotInProgressError,
    StorageError,
    TaskGraphError,
    TaskNotFoundError,
    TaskValidationError,
)

# Re-export models
from taskgraph_mcp.models import (
    BatchResult,
    BlockingDependency,
    ComplexityAssessment,
    ComplexityMetrics,
    ExecuteTaskInput,
    ExecutionCheck,
    GetTaskInput,
    ListTasksInput,
    QueryTaskInput,
    RelatedFile,
    SearchPage,
    SplitTasksInput,
    Task,
    TaskDependency,
    TaskDraft,
    TransitionOutcome,
    UpdateTaskInput,
    VerificationOutcome,
    VerifyTaskInput,
)

# Re-export engine functions
from taskgraph_mcp.engine import (
    assess_complexity,
    check_execution,
    ensure_acyclic,
    reconcile_batch,
    resolve_dependencies,
)

# Re-export the store
from taskgraph_mcp.store import JsonTaskRepository, TaskStore, clear_store_cache, get_store

# Re-export MCP server instance
from taskgraph_mcp.server import mcp

# Re-export tools
from taskgraph_mcp.tools import (
    check_task_executable,
    execute_task,
    get_task_detail,
    list_tasks,
    query_task,
    split_tasks,
    update_task,
    verify_task,
)

__all__ = [
    # Enums
    "TaskStatus",
    "StatusFilter",
    "RelatedFileType",
    "UpdateMode",
    "ComplexityLevel",
    "GateCondition",
    "ResponseFormat",
    # Errors
    "TaskGraphError",
    "TaskValidationError",
    "TaskNotFoundError",
    "DependencyNotFoundError",
    "CyclicDependencyError",
    "NotExecutableError",
    "AlreadyCompletedError",
    "NotInProgressError",
    "StorageError",
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
    # Engine
    "assess_complexity",
    "check_execution",
    "resolve_dependencies",
    "ensure_acyclic",
    "reconcile_batch",
    # Store
    "JsonTaskRepository",
    "TaskStore",
    "get_store",
    "clear_store_cache",
    # Tools
    "split_tasks",
    "list_tasks",
    "query_task",
    "get_task_detail",
    "update_task",
    "check_task_executable",
    "execute_task",
    "verify_task",
    # MCP server instance
    "mcp",
]
