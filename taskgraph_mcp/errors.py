"""Error taxonomy for the task graph engine.

Engine and store functions raise these; MCP tools translate them into
``Error: ...`` text for the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taskgraph_mcp.models.results import BlockingDependency


class TaskGraphError(Exception):
    """Base error for all engine failures."""

    code = "task_graph_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TaskValidationError(TaskGraphError):
    """Malformed input: bad line range, empty name, short text, duplicate names."""

    code = "validation_error"


class TaskNotFoundError(TaskGraphError):
    """No task with the given id exists in the current snapshot."""

    code = "not_found"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task '{task_id}' not found")
        self.task_id = task_id


class DependencyNotFoundError(TaskGraphError):
    """A dependency token matched neither a task id nor a task name."""

    code = "dependency_not_found"

    def __init__(self, token: str) -> None:
        super().__init__(f"Dependency '{token}' does not match any task id or name")
        self.token = token


class CyclicDependencyError(TaskGraphError):
    """Resolved dependencies would form a cycle."""

    code = "cyclic_dependency"

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class NotExecutableError(TaskGraphError):
    """The task still has unfinished prerequisites."""

    code = "not_executable"

    def __init__(self, task_id: str, blocked_by: list[BlockingDependency]) -> None:
        names = ", ".join(dep.label for dep in blocked_by)
        super().__init__(f"Task '{task_id}' is blocked by incomplete dependencies: {names}")
        self.task_id = task_id
        self.blocked_by = blocked_by


class AlreadyCompletedError(TaskGraphError):
    """The task is completed; no further transition or edit is allowed."""

    code = "already_completed"

    def __init__(self, task_id: str) -> None:
        super().__init__(
            f"Task '{task_id}' is already completed. To run it again, recreate it in a new batch."
        )
        self.task_id = task_id


class NotInProgressError(TaskGraphError):
    """Verification was requested for a task that has not been started."""

    code = "not_in_progress"

    def __init__(self, task_id: str, status: str) -> None:
        super().__init__(
            f"Task '{task_id}' has status '{status}'; only in_progress tasks can be verified"
        )
        self.task_id = task_id
        self.status = status


class StorageError(TaskGraphError):
    """Snapshot load, commit or backup failed."""

    code = "io_error"
