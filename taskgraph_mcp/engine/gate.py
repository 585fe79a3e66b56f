"""Execution gate: may a task start yet?"""

from collections.abc import Mapping

from taskgraph_mcp.enums import GateCondition, TaskStatus
from taskgraph_mcp.models.results import BlockingDependency, ExecutionCheck
from taskgraph_mcp.models.task import Task


def check_execution(task: Task, tasks_by_id: Mapping[str, Task]) -> ExecutionCheck:
    """
    Check whether every prerequisite of a task is completed.

    All incomplete prerequisites are listed, in dependency order. An id that
    no longer resolves counts as incomplete. A task that is already started
    or completed reports that through ``condition``.

    Args:
        task: Task to check
        tasks_by_id: Current snapshot keyed by id

    Returns:
        ExecutionCheck with executable flag, condition and blockers
    """
    blocked_by: list[BlockingDependency] = []
    for dep_id in task.dependency_ids:
        dep = tasks_by_id.get(dep_id)
        if dep is None:
            blocked_by.append(BlockingDependency(task_id=dep_id))
        elif dep.status != TaskStatus.COMPLETED:
            blocked_by.append(BlockingDependency(task_id=dep_id, name=dep.name, status=dep.status))

    executable = not blocked_by

    if task.status == TaskStatus.COMPLETED:
        condition = GateCondition.ALREADY_COMPLETED
    elif task.status == TaskStatus.IN_PROGRESS:
        condition = GateCondition.ALREADY_IN_PROGRESS
    elif executable:
        condition = GateCondition.READY
    else:
        condition = GateCondition.BLOCKED

    return ExecutionCheck(
        task_id=task.id,
        executable=executable,
        condition=condition,
        blocked_by=blocked_by,
    )
