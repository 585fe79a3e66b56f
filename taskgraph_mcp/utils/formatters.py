"""Formatting utilities for task output."""

from collections.abc import Mapping

from taskgraph_mcp.enums import GateCondition, RelatedFileType, TaskStatus
from taskgraph_mcp.errors import TaskGraphError
from taskgraph_mcp.models.results import ComplexityAssessment, ExecutionCheck
from taskgraph_mcp.models.task import RelatedFile, Task

RELATED_FILES_MAX_LENGTH = 15000

_FILE_TYPE_PRIORITY = {
    RelatedFileType.TO_MODIFY: 1,
    RelatedFileType.REFERENCE: 2,
    RelatedFileType.DEPENDENCY: 3,
    RelatedFileType.CREATE: 4,
    RelatedFileType.OTHER: 5,
}

_ERROR_TIPS = {
    "not_found": "Use list_tasks or query_task to find valid task ids.",
    "dependency_not_found": "Reference prerequisites by exact task id or exact task name.",
    "cyclic_dependency": "Remove one of the dependencies in the cycle.",
    "not_executable": "Finish the listed dependencies first, then execute this task again.",
    "not_in_progress": "Start the task with execute_task before verifying it.",
    "already_completed": "Completed tasks are final; create a new task with split_tasks to redo the work.",
}

_STATUS_LABEL = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.BLOCKED: "Blocked",
}


def _short_id(task_id: str) -> str:
    return task_id[:8]


def _format_task_concise(task: Task) -> str:
    """
    Format a single task in concise format for token efficiency.

    Output: "[1a2b3c4d] Build parser (in_progress, deps:2)"
    """
    meta = [task.status.value]
    if task.dependencies:
        meta.append(f"deps:{len(task.dependencies)}")
    return f"[{_short_id(task.id)}] {task.name} ({', '.join(meta)})"


def _format_tasks_concise(tasks: list[Task], title: str | None = None) -> str:
    """
    Format a list of tasks in concise format for token efficiency.

    Output:
    2 task(s) | pending
    [1a2b3c4d] Build parser (pending)
    [5e6f7a8b] Write tests (pending, deps:1)
    """
    if not tasks:
        return "0 tasks"

    header = f"{len(tasks)} task(s)"
    if title:
        header = f"{len(tasks)} task(s) | {title}"

    return "\n".join([header] + [_format_task_concise(t) for t in tasks])


def _format_related_files(files: list[RelatedFile], max_length: int = RELATED_FILES_MAX_LENGTH) -> str:
    """
    Summarize related files from their metadata only.

    Files to modify come first, then references, dependencies, files to
    create and the rest. Output stops once ``max_length`` is reached.
    """
    if not files:
        return "No related files"

    lines = [f"## Related Files ({len(files)})", ""]
    total = 0
    for file in sorted(files, key=lambda f: _FILE_TYPE_PRIORITY[f.type]):
        if total >= max_length:
            lines.append("*Length limit reached, remaining files omitted*")
            break
        line = f"- **{file.type.value}** `{file.path}`"
        if file.description:
            line += f" - {file.description}"
        if file.line_range:
            line += f" (lines {file.line_range})"
        lines.append(line)
        total += len(line)

    return "\n".join(lines)


def _format_task_markdown(task: Task, tasks_by_id: Mapping[str, Task] | None = None) -> str:
    """Format a single task as markdown."""
    lines = [f"### {task.name}", f"**ID**: `{task.id}` | **Status**: {_STATUS_LABEL[task.status]}", ""]

    lines.append(task.description or "No description")

    if task.notes:
        lines += ["", f"**Notes**: {task.notes}"]
    if task.implementation_guide:
        lines += ["", "**Implementation guide**:", task.implementation_guide]
    if task.verification_criteria:
        lines += ["", "**Verification criteria**:", task.verification_criteria]

    if task.dependencies:
        lines += ["", "**Dependencies**:"]
        for dep_id in task.dependency_ids:
            dep = tasks_by_id.get(dep_id) if tasks_by_id else None
            if dep is None:
                lines.append(f"  - `{dep_id}`")
            else:
                lines.append(f"  - {dep.name} (`{dep_id}`, {dep.status.value})")

    if task.related_files:
        lines += ["", _format_related_files(task.related_files)]

    lines += ["", f"*Created*: {task.created_at.isoformat()} | *Updated*: {task.updated_at.isoformat()}"]
    if task.completed_at:
        lines.append(f"*Completed*: {task.completed_at.isoformat()}")
    if task.summary:
        lines += ["", f"**Summary**: {task.summary}"]

    return "\n".join(lines)


def _format_tasks_markdown(
    tasks: list[Task],
    title: str = "Tasks",
    tasks_by_id: Mapping[str, Task] | None = None,
) -> str:
    """Format a list of tasks as markdown."""
    if not tasks:
        return f"# {title}\n\nNo tasks found."

    lines = [f"# {title}", f"*{len(tasks)} task(s)*", ""]

    for task in tasks:
        lines.append(_format_task_markdown(task, tasks_by_id))
        lines.append("")

    return "\n".join(lines)


def _format_complexity(assessment: ComplexityAssessment) -> str:
    """Format a complexity assessment as markdown."""
    metrics = assessment.metrics
    lines = [
        f"**Complexity**: {assessment.level.value}",
        f"- Description length: {metrics.description_length} characters",
        f"- Dependencies: {metrics.dependencies_count}",
    ]
    if metrics.has_notes:
        lines.append(f"- Notes length: {metrics.notes_length} characters")
    if assessment.recommendations:
        lines.append("")
        lines.append("**Recommendations**:")
        lines += [f"- {rec}" for rec in assessment.recommendations]
    return "\n".join(lines)


def _format_execution_check(check: ExecutionCheck, task_name: str) -> str:
    """Describe an execution gate result in one or two lines."""
    if check.condition == GateCondition.ALREADY_COMPLETED:
        return f'Task "{task_name}" (ID: `{check.task_id}`) is already completed.'
    if check.condition == GateCondition.ALREADY_IN_PROGRESS:
        return f'Task "{task_name}" (ID: `{check.task_id}`) is already in progress.'
    if check.executable:
        return f'Task "{task_name}" (ID: `{check.task_id}`) is ready to execute.'
    blockers = ", ".join(dep.label for dep in check.blocked_by)
    return (
        f'Task "{task_name}" (ID: `{check.task_id}`) cannot be executed yet.\n'
        f"Blocked by incomplete dependencies: {blockers}"
    )


def _format_error(error: TaskGraphError) -> str:
    """Render an engine error as tool output."""
    tip = _ERROR_TIPS.get(error.code)
    if tip:
        return f"Error: {error.message}\nTip: {tip}"
    return f"Error: {error.message}"
