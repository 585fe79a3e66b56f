"""Execution MCP tools: gate checks, starting and verifying tasks."""

import json

from mcp.types import ToolAnnotations

from taskgraph_mcp.engine.complexity import assess_complexity
from taskgraph_mcp.enums import GateCondition, ResponseFormat
from taskgraph_mcp.errors import NotExecutableError, TaskGraphError
from taskgraph_mcp.models.inputs import ExecuteTaskInput, GetTaskInput, VerifyTaskInput
from taskgraph_mcp.models.task import Task
from taskgraph_mcp.server import mcp
from taskgraph_mcp.store.task_store import get_store
from taskgraph_mcp.utils.formatters import (
    _format_complexity,
    _format_error,
    _format_execution_check,
    _format_related_files,
    _format_task_markdown,
)

# ============================================================================
# Execution Helper Functions
# ============================================================================


def _format_dependency_summaries(dependencies: list[Task]) -> str:
    """Completion summaries of prerequisites, as context for the next task."""
    lines = ["## Completed Prerequisites", ""]
    for dep in dependencies:
        lines.append(f"- **{dep.name}**: {dep.summary or 'No summary recorded'}")
    return "\n".join(lines)


# ============================================================================
# Execution Tool Definitions
# ============================================================================


@mcp.tool(
    name="check_task_executable",
    annotations=ToolAnnotations(
        title="Check Task Executable",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def check_task_executable(params: GetTaskInput) -> str:
    """
    Report whether a task's prerequisites are all completed.

    Args:
        params: GetTaskInput containing task_id and response_format

    Returns:
        Gate result listing every incomplete prerequisite (markdown or JSON)
    """
    store = get_store()
    try:
        check = store.can_execute(params.task_id)
    except TaskGraphError as e:
        return _format_error(e)

    if params.response_format == ResponseFormat.JSON:
        return json.dumps(check.model_dump(mode="json"), indent=2)

    task = store.get_by_id(params.task_id)
    return _format_execution_check(check, task.name if task else params.task_id)


@mcp.tool(
    name="execute_task",
    annotations=ToolAnnotations(
        title="Execute Task",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def execute_task(params: ExecuteTaskInput) -> str:
    """
    Start a task whose prerequisites are all completed.

    USE THIS WHEN:
    - Beginning work on a planned task

    The task moves to in_progress. The response carries everything needed to
    do the work: the task content, a complexity assessment, the completion
    summaries of its prerequisites and its related files.

    Args:
        params: ExecuteTaskInput containing the task_id

    Returns:
        Execution brief for the task, or the reason it cannot start
    """
    store = get_store()
    try:
        outcome = store.start_task(params.task_id)
    except NotExecutableError as e:
        task = store.get_by_id(params.task_id)
        check = store.can_execute(params.task_id)
        return f"Error: {_format_execution_check(check, task.name if task else e.task_id)}"
    except TaskGraphError as e:
        return _format_error(e)

    task = outcome.task
    if not outcome.changed:
        return f'Task "{task.name}" (ID: `{task.id}`) is already in progress.'

    tasks_by_id = {t.id: t for t in store.get_all()}
    dependencies = [tasks_by_id[d] for d in task.dependency_ids if d in tasks_by_id]

    sections = [
        f"# Executing Task: {task.name}",
        _format_task_markdown(task, tasks_by_id),
        _format_complexity(assess_complexity(task)),
    ]
    if dependencies:
        sections.append(_format_dependency_summaries(dependencies))
    if task.related_files:
        sections.append(_format_related_files(task.related_files))
    sections.append(
        "When the work is done, call verify_task with a score from 0 to 100 and a summary."
    )
    return "\n\n".join(sections)


@mcp.tool(
    name="verify_task",
    annotations=ToolAnnotations(
        title="Verify Task",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def verify_task(params: VerifyTaskInput) -> str:
    """
    Score an in-progress task against its verification criteria.

    A score of 80 or more marks the task completed and stores the summary.
    A lower score keeps it in progress; the summary then describes what is
    missing or must be corrected.

    Args:
        params: VerifyTaskInput containing task_id, score and summary

    Returns:
        Verification result
    """
    store = get_store()
    try:
        outcome = store.verify_task(params.task_id, params.score, params.summary)
    except TaskGraphError as e:
        return _format_error(e)

    task = outcome.task
    if outcome.completed:
        ready = [
            t.name
            for t in store.get_all()
            if params.task_id in t.dependency_ids and store.can_execute(t.id).condition == GateCondition.READY
        ]
        message = f'Task "{task.name}" (ID: `{task.id}`) completed with score {params.score:g}.'
        if ready:
            message += f"\nNow ready to execute: {', '.join(ready)}"
        return message

    return (
        f'Task "{task.name}" (ID: `{task.id}`) scored {params.score:g} and stays in progress.\n'
        f"Corrections needed: {outcome.feedback}\n"
        f"Fix the issues above, then call verify_task again."
    )
