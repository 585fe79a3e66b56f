"""Core MCP tool definitions: planning, listing, searching and editing tasks."""

import json

from mcp.types import ToolAnnotations

from taskgraph_mcp.enums import ResponseFormat, StatusFilter, TaskStatus, UpdateMode
from taskgraph_mcp.errors import StorageError, TaskGraphError
from taskgraph_mcp.models.inputs import (
    GetTaskInput,
    ListTasksInput,
    QueryTaskInput,
    SplitTasksInput,
    UpdateTaskInput,
)
from taskgraph_mcp.models.results import BatchResult, SearchPage
from taskgraph_mcp.server import mcp
from taskgraph_mcp.store.task_store import get_store
from taskgraph_mcp.utils.formatters import (
    _format_error,
    _format_task_concise,
    _format_task_markdown,
    _format_tasks_concise,
    _format_tasks_markdown,
)

_MODE_MESSAGES = {
    UpdateMode.APPEND: "Appended {created} new task(s).",
    UpdateMode.OVERWRITE: "Cleared unfinished tasks and created {created} new task(s).",
    UpdateMode.SELECTIVE: "Updated {updated} and created {created} task(s).",
    UpdateMode.CLEAR_ALL_TASKS: "Cleared all tasks and created {created} new task(s).",
}


def _page_footer(page: SearchPage) -> str:
    return f"*Page {page.page} of {max(page.total_pages, 1)} ({page.total} task(s) total)*"


def _batch_json(result: BatchResult) -> str:
    return json.dumps(
        {
            "mode": result.mode.value,
            "success": result.succeeded,
            "cleared": result.cleared,
            "backup_path": result.backup_path,
            "creation_error": result.creation_error,
            "created": [t.to_record() for t in result.created],
            "updated": [t.to_record() for t in result.updated],
        },
        indent=2,
    )


@mcp.tool(
    name="split_tasks",
    annotations=ToolAnnotations(
        title="Split Tasks",
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def split_tasks(params: SplitTasksInput) -> str:
    """
    Break a goal into structured tasks and merge them into the task list.

    USE THIS WHEN:
    - Turning an analysed goal into concrete, verifiable tasks
    - Revising an existing plan (use 'selective' to adjust tasks by name)

    UPDATE MODES:
    - append: keep every existing task, add the new ones
    - overwrite: drop unfinished tasks, keep completed ones, add the new ones
    - selective: update tasks whose name matches, keep the rest, add unmatched ones
    - clearAllTasks (default): back up and remove every task, then add the new ones

    DEPENDENCIES: reference prerequisites by task id or by the full task name,
    including tasks defined earlier in the same batch.

    Args:
        params: SplitTasksInput containing update_mode, tasks and global_analysis_result

    Returns:
        Summary of created/updated tasks (markdown, concise or JSON)

    Examples:
        - New plan: params with tasks=[{name: "Set up schema", description: "..."}]
        - Chained tasks: second task with dependencies=["Set up schema"]
    """
    store = get_store()
    try:
        result = store.reconcile_batch(params.update_mode, params.tasks, params.global_analysis_result)
    except TaskGraphError as e:
        return _format_error(e)

    if params.response_format == ResponseFormat.JSON:
        return _batch_json(result)

    if result.creation_error:
        return (
            f"Error: All tasks were cleared (backup: {result.backup_path}) but creating the new tasks failed: "
            f"{result.creation_error}\nTip: Fix the batch and call split_tasks again with update_mode='append'."
        )

    message = _MODE_MESSAGES[result.mode].format(created=len(result.created), updated=len(result.updated))
    if result.backup_path:
        message += f"\nBackup written to {result.backup_path}"

    touched = result.created + result.updated
    if params.response_format == ResponseFormat.CONCISE:
        return f"{message}\n{_format_tasks_concise(touched)}"

    tasks_by_id = {t.id: t for t in store.get_all()}
    return f"{message}\n\n{_format_tasks_markdown(touched, 'Planned Tasks', tasks_by_id)}"


@mcp.tool(
    name="list_tasks",
    annotations=ToolAnnotations(
        title="List Tasks",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def list_tasks(params: ListTasksInput) -> str:
    """
    List tasks, optionally filtered by status, ordered by creation time.

    USE THIS WHEN:
    - Getting an overview of the plan and its progress
    - Finding task ids to execute or verify

    DO NOT USE WHEN:
    - You are looking for a specific task by text → use query_task
    - You have a task id and want all of its details → use get_task_detail

    Args:
        params: ListTasksInput containing status, page, page_size and response_format

    Returns:
        Page of tasks (markdown, concise or JSON)
    """
    store = get_store()
    status = None if params.status == StatusFilter.ALL else TaskStatus(params.status.value)
    try:
        page = store.query(status=status, page=params.page, page_size=params.page_size)
    except TaskGraphError as e:
        return _format_error(e)

    if params.response_format == ResponseFormat.JSON:
        return json.dumps(
            {
                "total": page.total,
                "page": page.page,
                "total_pages": page.total_pages,
                "tasks": [t.to_record() for t in page.tasks],
            },
            indent=2,
        )

    if params.response_format == ResponseFormat.CONCISE:
        return _format_tasks_concise(page.tasks, params.status.value)

    title = "Tasks" if status is None else f"Tasks ({status.value})"
    tasks_by_id = {t.id: t for t in store.get_all()}
    return f"{_format_tasks_markdown(page.tasks, title, tasks_by_id)}\n\n{_page_footer(page)}"


@mcp.tool(
    name="query_task",
    annotations=ToolAnnotations(
        title="Query Tasks",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def query_task(params: QueryTaskInput) -> str:
    """
    Search tasks by id or by text in their name and description.

    Args:
        params: QueryTaskInput containing query, is_id, page, page_size and response_format

    Returns:
        Matching tasks (markdown, concise or JSON)

    Examples:
        - Text search: params with query="database"
        - Id lookup: params with query="<uuid>", is_id=True
    """
    store = get_store()
    try:
        page = store.search(params.query, is_id=params.is_id, page=params.page, page_size=params.page_size)
    except TaskGraphError as e:
        return _format_error(e)

    if params.response_format == ResponseFormat.JSON:
        return json.dumps(
            {
                "query": params.query,
                "total": page.total,
                "page": page.page,
                "total_pages": page.total_pages,
                "tasks": [t.to_record() for t in page.tasks],
            },
            indent=2,
        )

    if params.response_format == ResponseFormat.CONCISE:
        return _format_tasks_concise(page.tasks, f"query:{params.query}")

    title = f"Tasks matching '{params.query}'"
    return f"{_format_tasks_markdown(page.tasks, title)}\n\n{_page_footer(page)}"


@mcp.tool(
    name="get_task_detail",
    annotations=ToolAnnotations(
        title="Get Task Detail",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def get_task_detail(params: GetTaskInput) -> str:
    """
    Retrieve full details for a single task by id.

    Tasks removed by clearAllTasks are still found in the backups.

    Args:
        params: GetTaskInput containing task_id and response_format

    Returns:
        Detailed task information (markdown, concise or JSON)
    """
    store = get_store()
    try:
        page = store.search(params.task_id, is_id=True, page=1, page_size=1, include_backups=True)
    except StorageError as e:
        return _format_error(e)

    if not page.tasks:
        return (
            f"Error: Task '{params.task_id}' not found.\n"
            f"Tip: Use list_tasks or query_task to find valid task ids."
        )

    task = page.tasks[0]

    if params.response_format == ResponseFormat.JSON:
        return json.dumps(task.to_record(), indent=2)

    if params.response_format == ResponseFormat.CONCISE:
        return _format_task_concise(task)

    tasks_by_id = {t.id: t for t in store.get_all()}
    return _format_task_markdown(task, tasks_by_id)


@mcp.tool(
    name="update_task",
    annotations=ToolAnnotations(
        title="Update Task",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def update_task(params: UpdateTaskInput) -> str:
    """
    Update the content of an unfinished task.

    Only supplied fields change; each supplied field replaces the stored value.
    Status, timestamps and summaries are managed by execute_task and verify_task.

    Args:
        params: UpdateTaskInput containing task_id and the fields to replace

    Returns:
        The updated task (markdown, concise or JSON)

    Examples:
        - Rename: params with task_id="<uuid>", name="New name"
        - Re-point prerequisites: params with task_id="<uuid>", dependencies=["Set up schema"]
    """
    store = get_store()
    try:
        task = store.update_content(params.task_id, params.content_fields())
    except TaskGraphError as e:
        return _format_error(e)

    if params.response_format == ResponseFormat.JSON:
        return json.dumps(task.to_record(), indent=2)

    if params.response_format == ResponseFormat.CONCISE:
        return f"Task updated. {_format_task_concise(task)}"

    tasks_by_id = {t.id: t for t in store.get_all()}
    return f"Task updated successfully.\n\n{_format_task_markdown(task, tasks_by_id)}"
