"""Tests for the MCP tools, run against a store in a temporary directory."""

import json

import pytest

from taskgraph_mcp import (
    ExecuteTaskInput,
    GetTaskInput,
    ListTasksInput,
    QueryTaskInput,
    RelatedFile,
    RelatedFileType,
    ResponseFormat,
    SplitTasksInput,
    StatusFilter,
    TaskDraft,
    TaskStatus,
    UpdateMode,
    UpdateTaskInput,
    VerifyTaskInput,
    check_task_executable,
    execute_task,
    get_task_detail,
    list_tasks,
    mcp,
    query_task,
    split_tasks,
    update_task,
    verify_task,
)
from taskgraph_mcp.utils.formatters import _format_related_files

SUMMARY = "Schema created with migrations and covered by integration tests."


def _drafts() -> list[TaskDraft]:
    return [
        TaskDraft(
            name="Set up schema",
            description="Create the database schema and migrations",
            verification_criteria="Migrations apply cleanly",
            related_files=[
                RelatedFile(path="db/schema.sql", type=RelatedFileType.CREATE, description="Schema definition"),
                RelatedFile(
                    path="app/models.py",
                    type=RelatedFileType.TO_MODIFY,
                    description="ORM models",
                    line_start=10,
                    line_end=40,
                ),
            ],
        ),
        TaskDraft(
            name="Build API",
            description="Expose the schema through a REST API",
            dependencies=["Set up schema"],
        ),
    ]


async def _plan(tool_store, mode: UpdateMode = UpdateMode.APPEND):
    await split_tasks(SplitTasksInput(update_mode=mode, tasks=_drafts()))
    schema, api = tool_store.get_all()
    return schema, api


# ============================================================================
# Planning Tools
# ============================================================================


class TestSplitTasks:
    """Tests for split_tasks."""

    @pytest.mark.asyncio
    async def test_markdown_output(self, tool_store):
        result = await split_tasks(SplitTasksInput(update_mode=UpdateMode.APPEND, tasks=_drafts()))
        assert "Appended 2 new task(s)." in result
        assert "# Planned Tasks" in result
        assert "### Set up schema" in result
        assert "### Build API" in result
        assert len(tool_store.get_all()) == 2

    @pytest.mark.asyncio
    async def test_json_output(self, tool_store):
        params = SplitTasksInput(update_mode=UpdateMode.APPEND, tasks=_drafts(), response_format=ResponseFormat.JSON)
        data = json.loads(await split_tasks(params))
        assert data["mode"] == "append"
        assert data["success"] is True
        assert data["cleared"] is False
        schema, api = data["created"]
        assert api["dependencies"] == [{"taskId": schema["id"]}]

    @pytest.mark.asyncio
    async def test_concise_output(self, tool_store):
        params = SplitTasksInput(
            update_mode=UpdateMode.APPEND, tasks=_drafts(), response_format=ResponseFormat.CONCISE
        )
        result = await split_tasks(params)
        assert "Build API (pending, deps:1)" in result

    @pytest.mark.asyncio
    async def test_default_mode_clears_and_backs_up(self, tool_store):
        await _plan(tool_store)
        result = await split_tasks(
            SplitTasksInput(tasks=[TaskDraft(name="Fresh start", description="Begin again from scratch")])
        )
        assert "Cleared all tasks and created 1 new task(s)." in result
        assert "Backup written to" in result
        assert [t.name for t in tool_store.get_all()] == ["Fresh start"]

    @pytest.mark.asyncio
    async def test_duplicate_names_error(self, tool_store):
        drafts = [
            TaskDraft(name="Same", description="First task with this name"),
            TaskDraft(name="Same", description="Second task with this name"),
        ]
        result = await split_tasks(SplitTasksInput(update_mode=UpdateMode.APPEND, tasks=drafts))
        assert result.startswith("Error:")
        assert "Duplicate task name 'Same'" in result
        assert tool_store.get_all() == []

    @pytest.mark.asyncio
    async def test_unknown_dependency_error(self, tool_store):
        drafts = [TaskDraft(name="Lonely", description="Depends on a ghost", dependencies=["Ghost"])]
        result = await split_tasks(SplitTasksInput(update_mode=UpdateMode.APPEND, tasks=drafts))
        assert "Error: Dependency 'Ghost'" in result
        assert "Tip:" in result

    @pytest.mark.asyncio
    async def test_clear_all_creation_failure(self, tool_store):
        await _plan(tool_store)
        drafts = [TaskDraft(name="Lonely", description="Depends on a ghost", dependencies=["Ghost"])]
        result = await split_tasks(SplitTasksInput(tasks=drafts))
        assert result.startswith("Error: All tasks were cleared")
        assert "update_mode='append'" in result
        assert tool_store.get_all() == []

    @pytest.mark.asyncio
    async def test_selective_message(self, tool_store):
        await _plan(tool_store)
        drafts = [
            TaskDraft(name="Build API", description="Expose the schema through GraphQL instead"),
            TaskDraft(name="Write docs", description="Document the public endpoints"),
        ]
        result = await split_tasks(SplitTasksInput(update_mode=UpdateMode.SELECTIVE, tasks=drafts))
        assert "Updated 1 and created 1 task(s)." in result
        assert len(tool_store.get_all()) == 3

    @pytest.mark.asyncio
    async def test_long_dependency_chain(self, tool_store):
        drafts = [
            TaskDraft(name=f"Step {i}", description=f"Chain step number {i}", dependencies=[f"Step {i + 1}"])
            for i in range(1199)
        ]
        drafts.append(TaskDraft(name="Step 1199", description="Last step of the chain"))
        params = SplitTasksInput(update_mode=UpdateMode.APPEND, tasks=drafts, response_format=ResponseFormat.CONCISE)
        result = await split_tasks(params)
        assert result.startswith("Appended 1200 new task(s).")
        assert len(tool_store.get_all()) == 1200


class TestListTasks:
    """Tests for list_tasks."""

    @pytest.mark.asyncio
    async def test_empty(self, tool_store):
        result = await list_tasks(ListTasksInput())
        assert "No tasks found." in result

    @pytest.mark.asyncio
    async def test_markdown_shows_dependency_names(self, tool_store):
        await _plan(tool_store)
        result = await list_tasks(ListTasksInput())
        assert "# Tasks" in result
        assert "Set up schema (`" in result
        assert "*Page 1 of 1 (2 task(s) total)*" in result

    @pytest.mark.asyncio
    async def test_status_filter(self, tool_store):
        schema, _ = await _plan(tool_store)
        tool_store.start_task(schema.id)
        result = await list_tasks(ListTasksInput(status=StatusFilter.PENDING, response_format=ResponseFormat.JSON))
        data = json.loads(result)
        assert data["total"] == 1
        assert data["tasks"][0]["name"] == "Build API"

    @pytest.mark.asyncio
    async def test_concise(self, tool_store):
        await _plan(tool_store)
        result = await list_tasks(ListTasksInput(response_format=ResponseFormat.CONCISE))
        assert result.startswith("2 task(s) | all")

    @pytest.mark.asyncio
    async def test_page_beyond_end(self, tool_store):
        await _plan(tool_store)
        data = json.loads(await list_tasks(ListTasksInput(page=5, response_format=ResponseFormat.JSON)))
        assert data["tasks"] == []
        assert data["total"] == 2


class TestQueryTask:
    """Tests for query_task."""

    @pytest.mark.asyncio
    async def test_text_query(self, tool_store):
        await _plan(tool_store)
        result = await query_task(QueryTaskInput(query="rest api"))
        assert "# Tasks matching 'rest api'" in result
        assert "### Build API" in result
        assert "### Set up schema" not in result

    @pytest.mark.asyncio
    async def test_id_query(self, tool_store):
        schema, _ = await _plan(tool_store)
        params = QueryTaskInput(query=schema.id, is_id=True, response_format=ResponseFormat.JSON)
        data = json.loads(await query_task(params))
        assert data["total"] == 1
        assert data["tasks"][0]["id"] == schema.id

    @pytest.mark.asyncio
    async def test_no_matches(self, tool_store):
        result = await query_task(QueryTaskInput(query="nothing", response_format=ResponseFormat.CONCISE))
        assert result == "0 tasks"


class TestGetTaskDetail:
    """Tests for get_task_detail."""

    @pytest.mark.asyncio
    async def test_markdown(self, tool_store):
        _, api = await _plan(tool_store)
        result = await get_task_detail(GetTaskInput(task_id=api.id))
        assert "### Build API" in result
        assert "**Status**: Pending" in result
        assert "Set up schema (`" in result

    @pytest.mark.asyncio
    async def test_json_uses_record_layout(self, tool_store):
        schema, _ = await _plan(tool_store)
        data = json.loads(await get_task_detail(GetTaskInput(task_id=schema.id, response_format=ResponseFormat.JSON)))
        assert data["verificationCriteria"] == "Migrations apply cleanly"
        assert data["relatedFiles"][1]["lineEnd"] == 40

    @pytest.mark.asyncio
    async def test_not_found(self, tool_store):
        result = await get_task_detail(GetTaskInput(task_id="missing"))
        assert result.startswith("Error: Task 'missing' not found.")

    @pytest.mark.asyncio
    async def test_found_in_backup(self, tool_store):
        schema, _ = await _plan(tool_store)
        await split_tasks(SplitTasksInput(tasks=[TaskDraft(name="Next", description="The next plan begins")]))
        result = await get_task_detail(GetTaskInput(task_id=schema.id))
        assert "### Set up schema" in result


class TestUpdateTask:
    """Tests for update_task."""

    @pytest.mark.asyncio
    async def test_update_notes(self, tool_store):
        schema, _ = await _plan(tool_store)
        result = await update_task(UpdateTaskInput(task_id=schema.id, notes="Use UUID primary keys"))
        assert result.startswith("Task updated successfully.")
        assert "**Notes**: Use UUID primary keys" in result
        assert tool_store.get_by_id(schema.id).notes == "Use UUID primary keys"

    @pytest.mark.asyncio
    async def test_update_nothing(self, tool_store):
        schema, _ = await _plan(tool_store)
        result = await update_task(UpdateTaskInput(task_id=schema.id))
        assert result.startswith("Error: No fields to update")

    @pytest.mark.asyncio
    async def test_update_cycle_rejected(self, tool_store):
        schema, api = await _plan(tool_store)
        result = await update_task(UpdateTaskInput(task_id=schema.id, dependencies=[api.id]))
        assert result.startswith("Error: Circular dependency detected")

    @pytest.mark.asyncio
    async def test_update_unknown_task(self, tool_store):
        result = await update_task(UpdateTaskInput(task_id="missing", notes="anything"))
        assert result == (
            "Error: Task 'missing' not found\nTip: Use list_tasks or query_task to find valid task ids."
        )


# ============================================================================
# Execution Tools
# ============================================================================


class TestCheckTaskExecutable:
    """Tests for check_task_executable."""

    @pytest.mark.asyncio
    async def test_blocked(self, tool_store):
        schema, api = await _plan(tool_store)
        result = await check_task_executable(GetTaskInput(task_id=api.id))
        assert "cannot be executed yet" in result
        assert f"Set up schema ({schema.id})" in result

    @pytest.mark.asyncio
    async def test_ready_json(self, tool_store):
        schema, _ = await _plan(tool_store)
        params = GetTaskInput(task_id=schema.id, response_format=ResponseFormat.JSON)
        data = json.loads(await check_task_executable(params))
        assert data["executable"] is True
        assert data["condition"] == "ready"
        assert data["blocked_by"] == []

    @pytest.mark.asyncio
    async def test_unknown(self, tool_store):
        result = await check_task_executable(GetTaskInput(task_id="missing"))
        assert result.startswith("Error: Task 'missing' not found")


class TestExecuteTask:
    """Tests for execute_task."""

    @pytest.mark.asyncio
    async def test_execution_brief(self, tool_store):
        schema, _ = await _plan(tool_store)
        result = await execute_task(ExecuteTaskInput(task_id=schema.id))
        assert result.startswith("# Executing Task: Set up schema")
        assert "**Complexity**: low" in result
        assert "## Related Files (2)" in result
        assert "call verify_task" in result
        assert tool_store.get_by_id(schema.id).status == TaskStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_blocked_task(self, tool_store):
        _, api = await _plan(tool_store)
        result = await execute_task(ExecuteTaskInput(task_id=api.id))
        assert result.startswith("Error: ")
        assert "Blocked by incomplete dependencies: Set up schema" in result
        assert tool_store.get_by_id(api.id).status == TaskStatus.PENDING

    @pytest.mark.asyncio
    async def test_already_in_progress(self, tool_store):
        schema, _ = await _plan(tool_store)
        await execute_task(ExecuteTaskInput(task_id=schema.id))
        result = await execute_task(ExecuteTaskInput(task_id=schema.id))
        assert result.endswith("is already in progress.")

    @pytest.mark.asyncio
    async def test_prerequisite_summaries_included(self, tool_store):
        schema, api = await _plan(tool_store)
        await execute_task(ExecuteTaskInput(task_id=schema.id))
        await verify_task(VerifyTaskInput(task_id=schema.id, score=95, summary=SUMMARY))
        result = await execute_task(ExecuteTaskInput(task_id=api.id))
        assert "## Completed Prerequisites" in result
        assert f"- **Set up schema**: {SUMMARY}" in result

    @pytest.mark.asyncio
    async def test_completed_task(self, tool_store):
        schema, _ = await _plan(tool_store)
        await execute_task(ExecuteTaskInput(task_id=schema.id))
        await verify_task(VerifyTaskInput(task_id=schema.id, score=95, summary=SUMMARY))
        result = await execute_task(ExecuteTaskInput(task_id=schema.id))
        assert "is already completed" in result
        assert "Tip:" in result


class TestVerifyTask:
    """Tests for verify_task."""

    @pytest.mark.asyncio
    async def test_pass_unblocks_dependents(self, tool_store):
        schema, _ = await _plan(tool_store)
        await execute_task(ExecuteTaskInput(task_id=schema.id))
        result = await verify_task(VerifyTaskInput(task_id=schema.id, score=85, summary=SUMMARY))
        assert "completed with score 85." in result
        assert "Now ready to execute: Build API" in result
        assert tool_store.get_by_id(schema.id).summary == SUMMARY

    @pytest.mark.asyncio
    async def test_low_score(self, tool_store):
        schema, _ = await _plan(tool_store)
        await execute_task(ExecuteTaskInput(task_id=schema.id))
        feedback = "Migrations fail on a clean database; the index is missing."
        result = await verify_task(VerifyTaskInput(task_id=schema.id, score=50, summary=feedback))
        assert "scored 50 and stays in progress" in result
        assert f"Corrections needed: {feedback}" in result
        assert tool_store.get_by_id(schema.id).status == TaskStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_not_started(self, tool_store):
        schema, _ = await _plan(tool_store)
        result = await verify_task(VerifyTaskInput(task_id=schema.id, score=90, summary=SUMMARY))
        assert "only in_progress tasks can be verified" in result
        assert "Tip: Start the task with execute_task" in result


# ============================================================================
# Formatting
# ============================================================================


class TestFormatRelatedFiles:
    """Tests for the related file summary."""

    def test_sorted_by_type_priority(self):
        files = [
            RelatedFile(path="new.py", type=RelatedFileType.CREATE, description="new"),
            RelatedFile(path="ref.py", type=RelatedFileType.REFERENCE, description="ref"),
            RelatedFile(path="mod.py", type=RelatedFileType.TO_MODIFY, description="mod"),
        ]
        lines = _format_related_files(files).splitlines()
        assert "mod.py" in lines[2]
        assert "ref.py" in lines[3]
        assert "new.py" in lines[4]

    def test_length_limit(self):
        files = [
            RelatedFile(path=f"file_{i}.py", type=RelatedFileType.OTHER, description="x" * 50) for i in range(10)
        ]
        result = _format_related_files(files, max_length=100)
        assert "remaining files omitted" in result
        assert "file_9.py" not in result

    def test_line_range(self):
        files = [RelatedFile(path="a.py", type=RelatedFileType.TO_MODIFY, description="a", line_start=3, line_end=7)]
        assert "(lines 3-7)" in _format_related_files(files)

    def test_empty(self):
        assert _format_related_files([]) == "No related files"


class TestServer:
    """Tests for tool registration on the FastMCP server."""

    @pytest.mark.asyncio
    async def test_all_tools_registered(self):
        names = {tool.name for tool in await mcp.list_tools()}
        assert names == {
            "split_tasks",
            "list_tasks",
            "query_task",
            "get_task_detail",
            "update_task",
            "check_task_executable",
            "execute_task",
            "verify_task",
        }
