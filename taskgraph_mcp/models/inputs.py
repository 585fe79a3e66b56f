"""Input models for task graph MCP tools."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from taskgraph_mcp.enums import ResponseFormat, StatusFilter, UpdateMode
from taskgraph_mcp.models.task import TASK_NAME_MAX_LENGTH, RelatedFile

DESCRIPTION_MIN_LENGTH = 10
SUMMARY_MIN_LENGTH = 30

# ============================================================================
# Batch Input Models
# ============================================================================


class TaskDraft(BaseModel):
    """A candidate task submitted in a batch."""

    model_config = ConfigDict(str_strip_whitespace=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(
        ...,
        description="Concise task name that states the task's purpose",
        min_length=1,
        max_length=TASK_NAME_MAX_LENGTH,
    )
    description: str = Field(
        ...,
        description="Detailed description: implementation points, technical details and acceptance criteria",
        min_length=DESCRIPTION_MIN_LENGTH,
    )
    implementation_guide: str | None = Field(
        default=None, description="Concrete implementation steps or pseudocode for this task"
    )
    verification_criteria: str | None = Field(
        default=None, description="How to verify this task is done"
    )
    notes: str | None = Field(default=None, description="Supplementary notes (optional)")
    dependencies: list[str] | None = Field(
        default=None,
        description="Prerequisite tasks, referenced by task id or by full task name",
    )
    related_files: list[RelatedFile] | None = Field(
        default=None,
        description="Files related to the task: path, type, description and optional lineStart/lineEnd",
    )

    @field_validator("related_files")
    @classmethod
    def validate_file_descriptions(cls, v: list[RelatedFile] | None) -> list[RelatedFile] | None:
        if v:
            for file in v:
                if not (file.description or "").strip():
                    raise ValueError(f"File description cannot be empty for '{file.path}'")
        return v


class SplitTasksInput(BaseModel):
    """Input model for splitting a goal into tasks."""

    model_config = ConfigDict(str_strip_whitespace=True)

    update_mode: UpdateMode = Field(
        default=UpdateMode.CLEAR_ALL_TASKS,
        description=(
            "'append' keeps existing tasks and adds new ones; 'overwrite' drops unfinished tasks and keeps "
            "completed ones; 'selective' updates tasks matched by name and keeps the rest; 'clearAllTasks' "
            "backs up and removes every task first"
        ),
    )
    tasks: list[TaskDraft] = Field(..., description="Structured task list", min_length=1)
    global_analysis_result: str | None = Field(
        default=None, description="Overall goal or analysis shared by every task in the batch"
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN, description="Output format: 'markdown', 'concise' or 'json'"
    )


# ============================================================================
# Query Input Models
# ============================================================================


class ListTasksInput(BaseModel):
    """Input model for listing tasks."""

    model_config = ConfigDict(str_strip_whitespace=True)

    status: StatusFilter = Field(
        default=StatusFilter.ALL,
        description="Filter by status: all, pending, in_progress, completed or blocked",
    )
    page: int = Field(default=1, description="Page number (1-based)", ge=1)
    page_size: int = Field(default=20, description="Tasks per page", ge=1, le=100)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' for human-readable or 'json' for machine-readable",
    )


class QueryTaskInput(BaseModel):
    """Input model for searching tasks."""

    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., description="Task id, or text to match in names and descriptions", min_length=1)
    is_id: bool = Field(default=False, description="Treat the query as an exact task id")
    page: int = Field(default=1, description="Page number (1-based)", ge=1)
    page_size: int = Field(default=5, description="Tasks per page", ge=1, le=20)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN, description="Output format: 'markdown', 'concise' or 'json'"
    )


class GetTaskInput(BaseModel):
    """Input model for getting a single task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    task_id: str = Field(..., description="Task id to retrieve", min_length=1)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' for human-readable or 'json' for machine-readable",
    )


# ============================================================================
# Mutation Input Models
# ============================================================================


class UpdateTaskInput(BaseModel):
    """Input model for updating task content.

    Only supplied fields are changed; each one replaces the stored value.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    task_id: str = Field(..., description="Id of an unfinished task to update", min_length=1)
    name: str | None = Field(default=None, description="New task name", max_length=TASK_NAME_MAX_LENGTH)
    description: str | None = Field(default=None, description="New description")
    notes: str | None = Field(default=None, description="New notes")
    dependencies: list[str] | None = Field(
        default=None, description="New prerequisite list, by task id or task name"
    )
    related_files: list[RelatedFile] | None = Field(default=None, description="New related file list")
    implementation_guide: str | None = Field(default=None, description="New implementation guide")
    verification_criteria: str | None = Field(default=None, description="New verification criteria")
    analysis_result: str | None = Field(default=None, description="New analysis result")
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN, description="Output format: 'markdown', 'concise' or 'json'"
    )

    def content_fields(self) -> dict:
        """The content fields the caller supplied, keyed by task field name."""
        return self.model_dump(
            exclude_unset=True,
            exclude_none=True,
            exclude={"task_id", "response_format"},
        )


class ExecuteTaskInput(BaseModel):
    """Input model for starting a task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    task_id: str = Field(..., description="Id of the task to execute", min_length=1)


class VerifyTaskInput(BaseModel):
    """Input model for verifying a task."""

    model_config = ConfigDict(str_strip_whitespace=True)

    task_id: str = Field(..., description="Id of the in-progress task to verify", min_length=1)
    score: float = Field(
        ..., description="Score from 0 to 100; 80 or more completes the task", ge=0, le=100
    )
    summary: str = Field(
        ...,
        description=(
            "With a score of 80 or more: completion summary of results and decisions. "
            "Below 80: what is missing or needs correction"
        ),
        min_length=SUMMARY_MIN_LENGTH,
    )
