"""Core task models for the task graph engine."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from taskgraph_mcp.enums import RelatedFileType, TaskStatus

TASK_NAME_MAX_LENGTH = 100


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_task_id() -> str:
    """Fresh uuid4 task id."""
    return str(uuid4())


class _CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskDependency(_CamelModel):
    """Reference to a prerequisite task by id."""

    task_id: str = Field(..., min_length=1)


class RelatedFile(_CamelModel):
    """Metadata about a file a task touches or refers to.

    Only metadata is kept; file contents are never read by the engine.
    """

    path: str = Field(..., min_length=1)
    type: RelatedFileType
    description: str | None = None
    line_start: int | None = Field(default=None, gt=0)
    line_end: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_line_range(self) -> RelatedFile:
        if (self.line_start is None) != (self.line_end is None):
            raise ValueError("lineStart and lineEnd must be set together")
        if self.line_start is not None and self.line_end is not None and self.line_start > self.line_end:
            raise ValueError(f"lineStart ({self.line_start}) must not exceed lineEnd ({self.line_end})")
        return self

    @property
    def line_range(self) -> str | None:
        """Line range as "start-end", or None when no range is set."""
        if self.line_start is None:
            return None
        return f"{self.line_start}-{self.line_end}"


class Task(_CamelModel):
    """A unit of work with status, prerequisites and descriptive content."""

    id: str = Field(default_factory=new_task_id, min_length=1)
    name: str = Field(..., max_length=TASK_NAME_MAX_LENGTH)
    description: str = ""
    notes: str | None = None
    implementation_guide: str | None = None
    verification_criteria: str | None = None
    summary: str | None = None
    analysis_result: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    dependencies: list[TaskDependency] = Field(default_factory=list)
    related_files: list[RelatedFile] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Task name cannot be empty")
        return v.strip()

    @field_validator("dependencies")
    @classmethod
    def dedupe_dependencies(cls, v: list[TaskDependency]) -> list[TaskDependency]:
        seen: set[str] = set()
        unique: list[TaskDependency] = []
        for dep in v:
            if dep.task_id not in seen:
                seen.add(dep.task_id)
                unique.append(dep)
        return unique

    @model_validator(mode="after")
    def check_completion(self) -> Task:
        if (self.status == TaskStatus.COMPLETED) != (self.completed_at is not None):
            raise ValueError("completedAt must be set exactly when status is completed")
        return self

    @property
    def dependency_ids(self) -> list[str]:
        """Prerequisite ids in dependency order."""
        return [dep.task_id for dep in self.dependencies]

    def to_record(self) -> dict:
        """Serialize to the durable JSON shape (camelCase keys, ISO timestamps)."""
        return self.model_dump(mode="json", by_alias=True)
