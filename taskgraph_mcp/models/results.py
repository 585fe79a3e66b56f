"""Output/intermediate models produced by the engine and the store."""

from __future__ import annotations

from pydantic import BaseModel, Field

from taskgraph_mcp.enums import ComplexityLevel, GateCondition, TaskStatus, UpdateMode
from taskgraph_mcp.models.task import Task


class ComplexityMetrics(BaseModel):
    """Raw metrics behind a complexity assessment."""

    description_length: int = 0
    dependencies_count: int = 0
    notes_length: int = 0
    has_notes: bool = False


class ComplexityAssessment(BaseModel):
    """Derived, non-authoritative classification of a task's size."""

    level: ComplexityLevel
    metrics: ComplexityMetrics
    recommendations: list[str] = Field(default_factory=list)


class BlockingDependency(BaseModel):
    """A prerequisite that is not completed yet.

    ``name`` and ``status`` are None when the id no longer resolves.
    """

    task_id: str
    name: str | None = None
    status: TaskStatus | None = None

    @property
    def label(self) -> str:
        """Human-readable name and id of the blocking task."""
        if self.name is None:
            return f"{self.task_id} (missing)"
        return f"{self.name} ({self.task_id})"


class ExecutionCheck(BaseModel):
    """Result of the execution gate for one task."""

    task_id: str
    executable: bool
    condition: GateCondition
    blocked_by: list[BlockingDependency] = Field(default_factory=list)

    @property
    def blocked_by_ids(self) -> list[str]:
        """Ids of the incomplete prerequisites."""
        return [dep.task_id for dep in self.blocked_by]


class VerificationOutcome(BaseModel):
    """Result of scoring an in-progress task."""

    task: Task
    score: float
    completed: bool
    feedback: str | None = None


class TransitionOutcome(BaseModel):
    """Result of starting a task; ``changed`` is False for a no-op restart."""

    task: Task
    changed: bool


class BatchResult(BaseModel):
    """Outcome of a batch reconciliation.

    For ``clearAllTasks`` the clear and the creation are reported separately:
    ``cleared`` can be True while ``creation_error`` is set.
    """

    mode: UpdateMode
    created: list[Task] = Field(default_factory=list)
    updated: list[Task] = Field(default_factory=list)
    backup_path: str | None = None
    cleared: bool = False
    creation_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.creation_error is None


class SearchPage(BaseModel):
    """One page of task search results."""

    tasks: list[Task] = Field(default_factory=list)
    page: int = 1
    page_size: int
    total: int = 0

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size
