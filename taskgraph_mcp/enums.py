"""Enums for the task graph engine."""

from enum import Enum


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    CONCISE = "concise"  # One line per task, for chaining
    MARKDOWN = "markdown"  # Human-readable (default)
    JSON = "json"  # Machine-readable with all fields


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"  # reporting only, never written by the engine


class StatusFilter(str, Enum):
    """Status filter options for listing tasks."""

    ALL = "all"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class RelatedFileType(str, Enum):
    """How a file relates to a task."""

    TO_MODIFY = "TO_MODIFY"
    REFERENCE = "REFERENCE"
    CREATE = "CREATE"
    DEPENDENCY = "DEPENDENCY"
    OTHER = "OTHER"


class UpdateMode(str, Enum):
    """Batch reconciliation modes."""

    APPEND = "append"
    OVERWRITE = "overwrite"
    SELECTIVE = "selective"
    CLEAR_ALL_TASKS = "clearAllTasks"


class ComplexityLevel(str, Enum):
    """Derived complexity tier of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class GateCondition(str, Enum):
    """Outcome of an execution gate check."""

    READY = "ready"
    BLOCKED = "blocked"
    ALREADY_IN_PROGRESS = "already_in_progress"
    ALREADY_COMPLETED = "already_completed"
