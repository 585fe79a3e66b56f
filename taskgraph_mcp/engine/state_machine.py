"""Status transitions: pending -> in_progress -> completed.

Functions here never mutate their input; they return an updated copy.
"""

from datetime import datetime

from loguru import logger

from taskgraph_mcp.enums import GateCondition, TaskStatus
from taskgraph_mcp.errors import (
    AlreadyCompletedError,
    NotExecutableError,
    NotInProgressError,
    TaskValidationError,
)
from taskgraph_mcp.models.inputs import SUMMARY_MIN_LENGTH
from taskgraph_mcp.models.results import ExecutionCheck, TransitionOutcome, VerificationOutcome
from taskgraph_mcp.models.task import Task

PASSING_SCORE = 80


def start_task(task: Task, check: ExecutionCheck, now: datetime) -> TransitionOutcome:
    """
    Move a task to in_progress.

    Re-starting a task that is already in progress is a no-op.

    Raises:
        AlreadyCompletedError: If the task is completed
        NotExecutableError: If prerequisites are not completed
    """
    if task.status == TaskStatus.COMPLETED:
        raise AlreadyCompletedError(task.id)
    if task.status == TaskStatus.IN_PROGRESS:
        return TransitionOutcome(task=task, changed=False)
    if not check.executable or check.condition != GateCondition.READY:
        raise NotExecutableError(task.id, check.blocked_by)

    started = task.model_copy(update={"status": TaskStatus.IN_PROGRESS, "updated_at": now})
    logger.debug(f"Task {task.id} started")
    return TransitionOutcome(task=started, changed=True)


def verify_task(task: Task, score: float, summary: str, now: datetime) -> VerificationOutcome:
    """
    Score an in-progress task.

    A score of 80 or more completes the task and stores ``summary``. A lower
    score leaves the status alone and hands ``summary`` back as feedback.

    Raises:
        TaskValidationError: If the score is out of range or the text is too short
        AlreadyCompletedError: If the task is completed
        NotInProgressError: If the task has not been started
    """
    if not 0 <= score <= 100:
        raise TaskValidationError(f"Score must be between 0 and 100, got {score}")
    text = summary.strip()
    if len(text) < SUMMARY_MIN_LENGTH:
        raise TaskValidationError(f"Summary must be at least {SUMMARY_MIN_LENGTH} characters")
    if task.status == TaskStatus.COMPLETED:
        raise AlreadyCompletedError(task.id)
    if task.status != TaskStatus.IN_PROGRESS:
        raise NotInProgressError(task.id, task.status.value)

    if score < PASSING_SCORE:
        logger.debug(f"Task {task.id} scored {score}, staying in progress")
        return VerificationOutcome(task=task, score=score, completed=False, feedback=text)

    completed = task.model_copy(
        update={
            "status": TaskStatus.COMPLETED,
            "summary": text,
            "completed_at": now,
            "updated_at": now,
        }
    )
    logger.debug(f"Task {task.id} completed with score {score}")
    return VerificationOutcome(task=completed, score=score, completed=True)
