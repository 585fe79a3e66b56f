"""Batch reconciliation: merge an incoming task batch into the task set.

This module is pure. It computes the next snapshot; committing it (and the
backup for ``clearAllTasks``) is the store's job.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from pydantic import ValidationError

from taskgraph_mcp.enums import TaskStatus, UpdateMode
from taskgraph_mcp.engine.resolver import ensure_acyclic, resolve_dependencies
from taskgraph_mcp.errors import TaskValidationError
from taskgraph_mcp.models.inputs import TaskDraft
from taskgraph_mcp.models.task import Task, TaskDependency, utc_now


@dataclass
class ReconcilePlan:
    """Next snapshot plus the tasks the batch created or updated."""

    tasks: list[Task]
    created: list[Task] = field(default_factory=list)
    updated: list[Task] = field(default_factory=list)


def check_unique_names(drafts: Sequence[TaskDraft]) -> None:
    """Reject a batch whose task names are not pairwise distinct."""
    seen: set[str] = set()
    for draft in drafts:
        if draft.name in seen:
            raise TaskValidationError(
                f"Duplicate task name '{draft.name}' in batch; each task name must be unique"
            )
        seen.add(draft.name)


def select_survivors(existing: Sequence[Task], mode: UpdateMode) -> list[Task]:
    """Existing tasks that remain after the mode's discard rule."""
    if mode == UpdateMode.OVERWRITE:
        return [t for t in existing if t.status == TaskStatus.COMPLETED]
    if mode == UpdateMode.CLEAR_ALL_TASKS:
        return []
    return list(existing)


def build_task(data: dict) -> Task:
    """Validate task data, reporting failures as TaskValidationError."""
    try:
        return Task.model_validate(data)
    except ValidationError as e:
        raise TaskValidationError(f"Invalid task '{data.get('name')}': {e}") from e


def _new_task(draft: TaskDraft, analysis_result: str | None, now: datetime) -> Task:
    return build_task(
        {
            "name": draft.name,
            "description": draft.description,
            "notes": draft.notes,
            "implementation_guide": draft.implementation_guide,
            "verification_criteria": draft.verification_criteria,
            "related_files": draft.related_files or [],
            "analysis_result": analysis_result,
            "created_at": now,
            "updated_at": now,
        }
    )


def _updated_task(current: Task, draft: TaskDraft, analysis_result: str | None, now: datetime) -> Task:
    data = current.model_dump()
    data["description"] = draft.description
    for name in ("notes", "implementation_guide", "verification_criteria", "related_files"):
        value = getattr(draft, name)
        if value is not None:
            data[name] = value
    if current.analysis_result is None and analysis_result:
        data["analysis_result"] = analysis_result
    data["updated_at"] = now
    return build_task(data)


def reconcile_batch(
    existing: Sequence[Task],
    mode: UpdateMode,
    drafts: Sequence[TaskDraft],
    global_analysis_result: str | None = None,
    now: datetime | None = None,
) -> ReconcilePlan:
    """
    Compute the task set that results from applying a batch.

    Steps: reject duplicate names, pick surviving existing tasks for the
    mode, materialize incoming tasks (new ids, or the matched id in
    ``selective`` mode), resolve dependency tokens against survivors plus
    incoming tasks, then reject cycles.

    Args:
        existing: Current snapshot
        mode: Update mode; ``clearAllTasks`` behaves like ``append`` on an empty set
        drafts: Incoming candidate tasks
        global_analysis_result: Analysis text for tasks that carry none yet
        now: Timestamp for created/updated tasks

    Returns:
        ReconcilePlan with the next snapshot and created/updated tasks

    Raises:
        TaskValidationError: Duplicate names or invalid task content
        DependencyNotFoundError: A dependency token does not resolve
        CyclicDependencyError: The resulting graph has a cycle
    """
    check_unique_names(drafts)
    now = now or utc_now()

    survivors = select_survivors(existing, mode)

    matched: dict[str, Task] = {}
    if mode == UpdateMode.SELECTIVE:
        for task in survivors:
            matched.setdefault(task.name, task)

    # Phase 1: materialize incoming tasks without dependencies
    incoming: list[Task] = []
    is_update: list[bool] = []
    for draft in drafts:
        current = matched.get(draft.name)
        if current is not None:
            incoming.append(_updated_task(current, draft, global_analysis_result, now))
            is_update.append(True)
        else:
            incoming.append(_new_task(draft, global_analysis_result, now))
            is_update.append(False)

    # Phase 2: resolve every reference against one consistent view
    resolved: list[Task] = []
    for draft, task in zip(drafts, incoming):
        if draft.dependencies is None:
            resolved.append(task)
            continue
        dep_ids = resolve_dependencies(draft.dependencies, survivors, incoming)
        resolved.append(
            task.model_copy(update={"dependencies": [TaskDependency(task_id=d) for d in dep_ids]})
        )

    created = [t for t, flag in zip(resolved, is_update) if not flag]
    updated = [t for t, flag in zip(resolved, is_update) if flag]
    replacements = {t.id: t for t in updated}

    tasks = [replacements.get(t.id, t) for t in survivors] + created
    ensure_acyclic(tasks)

    logger.info(
        f"Reconciled batch ({mode.value}): {len(created)} created, {len(updated)} updated, "
        f"{len(existing) - len(survivors)} discarded"
    )
    return ReconcilePlan(tasks=tasks, created=created, updated=updated)
