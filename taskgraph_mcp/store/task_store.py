"""Task store facade: owns the durable task set.

Single writer, many readers. Mutations run under one lock, build a new
snapshot, commit it through the repository and only then publish it. Reads
use whatever snapshot was last published and hand out copies.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from typing import Any

from loguru import logger

from taskgraph_mcp.config import get_settings
from taskgraph_mcp.engine.complexity import assess_complexity
from taskgraph_mcp.engine.gate import check_execution
from taskgraph_mcp.engine.reconciler import build_task, check_unique_names, reconcile_batch
from taskgraph_mcp.engine.resolver import ensure_acyclic, resolve_dependencies
from taskgraph_mcp.engine.state_machine import start_task, verify_task
from taskgraph_mcp.enums import TaskStatus, UpdateMode
from taskgraph_mcp.errors import (
    AlreadyCompletedError,
    TaskGraphError,
    TaskNotFoundError,
    TaskValidationError,
)
from taskgraph_mcp.models.inputs import TaskDraft
from taskgraph_mcp.models.results import (
    BatchResult,
    ComplexityAssessment,
    ExecutionCheck,
    SearchPage,
    TransitionOutcome,
    VerificationOutcome,
)
from taskgraph_mcp.models.task import Task, utc_now
from taskgraph_mcp.store.repository import JsonTaskRepository

CONTENT_FIELDS = frozenset(
    {
        "name",
        "description",
        "notes",
        "dependencies",
        "related_files",
        "implementation_guide",
        "verification_criteria",
        "analysis_result",
    }
)


def _copies(tasks: Sequence[Task]) -> list[Task]:
    return [t.model_copy(deep=True) for t in tasks]


def _paginate(tasks: list[Task], page: int, page_size: int) -> SearchPage:
    if page < 1:
        raise TaskValidationError(f"Page must be 1 or greater, got {page}")
    if page_size < 1:
        raise TaskValidationError(f"Page size must be 1 or greater, got {page_size}")
    ordered = sorted(tasks, key=lambda t: t.created_at)
    start = (page - 1) * page_size
    return SearchPage(
        tasks=[t.model_copy(deep=True) for t in ordered[start : start + page_size]],
        page=page,
        page_size=page_size,
        total=len(ordered),
    )


class TaskStore:
    """Owner of the durable task set."""

    def __init__(
        self,
        repository: JsonTaskRepository,
        clock: Callable[[], datetime] = utc_now,
        default_page_size: int = 20,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._default_page_size = default_page_size
        self._lock = threading.Lock()
        self._snapshot: tuple[Task, ...] = tuple(repository.load_snapshot())

    @property
    def repository(self) -> JsonTaskRepository:
        return self._repository

    # ------------------------------------------------------------------
    # Snapshot handling
    # ------------------------------------------------------------------

    @contextmanager
    def _writing(self) -> Iterator[tuple[Task, ...]]:
        with self._lock:
            yield self._snapshot

    def _commit(self, tasks: Sequence[Task]) -> None:
        self._repository.commit_snapshot(tasks)
        self._snapshot = tuple(tasks)

    def _find(self, snapshot: Sequence[Task], task_id: str) -> Task:
        for task in snapshot:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def _replace(self, snapshot: Sequence[Task], task: Task) -> list[Task]:
        return [task if t.id == task.id else t for t in snapshot]

    def reload(self) -> None:
        """Replace the in-memory snapshot with what is on disk."""
        with self._writing():
            self._snapshot = tuple(self._repository.load_snapshot())
        logger.info(f"Reloaded {len(self._snapshot)} tasks")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all(self) -> list[Task]:
        return [t.model_copy(deep=True) for t in self._snapshot]

    def get_by_id(self, task_id: str) -> Task | None:
        for task in self._snapshot:
            if task.id == task_id:
                return task.model_copy(deep=True)
        return None

    def search(
        self,
        query: str,
        is_id: bool = False,
        page: int = 1,
        page_size: int | None = None,
        include_backups: bool = False,
    ) -> SearchPage:
        """
        Find tasks by exact id or by substring of name/description.

        Args:
            query: Task id, or text to look for (case-insensitive)
            is_id: Treat ``query`` as an exact id
            page: 1-based page number
            page_size: Tasks per page (settings default when None)
            include_backups: Also search tasks kept in backup snapshots

        Returns:
            SearchPage ordered by creation time
        """
        candidates = list(self._snapshot)
        if include_backups:
            seen = {t.id for t in candidates}
            for task in self._repository.load_backups():
                if task.id not in seen:
                    seen.add(task.id)
                    candidates.append(task)

        if is_id:
            matches = [t for t in candidates if t.id == query]
        else:
            needle = query.lower()
            matches = [
                t for t in candidates if needle in t.name.lower() or needle in (t.description or "").lower()
            ]
        return _paginate(matches, page, page_size or self._default_page_size)

    def query(
        self,
        status: TaskStatus | None = None,
        text: str | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> SearchPage:
        """List tasks, optionally filtered by status and text."""
        tasks = list(self._snapshot)
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        if text:
            needle = text.lower()
            tasks = [t for t in tasks if needle in t.name.lower() or needle in (t.description or "").lower()]
        return _paginate(tasks, page, page_size or self._default_page_size)

    def resolve_dependencies(self, tokens: Sequence[str], batch: Sequence[Task] = ()) -> list[str]:
        """Resolve dependency tokens against the current snapshot plus ``batch``."""
        return resolve_dependencies(tokens, self._snapshot, batch)

    def can_execute(self, task_id: str) -> ExecutionCheck:
        snapshot = self._snapshot
        task = self._find(snapshot, task_id)
        return check_execution(task, {t.id: t for t in snapshot})

    def assess_complexity(self, task_id: str) -> ComplexityAssessment:
        return assess_complexity(self._find(self._snapshot, task_id))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def reconcile_batch(
        self,
        mode: UpdateMode,
        drafts: Sequence[TaskDraft],
        global_analysis_result: str | None = None,
    ) -> BatchResult:
        """
        Apply a batch of candidate tasks using one of the four update modes.

        For every mode except ``clearAllTasks`` the batch is all-or-nothing.
        ``clearAllTasks`` commits the backup and the clear first; a failure
        while creating the new tasks afterwards is returned in
        ``creation_error`` with ``cleared=True``.

        Raises:
            TaskValidationError: Duplicate names or invalid content
            DependencyNotFoundError: Unresolvable dependency (not for clearAllTasks)
            CyclicDependencyError: Cyclic dependencies (not for clearAllTasks)
            StorageError: Backup or commit failed
        """
        with self._writing() as snapshot:
            check_unique_names(drafts)
            now = self._clock()

            if mode != UpdateMode.CLEAR_ALL_TASKS:
                plan = reconcile_batch(snapshot, mode, drafts, global_analysis_result, now)
                self._commit(plan.tasks)
                return BatchResult(mode=mode, created=_copies(plan.created), updated=_copies(plan.updated))

            backup_path = self._repository.write_backup(snapshot, now)
            self._commit([])
            logger.info(f"Cleared {len(snapshot)} tasks, backup at {backup_path}")
            result = BatchResult(mode=mode, backup_path=str(backup_path), cleared=True)

            try:
                plan = reconcile_batch([], UpdateMode.APPEND, drafts, global_analysis_result, now)
                self._commit(plan.tasks)
            except TaskGraphError as e:
                logger.error(f"Tasks cleared but creating the new batch failed: {e.message}")
                result.creation_error = e.message
                return result

            result.created = _copies(plan.created)
            return result

    def start_task(self, task_id: str) -> TransitionOutcome:
        """
        Move a pending task to in_progress once its prerequisites are done.

        Raises:
            TaskNotFoundError, AlreadyCompletedError, NotExecutableError, StorageError
        """
        with self._writing() as snapshot:
            task = self._find(snapshot, task_id)
            check = check_execution(task, {t.id: t for t in snapshot})
            outcome = start_task(task, check, self._clock())
            if outcome.changed:
                self._commit(self._replace(snapshot, outcome.task))
                logger.info(f"Task '{task.name}' ({task_id}) is now in progress")
            return outcome.model_copy(deep=True)

    def verify_task(self, task_id: str, score: float, summary: str) -> VerificationOutcome:
        """
        Score an in-progress task; 80 or more completes it.

        Raises:
            TaskNotFoundError, TaskValidationError, AlreadyCompletedError,
            NotInProgressError, StorageError
        """
        with self._writing() as snapshot:
            task = self._find(snapshot, task_id)
            outcome = verify_task(task, score, summary, self._clock())
            if outcome.completed:
                self._commit(self._replace(snapshot, outcome.task))
                logger.info(f"Task '{task.name}' ({task_id}) completed with score {score}")
            return outcome.model_copy(deep=True)

    def update_content(self, task_id: str, fields: Mapping[str, Any]) -> Task:
        """
        Replace the supplied content fields of an unfinished task.

        ``dependencies`` are given as task ids or names and are resolved
        against the current snapshot.

        Raises:
            TaskValidationError: Empty update, unknown field or invalid content
            TaskNotFoundError: Unknown id
            AlreadyCompletedError: The task is completed
            DependencyNotFoundError, CyclicDependencyError, StorageError
        """
        changes = dict(fields)
        if not changes:
            raise TaskValidationError("No fields to update were supplied")
        unknown = set(changes) - CONTENT_FIELDS
        if unknown:
            raise TaskValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with self._writing() as snapshot:
            current = self._find(snapshot, task_id)
            if current.status == TaskStatus.COMPLETED:
                raise AlreadyCompletedError(task_id)

            data = current.model_dump()
            tokens = changes.pop("dependencies", None)
            data.update(changes)
            if tokens is not None:
                dep_ids = resolve_dependencies(tokens, snapshot)
                data["dependencies"] = [{"task_id": d} for d in dep_ids]
            data["updated_at"] = self._clock()

            updated = build_task(data)
            tasks = self._replace(snapshot, updated)
            ensure_acyclic(tasks)
            self._commit(tasks)
            logger.info(f"Updated {', '.join(sorted(fields))} of task {task_id}")
            return updated.model_copy(deep=True)


@lru_cache
def get_store() -> TaskStore:
    """Process-wide store built from settings."""
    settings = get_settings()
    return TaskStore(JsonTaskRepository(settings.data_dir), default_page_size=settings.default_page_size)


def clear_store_cache() -> None:
    get_store.cache_clear()
