"""JSON file persistence for task snapshots.

Every write goes to a temporary file beside the target and is swapped in
with ``os.replace``, so a crash mid-write leaves the previous file intact.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterator, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError

from taskgraph_mcp.errors import StorageError
from taskgraph_mcp.models.task import Task, utc_now

TASKS_FILE_NAME = "tasks.json"
BACKUP_DIR_NAME = "memory"
BACKUP_PREFIX = "tasks_memory_"


def _write_text_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp-{os.getpid()}-{uuid4().hex}")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def _dump_tasks(tasks: Sequence[Task]) -> str:
    return json.dumps({"tasks": [t.to_record() for t in tasks]}, indent=2, ensure_ascii=False) + "\n"


def _parse_tasks(path: Path) -> list[Task]:
    """
    Read a snapshot file into Task models.

    Args:
        path: File written by ``_dump_tasks``

    Returns:
        List of tasks in file order
    """
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StorageError(f"Failed to read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise StorageError(f"Failed to parse {path}: {e}") from e

    records = raw.get("tasks", []) if isinstance(raw, dict) else raw
    if not isinstance(records, list):
        raise StorageError(f"Unexpected snapshot layout in {path}")
    try:
        return [Task.model_validate(r) for r in records]
    except ValidationError as e:
        raise StorageError(f"Invalid task record in {path}: {e}") from e


class JsonTaskRepository:
    """Durable mirror of the task set: one snapshot file plus backups."""

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)
        self.tasks_file = self.data_dir / TASKS_FILE_NAME
        self.backup_dir = self.data_dir / BACKUP_DIR_NAME

    def load_snapshot(self) -> list[Task]:
        """Load the current snapshot; a missing file means no tasks."""
        if not self.tasks_file.exists():
            logger.debug(f"No snapshot at {self.tasks_file}, starting empty")
            return []
        tasks = _parse_tasks(self.tasks_file)
        logger.debug(f"Loaded {len(tasks)} tasks from {self.tasks_file}")
        return tasks

    def commit_snapshot(self, tasks: Sequence[Task]) -> None:
        """Atomically replace the snapshot file."""
        try:
            _write_text_atomic(self.tasks_file, _dump_tasks(tasks))
        except OSError as e:
            logger.error(f"Snapshot commit to {self.tasks_file} failed: {e}")
            raise StorageError(f"Failed to write {self.tasks_file}: {e}") from e
        logger.debug(f"Committed {len(tasks)} tasks to {self.tasks_file}")

    def write_backup(self, tasks: Sequence[Task], now: datetime | None = None) -> Path:
        """
        Write a point-in-time copy of ``tasks`` to the backup folder.

        Returns:
            Path of the backup file
        """
        stamp = (now or utc_now()).strftime("%Y-%m-%dT%H-%M-%S-%f")
        path = self.backup_dir / f"{BACKUP_PREFIX}{stamp}.json"
        try:
            _write_text_atomic(path, _dump_tasks(tasks))
        except OSError as e:
            logger.error(f"Backup to {path} failed: {e}")
            raise StorageError(f"Failed to write backup {path}: {e}") from e
        logger.info(f"Backed up {len(tasks)} tasks to {path}")
        return path

    def backup_files(self) -> list[Path]:
        """Backup files, newest first."""
        if not self.backup_dir.is_dir():
            return []
        return sorted(self.backup_dir.glob(f"{BACKUP_PREFIX}*.json"), reverse=True)

    def load_backups(self) -> Iterator[Task]:
        """Yield tasks from every readable backup, newest backup first."""
        for path in self.backup_files():
            try:
                tasks = _parse_tasks(path)
            except StorageError as e:
                logger.warning(f"Skipping unreadable backup: {e}")
                continue
            yield from tasks
