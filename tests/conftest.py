"""Pytest configuration and fixtures for taskgraph-mcp tests."""

from datetime import datetime, timedelta, timezone

import pytest

from taskgraph_mcp.config import clear_settings_cache
from taskgraph_mcp.models.inputs import TaskDraft
from taskgraph_mcp.store.repository import JsonTaskRepository
from taskgraph_mcp.store.task_store import TaskStore, clear_store_cache, get_store


class FakeClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(tmp_path):
    """Repository writing into a temporary data directory."""
    return JsonTaskRepository(tmp_path / "data")


@pytest.fixture
def store(repository, clock):
    """Empty store backed by a temporary data directory."""
    return TaskStore(repository, clock=clock)


@pytest.fixture
def tool_store(tmp_path, monkeypatch):
    """Point the process-wide store used by the MCP tools at a temporary directory."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "tool-data"))
    clear_settings_cache()
    clear_store_cache()
    yield get_store()
    clear_store_cache()
    clear_settings_cache()


@pytest.fixture
def make_draft():
    """Factory for batch drafts with a valid default description."""

    def _make(name: str, dependencies: list[str] | None = None, **kwargs) -> TaskDraft:
        kwargs.setdefault("description", f"Detailed description for {name}")
        return TaskDraft(name=name, dependencies=dependencies, **kwargs)

    return _make
