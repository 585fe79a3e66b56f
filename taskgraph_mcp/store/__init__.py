"""Durable task set: JSON repository and the store facade."""

from taskgraph_mcp.store.repository import JsonTaskRepository
from taskgraph_mcp.store.task_store import TaskStore, clear_store_cache, get_store

__all__ = ["JsonTaskRepository", "TaskStore", "get_store", "clear_store_cache"]
