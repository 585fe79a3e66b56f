"""Utility functions for the task graph MCP server."""

from taskgraph_mcp.utils.formatters import (
    _format_complexity,
    _format_error,
    _format_execution_check,
    _format_related_files,
    _format_task_concise,
    _format_task_markdown,
    _format_tasks_concise,
    _format_tasks_markdown,
)

__all__ = [
    "_format_task_concise",
    "_format_tasks_concise",
    "_format_task_markdown",
    "_format_tasks_markdown",
    "_format_related_files",
    "_format_complexity",
    "_format_execution_check",
    "_format_error",
]
