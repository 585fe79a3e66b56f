"""MCP tool definitions for the task graph."""

# Import all tools to register them with the MCP server
from taskgraph_mcp.tools.core import (
    get_task_detail,
    list_tasks,
    query_task,
    split_tasks,
    update_task,
)
from taskgraph_mcp.tools.execution import (
    check_task_executable,
    execute_task,
    verify_task,
)

__all__ = [
    # Planning and query tools
    "split_tasks",
    "list_tasks",
    "query_task",
    "get_task_detail",
    "update_task",
    # Execution tools
    "check_task_executable",
    "execute_task",
    "verify_task",
]
