"""Pure task graph logic: complexity, dependencies, gate, transitions, reconciliation."""

from taskgraph_mcp.engine.complexity import assess_complexity
from taskgraph_mcp.engine.gate import check_execution
from taskgraph_mcp.engine.reconciler import ReconcilePlan, check_unique_names, reconcile_batch
from taskgraph_mcp.engine.resolver import detect_cycle, ensure_acyclic, resolve_dependencies
from taskgraph_mcp.engine.state_machine import PASSING_SCORE, start_task, verify_task

__all__ = [
    "assess_complexity",
    "check_execution",
    "resolve_dependencies",
    "detect_cycle",
    "ensure_acyclic",
    "start_task",
    "verify_task",
    "PASSING_SCORE",
    "reconcile_batch",
    "check_unique_names",
    "ReconcilePlan",
]
