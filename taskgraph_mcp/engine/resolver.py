"""Dependency resolution and cycle detection.

Dependency tokens are either task ids or task names. Resolution is done
against one consistent view: the tasks that already exist plus the tasks
being created in the same batch.
"""

from collections.abc import Iterable, Iterator, Sequence

from loguru import logger

from taskgraph_mcp.errors import CyclicDependencyError, DependencyNotFoundError
from taskgraph_mcp.models.task import Task


def resolve_dependencies(
    tokens: Iterable[str],
    existing: Sequence[Task],
    incoming: Sequence[Task] = (),
) -> list[str]:
    """
    Resolve dependency tokens to task ids.

    Resolution order: exact id match, then exact name match. For both kinds
    of match a task in the incoming batch wins over an existing one.

    Args:
        tokens: Task ids or task names
        existing: Tasks already in the store (after survivor selection)
        incoming: Tasks being created or updated by the same batch

    Returns:
        Resolved ids in token order, duplicates removed

    Raises:
        DependencyNotFoundError: If a token matches no id and no name
    """
    ids = {t.id for t in incoming} | {t.id for t in existing}

    name_to_id: dict[str, str] = {}
    for task in existing:
        name_to_id.setdefault(task.name, task.id)
    # Incoming names shadow existing ones
    for task in incoming:
        name_to_id[task.name] = task.id

    resolved: list[str] = []
    for raw in tokens:
        token = raw.strip()
        if not token:
            continue
        if token in ids:
            task_id = token
        elif token in name_to_id:
            task_id = name_to_id[token]
        else:
            raise DependencyNotFoundError(token)
        if task_id not in resolved:
            resolved.append(task_id)

    return resolved


def detect_cycle(tasks: Sequence[Task]) -> list[str] | None:
    """
    Find one dependency cycle using DFS.

    Dependency ids that point outside ``tasks`` are ignored.

    Returns:
        Cycle as a list of task ids (first id repeated at the end), or None
    """
    graph = {t.id: t.dependency_ids for t in tasks}

    visiting: set[str] = set()
    done: set[str] = set()

    for root in graph:
        if root in done:
            continue

        # Explicit (node, remaining deps) frames: chains can exceed the recursion limit
        path: list[str] = [root]
        visiting.add(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]

        while stack:
            node, deps = stack[-1]
            for dep in deps:
                if dep not in graph or dep in done:
                    continue
                if dep in visiting:
                    return path[path.index(dep) :] + [dep]
                visiting.add(dep)
                path.append(dep)
                stack.append((dep, iter(graph[dep])))
                break
            else:
                stack.pop()
                path.pop()
                visiting.discard(node)
                done.add(node)

    return None


def ensure_acyclic(tasks: Sequence[Task]) -> None:
    """
    Validate that the dependency graph has no cycles.

    Raises:
        CyclicDependencyError: With the cycle expressed as task names
    """
    cycle = detect_cycle(tasks)
    if cycle:
        names = {t.id: t.name for t in tasks}
        named = [names.get(task_id, task_id) for task_id in cycle]
        logger.warning(f"Rejecting dependency cycle: {' -> '.join(named)}")
        raise CyclicDependencyError(named)
