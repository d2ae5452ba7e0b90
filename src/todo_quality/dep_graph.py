"""Dependency graph analysis for task lists.

Edges point from a task to each prerequisite listed in its
``dependencies``. Acyclicity is decided with Kahn's algorithm (BFS
topological sort); when nodes remain unresolved, one representative cycle
is traced through them as evidence. Depth and critical-path length come
from a memoised walk with an explicit in-progress map, so a cycle can
never send it into unbounded recursion.

Every function here is pure: input tasks are read, never mutated, and a
cycle is reported as a value rather than raised.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .task_model import Task

logger = logging.getLogger(__name__)

# Depth recorded for a node whose dependencies are still being explored
_IN_PROGRESS = 0

CYCLE_SEPARATOR = " -> "


@dataclass(frozen=True)
class CycleCheck:
    """Outcome of a dependency cycle check.

    Attributes:
        cycle: Ids forming one cycle, each depending on the next and the
            last depending on the first. Empty when the graph is acyclic.
        order: Ids Kahn's algorithm resolved, prerequisites first. Covers
            every task when the graph is acyclic.
    """

    cycle: tuple[str, ...] = ()
    order: tuple[str, ...] = ()

    @property
    def is_acyclic(self) -> bool:
        return not self.cycle

    def format_cycle(self) -> str:
        """Render the cycle as ``a -> b -> a``; empty string when acyclic."""
        if not self.cycle:
            return ""
        return CYCLE_SEPARATOR.join((*self.cycle, self.cycle[0]))


def build_graph(tasks: Iterable[Task]) -> dict[str, list[str]]:
    """Build the id -> dependency ids adjacency list.

    Tasks sharing an id are merged into one node whose dependencies are
    concatenated in list order.

    Args:
        tasks: Tasks to index.

    Returns:
        Adjacency list keyed by task id, in first-seen order.
    """
    graph: dict[str, list[str]] = {}
    for task in tasks:
        graph.setdefault(task.id, []).extend(task.dependencies)
    return graph


def validate_dependencies(tasks: Iterable[Task]) -> CycleCheck:
    """Check that the dependency graph has no cycles.

    Uses Kahn's algorithm. Each node's in-degree is the number of its own
    dependencies that resolve to a task in the list (dependencies on
    unknown ids are ignored here; the list validator reports them). Nodes
    with in-degree zero are processed first, and processing a node
    releases every task that depends on it. If all nodes get processed the
    graph is acyclic; otherwise a cycle is traced through the rest.

    Args:
        tasks: Tasks with ``dependencies`` populated.

    Returns:
        CycleCheck with the topological order and, if found, a cycle.
    """
    graph = build_graph(tasks)

    in_degree: dict[str, int] = {node: 0 for node in graph}
    dependents: dict[str, list[str]] = {node: [] for node in graph}
    for node, deps in graph.items():
        for dep in deps:
            if dep not in graph:
                continue
            in_degree[node] += 1
            dependents[dep].append(node)

    queue: deque[str] = deque(node for node, degree in in_degree.items() if degree == 0)
    order: list[str] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) == len(graph):
        return CycleCheck(order=tuple(order))

    remaining = {node for node, degree in in_degree.items() if degree > 0}
    cycle = _trace_cycle(graph, remaining)
    logger.debug(f"Dependency cycle detected: {CYCLE_SEPARATOR.join(cycle)}")
    return CycleCheck(cycle=tuple(cycle), order=tuple(order))


def _trace_cycle(graph: dict[str, list[str]], remaining: set[str]) -> list[str]:
    """Walk unresolved dependency edges until a node repeats.

    Every unresolved node still has at least one unresolved dependency,
    so the walk cannot dead-end and always closes a loop. The lead-in
    before the first repeated node is dropped.

    Args:
        graph: Adjacency list for the full graph.
        remaining: Ids left unresolved by Kahn's algorithm.

    Returns:
        Ids forming one cycle, in dependency direction.
    """
    start = next(node for node in graph if node in remaining)
    path: list[str] = []
    position: dict[str, int] = {}
    node = start

    while node not in position:
        position[node] = len(path)
        path.append(node)
        node = next(dep for dep in graph[node] if dep in remaining)

    return path[position[node]:]


def find_cycle(tasks: Iterable[Task]) -> list[str]:
    """Return the ids of one dependency cycle, or an empty list if none."""
    return list(validate_dependencies(tasks).cycle)


def topological_order(tasks: Iterable[Task]) -> list[str] | None:
    """Return task ids with prerequisites first, or None if a cycle exists."""
    check = validate_dependencies(tasks)
    if not check.is_acyclic:
        return None
    return list(check.order)


def _dependency_depth(
    start: str,
    graph: dict[str, list[str]],
    cache: dict[str, int],
) -> int:
    """Compute the depth of ``start`` with an explicit worklist.

    Depth is 1 for a task without dependencies and otherwise
    ``1 + max(depth(dep))``. Before a node's dependencies are explored its
    cache entry is set to the in-progress sentinel 0; reaching a node still
    at 0 means the edge closes a loop, and it contributes depth 0 instead
    of being explored again. Unknown ids also contribute 0.

    Args:
        start: Task id to measure.
        graph: Adjacency list from ``build_graph``.
        cache: Shared memo of finished depths and in-progress sentinels.

    Returns:
        Depth of ``start``.
    """
    if start in cache:
        return cache[start]

    cache[start] = _IN_PROGRESS
    deepest: dict[str, int] = {start: 0}
    stack: list[tuple[str, Iterator[str]]] = [(start, iter(graph.get(start, ())))]

    while stack:
        node, deps = stack[-1]
        descended = False

        for dep in deps:
            if dep in cache:
                deepest[node] = max(deepest[node], cache[dep])
                continue
            if dep not in graph:
                cache[dep] = 0
                continue
            cache[dep] = _IN_PROGRESS
            deepest[dep] = 0
            stack.append((dep, iter(graph[dep])))
            descended = True
            break

        if descended:
            continue

        stack.pop()
        depth = deepest.pop(node) + 1
        cache[node] = depth
        if stack:
            parent = stack[-1][0]
            deepest[parent] = max(deepest[parent], depth)

    return cache[start]


def task_depths(tasks: Iterable[Task]) -> dict[str, int]:
    """Compute the dependency depth of every task.

    Only meaningful on an acyclic graph; on a cyclic one the in-progress
    sentinel keeps the walk finite but depths along the loop are partial.

    Args:
        tasks: Tasks to measure.

    Returns:
        Mapping of task id to depth, in first-seen order.
    """
    graph = build_graph(tasks)
    cache: dict[str, int] = {}
    return {node: _dependency_depth(node, graph, cache) for node in graph}


def max_depth(tasks: Iterable[Task]) -> int:
    """Return the deepest dependency chain length; 0 if empty or cyclic."""
    task_list = list(tasks)
    if not task_list or not validate_dependencies(task_list).is_acyclic:
        return 0
    return max(task_depths(task_list).values())


def critical_path_length(tasks: Iterable[Task]) -> int:
    """Return the critical-path length.

    Defined as the maximum depth, counted in tasks and not weighted by
    ``estimated_hours``. 0 when empty or cyclic.
    """
    return max_depth(tasks)


def critical_path(tasks: Iterable[Task]) -> list[str]:
    """Return the ids along one longest dependency chain.

    The chain runs from a task without dependencies to the deepest task,
    so its length equals ``critical_path_length``. Ties resolve to the
    earliest task in list order. Empty when empty or cyclic.

    Args:
        tasks: Tasks to analyse.

    Returns:
        Ids of the chain, prerequisites first.
    """
    task_list = list(tasks)
    if not task_list or not validate_dependencies(task_list).is_acyclic:
        return []

    graph = build_graph(task_list)
    depths = task_depths(task_list)

    node = max(depths, key=lambda task_id: depths[task_id])
    chain = [node]
    while depths[node] > 1:
        node = next(dep for dep in graph[node] if depths.get(dep) == depths[node] - 1)
        chain.append(node)

    chain.reverse()
    return chain
