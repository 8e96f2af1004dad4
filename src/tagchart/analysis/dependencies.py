"""
Dependency cycle detection over the records' depends-on relation.

Edges run from a record to every id listed (in order) in the StringArray at
the dependency field. Ids that do not name a record are leaves.

The result is a flat list of human readable path entries. For each
component that contains a cycle the walk from the component root to the
closing edge is reported, e.g.::

    ["A -> B", "B -> A", "A (cyclic)"]

An empty list means the relation is acyclic.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Final

import structlog

from tagchart.domain.records import Record, RecordSet, iter_records
from tagchart.errors import DependencyChainTooDeepError

DEFAULT_DEPENDS_ON_FIELD: Final[str] = "depends_on"
DEFAULT_MAX_DEPENDENCY_DEPTH: Final[int] = 10_000

DependencyGraph = Mapping[str, tuple[str, ...]]

logger = structlog.get_logger(__name__)


def dependency_graph(
    records: RecordSet | Iterable[Record],
    depends_on_field: str = DEFAULT_DEPENDS_ON_FIELD,
) -> dict[str, tuple[str, ...]]:
    """Map each record id to its listed dependencies (empty when absent)."""
    graph: dict[str, tuple[str, ...]] = {}
    for record in iter_records(records):
        graph[record.id] = record.string_array(depends_on_field) or ()
    return graph


def detect_cycles(
    records: RecordSet | Iterable[Record],
    depends_on_field: str = DEFAULT_DEPENDS_ON_FIELD,
    *,
    max_depth: int = DEFAULT_MAX_DEPENDENCY_DEPTH,
) -> list[str]:
    """Return cycle path entries for every cyclic component, ``[]`` if acyclic."""

    graph = dependency_graph(records, depends_on_field)
    visited: set[str] = set()
    found: list[str] = []

    for start in sorted(graph):
        if start in visited:
            continue
        found.extend(_search_component(start, graph, visited, max_depth))

    if found:
        logger.debug("dependency_cycle_found", field=depends_on_field, edges=found)
    return found


def _search_component(
    start: str,
    graph: DependencyGraph,
    visited: set[str],
    max_depth: int,
) -> list[str]:
    visited.add(start)
    on_stack: set[str] = {start}
    path: list[str] = []
    frames: list[tuple[str, Iterator[str]]] = [(start, iter(graph.get(start, ())))]

    while frames:
        node, deps = frames[-1]
        dep = next(deps, None)

        if dep is None:
            frames.pop()
            on_stack.discard(node)
            if frames:
                # no cycle below node: forget the edge that led here
                path.pop()
            continue

        if dep not in visited:
            if len(frames) >= max_depth:
                raise DependencyChainTooDeepError(max_depth)
            visited.add(dep)
            on_stack.add(dep)
            path.append(f"{node} -> {dep}")
            frames.append((dep, iter(graph.get(dep, ()))))
            continue

        if dep in on_stack:
            path.append(f"{node} -> {dep}")
            path.append(f"{dep} (cyclic)")
            return path

    return []


def has_cycles(
    records: RecordSet | Iterable[Record],
    depends_on_field: str = DEFAULT_DEPENDS_ON_FIELD,
    *,
    max_depth: int = DEFAULT_MAX_DEPENDENCY_DEPTH,
) -> bool:
    return bool(detect_cycles(records, depends_on_field, max_depth=max_depth))


__all__ = [
    "DEFAULT_DEPENDS_ON_FIELD",
    "DEFAULT_MAX_DEPENDENCY_DEPTH",
    "dependency_graph",
    "detect_cycles",
    "has_cycles",
]
