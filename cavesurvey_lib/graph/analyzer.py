# -*- coding: utf-8 -*-
"""Graph algorithms over a :class:`StationGraph`.

- Cycles: fundamental cycles of a depth-first spanning forest.  Each edge
  outside the forest closes exactly one loop.
- Shortest path: Dijkstra over the edge weights.
- Component: breadth-first search that stops at termination stations.

Missing paths are returned as ``None`` or empty results and never raise.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from typing import TYPE_CHECKING

from cavesurvey_lib.graph.models import Component
from cavesurvey_lib.graph.models import Cycle
from cavesurvey_lib.graph.models import Section

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cavesurvey_lib.graph.models import Edge
    from cavesurvey_lib.graph.models import StationGraph

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Cycles
# -----------------------------------------------------------------------------


def find_cycles(graph: StationGraph) -> list[Cycle]:
    """Return the fundamental cycles of ``graph``.

    Vertices are visited in insertion order, so the result is deterministic.
    A tree yields no cycles; disconnected parts are searched independently
    and a cycle never spans two of them.

    Each cycle's path starts and ends at the vertex where the closing edge
    meets the spanning tree, and follows the tree down to the closing edge.
    """
    visited: set[str] = set()
    used_edges: set[int] = set()
    parent: dict[str, tuple[str, Edge] | None] = {}
    cycles: list[Cycle] = []

    for root in graph.vertices:
        if root in visited:
            continue

        visited.add(root)
        parent[root] = None
        stack = [(root, iter(graph.incident_edges(root)))]

        while stack:
            vertex, edges = stack[-1]
            edge = next(edges, None)
            if edge is None:
                stack.pop()
                continue
            if edge.index in used_edges:
                continue
            used_edges.add(edge.index)

            neighbour = edge.other(vertex)
            if neighbour not in visited:
                visited.add(neighbour)
                parent[neighbour] = (vertex, edge)
                stack.append((neighbour, iter(graph.incident_edges(neighbour))))
                continue

            # Non-tree edge: ``neighbour`` is an ancestor of ``vertex``.
            cycles.append(
                _fundamental_cycle(
                    f"cycle-{len(cycles) + 1}", vertex, neighbour, edge, parent
                )
            )

    logger.debug("Found %d cycle(s)", len(cycles))
    return cycles


def _fundamental_cycle(
    cycle_id: str,
    descendant: str,
    ancestor: str,
    closing_edge: Edge,
    parent: dict[str, tuple[str, Edge] | None],
) -> Cycle:
    path = [descendant]
    edges: list[Edge] = []
    current = descendant
    while current != ancestor:
        link = parent[current]
        if link is None:  # pragma: no cover
            raise RuntimeError(f"`{ancestor}` is not an ancestor of `{descendant}`")
        current, edge = link
        path.append(current)
        edges.append(edge)

    path.reverse()
    edges.reverse()
    path.append(ancestor)
    edges.append(closing_edge)
    return Cycle(
        id=cycle_id,
        path=path,
        distance=sum(e.weight for e in edges),
        edges=edges,
    )


# -----------------------------------------------------------------------------
# Shortest paths
# -----------------------------------------------------------------------------


def _dijkstra(
    graph: StationGraph, start: str, target: str | None = None
) -> tuple[dict[str, float], dict[str, tuple[str, Edge]]]:
    """Single source shortest paths.

    Equal distances are settled in discovery order, and a path is only
    replaced by a strictly shorter one.
    """
    distances: dict[str, float] = {start: 0.0}
    previous: dict[str, tuple[str, Edge]] = {}
    settled: set[str] = set()
    counter = itertools.count()
    heap = [(0.0, next(counter), start)]

    while heap:
        distance, _, vertex = heapq.heappop(heap)
        if vertex in settled:
            continue
        settled.add(vertex)
        if vertex == target:
            break

        for edge in graph.incident_edges(vertex):
            neighbour = edge.other(vertex)
            if neighbour in settled:
                continue
            candidate = distance + edge.weight
            if neighbour not in distances or candidate < distances[neighbour]:
                distances[neighbour] = candidate
                previous[neighbour] = (vertex, edge)
                heapq.heappush(heap, (candidate, next(counter), neighbour))

    return {k: v for k, v in distances.items() if k in settled}, previous


def shortest_path(graph: StationGraph, from_name: str, to_name: str) -> Section | None:
    """Shortest path between two stations.

    Returns:
        The path as a :class:`Section`, or ``None`` when either station is
        unknown or the two are not connected
    """
    for name in (from_name, to_name):
        if not graph.has_vertex(name):
            logger.debug("Shortest path: unknown station `%s`", name)
            return None

    distances, previous = _dijkstra(graph, from_name, to_name)
    if to_name not in distances:
        logger.debug("No path between `%s` and `%s`", from_name, to_name)
        return None

    path = [to_name]
    edges: list[Edge] = []
    current = to_name
    while current != from_name:
        current, edge = previous[current]
        path.append(current)
        edges.append(edge)
    path.reverse()
    edges.reverse()

    return Section(
        from_station=from_name,
        to_station=to_name,
        path=path,
        distance=distances[to_name],
        edges=edges,
    )


def traverse_distances(graph: StationGraph, start: str) -> dict[str, float]:
    """Shortest path distance from ``start`` to every reachable station."""
    if not graph.has_vertex(start):
        logger.debug("Traverse: unknown station `%s`", start)
        return {}
    distances, _ = _dijkstra(graph, start)
    return distances


# -----------------------------------------------------------------------------
# Components
# -----------------------------------------------------------------------------


def component(
    graph: StationGraph, start: str, terminations: Iterable[str] = ()
) -> Component:
    """Stations reachable from ``start`` without going past a termination.

    Termination stations are part of the component but are not expanded.
    The start station is always expanded, even when listed as a termination.

    Returns:
        The component; empty when ``start`` is unknown
    """
    stops = list(dict.fromkeys(terminations))
    result = Component(start=start, terminations=stops)
    if not graph.has_vertex(start):
        logger.debug("Component: unknown start station `%s`", start)
        return result

    stop_set = set(stops)
    visited = {start}
    order = [start]
    queue = deque([start])

    while queue:
        vertex = queue.popleft()
        if vertex != start and vertex in stop_set:
            continue
        for neighbour in graph.neighbours(vertex):
            if neighbour not in visited:
                visited.add(neighbour)
                order.append(neighbour)
                queue.append(neighbour)

    result.path = order
    result.edges = [
        e for e in graph.edges if e.from_station in visited and e.to_station in visited
    ]
    result.distance = sum(e.weight for e in result.edges)
    return result


# -----------------------------------------------------------------------------
# Analyzer
# -----------------------------------------------------------------------------


class GraphAnalyzer:
    """Runs queries against one graph.

    Cycles are computed once and cached; everything else is computed on
    demand.
    """

    def __init__(self, graph: StationGraph):
        self.graph = graph
        self._cycles: list[Cycle] | None = None

    @property
    def cycles(self) -> list[Cycle]:
        if self._cycles is None:
            self._cycles = find_cycles(self.graph)
        return self._cycles

    def shortest_path(self, from_name: str, to_name: str) -> Section | None:
        return shortest_path(self.graph, from_name, to_name)

    def component(self, start: str, terminations: Iterable[str] = ()) -> Component:
        return component(self.graph, start, terminations)

    def traverse_distances(self, start: str) -> dict[str, float]:
        return traverse_distances(self.graph, start)
