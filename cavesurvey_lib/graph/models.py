# -*- coding: utf-8 -*-
"""Data structures of the station graph.

The graph is undirected: shots are recorded with a direction, but loops,
paths and components ignore it.  Parallel edges (several shots between the
same two stations) are kept.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cavesurvey_lib.geometry import Vector3D


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Edge:
    """An undirected edge created from one shot.

    Attributes:
        index: Position of the edge in :attr:`StationGraph.edges`
        from_station: Station the shot was recorded from
        to_station: Station the shot was recorded to
        weight: Distance between the resolved station positions
        shot_id: Identifier of the shot within its survey
        survey: Name of the survey the shot belongs to
    """

    index: int
    from_station: str
    to_station: str
    weight: float
    shot_id: int | None = None
    survey: str | None = None

    def other(self, name: str) -> str:
        """Return the endpoint that is not ``name``."""
        return self.to_station if name == self.from_station else self.from_station


@dataclass
class StationGraph:
    """Stations as vertices, shots as weighted edges.

    Attributes:
        vertices: Station name -> resolved position, in insertion order
        edges: Every edge, indexed by :attr:`Edge.index`
    """

    vertices: dict[str, Vector3D] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)

    _adjacency: dict[str, list[Edge]] = field(
        default_factory=dict, init=False, repr=False
    )

    def add_vertex(self, name: str, position: Vector3D) -> None:
        self.vertices[name] = position
        self._adjacency.setdefault(name, [])

    def add_edge(
        self,
        from_station: str,
        to_station: str,
        weight: float,
        shot_id: int | None = None,
        survey: str | None = None,
    ) -> Edge:
        """Add an edge between two existing vertices.

        Raises:
            KeyError: If either endpoint is not a vertex
        """
        for name in (from_station, to_station):
            if name not in self.vertices:
                raise KeyError(f"Unknown station: `{name}`")

        edge = Edge(
            index=len(self.edges),
            from_station=from_station,
            to_station=to_station,
            weight=weight,
            shot_id=shot_id,
            survey=survey,
        )
        self.edges.append(edge)
        self._adjacency[from_station].append(edge)
        if to_station != from_station:
            self._adjacency[to_station].append(edge)
        return edge

    def has_vertex(self, name: str) -> bool:
        return name in self.vertices

    def incident_edges(self, name: str) -> list[Edge]:
        """Edges touching ``name``, in insertion order."""
        return self._adjacency.get(name, [])

    def neighbours(self, name: str) -> list[str]:
        return [edge.other(name) for edge in self.incident_edges(name)]

    def edges_between(self, a: str, b: str) -> list[Edge]:
        return [e for e in self.incident_edges(a) if e.other(a) == b]

    def __len__(self) -> int:
        return len(self.vertices)


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


def _path_errors(path: list[str], stations: Mapping[str, object]) -> list[str]:
    errors = [f"Station '{name}' does not exist" for name in path if name not in stations]
    if not path:
        errors.append("Path is empty")
    return errors


def _distance_errors(distance: float) -> list[str]:
    if not math.isfinite(distance):
        return [f"Distance '{distance}' is not a finite number"]
    if distance <= 0:
        return ["Distance must be greater than zero"]
    return []


@dataclass
class Cycle:
    """A closed loop of the station graph.

    Attributes:
        id: Identifier, unique within one cycle search
        path: Station names; the first and last are the same
        distance: Sum of the edge weights along the loop
        edges: The edges along the loop, in path order
    """

    id: str
    path: list[str]
    distance: float
    edges: list[Edge] = field(default_factory=list)

    def validate(self, stations: Mapping[str, object]) -> list[str]:
        errors = _path_errors(self.path, stations)
        if self.path and self.path[0] != self.path[-1]:
            errors.append("Cycle does not end at its first station")
        interior = self.path[:-1]
        if len(set(interior)) != len(interior):
            errors.append("Cycle visits a station twice")
        errors.extend(_distance_errors(self.distance))
        return errors

    def is_valid(self, stations: Mapping[str, object]) -> bool:
        return len(self.validate(stations)) == 0


@dataclass
class Section:
    """A path between two stations."""

    from_station: str
    to_station: str
    path: list[str]
    distance: float
    edges: list[Edge] = field(default_factory=list)

    def validate(self, stations: Mapping[str, object]) -> list[str]:
        errors = _path_errors(self.path, stations)
        if self.from_station == self.to_station:
            errors.append(f"From and to station are the same: '{self.from_station}'")
        if self.path and (
            self.path[0] != self.from_station or self.path[-1] != self.to_station
        ):
            errors.append("Path does not connect the section endpoints")
        errors.extend(_distance_errors(self.distance))
        return errors

    def is_valid(self, stations: Mapping[str, object]) -> bool:
        return len(self.validate(stations)) == 0


@dataclass
class Component:
    """Stations reachable from ``start`` without crossing a termination.

    Attributes:
        start: Station the search started from
        terminations: Stations the search does not expand past
        path: Reached stations in discovery order (terminations included)
        edges: Edges between reached stations
        distance: Sum of the edge weights
    """

    start: str
    terminations: list[str] = field(default_factory=list)
    path: list[str] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    distance: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.path

    def __contains__(self, name: object) -> bool:
        return name in self.path

    def validate(self, stations: Mapping[str, object]) -> list[str]:
        errors = _path_errors(self.path, stations)
        if not self.start:
            errors.append("Start station is empty")
        errors.extend(f"Termination '{t}' is empty" for t in self.terminations if not t)
        errors.extend(_distance_errors(self.distance))
        return errors

    def is_valid(self, stations: Mapping[str, object]) -> bool:
        return len(self.validate(stations)) == 0
