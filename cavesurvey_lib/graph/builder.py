# -*- coding: utf-8 -*-
"""Builds the station graph of a resolved cave."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cavesurvey_lib.enums import ShotType
from cavesurvey_lib.enums import StationType
from cavesurvey_lib.graph.models import StationGraph

if TYPE_CHECKING:
    from cavesurvey_lib.cave.models import ResolvedCave

logger = logging.getLogger(__name__)


def build_graph(
    resolved: ResolvedCave, include_splays: bool | None = None
) -> StationGraph:
    """Build the undirected station graph of ``resolved``.

    Every merged station becomes a vertex and every traversed shot an edge.
    The edge weight is the distance between the resolved positions, not the
    recorded length, so a loop's closure error shows up as a difference
    between the two.

    Args:
        resolved: The resolved cave
        include_splays: Keep splay stations and splay shots. Defaults to the
            ``include_splays_in_graph`` setting the cave was recalculated with

    Returns:
        The station graph
    """
    if include_splays is None:
        include_splays = resolved.config.include_splays_in_graph
    graph = StationGraph()

    for name, station in resolved.stations.items():
        if not include_splays and station.type == StationType.SPLAY:
            continue
        graph.add_vertex(name, station.position)

    for traversed in resolved.traversed_shots():
        if not include_splays and traversed.shot.type == ShotType.SPLAY:
            continue

        from_pos = graph.vertices.get(traversed.from_key)
        to_pos = graph.vertices.get(traversed.to_key)
        if from_pos is None or to_pos is None:
            logger.debug(
                "Skipping shot %s of survey '%s': endpoint not in graph",
                traversed.shot.id,
                traversed.survey,
            )
            continue

        graph.add_edge(
            traversed.from_key,
            traversed.to_key,
            weight=from_pos.distance_to(to_pos),
            shot_id=traversed.shot.id,
            survey=traversed.survey,
        )

    logger.debug(
        "Graph of cave '%s': %d vertices, %d edges",
        resolved.name,
        len(graph.vertices),
        len(graph.edges),
    )
    return graph
