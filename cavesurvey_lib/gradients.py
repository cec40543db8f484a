# -*- coding: utf-8 -*-
"""Per-station color gradients.

Stations are mapped to a relative value in ``[0, 100]`` which is then looked
up on the gradient stops:

- by depth: 0 at the highest station, 100 at the lowest one
- by distance: 0 at the start station, 100 at the farthest reachable one
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cavesurvey_lib.geometry import Color
from cavesurvey_lib.geometry import GradientStop
from cavesurvey_lib.geometry import interpolate_color
from cavesurvey_lib.graph.analyzer import traverse_distances

if TYPE_CHECKING:
    from collections.abc import Mapping
    from collections.abc import Sequence

    from cavesurvey_lib.cave.models import ResolvedCave
    from cavesurvey_lib.graph.models import StationGraph

logger = logging.getLogger(__name__)

#: Upper end of the relative scale the stops are expressed on
RELATIVE_SCALE = 100.0

#: Blue at the surface, red at the bottom
DEFAULT_STOPS: tuple[GradientStop, ...] = (
    GradientStop(0.0, Color.from_hex("#0000ff")),
    GradientStop(50.0, Color.from_hex("#00ff00")),
    GradientStop(100.0, Color.from_hex("#ff0000")),
)


def _sorted_stops(stops: Sequence[GradientStop] | None) -> list[GradientStop]:
    return sorted(stops if stops is not None else DEFAULT_STOPS, key=lambda s: s.value)


def colors_by_depth(
    resolved: ResolvedCave, stops: Sequence[GradientStop] | None = None
) -> dict[str, Color]:
    """Color every station of ``resolved`` by its relative depth."""
    ordered = _sorted_stops(stops)
    if not resolved.stations:
        return {}

    z_values = [s.position.z for s in resolved.stations.values()]
    max_z = max(z_values)
    diff_z = max_z - min(z_values)

    result: dict[str, Color] = {}
    for name, station in resolved.stations.items():
        relative = 0.0 if diff_z == 0 else (max_z - station.position.z) / diff_z
        result[name] = interpolate_color(relative * RELATIVE_SCALE, ordered)
    return result


def colors_by_distance(
    graph: StationGraph, start: str, stops: Sequence[GradientStop] | None = None
) -> dict[str, Color]:
    """Color every station reachable from ``start`` by its graph distance.

    Unreachable stations are left out of the result.
    """
    ordered = _sorted_stops(stops)
    distances = traverse_distances(graph, start)
    if not distances:
        logger.debug("No distances from `%s`, no colors", start)
        return {}

    max_distance = max(distances.values())
    return {
        name: interpolate_color(
            0.0 if max_distance == 0 else distance / max_distance * RELATIVE_SCALE,
            ordered,
        )
        for name, distance in distances.items()
    }


def shot_colors(
    resolved: ResolvedCave, station_colors: Mapping[str, Color]
) -> dict[tuple[str, int], tuple[Color, Color]]:
    """Color pair of every traversed shot, keyed by ``(survey, shot id)``.

    Shots with an uncolored endpoint are skipped.
    """
    result: dict[tuple[str, int], tuple[Color, Color]] = {}
    for traversed in resolved.traversed_shots():
        from_color = station_colors.get(traversed.from_key)
        to_color = station_colors.get(traversed.to_key)
        if from_color is None or to_color is None:
            continue
        result[(traversed.survey, traversed.shot.id)] = (from_color, to_color)
    return result
