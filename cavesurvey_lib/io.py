# -*- coding: utf-8 -*-
"""JSON persistence of caves and export of resolved results.

Reading and writing follow the same path for every model:

    File -> JSON -> model_validate_json() -> Cave
    Cave -> model_dump_json() -> File

Missing measurements round-trip as ``null``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

import orjson

from cavesurvey_lib.constants import JSON_ENCODING
from cavesurvey_lib.models import Cave

if TYPE_CHECKING:
    from pathlib import Path

    from cavesurvey_lib.cave.models import ResolvedCave
    from cavesurvey_lib.survey.models import Station

logger = logging.getLogger(__name__)


# --- Caves ---


def load_cave(path: Path) -> Cave:
    """Load a cave from JSON.

    Raises:
        pydantic.ValidationError: If the file does not describe a valid cave
    """
    json_str = path.read_text(encoding=JSON_ENCODING)
    cave = Cave.model_validate_json(json_str)
    logger.debug("Loaded cave '%s' from %s", cave.name, path)
    return cave


def save_cave(cave: Cave, path: Path) -> None:
    json_str = cave.model_dump_json(indent=2, by_alias=True, exclude_none=True)
    path.write_text(json_str, encoding=JSON_ENCODING)


# --- Resolved results ---


def _station_to_dict(station: Station) -> dict[str, Any]:
    data: dict[str, Any] = {
        "position": list(station.position),
        "type": station.type.value,
        "surveyName": station.survey,
    }
    if station.projected is not None:
        data["projected"] = station.projected.model_dump()
    if station.wgs84 is not None:
        data["wgs84"] = {
            "latitude": float(station.wgs84.latitude),
            "longitude": float(station.wgs84.longitude),
        }
    return data


def station_map(resolved: ResolvedCave) -> dict[str, dict[str, Any]]:
    """Merged stations as plain dictionaries, keyed by station name."""
    return {name: _station_to_dict(s) for name, s in resolved.stations.items()}


def diagnostics_summary(resolved: ResolvedCave) -> dict[str, Any]:
    """Orphan and invalid shot ids per survey, isolated surveys, messages."""
    return {
        "orphanShotIds": {
            name: sorted(ids) for name, ids in resolved.orphan_shot_ids.items() if ids
        },
        "invalidShotIds": {
            name: sorted(ids) for name, ids in resolved.invalid_shot_ids.items() if ids
        },
        "isolatedSurveyNames": resolved.isolated_survey_names,
        "diagnostics": [str(d) for d in resolved.all_diagnostics],
    }


def save_resolved(resolved: ResolvedCave, path: Path, *, minify: bool = False) -> str:
    """Write the station map and diagnostics of ``resolved`` as JSON."""
    data = {
        "name": resolved.name,
        "stations": station_map(resolved),
        "diagnostics": diagnostics_summary(resolved),
    }
    opts = 0 if minify else orjson.OPT_INDENT_2
    json_str = orjson.dumps(data, option=opts).decode(JSON_ENCODING)
    path.write_text(json_str, encoding=JSON_ENCODING)
    return json_str
