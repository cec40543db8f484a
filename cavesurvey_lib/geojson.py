# -*- coding: utf-8 -*-
"""GeoJSON export of a resolved cave.

GeoJSON output uses WGS84 coordinates (longitude, latitude, elevation in
metres), so the cave has to be geo-referenced: every station carries the
WGS84 location computed by :meth:`CaveAggregator.apply_geo_reference`.

- Each station becomes a ``Point`` feature
- Each traversed shot becomes a ``LineString`` feature between its stations

Station and shot colors (e.g. from :mod:`cavesurvey_lib.gradients`) are
written as simplestyle properties, which geojson.io, QGIS and most web
viewers render automatically.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING
from typing import Any

import orjson
from geojson import Feature
from geojson import FeatureCollection
from geojson import LineString
from geojson import Point

from cavesurvey_lib.constants import GEOJSON_COORDINATE_PRECISION
from cavesurvey_lib.constants import GEOJSON_ELEVATION_PRECISION
from cavesurvey_lib.constants import JSON_ENCODING
from cavesurvey_lib.enums import ShotType
from cavesurvey_lib.enums import StationType
from cavesurvey_lib.errors import NoGeoReferenceError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from cavesurvey_lib.cave.models import ResolvedCave
    from cavesurvey_lib.cave.models import TraversedShot
    from cavesurvey_lib.geometry import Color
    from cavesurvey_lib.survey.models import Station

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Features
# -----------------------------------------------------------------------------


def _elevation(station: Station) -> float:
    if station.projected is not None:
        return station.projected.elevation
    return station.position.z


def _lon_lat_elev(station: Station) -> tuple[float, float, float]:
    if station.wgs84 is None:
        raise NoGeoReferenceError(f"Station '{station.name}' has no WGS84 location")
    return (
        round(float(station.wgs84.longitude), GEOJSON_COORDINATE_PRECISION),
        round(float(station.wgs84.latitude), GEOJSON_COORDINATE_PRECISION),
        round(_elevation(station), GEOJSON_ELEVATION_PRECISION),
    )


def station_to_feature(
    key: str, station: Station, color: Color | None = None
) -> Feature:
    """Convert a station to a GeoJSON Point Feature.

    Args:
        key: Key of the station in the merged station map
        station: Station with a WGS84 location
        color: Optional marker color

    Returns:
        GeoJSON Feature with Point geometry
    """
    properties: dict[str, Any] = {
        "type": "station",
        "name": key,
        "station_type": station.type.value,
        "survey": station.survey,
        "elevation_m": round(_elevation(station), GEOJSON_ELEVATION_PRECISION),
    }
    if color is not None:
        properties["marker-color"] = color.hex_string()

    return Feature(geometry=Point(_lon_lat_elev(station)), properties=properties)


def shot_to_feature(
    traversed: TraversedShot,
    from_station: Station,
    to_station: Station,
    color: Color | None = None,
) -> Feature:
    """Convert a traversed shot to a GeoJSON LineString Feature."""
    properties: dict[str, Any] = {
        "type": "shot",
        "survey": traversed.survey,
        "shot_id": traversed.shot.id,
        "shot_type": traversed.shot.type.value,
        "from": traversed.from_key,
        "to": traversed.to_key,
        "length_m": round(traversed.shot.length, GEOJSON_ELEVATION_PRECISION),
    }
    if color is not None:
        properties["stroke"] = color.hex_string()

    return Feature(
        id=str(
            uuid.uuid5(
                uuid.NAMESPACE_OID, f"{traversed.survey}/{traversed.shot.id}"
            )
        ),
        geometry=LineString([_lon_lat_elev(from_station), _lon_lat_elev(to_station)]),
        properties=properties,
    )


# -----------------------------------------------------------------------------
# Collection
# -----------------------------------------------------------------------------


def resolved_cave_to_geojson(
    resolved: ResolvedCave,
    *,
    include_stations: bool = True,
    include_shots: bool = True,
    include_splays: bool = False,
    station_colors: Mapping[str, Color] | None = None,
) -> FeatureCollection:
    """Convert a resolved cave to a GeoJSON FeatureCollection.

    Args:
        resolved: Resolved, geo-referenced cave
        include_stations: Include Point features for stations
        include_shots: Include LineString features for shots
        include_splays: Include splay stations and splay shots
        station_colors: Optional color per station key; a shot takes the
            color of its ``to`` station

    Returns:
        GeoJSON FeatureCollection

    Raises:
        NoGeoReferenceError: If the cave is not geo-referenced
    """
    if not resolved.is_geo_referenced:
        raise NoGeoReferenceError(
            f"Cannot convert cave '{resolved.name}' to GeoJSON: "
            "no coordinate system or fix point"
        )

    colors = station_colors or {}
    stations = resolved.stations
    features: list[Feature] = []

    if include_stations:
        for key, station in stations.items():
            if station.type == StationType.SPLAY and not include_splays:
                continue
            if station.wgs84 is None:
                logger.warning("Skipping station '%s': no WGS84 location", key)
                continue
            features.append(station_to_feature(key, station, colors.get(key)))

    if include_shots:
        for traversed in resolved.traversed_shots():
            if traversed.shot.type == ShotType.SPLAY and not include_splays:
                continue
            from_station = stations.get(traversed.from_key)
            to_station = stations.get(traversed.to_key)
            if (
                from_station is None
                or to_station is None
                or from_station.wgs84 is None
                or to_station.wgs84 is None
            ):
                logger.warning(
                    "Skipping shot %s of survey '%s': endpoint has no WGS84 location",
                    traversed.shot.id,
                    traversed.survey,
                )
                continue
            features.append(
                shot_to_feature(
                    traversed, from_station, to_station, colors.get(traversed.to_key)
                )
            )

    logger.info(
        "GeoJSON export of cave '%s': %d feature(s)", resolved.name, len(features)
    )
    return FeatureCollection(
        features,
        properties={
            "cave": resolved.name,
            "coordinate_system": str(resolved.coordinate_system),
        },
    )


def resolved_cave_to_geojson_str(
    resolved: ResolvedCave, *, minify: bool = False, **kwargs: Any
) -> str:
    """Serialize :func:`resolved_cave_to_geojson` with orjson."""
    collection = resolved_cave_to_geojson(resolved, **kwargs)
    opts = 0 if minify else orjson.OPT_INDENT_2
    return orjson.dumps(collection, option=opts).decode(JSON_ENCODING)


def write_geojson(
    resolved: ResolvedCave, output_path: Path, *, minify: bool = False, **kwargs: Any
) -> str:
    """Write the GeoJSON of ``resolved`` to ``output_path`` and return it."""
    json_str = resolved_cave_to_geojson_str(resolved, minify=minify, **kwargs)
    output_path.write_text(json_str, encoding=JSON_ENCODING)
    return json_str
