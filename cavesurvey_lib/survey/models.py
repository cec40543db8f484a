# -*- coding: utf-8 -*-
"""Resolved survey data.

These dataclasses hold the output of :mod:`cavesurvey_lib.survey.resolver`.
Back-references (owning survey, owning cave) are plain names, resolved
through the owning cave's station map.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace

from cavesurvey_lib.enums import StationType
from cavesurvey_lib.errors import Diagnostic
from cavesurvey_lib.geo_utils import GeoLocation
from cavesurvey_lib.geometry import Vector3D
from cavesurvey_lib.models import EOVCoordinate
from cavesurvey_lib.models import UTMCoordinate


@dataclass(frozen=True)
class Station:
    """A station with a resolved position.

    Attributes:
        name: Station name (the key in the station map, which may be
            survey-qualified after a cave merge)
        type: Kind of station
        position: Local position (east, north, up) in metres
        survey: Name of the survey that created the station
        cave: Name of the owning cave, set by the cave merge
        projected: Projected coordinate, if the cave is geo-referenced
        wgs84: WGS84 location, if the cave is geo-referenced
    """

    name: str
    type: StationType
    position: Vector3D
    survey: str
    cave: str | None = None
    projected: EOVCoordinate | UTMCoordinate | None = None
    wgs84: GeoLocation | None = None

    def with_changes(self, **changes) -> Station:
        return replace(self, **changes)


@dataclass
class ResolvedSurvey:
    """Stations and diagnostics produced by resolving one survey.

    Attributes:
        name: Survey name
        start: Name of the start station actually used (``None`` when the
            survey has no valid shot)
        stations: Stations created by this survey, keyed by station name.
            Stations reused from earlier surveys are not repeated here.
        orphan_shot_ids: Valid shots unreachable from the start
        invalid_shot_ids: Shots excluded because of invalid measurements
        loop_closing_shot_ids: Shots whose endpoints were both already
            resolved; they are graph edges only
        shot_endpoints: Station keys connected by each traversed shot, in
            the direction the shot was recorded
        isolated: The survey could not be attached to the previous surveys
            and was resolved around the fallback origin
        declination: Declination applied to the azimuths, in degrees
        convergence: Meridian convergence applied to the azimuths, in degrees
        diagnostics: Problems found in this survey
    """

    name: str
    start: str | None = None
    stations: dict[str, Station] = field(default_factory=dict)
    orphan_shot_ids: set[int] = field(default_factory=set)
    invalid_shot_ids: set[int] = field(default_factory=set)
    loop_closing_shot_ids: set[int] = field(default_factory=set)
    shot_endpoints: dict[int, tuple[str, str]] = field(default_factory=dict)
    isolated: bool = False
    declination: float = 0.0
    convergence: float = 0.0
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def azimuth_correction(self) -> float:
        """Angle added to every recorded azimuth of this survey (degrees)."""
        return self.declination + self.convergence

    def as_tuple(self) -> tuple[dict[str, Station], set[int], set[int]]:
        """Return ``(stations, orphan_shot_ids, invalid_shot_ids)``."""
        return self.stations, self.orphan_shot_ids, self.invalid_shot_ids

    def rename_station(self, old: str, new: str) -> None:
        """Re-key a station, updating the shot endpoints that use it."""
        station = self.stations.pop(old)
        self.stations[new] = station.with_changes(name=new)
        for shot_id, (from_key, to_key) in self.shot_endpoints.items():
            if old in (from_key, to_key):
                self.shot_endpoints[shot_id] = (
                    new if from_key == old else from_key,
                    new if to_key == old else to_key,
                )
        if self.start == old:
            self.start = new
