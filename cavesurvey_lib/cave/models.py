# -*- coding: utf-8 -*-
"""Resolved cave data.

A :class:`ResolvedCave` owns the input :class:`~cavesurvey_lib.models.Cave`
it was computed from, the per-survey results and the merged station map.
Everything is recomputed from scratch on each recalculation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING

from cavesurvey_lib.config import DEFAULT_CONFIG
from cavesurvey_lib.enums import ShotType
from cavesurvey_lib.enums import StationType
from cavesurvey_lib.geometry import Vector3D
from cavesurvey_lib.geometry import from_polar

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cavesurvey_lib.config import RecalculationConfig
    from cavesurvey_lib.errors import Diagnostic
    from cavesurvey_lib.models import Cave
    from cavesurvey_lib.models import CoordinateSystem
    from cavesurvey_lib.models import FixPoint
    from cavesurvey_lib.models import Shot
    from cavesurvey_lib.survey.models import ResolvedSurvey
    from cavesurvey_lib.survey.models import Station


@dataclass(frozen=True)
class TraversedShot:
    """A valid shot together with the station keys it connects.

    Attributes:
        survey: Name of the owning survey
        shot: The input shot
        from_key: Key of the ``from`` station in the merged map
        to_key: Key of the ``to`` station in the merged map
        vector: Measured displacement with the survey's azimuth correction
    """

    survey: str
    shot: Shot
    from_key: str
    to_key: str
    vector: Vector3D


@dataclass(frozen=True)
class CaveStats:
    """Summary numbers of a resolved cave.

    Lengths are in metres; invalid shots only count towards
    ``invalid_length``.  ``depth`` and ``height`` are measured from the
    first survey's start station; vertical values only consider centerline
    stations except ``vertical_with_splays``.
    """

    stations: int
    surveys: int
    isolated: int
    splays: int
    length: float
    orphan_length: float
    invalid_length: float
    auxiliary_length: float
    depth: float
    height: float
    vertical: float
    vertical_with_splays: float
    min_z: float
    max_z: float


@dataclass
class ResolvedCave:
    """The resolved geometry of a cave.

    Attributes:
        name: Cave name
        source: The input cave this result was computed from
        stations: Merged station map of every survey
        surveys: Per-survey results, in survey order
        diagnostics: Cave-level problems (ambiguous stations, geo-reference)
        coordinate_system: Projected system of the geo-reference, if any
        anchor: Fix point tying the local frame to the projected system
        convergence: Meridian convergence at the anchor (degrees)
        config: Settings the cave was recalculated with. Graph building and
            loop closure analysis take their defaults from it.
    """

    name: str
    source: Cave
    stations: dict[str, Station] = field(default_factory=dict)
    surveys: list[ResolvedSurvey] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    coordinate_system: CoordinateSystem | None = None
    anchor: FixPoint | None = None
    convergence: float = 0.0
    config: RecalculationConfig = DEFAULT_CONFIG

    # -- lookups ---------------------------------------------------------------

    def station(self, name: str) -> Station | None:
        return self.stations.get(name)

    def survey(self, name: str) -> ResolvedSurvey | None:
        return next((s for s in self.surveys if s.name == name), None)

    @property
    def first_station(self) -> Station | None:
        if not self.surveys or self.surveys[0].start is None:
            return None
        return self.stations.get(self.surveys[0].start)

    @property
    def is_geo_referenced(self) -> bool:
        return self.coordinate_system is not None and self.anchor is not None

    # -- diagnostics -----------------------------------------------------------

    @property
    def orphan_shot_ids(self) -> dict[str, set[int]]:
        return {s.name: set(s.orphan_shot_ids) for s in self.surveys}

    @property
    def invalid_shot_ids(self) -> dict[str, set[int]]:
        return {s.name: set(s.invalid_shot_ids) for s in self.surveys}

    @property
    def isolated_survey_names(self) -> list[str]:
        return [s.name for s in self.surveys if s.isolated]

    @property
    def all_diagnostics(self) -> list[Diagnostic]:
        """Survey diagnostics in survey order, followed by cave diagnostics."""
        result: list[Diagnostic] = []
        for survey in self.surveys:
            result.extend(survey.diagnostics)
        result.extend(self.diagnostics)
        return result

    # -- shots -----------------------------------------------------------------

    def traversed_shots(self) -> Iterator[TraversedShot]:
        """Yield every shot that took part in the traversal.

        Invalid and orphan shots are skipped.  Shots come in survey order,
        then in recorded order.
        """
        for resolved in self.surveys:
            survey = self.source.get_survey(resolved.name)
            if survey is None:
                continue
            for shot in survey.shots:
                endpoints = resolved.shot_endpoints.get(shot.id)
                if endpoints is None:
                    continue
                yield TraversedShot(
                    survey=resolved.name,
                    shot=shot,
                    from_key=endpoints[0],
                    to_key=endpoints[1],
                    vector=from_polar(
                        shot.length,
                        shot.azimuth + resolved.azimuth_correction,
                        shot.clino,
                    ),
                )

    # -- statistics ------------------------------------------------------------

    def stats(self) -> CaveStats:
        length = orphan_length = invalid_length = auxiliary_length = 0.0
        splays = 0

        for resolved in self.surveys:
            survey = self.source.get_survey(resolved.name)
            if survey is None:
                continue
            for shot in survey.shots:
                if not math.isfinite(shot.length):
                    continue
                if shot.id in resolved.orphan_shot_ids:
                    orphan_length += shot.length
                if shot.id in resolved.invalid_shot_ids:
                    invalid_length += shot.length
                    continue

                if shot.type == ShotType.AUXILIARY:
                    auxiliary_length += shot.length
                elif shot.type == ShotType.CENTER:
                    length += shot.length
                elif shot.type == ShotType.SPLAY:
                    splays += 1

        center_z = [
            s.position.z for s in self.stations.values() if s.type == StationType.CENTER
        ]
        splay_z = [
            s.position.z for s in self.stations.values() if s.type == StationType.SPLAY
        ]
        min_z = min(center_z, default=0.0)
        max_z = max(center_z, default=0.0)
        all_z = center_z + splay_z
        first = self.first_station
        first_z = first.position.z if first is not None else None

        return CaveStats(
            stations=len(center_z),
            surveys=len(self.surveys),
            isolated=len(self.isolated_survey_names),
            splays=splays,
            length=length,
            orphan_length=orphan_length,
            invalid_length=invalid_length,
            auxiliary_length=auxiliary_length,
            depth=(first_z - min_z) if center_z and first_z is not None else 0.0,
            height=(max_z - first_z) if center_z and first_z is not None else 0.0,
            vertical=max_z - min_z,
            vertical_with_splays=(max(all_z) - min(all_z)) if all_z else 0.0,
            min_z=min_z,
            max_z=max_z,
        )


@dataclass(frozen=True)
class CaveRecalculated:
    """Event emitted by the caller after a successful recalculation.

    Attributes:
        cave: Name of the recalculated cave
        stations: Number of stations in the merged map
        isolated_surveys: Names of the isolated surveys
        diagnostics: Number of diagnostics
    """

    cave: str
    stations: int
    isolated_surveys: tuple[str, ...]
    diagnostics: int

    @classmethod
    def from_result(cls, resolved: ResolvedCave) -> CaveRecalculated:
        return cls(
            cave=resolved.name,
            stations=len(resolved.stations),
            isolated_surveys=tuple(resolved.isolated_survey_names),
            diagnostics=len(resolved.all_diagnostics),
        )
