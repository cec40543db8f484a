# -*- coding: utf-8 -*-
"""Merges the surveys of a cave into a single station map.

Surveys are resolved in definition order:

- The first survey starts at the configured origin.
- A later survey whose start station is already known continues from that
  station. Every station of the earlier surveys is usable as a traversal
  source, so shots between surveys close loops.
- A later survey whose start station is unknown is isolated. It is resolved
  around the fallback origin so it can still be displayed, and flagged.

When the cave is geo-referenced, every merged station also receives a
projected and a WGS84 coordinate.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import fields
from typing import TYPE_CHECKING

from cavesurvey_lib.cave.models import ResolvedCave
from cavesurvey_lib.config import DEFAULT_CONFIG
from cavesurvey_lib.constants import SURVEY_QUALIFIER
from cavesurvey_lib.coordinates import CoordinateSystemConverter
from cavesurvey_lib.enums import DiagnosticKind
from cavesurvey_lib.errors import Diagnostic
from cavesurvey_lib.errors import EmptyCaveError
from cavesurvey_lib.errors import InvalidCoordinateError
from cavesurvey_lib.survey.resolver import AliasTable
from cavesurvey_lib.survey.resolver import SurveyResolver

if TYPE_CHECKING:
    from cavesurvey_lib.config import RecalculationConfig
    from cavesurvey_lib.geo_utils import DeclinationProvider
    from cavesurvey_lib.models import Cave
    from cavesurvey_lib.models import FixPoint
    from cavesurvey_lib.models import GeoData
    from cavesurvey_lib.survey.models import ResolvedSurvey

logger = logging.getLogger(__name__)


class CaveAggregator:
    """Recalculates the station map of a cave from its surveys."""

    def __init__(
        self,
        config: RecalculationConfig | None = None,
        converter: CoordinateSystemConverter | None = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.converter = converter or CoordinateSystemConverter()
        self.resolver = SurveyResolver(self.config.splay_name_template)

    # -------------------------------------------------------------------------
    # Recalculation
    # -------------------------------------------------------------------------

    def recalculate(self, cave: Cave) -> ResolvedCave:
        """Resolve every survey of ``cave`` and merge the results.

        Per-shot and per-survey problems are reported as diagnostics on the
        returned object.

        Raises:
            EmptyCaveError: If the cave has no survey
            CyclicAliasError: If the cave's aliases form a cycle
            FatalConfigurationError: If an alias refers to two stations
        """
        if not cave.surveys:
            raise EmptyCaveError(f"Cave '{cave.name}' has no surveys")

        aliases = AliasTable(cave.aliases)
        resolved = ResolvedCave(name=cave.name, source=cave, config=self.config)
        merged = resolved.stations

        geo = cave.geo_data
        if geo is not None:
            resolved.coordinate_system = geo.coordinate_system
        resolved.anchor = self._find_anchor(cave)
        resolved.convergence = self._cave_convergence(resolved)

        for index, survey in enumerate(cave.surveys):
            start = survey.implicit_start
            declination = (
                survey.metadata.declination if self.config.apply_declination else None
            )
            convergence = (
                survey.metadata.convergence
                if survey.metadata.convergence is not None
                else resolved.convergence
            )

            connected = index > 0 and start is not None and any(
                candidate in merged for candidate in aliases.candidates(start)
            )
            result = self.resolver.resolve(
                survey,
                None if connected else self.config.origin,
                aliases,
                known=merged if connected else None,
                declination=declination,
                convergence=convergence,
                cave=cave.name,
            )

            if index > 0 and not connected and start is not None:
                result.isolated = True
                result.diagnostics.append(
                    Diagnostic.create(
                        DiagnosticKind.ISOLATED_SURVEY,
                        f"Start station '{start}' is not part of the previous "
                        "surveys, survey is resolved around the origin",
                        survey=survey.name,
                        station=start,
                    )
                )
                logger.warning(
                    "Survey '%s' is isolated: start station '%s' not found",
                    survey.name,
                    start,
                )

            self._merge(resolved, result)
            resolved.surveys.append(result)

        self.apply_geo_reference(resolved)

        logger.info(
            "Cave '%s' recalculated: %d survey(s), %d station(s), %d diagnostic(s)",
            cave.name,
            len(resolved.surveys),
            len(merged),
            len(resolved.all_diagnostics),
        )
        return resolved

    def _merge(self, resolved: ResolvedCave, result: ResolvedSurvey) -> None:
        """Add a survey's stations to the merged map.

        A name already used by another survey is kept under a survey-qualified
        key so neither position is lost.
        """
        merged = resolved.stations
        for name in list(result.stations):
            if name not in merged:
                continue

            qualified = f"{name}{SURVEY_QUALIFIER}{result.name}"
            existing = merged[name]
            resolved.diagnostics.append(
                Diagnostic.create(
                    DiagnosticKind.AMBIGUOUS_STATION,
                    f"Station '{name}' is already defined by survey "
                    f"'{existing.survey}', stored as '{qualified}'",
                    survey=result.name,
                    station=name,
                )
            )
            logger.warning(
                "Ambiguous station '%s' in surveys '%s' and '%s'",
                name,
                existing.survey,
                result.name,
            )
            result.rename_station(name, qualified)

        merged.update(result.stations)

    # -------------------------------------------------------------------------
    # Geo-reference
    # -------------------------------------------------------------------------

    @staticmethod
    def _find_anchor(cave: Cave) -> FixPoint | None:
        """Fix point of the first survey's start, else the first fix point."""
        geo = cave.geo_data
        if geo is None or not geo.fix_points:
            return None

        first_start = cave.surveys[0].implicit_start if cave.surveys else None
        if first_start is not None and (fix := geo.fix_point_for(first_start)):
            return fix
        return geo.fix_points[0]

    def _cave_convergence(self, resolved: ResolvedCave) -> float:
        if (
            not self.config.apply_convergence
            or resolved.coordinate_system is None
            or resolved.anchor is None
        ):
            return 0.0

        try:
            convergence = self.converter.meridian_convergence(
                resolved.anchor.coordinate, resolved.coordinate_system
            )
        except InvalidCoordinateError as e:
            resolved.diagnostics.append(e.to_diagnostic())
            logger.warning("Cannot compute meridian convergence: %s", e)
            return 0.0

        logger.debug(
            "Meridian convergence at '%s': %.4f°", resolved.anchor.station, convergence
        )
        return convergence

    def apply_geo_reference(
        self, resolved: ResolvedCave, geo_data: GeoData | None = None
    ) -> ResolvedCave:
        """Fill the projected and WGS84 coordinates of every station.

        Called at the end of :meth:`recalculate`, and on its own when only
        the geo-reference changed.  Without a coordinate system or anchor the
        coordinates are cleared.  A new geo-reference that changes the
        meridian convergence rotates the surveys, so the cave is recalculated
        from scratch instead.

        Args:
            resolved: The resolved cave, updated in place
            geo_data: New geo-reference. Defaults to the one of the source cave.

        Returns:
            ``resolved``
        """
        if geo_data is not None:
            resolved.source = resolved.source.model_copy(update={"geo_data": geo_data})
            resolved.coordinate_system = geo_data.coordinate_system
            resolved.anchor = self._find_anchor(resolved.source)
            convergence = self._cave_convergence(resolved)
            if convergence != resolved.convergence:
                logger.info(
                    "Convergence of cave '%s' changed from %.4f° to %.4f°, recalculating",
                    resolved.name,
                    resolved.convergence,
                    convergence,
                )
                fresh = self.recalculate(resolved.source)
                for f in fields(fresh):
                    setattr(resolved, f.name, getattr(fresh, f.name))
                return resolved
        resolved.diagnostics = [
            d
            for d in resolved.diagnostics
            if d.kind != DiagnosticKind.GEO_REFERENCE or d.station is None
        ]

        system = resolved.coordinate_system
        anchor = resolved.anchor
        stations = resolved.stations

        if system is None or anchor is None:
            logger.debug("Cave '%s' is not geo-referenced", resolved.name)
            for name, station in stations.items():
                stations[name] = station.with_changes(projected=None, wgs84=None)
            return resolved

        anchor_station = stations.get(anchor.station)
        if anchor_station is None:
            resolved.diagnostics.append(
                Diagnostic.create(
                    DiagnosticKind.GEO_REFERENCE,
                    f"Fix point station '{anchor.station}' is not surveyed",
                    station=anchor.station,
                )
            )
            return resolved

        for name, station in stations.items():
            projected = self.converter.to_projected(
                station.position, anchor, anchor_station.position
            )
            try:
                wgs84 = self.converter.to_wgs84(projected, system)
            except InvalidCoordinateError as e:
                wgs84 = None
                resolved.diagnostics.append(
                    Diagnostic.create(
                        DiagnosticKind.GEO_REFERENCE, e.message, station=name
                    )
                )
            stations[name] = station.with_changes(projected=projected, wgs84=wgs84)

        return resolved

    # -------------------------------------------------------------------------
    # Declination
    # -------------------------------------------------------------------------

    def resolve_declinations(
        self, cave: Cave, provider: DeclinationProvider
    ) -> Cave:
        """Fill missing survey declinations from ``provider``.

        Runs before :meth:`recalculate`.  Surveys with an explicit declination
        or without a date are left untouched; so is every survey when the
        cave has no usable geo-reference.

        Returns:
            A copy of ``cave`` with the looked up declinations
        """
        anchor = self._find_anchor(cave)
        system = cave.geo_data.coordinate_system if cave.geo_data else None
        if anchor is None or system is None:
            logger.debug("Cave '%s' has no geo-reference for declination", cave.name)
            return cave

        location = self.converter.to_wgs84(anchor.coordinate, system)
        surveys = []
        for survey in cave.surveys:
            metadata = survey.metadata
            if metadata.declination is not None or metadata.date is None:
                surveys.append(survey)
                continue

            date = metadata.date
            if isinstance(date, datetime.datetime):
                date = date.date()
            declination = provider.declination(location, date)
            logger.info(
                "Survey '%s' (%s): declination %.2f°", survey.name, date, declination
            )
            surveys.append(
                survey.model_copy(
                    update={
                        "metadata": metadata.model_copy(
                            update={"declination": declination}
                        )
                    }
                )
            )
        return cave.model_copy(update={"surveys": surveys})


def recalculate(
    cave: Cave, config: RecalculationConfig | None = None
) -> ResolvedCave:
    """Recalculate ``cave`` with a default :class:`CaveAggregator`."""
    return CaveAggregator(config).recalculate(cave)

