# -*- coding: utf-8 -*-
"""Turns a survey's shot list into absolute station positions.

Resolution works in passes over the valid shots, in the order they were
recorded:

- a shot whose ``from`` station is known creates its ``to`` station;
- a shot whose ``to`` station is known creates its ``from`` station
  (backward resolution);
- a shot whose two stations are both known is a loop-closing edge and
  never moves either station;
- a shot with no known station is deferred to the next pass.

Passes repeat until one resolves nothing new.  Whatever is still deferred
then is orphaned: it is not connected to the start station.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cavesurvey_lib.constants import SPLAY_NAME_TEMPLATE
from cavesurvey_lib.enums import DiagnosticKind
from cavesurvey_lib.enums import ShotType
from cavesurvey_lib.enums import StationType
from cavesurvey_lib.errors import CyclicAliasError
from cavesurvey_lib.errors import Diagnostic
from cavesurvey_lib.errors import FatalConfigurationError
from cavesurvey_lib.geometry import from_polar
from cavesurvey_lib.survey.models import ResolvedSurvey
from cavesurvey_lib.survey.models import Station

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Mapping

    from cavesurvey_lib.geometry import Vector3D
    from cavesurvey_lib.models import Shot
    from cavesurvey_lib.models import Survey
    from cavesurvey_lib.models import SurveyAlias

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Aliases
# -----------------------------------------------------------------------------


class AliasTable:
    """Lookup structure for station aliases.

    Each :class:`SurveyAlias` declares ``from_station`` an alternate name of
    the canonical ``to_station``.  Chains are followed (``a -> b -> c``);
    cycles are rejected.

    Raises:
        CyclicAliasError: If a chain of aliases leads back to its start
        FatalConfigurationError: If an alias points to two canonical names
    """

    def __init__(self, aliases: Iterable[SurveyAlias] = ()):
        self._canonical: dict[str, str] = {}
        self._members: dict[str, list[str]] = {}

        for alias in aliases:
            existing = self._canonical.get(alias.from_station)
            if existing is not None and existing != alias.to_station:
                raise FatalConfigurationError(
                    f"Alias '{alias.from_station}' refers to both "
                    f"'{existing}' and '{alias.to_station}'"
                )
            self._canonical[alias.from_station] = alias.to_station

        self._check_cycles()
        self._build_classes()

    def __len__(self) -> int:
        return len(self._canonical)

    def _check_cycles(self) -> None:
        for name in self._canonical:
            chain = [name]
            current = name
            while current in self._canonical:
                current = self._canonical[current]
                if current in chain:
                    raise CyclicAliasError([*chain[chain.index(current) :], current])
                chain.append(current)

    def _build_classes(self) -> None:
        """Group names connected by aliases, in definition order."""
        neighbours: dict[str, list[str]] = {}
        for alias_name, canonical in self._canonical.items():
            neighbours.setdefault(alias_name, []).append(canonical)
            neighbours.setdefault(canonical, []).append(alias_name)

        for name in neighbours:
            if name in self._members:
                continue
            members: list[str] = []
            stack = [name]
            while stack:
                current = stack.pop()
                if current in members:
                    continue
                members.append(current)
                stack.extend(reversed(neighbours[current]))
            for member in members:
                self._members[member] = members

    def canonical(self, name: str) -> str:
        """Follow the alias chain of ``name`` to its canonical station."""
        while name in self._canonical:
            name = self._canonical[name]
        return name

    def candidates(self, name: str) -> list[str]:
        """Names ``name`` may be resolved under, in order of preference.

        The name itself comes first, then its canonical chain, then every
        other name of the same alias group.
        """
        result = [name]
        current = name
        while current in self._canonical:
            current = self._canonical[current]
            result.append(current)
        result.extend(m for m in self._members.get(name, []) if m not in result)
        return result


# -----------------------------------------------------------------------------
# Resolver
# -----------------------------------------------------------------------------


class SurveyResolver:
    """Resolves the station positions of a single survey.

    The resolver holds no state between calls; resolving the same survey
    twice with the same inputs yields identical positions.
    """

    def __init__(self, splay_name_template: str = SPLAY_NAME_TEMPLATE):
        self.splay_name_template = splay_name_template

    def splay_station_name(self, shot: Shot, survey: Survey) -> str:
        return self.splay_name_template.format(id=shot.id, survey=survey.name)

    def resolve(  # noqa: C901
        self,
        survey: Survey,
        start_position: Vector3D | None,
        aliases: AliasTable | Iterable[SurveyAlias] | None = None,
        *,
        known: Mapping[str, Station] | None = None,
        declination: float | None = None,
        convergence: float | None = None,
        cave: str | None = None,
    ) -> ResolvedSurvey:
        """Resolve the stations of ``survey``.

        Args:
            survey: The survey to resolve
            start_position: Position of the start station.  ``None`` means
                the start station must already be present in ``known``.
            aliases: Station aliases of the cave
            known: Stations resolved by earlier surveys.  They are used as
                traversal sources but never modified or repeated in the
                result.
            declination: Magnetic declination in degrees
            convergence: Meridian convergence in degrees
            cave: Name of the owning cave, copied onto the stations

        Returns:
            The resolved survey

        Raises:
            ValueError: If ``start_position`` is ``None`` and the start
                station is not in ``known``
        """
        alias_table = aliases if isinstance(aliases, AliasTable) else AliasTable(aliases or ())
        known = known if known is not None else {}
        result = ResolvedSurvey(name=survey.name)
        stations = result.stations

        # -- validation --------------------------------------------------------
        valid_shots: list[Shot] = []
        for shot in survey.shots:
            errors = shot.validate_shot()
            if errors:
                result.invalid_shot_ids.add(shot.id)
                result.diagnostics.append(
                    Diagnostic.create(
                        DiagnosticKind.INVALID_SHOT,
                        "; ".join(errors),
                        survey=survey.name,
                        shot_id=shot.id,
                    )
                )
                continue
            valid_shots.append(shot)

        start = survey.implicit_start
        if start is None:
            logger.warning("Survey '%s' has no valid shot", survey.name)
            return result

        def lookup(name: str) -> str | None:
            for candidate in alias_table.candidates(name):
                if candidate in stations or candidate in known:
                    return candidate
            return None

        def get(key: str) -> Station:
            return stations[key] if key in stations else known[key]

        # -- start station -----------------------------------------------------
        if start_position is not None:
            stations[start] = Station(
                name=start,
                type=StationType.CENTER,
                position=start_position,
                survey=survey.name,
                cave=cave,
            )
            result.start = start
        else:
            start_key = lookup(start)
            if start_key is None:
                raise ValueError(
                    f"Start station '{start}' of survey '{survey.name}' is not resolved"
                )
            result.start = start_key

        result.declination = declination or 0.0
        result.convergence = convergence or 0.0
        correction = result.azimuth_correction

        def can_start_from(station: Station, shot: Shot) -> bool:
            return not (
                station.type == StationType.AUXILIARY
                and shot.type in (ShotType.CENTER, ShotType.SPLAY)
            )

        def process(shot: Shot) -> bool:
            from_key = lookup(shot.from_station)
            if shot.type == ShotType.SPLAY:
                to_name = self.splay_station_name(shot, survey)
                to_key = None
            else:
                to_name = shot.to_station
                to_key = lookup(to_name)

            if from_key is None and to_key is None:
                return False

            if from_key is not None and to_key is not None:
                result.shot_endpoints[shot.id] = (from_key, to_key)
                result.loop_closing_shot_ids.add(shot.id)
                return True

            delta = from_polar(shot.length, shot.azimuth + correction, shot.clino)

            if from_key is not None:
                source = get(from_key)
                if not can_start_from(source, shot):
                    return False
                stations[to_name] = Station(
                    name=to_name,
                    type=shot.type.station_type,
                    position=source.position + delta,
                    survey=survey.name,
                    cave=cave,
                )
                result.shot_endpoints[shot.id] = (from_key, to_name)
                return True

            target = get(to_key)
            if not can_start_from(target, shot):
                return False
            stations[shot.from_station] = Station(
                name=shot.from_station,
                type=shot.type.station_type,
                position=target.position - delta,
                survey=survey.name,
                cave=cave,
            )
            result.shot_endpoints[shot.id] = (shot.from_station, to_key)
            return True

        # -- traversal ---------------------------------------------------------
        pending = valid_shots
        pass_number = 0
        progress = True
        while progress and pending:
            pass_number += 1
            deferred = [shot for shot in pending if not process(shot)]
            progress = len(deferred) < len(pending)
            logger.debug(
                "Survey '%s' pass %d: %d shot(s) resolved, %d deferred",
                survey.name,
                pass_number,
                len(pending) - len(deferred),
                len(deferred),
            )
            pending = deferred

        for shot in pending:
            result.orphan_shot_ids.add(shot.id)
            result.diagnostics.append(
                Diagnostic.create(
                    DiagnosticKind.ORPHAN_SHOT,
                    f"Shot '{shot.from_station}' -> '{shot.to_station or ''}' is "
                    f"not connected to start station '{result.start}'",
                    survey=survey.name,
                    shot_id=shot.id,
                )
            )

        if result.orphan_shot_ids or result.invalid_shot_ids:
            logger.info(
                "Survey '%s': %d station(s), %d orphan shot(s), %d invalid shot(s)",
                survey.name,
                len(stations),
                len(result.orphan_shot_ids),
                len(result.invalid_shot_ids),
            )
        return result


def resolve_survey(
    survey: Survey,
    start_position: Vector3D | None,
    aliases: AliasTable | Iterable[SurveyAlias] | None = None,
    **kwargs,
) -> ResolvedSurvey:
    """Resolve ``survey`` with a default :class:`SurveyResolver`."""
    return SurveyResolver().resolve(survey, start_position, aliases, **kwargs)
