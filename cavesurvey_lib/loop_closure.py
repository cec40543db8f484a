# -*- coding: utf-8 -*-
"""Loop closure analysis.

Walking a cycle and adding up the measured shot vectors should bring you
back to where you started.  The vector you end up off by is the loop's
misclosure:

    misclosure = sum(shot vectors along the loop)

A perfect loop has misclosure == ZERO.  The proportional (Bowditch) rule
spreads the misclosure over the loop's shots in proportion to their
lengths, which yields corrected shot measurements.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cavesurvey_lib.constants import LOOP_CLOSURE_ZERO_TOLERANCE
from cavesurvey_lib.errors import LoopClosureError
from cavesurvey_lib.geometry import ZERO
from cavesurvey_lib.geometry import Polar
from cavesurvey_lib.geometry import Vector3D
from cavesurvey_lib.geometry import normalize_azimuth
from cavesurvey_lib.geometry import to_polar

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cavesurvey_lib.cave.models import ResolvedCave
    from cavesurvey_lib.cave.models import TraversedShot
    from cavesurvey_lib.graph.models import Cycle
    from cavesurvey_lib.models import Cave
    from cavesurvey_lib.models import Shot

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoopLeg:
    """A shot walked as part of a loop.

    Attributes:
        traversed: The shot and the stations it connects
        forward: True when walked in the direction it was recorded
    """

    traversed: TraversedShot
    forward: bool

    @property
    def vector(self) -> Vector3D:
        """Measured displacement in walking direction."""
        v = self.traversed.vector
        return v if self.forward else -v

    @property
    def length(self) -> float:
        return self.traversed.shot.length


@dataclass(frozen=True)
class LoopClosure:
    """Misclosure of a cycle.

    Attributes:
        cycle_id: Identifier of the cycle
        misclosure: Sum of the measured vectors around the loop
        error: ``misclosure`` in polar form, zeroed below the tolerance
        total_length: Sum of the recorded shot lengths
    """

    cycle_id: str
    misclosure: Vector3D
    error: Polar
    total_length: float

    @property
    def relative_error(self) -> float:
        """Misclosure in percent of the loop length."""
        if self.total_length <= 0:
            return 0.0
        return self.error.distance / self.total_length * 100.0


@dataclass(frozen=True)
class ShotCorrection:
    """A shot adjusted to make a loop close.

    Attributes:
        survey: Name of the survey owning the shot
        original: The shot as recorded
        corrected: The shot with adjusted measurements
        diff: Change of the shot vector, in recorded direction
    """

    survey: str
    original: Shot
    corrected: Shot
    diff: Vector3D


# ---------------------------------------------------------------------------
# Loop walking
# ---------------------------------------------------------------------------


def loop_legs(cycle: Cycle, resolved: ResolvedCave) -> list[LoopLeg]:
    """Map each step of ``cycle`` back to the shot it walks along.

    Raises:
        LoopClosureError: If the path is not a closed loop, references an
            unknown station or a step has no matching shot
    """
    path = cycle.path
    if len(path) < 3 or path[0] != path[-1]:  # noqa: PLR2004
        raise LoopClosureError(f"Path of '{cycle.id}' is not a closed loop")

    missing = next((name for name in path if name not in resolved.stations), None)
    if missing is not None:
        raise LoopClosureError(f"Station '{missing}' of '{cycle.id}' does not exist")

    by_edge = {
        (t.survey, t.shot.id): t for t in resolved.traversed_shots()
    }

    legs: list[LoopLeg] = []
    for step, (from_name, to_name) in enumerate(zip(path, path[1:])):
        traversed = None
        if step < len(cycle.edges):
            edge = cycle.edges[step]
            traversed = by_edge.get((edge.survey, edge.shot_id))

        if traversed is None or {traversed.from_key, traversed.to_key} != {
            from_name,
            to_name,
        }:
            traversed = _find_shot(by_edge.values(), from_name, to_name)

        if traversed is None:
            raise LoopClosureError(
                f"No shot between '{from_name}' and '{to_name}' in '{cycle.id}'"
            )
        legs.append(LoopLeg(traversed=traversed, forward=traversed.from_key == from_name))
    return legs


def _find_shot(
    shots: Iterable[TraversedShot], from_name: str, to_name: str
) -> TraversedShot | None:
    return next(
        (
            t
            for t in shots
            if (t.from_key, t.to_key) in ((from_name, to_name), (to_name, from_name))
        ),
        None,
    )


# ---------------------------------------------------------------------------
# Misclosure
# ---------------------------------------------------------------------------


def calculate_cycle_error(cycle: Cycle, resolved: ResolvedCave) -> LoopClosure:
    """Misclosure of ``cycle`` from the measured shots."""
    legs = loop_legs(cycle, resolved)

    misclosure = ZERO
    for leg in legs:
        misclosure = misclosure + leg.vector

    polar = to_polar(misclosure)
    if polar.distance < LOOP_CLOSURE_ZERO_TOLERANCE:
        polar = Polar(polar.distance, 0.0, 0.0)

    return LoopClosure(
        cycle_id=cycle.id,
        misclosure=misclosure,
        error=polar,
        total_length=sum(leg.length for leg in legs),
    )


def _corrected_shot(traversed: TraversedShot, azimuth_correction: float, vector: Vector3D) -> Shot:
    polar = to_polar(vector)
    return traversed.shot.model_copy(
        update={
            "length": polar.distance,
            "azimuth": normalize_azimuth(polar.azimuth - azimuth_correction),
            "clino": polar.clino,
        }
    )


def propagate_error(cycle: Cycle, resolved: ResolvedCave) -> list[ShotCorrection]:
    """Distribute the misclosure of ``cycle`` with the Bowditch rule.

    Every shot of the loop receives ``-misclosure * length / total_length``.
    Returns an empty list when the loop already closes.
    """
    closure = calculate_cycle_error(cycle, resolved)
    if closure.error.distance < LOOP_CLOSURE_ZERO_TOLERANCE or closure.total_length <= 0:
        return []

    corrections: list[ShotCorrection] = []
    for leg in loop_legs(cycle, resolved):
        share = -closure.misclosure * (leg.length / closure.total_length)
        diff = share if leg.forward else -share
        traversed = leg.traversed
        survey = resolved.survey(traversed.survey)
        corrections.append(
            ShotCorrection(
                survey=traversed.survey,
                original=traversed.shot,
                corrected=_corrected_shot(
                    traversed,
                    survey.azimuth_correction if survey else 0.0,
                    traversed.vector + diff,
                ),
                diff=diff,
            )
        )

    logger.debug(
        "Cycle '%s': misclosure %.3f m over %.2f m distributed on %d shot(s)",
        cycle.id,
        closure.error.distance,
        closure.total_length,
        len(corrections),
    )
    return corrections


def find_loop_deviation_shots(
    cycle: Cycle,
    resolved: ResolvedCave,
    tolerance: float | None = None,
) -> list[ShotCorrection]:
    """Shots whose measurement disagrees with the resolved positions.

    For a shot from ``a`` to ``b`` the deviation is
    ``position(a) + shot vector - position(b)``.  Only loop-closing shots
    deviate after resolution; the corrected shot reproduces the resolved
    positions exactly.  ``tolerance`` (metres) defaults to the
    ``loop_deviation_tolerance`` the cave was recalculated with.
    """
    if tolerance is None:
        tolerance = resolved.config.loop_deviation_tolerance
    result: list[ShotCorrection] = []
    for leg in loop_legs(cycle, resolved):
        traversed = leg.traversed
        from_pos = resolved.stations[traversed.from_key].position
        to_pos = resolved.stations[traversed.to_key].position
        diff = from_pos + traversed.vector - to_pos
        if diff.length <= tolerance:
            continue

        survey = resolved.survey(traversed.survey)
        result.append(
            ShotCorrection(
                survey=traversed.survey,
                original=traversed.shot,
                corrected=_corrected_shot(
                    traversed,
                    survey.azimuth_correction if survey else 0.0,
                    traversed.vector - diff,
                ),
                diff=-diff,
            )
        )
    return result


def apply_corrections(cave: Cave, corrections: Iterable[ShotCorrection]) -> Cave:
    """Return a copy of ``cave`` with the corrected shots swapped in.

    The cave has to be recalculated afterwards.
    """
    by_survey: dict[str, dict[int, Shot]] = {}
    for correction in corrections:
        by_survey.setdefault(correction.survey, {})[correction.corrected.id] = (
            correction.corrected
        )
    if not by_survey:
        return cave

    surveys = []
    for survey in cave.surveys:
        replacements = by_survey.get(survey.name)
        if not replacements:
            surveys.append(survey)
            continue
        shots = [replacements.get(shot.id, shot) for shot in survey.shots]
        surveys.append(survey.model_copy(update={"shots": shots}))
    return cave.model_copy(update={"surveys": surveys})
