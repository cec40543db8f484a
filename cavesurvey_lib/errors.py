# -*- coding: utf-8 -*-
"""Error handling for cave survey resolution.

Two kinds of error objects exist:

* :class:`Diagnostic` is a data record.  Per-shot and per-survey problems
  (invalid or orphan shots, isolated surveys, ambiguous stations) are
  accumulated as diagnostics and returned alongside the resolved model.
* :class:`CaveSurveyError` and its subclasses are raised.  Only structurally
  fatal input (a cave without surveys, cyclic aliases) aborts a
  recalculation; the remaining exceptions belong to on-demand operations
  such as coordinate conversion or GeoJSON export.
"""

from __future__ import annotations

from dataclasses import dataclass

from cavesurvey_lib.enums import DiagnosticKind
from cavesurvey_lib.enums import Severity


@dataclass(frozen=True)
class Diagnostic:
    """A problem found while resolving a cave.

    This is a data record for storing error information, not an exception.

    Attributes:
        kind: Category of the problem
        severity: ERROR, WARNING or INFO
        message: Human-readable message
        survey: Name of the owning survey (optional)
        shot_id: Identifier of the affected shot (optional)
        station: Name of the affected station (optional)
    """

    kind: DiagnosticKind
    severity: Severity
    message: str
    survey: str | None = None
    shot_id: int | None = None
    station: str | None = None

    @classmethod
    def create(
        cls,
        kind: DiagnosticKind,
        message: str,
        *,
        survey: str | None = None,
        shot_id: int | None = None,
        station: str | None = None,
    ) -> Diagnostic:
        """Build a diagnostic using the default severity of ``kind``."""
        return cls(
            kind=kind,
            severity=kind.default_severity,
            message=message,
            survey=survey,
            shot_id=shot_id,
            station=station,
        )

    def __str__(self) -> str:
        """Format as human-readable diagnostic string."""
        where = []
        if self.survey is not None:
            where.append(f"survey '{self.survey}'")
        if self.shot_id is not None:
            where.append(f"shot {self.shot_id}")
        if self.station is not None:
            where.append(f"station '{self.station}'")

        base = f"{self.severity.value}: {self.message}"
        if where:
            base += f" (in {', '.join(where)})"
        return base


class CaveSurveyError(Exception):
    """Base class of every exception raised by cavesurvey_lib."""

    kind: DiagnosticKind = DiagnosticKind.CONFIGURATION

    def __init__(self, message: str, *, survey: str | None = None):
        self.message = message
        self.survey = survey
        super().__init__(str(self))

    def __str__(self) -> str:
        """Format as human-readable exception string."""
        if self.survey:
            return f"{self.message} (in survey '{self.survey}')"
        return self.message

    def to_diagnostic(self) -> Diagnostic:
        """Convert exception to a :class:`Diagnostic` record."""
        return Diagnostic(
            kind=self.kind,
            severity=Severity.ERROR,
            message=self.message,
            survey=self.survey,
        )


class FatalConfigurationError(CaveSurveyError):
    """The cave cannot be recalculated at all.

    No partial result is returned when this is raised.
    """


class EmptyCaveError(FatalConfigurationError):
    """Raised when a cave has no surveys."""


class CyclicAliasError(FatalConfigurationError):
    """Raised when station aliases refer back to themselves.

    Attributes:
        chain: The alias names forming the cycle, in order
    """

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(f"Cyclic station alias: {' -> '.join(chain)}")


class InvalidCoordinateError(CaveSurveyError):
    """Raised when a coordinate conversion fails."""

    kind = DiagnosticKind.GEO_REFERENCE


class NoGeoReferenceError(CaveSurveyError):
    """Raised when WGS84 coordinates are required but not available."""

    kind = DiagnosticKind.GEO_REFERENCE


class LoopClosureError(CaveSurveyError):
    """Raised when a cycle cannot be mapped back onto the surveyed shots."""

    kind = DiagnosticKind.LOOP_CLOSURE
