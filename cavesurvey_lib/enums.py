# -*- coding: utf-8 -*-
"""Enumerations for cave survey data.

This module contains the enumerations used by the survey input records,
the resolved station model and the diagnostics attached to them.
"""

from enum import Enum


class ShotType(str, Enum):
    """Kind of a survey shot.

    Attributes:
        CENTER: Centerline shot along the main surveyed passage
        SPLAY: Side measurement to a wall point, ends in a leaf station
        AUXILIARY: Helper shot that is not part of the centerline
    """

    CENTER = "center"
    SPLAY = "splay"
    AUXILIARY = "auxiliary"

    @property
    def station_type(self) -> "StationType":
        """Station type given to stations created by this kind of shot."""
        return StationType(self.value)


class StationType(str, Enum):
    """Kind of a resolved station.

    Attributes:
        CENTER: Centerline station
        SPLAY: Leaf station at the end of a splay shot
        AUXILIARY: Station created by an auxiliary shot
        SURFACE: Station measured on the surface (GPS / total station)
    """

    CENTER = "center"
    SPLAY = "splay"
    AUXILIARY = "auxiliary"
    SURFACE = "surface"


class CoordinateSystemType(str, Enum):
    """Projected coordinate systems supported for geo-referencing.

    Attributes:
        EOV: Hungarian national grid (HD72 / EOV)
        UTM: Universal Transverse Mercator on WGS84
    """

    EOV = "eov"
    UTM = "utm"


class Severity(str, Enum):
    """Severity level of a diagnostic.

    Attributes:
        ERROR: The affected shot / station is missing from the geometry
        WARNING: The geometry exists but needs user attention
        INFO: Informational message
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticKind(str, Enum):
    """Category of a diagnostic raised while resolving a cave.

    Attributes:
        INVALID_SHOT: Non-finite or out-of-range shot measurement
        ORPHAN_SHOT: Shot unreachable from the survey start
        ISOLATED_SURVEY: Survey start not found in the previous surveys
        AMBIGUOUS_STATION: Station name defined by two unrelated surveys
        GEO_REFERENCE: Projected / WGS84 coordinates could not be computed
        ATTRIBUTE_SCOPE: Section / component attribute no longer resolvable
        LOOP_CLOSURE: Cycle path cannot be mapped back onto shots
        CONFIGURATION: Structurally invalid cave configuration
    """

    INVALID_SHOT = "invalid_shot"
    ORPHAN_SHOT = "orphan_shot"
    ISOLATED_SURVEY = "isolated_survey"
    AMBIGUOUS_STATION = "ambiguous_station"
    GEO_REFERENCE = "geo_reference"
    ATTRIBUTE_SCOPE = "attribute_scope"
    LOOP_CLOSURE = "loop_closure"
    CONFIGURATION = "configuration"

    @property
    def default_severity(self) -> Severity:
        """Severity used when a diagnostic of this kind is recorded."""
        if self in (DiagnosticKind.ISOLATED_SURVEY, DiagnosticKind.GEO_REFERENCE):
            return Severity.WARNING
        return Severity.ERROR


class ParameterType(str, Enum):
    """Value type of an attribute parameter.

    Attributes:
        INT: Whole number, optionally restricted to a set of values
        FLOAT: Finite real number, optionally bounded
        STRING: Free text, optionally restricted to a set of values
    """

    INT = "int"
    FLOAT = "float"
    STRING = "string"
