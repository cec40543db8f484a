# -*- coding: utf-8 -*-
"""Cave Survey Library.

A Python library that resolves cave survey shots into 3D station
positions, ties them to the map (EOV / UTM / WGS84) and analyses the
resulting station graph.

Usage:
    from cavesurvey_lib import CaveAggregator, GraphAnalyzer, build_graph
    from cavesurvey_lib import load_cave

    cave = load_cave(Path("cave.json"))
    resolved = CaveAggregator().recalculate(cave)

    for name, station in resolved.stations.items():
        print(name, station.position, station.wgs84)

    for diagnostic in resolved.all_diagnostics:
        print(diagnostic)

    analyzer = GraphAnalyzer(build_graph(resolved))
    for cycle in analyzer.cycles:
        closure = calculate_cycle_error(cycle, resolved)
        print(cycle.id, closure.error.distance)
"""

__version__ = "0.1.0"

from cavesurvey_lib.attributes import Attribute
from cavesurvey_lib.attributes import AttributeCatalog
from cavesurvey_lib.attributes import AttributeDefinition
from cavesurvey_lib.attributes import ComponentAttribute
from cavesurvey_lib.attributes import FloatParam
from cavesurvey_lib.attributes import IntParam
from cavesurvey_lib.attributes import SectionAttribute
from cavesurvey_lib.attributes import StringParam
from cavesurvey_lib.attributes import scope_attributes
from cavesurvey_lib.attributes import validate_param_value
from cavesurvey_lib.cave.aggregator import CaveAggregator
from cavesurvey_lib.cave.aggregator import recalculate
from cavesurvey_lib.cave.models import CaveRecalculated
from cavesurvey_lib.cave.models import CaveStats
from cavesurvey_lib.cave.models import ResolvedCave
from cavesurvey_lib.config import DEFAULT_CONFIG
from cavesurvey_lib.config import RecalculationConfig
from cavesurvey_lib.constants import JSON_ENCODING
from cavesurvey_lib.coordinates import CoordinateSystemConverter

# Enums
from cavesurvey_lib.enums import CoordinateSystemType
from cavesurvey_lib.enums import DiagnosticKind
from cavesurvey_lib.enums import ParameterType
from cavesurvey_lib.enums import Severity
from cavesurvey_lib.enums import ShotType
from cavesurvey_lib.enums import StationType
from cavesurvey_lib.errors import CaveSurveyError
from cavesurvey_lib.errors import CyclicAliasError
from cavesurvey_lib.errors import Diagnostic
from cavesurvey_lib.errors import EmptyCaveError
from cavesurvey_lib.errors import FatalConfigurationError
from cavesurvey_lib.errors import InvalidCoordinateError
from cavesurvey_lib.errors import LoopClosureError
from cavesurvey_lib.errors import NoGeoReferenceError
from cavesurvey_lib.geo_utils import DeclinationCache
from cavesurvey_lib.geo_utils import GeoLocation
from cavesurvey_lib.geo_utils import IGRFDeclinationProvider
from cavesurvey_lib.geojson import resolved_cave_to_geojson
from cavesurvey_lib.geojson import write_geojson
from cavesurvey_lib.geometry import ZERO
from cavesurvey_lib.geometry import Color
from cavesurvey_lib.geometry import GradientStop
from cavesurvey_lib.geometry import Polar
from cavesurvey_lib.geometry import Vector3D
from cavesurvey_lib.geometry import from_polar
from cavesurvey_lib.geometry import strike_dip
from cavesurvey_lib.geometry import to_polar
from cavesurvey_lib.gradients import colors_by_depth
from cavesurvey_lib.gradients import colors_by_distance
from cavesurvey_lib.graph import GraphAnalyzer
from cavesurvey_lib.graph import StationGraph
from cavesurvey_lib.graph import build_graph
from cavesurvey_lib.io import diagnostics_summary
from cavesurvey_lib.io import load_cave
from cavesurvey_lib.io import save_cave
from cavesurvey_lib.io import station_map
from cavesurvey_lib.loop_closure import calculate_cycle_error
from cavesurvey_lib.loop_closure import find_loop_deviation_shots
from cavesurvey_lib.loop_closure import propagate_error
from cavesurvey_lib.models import Cave
from cavesurvey_lib.models import CoordinateSystem
from cavesurvey_lib.models import EOVCoordinate
from cavesurvey_lib.models import FixPoint
from cavesurvey_lib.models import GeoData
from cavesurvey_lib.models import Shot
from cavesurvey_lib.models import Survey
from cavesurvey_lib.models import SurveyAlias
from cavesurvey_lib.models import SurveyMetadata
from cavesurvey_lib.models import UTMCoordinate
from cavesurvey_lib.survey import ResolvedSurvey
from cavesurvey_lib.survey import Station
from cavesurvey_lib.survey import SurveyResolver

__all__ = [
    "DEFAULT_CONFIG",
    # Constants
    "JSON_ENCODING",
    "ZERO",
    # Attributes
    "Attribute",
    "AttributeCatalog",
    "AttributeDefinition",
    # Input Models
    "Cave",
    # Resolution
    "CaveAggregator",
    "CaveRecalculated",
    "CaveStats",
    # Errors
    "CaveSurveyError",
    # Geometry
    "Color",
    "ComponentAttribute",
    "CoordinateSystem",
    # Coordinates
    "CoordinateSystemConverter",
    # Enums
    "CoordinateSystemType",
    "CyclicAliasError",
    "DeclinationCache",
    "Diagnostic",
    "DiagnosticKind",
    "EOVCoordinate",
    "EmptyCaveError",
    "FatalConfigurationError",
    "FixPoint",
    "FloatParam",
    "GeoData",
    "GeoLocation",
    "GradientStop",
    # Graph
    "GraphAnalyzer",
    "IGRFDeclinationProvider",
    "IntParam",
    "InvalidCoordinateError",
    "LoopClosureError",
    "NoGeoReferenceError",
    "ParameterType",
    "Polar",
    "RecalculationConfig",
    "ResolvedCave",
    "ResolvedSurvey",
    "SectionAttribute",
    "Severity",
    "Shot",
    "ShotType",
    "Station",
    "StationGraph",
    "StationType",
    "StringParam",
    "Survey",
    "SurveyAlias",
    "SurveyMetadata",
    "SurveyResolver",
    "UTMCoordinate",
    "Vector3D",
    "build_graph",
    # Loop closure
    "calculate_cycle_error",
    # Gradients
    "colors_by_depth",
    "colors_by_distance",
    # I/O
    "diagnostics_summary",
    "find_loop_deviation_shots",
    "from_polar",
    "load_cave",
    "propagate_error",
    "recalculate",
    "resolved_cave_to_geojson",
    "save_cave",
    "scope_attributes",
    "station_map",
    "strike_dip",
    "to_polar",
    "validate_param_value",
    # Export
    "write_geojson",
]
