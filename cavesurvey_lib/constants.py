# -*- coding: utf-8 -*-
"""Constants used throughout the cavesurvey_lib library.

This module centralizes all constant values to ensure consistency
and avoid magic numbers/strings scattered across the codebase.
"""

# -----------------------------------------------------------------------------
# File Encodings
# -----------------------------------------------------------------------------

#: Encoding used for JSON files
JSON_ENCODING = "utf-8"

# -----------------------------------------------------------------------------
# Shot Validation
# -----------------------------------------------------------------------------

#: Inclination limits in degrees (inclusive)
MIN_CLINO: float = -90.0
MAX_CLINO: float = 90.0

#: Azimuth limits in degrees (inclusive). Negative bearings are tolerated
#: because some instruments export them before normalization.
MIN_AZIMUTH: float = -360.0
MAX_AZIMUTH: float = 360.0

# -----------------------------------------------------------------------------
# Station Naming
# -----------------------------------------------------------------------------

#: Template for the leaf station created at the end of a splay shot
SPLAY_NAME_TEMPLATE: str = "splay-{id}@{survey}"

#: Separator between a station name and its owning survey in qualified keys
SURVEY_QUALIFIER: str = "@"

# -----------------------------------------------------------------------------
# Tolerances
# -----------------------------------------------------------------------------

#: Loop closure errors shorter than this are reported as zero (meters)
LOOP_CLOSURE_ZERO_TOLERANCE: float = 0.0001

#: Per-shot corrections above this are reported as deviation shots (meters)
LOOP_DEVIATION_TOLERANCE: float = 0.01

#: Round trip tolerance guaranteed by the coordinate converter (meters)
ROUND_TRIP_TOLERANCE: float = 1e-3

# -----------------------------------------------------------------------------
# Coordinate Reference Systems
# -----------------------------------------------------------------------------

#: Geographic WGS84 coordinate reference system
WGS84_EPSG: str = "EPSG:4326"

#: Hungarian national grid (Egységes Országos Vetület, HD72 / EOV)
EOV_EPSG: str = "EPSG:23700"

#: Prefix of WGS84 / UTM north zones, the zone number is appended (EPSG:326zz)
UTM_NORTH_EPSG_PREFIX: int = 32600

#: Prefix of WGS84 / UTM south zones, the zone number is appended (EPSG:327zz)
UTM_SOUTH_EPSG_PREFIX: int = 32700

#: Valid EOV ranges (meters). ``y`` is the easting, ``x`` the northing.
EOV_MIN_Y: float = 400_000.0
EOV_MAX_Y: float = 950_000.0
EOV_MIN_X: float = 0.0
EOV_MAX_X: float = 400_000.0

#: EOV false easting / false northing (meters)
EOV_FALSE_EASTING: float = 650_000.0
EOV_FALSE_NORTHING: float = 200_000.0

#: Radius of the Gauss sphere used by the EOV projection (meters)
EOV_GAUSS_SPHERE_RADIUS: float = 6_379_296.41898993

#: Latitude of the EOV projection center on the Gauss sphere (radians)
EOV_CENTER_LATITUDE_RAD: float = 0.82205

#: Valid UTM ranges (meters)
UTM_MIN_EASTING: float = 100_000.0
UTM_MAX_EASTING: float = 900_000.0
UTM_MIN_NORTHING: float = 0.0
UTM_MAX_NORTHING: float = 10_000_000.0

# -----------------------------------------------------------------------------
# GeoJSON
# -----------------------------------------------------------------------------

#: Decimal precision for GeoJSON coordinates (WGS84)
GEOJSON_COORDINATE_PRECISION: int = 7

#: Decimal precision for elevation values in GeoJSON
GEOJSON_ELEVATION_PRECISION: int = 2

# -----------------------------------------------------------------------------
# Declination
# -----------------------------------------------------------------------------

#: Decimal places latitude / longitude are rounded to in declination cache keys
DECLINATION_CACHE_PRECISION: int = 2

#: Decimal places of returned declination values (degrees)
DECLINATION_PRECISION: int = 2

# -----------------------------------------------------------------------------
# Attributes
# -----------------------------------------------------------------------------

#: Separator between attribute parameters in the text form ``name(a◌̦b)``
ATTRIBUTE_PARAM_DELIMITER: str = "◌̦"

#: Separator between attributes in the text form ``a(..)|b(..)``
ATTRIBUTE_DELIMITER: str = "|"
