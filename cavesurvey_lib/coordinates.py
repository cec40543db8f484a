# -*- coding: utf-8 -*-
"""Conversion between local, projected (EOV / UTM) and WGS84 coordinates.

Local coordinates are the metric (east, north, up) frame the survey is
resolved in.  A fix point ties one local position to a projected coordinate;
because both frames are metric and grid aligned, converting between them is
a translation.  Projected <-> WGS84 goes through pyproj.

Meridian convergence is the angle between grid north and true north at a
point.  Surveys add it to their recorded azimuths together with the magnetic
declination, so a survey is traversed with ``azimuth + declination +
convergence``.
"""

from __future__ import annotations

import logging
import math

import utm
from pydantic import ValidationError
from pyproj import Transformer
from pyproj.enums import TransformDirection
from pyproj.exceptions import ProjError

from cavesurvey_lib.constants import EOV_CENTER_LATITUDE_RAD
from cavesurvey_lib.constants import EOV_EPSG
from cavesurvey_lib.constants import EOV_FALSE_EASTING
from cavesurvey_lib.constants import EOV_FALSE_NORTHING
from cavesurvey_lib.constants import EOV_GAUSS_SPHERE_RADIUS
from cavesurvey_lib.constants import UTM_NORTH_EPSG_PREFIX
from cavesurvey_lib.constants import UTM_SOUTH_EPSG_PREFIX
from cavesurvey_lib.constants import WGS84_EPSG
from cavesurvey_lib.enums import CoordinateSystemType
from cavesurvey_lib.errors import InvalidCoordinateError
from cavesurvey_lib.geo_utils import GeoLocation
from cavesurvey_lib.geometry import ZERO
from cavesurvey_lib.geometry import Vector3D
from cavesurvey_lib.geometry import degrees_to_radians
from cavesurvey_lib.geometry import radians_to_degrees
from cavesurvey_lib.models import CoordinateSystem
from cavesurvey_lib.models import EOVCoordinate
from cavesurvey_lib.models import FixPoint
from cavesurvey_lib.models import UTMCoordinate

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# pyproj transformers
# -----------------------------------------------------------------------------


def crs_for(system: CoordinateSystem) -> str:
    """Return the EPSG code of a projected coordinate system."""
    if system.type == CoordinateSystemType.EOV:
        return EOV_EPSG

    if system.zone is None:
        raise InvalidCoordinateError("UTM coordinate system without a zone")
    prefix = UTM_NORTH_EPSG_PREFIX if system.northern else UTM_SOUTH_EPSG_PREFIX
    return f"EPSG:{prefix + system.zone}"


# Cache for pyproj transformers (source CRS -> transformer)
_transformer_cache: dict[str, Transformer] = {}


def _get_transformer(source_crs: str) -> Transformer:
    """Get or create a cached transformer from ``source_crs`` to WGS84.

    The same transformer serves both directions so that a forward and an
    inverse conversion use the same operation.
    """
    if source_crs not in _transformer_cache:
        logger.debug("Creating transformer %s -> %s", source_crs, WGS84_EPSG)
        _transformer_cache[source_crs] = Transformer.from_crs(
            source_crs,
            WGS84_EPSG,
            always_xy=True,
        )
    return _transformer_cache[source_crs]


# -----------------------------------------------------------------------------
# Meridian convergence
# -----------------------------------------------------------------------------


def eov_convergence(y: float, x: float) -> float:
    """Meridian convergence at an EOV coordinate, in degrees.

    Args:
        y: EOV easting
        x: EOV northing
    """
    dx = (x - EOV_FALSE_NORTHING) / EOV_GAUSS_SPHERE_RADIUS
    dy = (y - EOV_FALSE_EASTING) / EOV_GAUSS_SPHERE_RADIUS
    gamma = math.atan(
        (math.cosh(dx) * math.sin(dy))
        / (1.0 / math.tan(EOV_CENTER_LATITUDE_RAD) - math.sinh(dx) * math.cos(dy))
    )
    return radians_to_degrees(gamma)


def utm_central_meridian(zone: int) -> float:
    return 6.0 * zone - 183.0


def utm_convergence(
    easting: float, northing: float, zone: int, northern: bool = True
) -> float:
    """Meridian convergence at a UTM coordinate, in degrees.

    Uses the spherical approximation ``atan(tan(λ - λ0) · sin(φ))`` which
    is accurate to a few arc-seconds inside a zone.
    """
    try:
        latitude, longitude = utm.to_latlon(easting, northing, zone, northern=northern)
    except utm.OutOfRangeError as e:
        raise InvalidCoordinateError(
            f"UTM coordinate ({easting}, {northing}) zone {zone} is out of range"
        ) from e

    phi = degrees_to_radians(latitude)
    dlam = degrees_to_radians(longitude - utm_central_meridian(zone))
    return radians_to_degrees(math.atan(math.tan(dlam) * math.sin(phi)))


# -----------------------------------------------------------------------------
# Converter
# -----------------------------------------------------------------------------


class CoordinateSystemConverter:
    """Converts between local, projected and WGS84 coordinates."""

    # -- local <-> projected ---------------------------------------------------

    def to_projected(
        self,
        local_pos: Vector3D,
        fix_point: FixPoint,
        local_origin: Vector3D = ZERO,
    ) -> EOVCoordinate | UTMCoordinate:
        """Projected coordinate of a local position.

        Args:
            local_pos: Position in the local frame
            fix_point: Fix point whose station sits at ``local_origin``
            local_origin: Local position of the fix point's station

        Returns:
            Coordinate in the fix point's projected system
        """
        return fix_point.coordinate.add_vector(local_pos - local_origin)

    def to_local(
        self,
        projected: EOVCoordinate | UTMCoordinate,
        fix_point: FixPoint,
        local_origin: Vector3D = ZERO,
    ) -> Vector3D:
        """Inverse of :meth:`to_projected`."""
        if type(projected) is not type(fix_point.coordinate):
            raise InvalidCoordinateError(
                f"Cannot mix {projected.system.upper()} and "
                f"{fix_point.coordinate.system.upper()} coordinates"
            )
        return local_origin + projected.difference(fix_point.coordinate)  # type: ignore[arg-type]

    # -- projected <-> WGS84 ---------------------------------------------------

    def to_wgs84(
        self,
        projected: EOVCoordinate | UTMCoordinate,
        system: CoordinateSystem,
    ) -> GeoLocation:
        """Convert a projected coordinate to WGS84.

        Raises:
            InvalidCoordinateError: If the coordinate does not belong to
                ``system`` or the conversion fails
        """
        if not system.accepts(projected):
            raise InvalidCoordinateError(
                f"{projected.system.upper()} coordinate is not expressed in {system}"
            )

        transformer = _get_transformer(crs_for(system))
        try:
            longitude, latitude = transformer.transform(
                projected.easting, projected.northing, errcheck=True
            )
            return GeoLocation(latitude=latitude, longitude=longitude)
        except (ProjError, ValidationError) as e:
            raise InvalidCoordinateError(
                f"Failed to convert ({projected.easting:.2f}, "
                f"{projected.northing:.2f}) from {system} to WGS84"
            ) from e

    def from_wgs84(
        self,
        location: GeoLocation,
        system: CoordinateSystem,
        elevation: float = 0.0,
    ) -> EOVCoordinate | UTMCoordinate:
        """Convert a WGS84 location into ``system``."""
        transformer = _get_transformer(crs_for(system))
        try:
            easting, northing = transformer.transform(
                location.longitude,
                location.latitude,
                errcheck=True,
                direction=TransformDirection.INVERSE,
            )
        except ProjError as e:
            raise InvalidCoordinateError(
                f"Failed to convert ({location.latitude:.6f}, "
                f"{location.longitude:.6f}) from WGS84 to {system}"
            ) from e

        if system.type == CoordinateSystemType.EOV:
            return EOVCoordinate(y=easting, x=northing, elevation=elevation)
        return UTMCoordinate(
            easting=easting,
            northing=northing,
            elevation=elevation,
            zone=system.zone,
            northern=system.northern,
        )

    # -- convergence -----------------------------------------------------------

    def meridian_convergence(
        self,
        coordinate: EOVCoordinate | UTMCoordinate,
        system: CoordinateSystem,
    ) -> float:
        """Angle between grid north and true north at ``coordinate`` (degrees)."""
        if not system.accepts(coordinate):
            raise InvalidCoordinateError(
                f"{coordinate.system.upper()} coordinate is not expressed in {system}"
            )

        if isinstance(coordinate, EOVCoordinate):
            return eov_convergence(coordinate.y, coordinate.x)
        return utm_convergence(
            coordinate.easting,
            coordinate.northing,
            coordinate.zone,
            northern=coordinate.northern,
        )

    @staticmethod
    def utm_system_for(location: GeoLocation) -> CoordinateSystem:
        """UTM coordinate system whose zone contains ``location``."""
        zone = utm.latlon_to_zone_number(location.latitude, location.longitude)
        return CoordinateSystem.utm(zone, northern=location.latitude >= 0)
