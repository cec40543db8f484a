# -*- coding: utf-8 -*-
"""Vector and trigonometry primitives.

Conventions used across the library:

* ``x`` points east, ``y`` points north and ``z`` points up.
* Azimuths are compass bearings: 0° is north, 90° is east.
* Clino (inclination) is measured from the horizontal, positive upwards.

Angles are passed around in degrees at the API boundary and converted to
radians only inside the conversion functions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import NamedTuple

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Sequence


# ---------------------------------------------------------------------------
# Vectors
# ---------------------------------------------------------------------------


class Vector3D(NamedTuple):
    """An immutable 3-D vector (east, north, up) in metres."""

    x: float
    y: float
    z: float

    def __add__(self, other: Vector3D) -> Vector3D:  # type: ignore[override]
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3D) -> Vector3D:
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3D:  # type: ignore[override]
        return Vector3D(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vector3D:
        return self.__mul__(scalar)

    def __neg__(self) -> Vector3D:
        return Vector3D(-self.x, -self.y, -self.z)

    @property
    def length(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    @property
    def horizontal_length(self) -> float:
        """Length of the projection onto the horizontal plane."""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Vector3D) -> float:
        """Euclidean distance between two points."""
        return (other - self).length

    def dot(self, other: Vector3D) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self)


ZERO = Vector3D(0.0, 0.0, 0.0)


# ---------------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------------


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


def radians_to_degrees(radians: float) -> float:
    return radians * 180.0 / math.pi


def normalize_azimuth(azimuth: float) -> float:
    """Fold an azimuth into the ``[0, 360)`` range."""
    value = math.fmod(azimuth, 360.0)
    if value < 0:
        value += 360.0
    # fmod(-1e-17, 360) + 360 rounds to exactly 360.0
    return 0.0 if value >= 360.0 else value


# ---------------------------------------------------------------------------
# Polar <-> Cartesian
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Polar:
    """A displacement expressed as a survey measurement.

    Attributes:
        distance: Slope distance in metres
        azimuth: Compass bearing in degrees, ``[0, 360)``
        clino: Inclination in degrees, ``[-90, 90]``
    """

    distance: float
    azimuth: float
    clino: float

    def to_vector(self) -> Vector3D:
        return from_polar(self.distance, self.azimuth, self.clino)


def from_polar(distance: float, azimuth: float, clino: float) -> Vector3D:
    """Convert a survey measurement into a Cartesian displacement.

    The horizontal component ``distance * cos(clino)`` is laid out along the
    compass bearing and the vertical component is ``distance * sin(clino)``.

    Args:
        distance: Slope distance
        azimuth: Compass bearing in degrees (0 = north, 90 = east)
        clino: Inclination in degrees (0 = horizontal)

    Returns:
        Displacement vector (east, north, up)
    """
    az = degrees_to_radians(azimuth)
    inc = degrees_to_radians(clino)
    horizontal = math.cos(inc) * distance
    return Vector3D(
        math.sin(az) * horizontal,
        math.cos(az) * horizontal,
        math.sin(inc) * distance,
    )


def to_polar(vector: Vector3D) -> Polar:
    """Inverse of :func:`from_polar`.

    A zero vector maps to ``Polar(0, 0, 0)``.
    """
    distance = vector.length
    if distance == 0.0:
        return Polar(0.0, 0.0, 0.0)

    azimuth = normalize_azimuth(radians_to_degrees(math.atan2(vector.x, vector.y)))
    clino = radians_to_degrees(math.asin(max(-1.0, min(1.0, vector.z / distance))))
    return Polar(distance=distance, azimuth=azimuth, clino=clino)


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Color:
    """An RGB color with channels in ``[0, 1]``."""

    r: float
    g: float
    b: float

    @classmethod
    def from_hex(cls, value: str) -> Color:
        """Parse ``#rrggbb`` (the leading ``#`` is optional)."""
        text = value.strip().lstrip("#")
        if len(text) != 6:  # noqa: PLR2004
            raise ValueError(f"Invalid hex color: `{value}`")
        try:
            r, g, b = (int(text[i : i + 2], 16) for i in (0, 2, 4))
        except ValueError as e:
            raise ValueError(f"Invalid hex color: `{value}`") from e
        return cls(r / 255.0, g / 255.0, b / 255.0)

    def hex_string(self) -> str:
        channels = (round(max(0.0, min(1.0, c)) * 255) for c in self.as_tuple())
        return "#" + "".join(f"{c:02x}" for c in channels)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class GradientStop:
    """A color anchored at a position of a gradient."""

    value: float
    color: Color


def interpolate_color(value: float, stops: Sequence[GradientStop]) -> Color:
    """Linearly interpolate ``value`` between gradient stops.

    Values below the first stop or above the last one are clamped to the
    color of that stop.

    Args:
        value: Position on the gradient
        stops: At least two stops, sorted by ``value``

    Returns:
        The interpolated color

    Raises:
        ValueError: If fewer than two stops are given or they are unsorted
    """
    if len(stops) < 2:  # noqa: PLR2004
        raise ValueError("A color gradient needs at least two stops")

    positions = np.array([s.value for s in stops], dtype=float)
    if np.any(np.diff(positions) < 0):
        raise ValueError("Gradient stops must be sorted by value")

    channels = np.array([s.color.as_tuple() for s in stops], dtype=float)
    r, g, b = (float(np.interp(value, positions, channels[:, i])) for i in range(3))
    return Color(r, g, b)


# ---------------------------------------------------------------------------
# Strike / dip
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StrikeDip:
    """Orientation of a plane.

    Attributes:
        strike: Right-hand-rule strike in degrees, ``[0, 360)``
        dip: Dip angle in degrees, ``[0, 90]``
        normal: Upward pointing unit normal of the plane
    """

    strike: float
    dip: float
    normal: Vector3D


def strike_dip(points: Iterable[Vector3D]) -> StrikeDip:
    """Fit a plane through the points and return its orientation.

    The plane is the least squares fit obtained from the singular value
    decomposition of the centered point cloud.

    Raises:
        ValueError: If fewer than three points are given or they are collinear
    """
    pts = np.array([tuple(p) for p in points], dtype=float)
    if pts.ndim != 2 or len(pts) < 3:  # noqa: PLR2004
        raise ValueError("At least three points are required to fit a plane")

    centered = pts - pts.mean(axis=0)
    _, singular, vh = np.linalg.svd(centered)
    if singular[1] <= 1e-9 * max(singular[0], 1.0):
        raise ValueError("Points are collinear, the plane is undefined")

    normal = vh[2]
    if normal[2] < 0:
        normal = -normal
    normal = normal / np.linalg.norm(normal)

    dip = radians_to_degrees(math.acos(max(-1.0, min(1.0, float(normal[2])))))
    if math.hypot(normal[0], normal[1]) < 1e-12:  # noqa: PLR2004
        # horizontal plane
        return StrikeDip(strike=0.0, dip=0.0, normal=Vector3D(0.0, 0.0, 1.0))

    dip_direction = normalize_azimuth(
        radians_to_degrees(math.atan2(float(normal[0]), float(normal[1])))
    )
    strike = normalize_azimuth(dip_direction - 90.0)
    return StrikeDip(
        strike=strike,
        dip=dip,
        normal=Vector3D(float(normal[0]), float(normal[1]), float(normal[2])),
    )
