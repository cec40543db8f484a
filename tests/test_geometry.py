# -*- coding: utf-8 -*-
"""Tests for vector, polar conversion, color and strike/dip helpers."""

import math

import pytest

from cavesurvey_lib.geometry import ZERO
from cavesurvey_lib.geometry import Color
from cavesurvey_lib.geometry import GradientStop
from cavesurvey_lib.geometry import Polar
from cavesurvey_lib.geometry import Vector3D
from cavesurvey_lib.geometry import from_polar
from cavesurvey_lib.geometry import interpolate_color
from cavesurvey_lib.geometry import normalize_azimuth
from cavesurvey_lib.geometry import strike_dip
from cavesurvey_lib.geometry import to_polar

# ---------------------------------------------------------------------------
# Vector3D
# ---------------------------------------------------------------------------


class TestVector3D:
    """Tests for Vector3D arithmetic."""

    def test_add(self):
        assert Vector3D(1, 2, 3) + Vector3D(4, 5, 6) == Vector3D(5, 7, 9)

    def test_sub(self):
        assert Vector3D(4, 5, 6) - Vector3D(1, 2, 3) == Vector3D(3, 3, 3)

    def test_mul(self):
        a = Vector3D(2, 3, 4)
        assert a * 2 == Vector3D(4, 6, 8)
        assert 2 * a == Vector3D(4, 6, 8)

    def test_neg(self):
        assert -Vector3D(1, -2, 3) == Vector3D(-1, 2, -3)

    def test_length(self):
        assert Vector3D(3, 4, 12).length == pytest.approx(13.0)
        assert Vector3D(3, 4, 12).horizontal_length == pytest.approx(5.0)

    def test_distance_to(self):
        assert Vector3D(1, 1, 1).distance_to(Vector3D(4, 5, 1)) == pytest.approx(5.0)

    def test_is_finite(self):
        assert Vector3D(1, 2, 3).is_finite()
        assert not Vector3D(1, math.nan, 3).is_finite()

    def test_zero(self):
        assert Vector3D(0, 0, 0) == ZERO
        assert ZERO.length == 0.0


# ---------------------------------------------------------------------------
# Polar conversion
# ---------------------------------------------------------------------------


class TestFromPolar:
    """The compass convention: 0° is north (+y), 90° is east (+x)."""

    @pytest.mark.parametrize(
        ("azimuth", "expected"),
        [
            (0, (0, 10, 0)),
            (90, (10, 0, 0)),
            (180, (0, -10, 0)),
            (270, (-10, 0, 0)),
        ],
    )
    def test_cardinal_directions(self, azimuth, expected):
        v = from_polar(10, azimuth, 0)
        assert tuple(v) == pytest.approx(expected, abs=1e-9)

    @pytest.mark.parametrize(
        ("azimuth", "sign_x", "sign_y"),
        [(45, 1, 1), (135, 1, -1), (225, -1, -1), (315, -1, 1)],
    )
    def test_quadrants(self, azimuth, sign_x, sign_y):
        """Each quadrant maps to the matching signs of east and north."""
        v = from_polar(10, azimuth, 0)
        assert math.copysign(1, v.x) == sign_x
        assert math.copysign(1, v.y) == sign_y
        assert abs(v.x) == pytest.approx(abs(v.y), abs=1e-9)

    def test_clino_components(self):
        """dz = L·sin(C) and the horizontal part is L·cos(C)."""
        v = from_polar(20, 30, 25)
        assert v.z == pytest.approx(20 * math.sin(math.radians(25)))
        assert v.horizontal_length == pytest.approx(20 * math.cos(math.radians(25)))
        assert v.length == pytest.approx(20)

    def test_vertical_shot(self):
        v = from_polar(7, 123, 90)
        assert tuple(v) == pytest.approx((0, 0, 7), abs=1e-9)


class TestToPolar:
    """Tests for the inverse conversion."""

    def test_zero_vector(self):
        assert to_polar(ZERO) == Polar(0.0, 0.0, 0.0)

    @pytest.mark.parametrize(
        ("distance", "azimuth", "clino"),
        [(10, 0, 0), (5, 45, 10), (12.5, 200, -30), (3, 359, 60)],
    )
    def test_inverse_of_from_polar(self, distance, azimuth, clino):
        polar = to_polar(from_polar(distance, azimuth, clino))
        assert polar.distance == pytest.approx(distance)
        assert polar.azimuth == pytest.approx(azimuth)
        assert polar.clino == pytest.approx(clino)

    def test_polar_to_vector(self):
        assert tuple(Polar(10, 90, 0).to_vector()) == pytest.approx((10, 0, 0), abs=1e-9)


class TestNormalizeAzimuth:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0, 0), (360, 0), (-90, 270), (450, 90), (-360, 0), (-1e-17, 0)],
    )
    def test_normalize(self, value, expected):
        assert normalize_azimuth(value) == pytest.approx(expected)
        assert 0 <= normalize_azimuth(value) < 360


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


class TestColor:
    """Tests for Color parsing and gradient interpolation."""

    def test_from_hex(self):
        c = Color.from_hex("#ff8000")
        assert c.r == pytest.approx(1.0)
        assert c.g == pytest.approx(128 / 255)
        assert c.b == pytest.approx(0.0)

    def test_hex_roundtrip(self):
        assert Color.from_hex("12abef").hex_string() == "#12abef"

    def test_invalid_hex(self):
        with pytest.raises(ValueError, match="Invalid hex color"):
            Color.from_hex("#12345")
        with pytest.raises(ValueError, match="Invalid hex color"):
            Color.from_hex("#zzzzzz")

    def test_interpolate_midpoint(self):
        stops = [
            GradientStop(0, Color(0, 0, 0)),
            GradientStop(100, Color(1, 1, 1)),
        ]
        c = interpolate_color(25, stops)
        assert c.as_tuple() == pytest.approx((0.25, 0.25, 0.25))

    def test_interpolate_clamps(self):
        stops = [
            GradientStop(10, Color(1, 0, 0)),
            GradientStop(20, Color(0, 0, 1)),
        ]
        assert interpolate_color(-5, stops) == Color(1.0, 0.0, 0.0)
        assert interpolate_color(50, stops) == Color(0.0, 0.0, 1.0)

    def test_interpolate_between_inner_stops(self):
        stops = [
            GradientStop(0, Color(1, 0, 0)),
            GradientStop(50, Color(0, 1, 0)),
            GradientStop(100, Color(0, 0, 1)),
        ]
        c = interpolate_color(75, stops)
        assert c.as_tuple() == pytest.approx((0.0, 0.5, 0.5))

    def test_needs_two_stops(self):
        with pytest.raises(ValueError, match="at least two stops"):
            interpolate_color(0, [GradientStop(0, Color(0, 0, 0))])

    def test_unsorted_stops(self):
        stops = [
            GradientStop(100, Color(0, 0, 0)),
            GradientStop(0, Color(1, 1, 1)),
        ]
        with pytest.raises(ValueError, match="sorted"):
            interpolate_color(50, stops)


# ---------------------------------------------------------------------------
# Strike / dip
# ---------------------------------------------------------------------------


class TestStrikeDip:
    """Tests for plane fitting."""

    def test_horizontal_plane(self):
        points = [Vector3D(0, 0, 5), Vector3D(10, 0, 5), Vector3D(0, 10, 5)]
        result = strike_dip(points)
        assert result.dip == pytest.approx(0.0, abs=1e-9)
        assert tuple(result.normal) == pytest.approx((0, 0, 1), abs=1e-9)

    def test_plane_dipping_east(self):
        """z drops 1 m per metre east: dip 45° towards 90°, strike 0°."""
        points = [
            Vector3D(0, 0, 0),
            Vector3D(1, 0, -1),
            Vector3D(0, 1, 0),
            Vector3D(1, 1, -1),
        ]
        result = strike_dip(points)
        assert result.dip == pytest.approx(45.0)
        assert result.strike == pytest.approx(0.0, abs=1e-9)

    def test_plane_dipping_south(self):
        points = [Vector3D(0, 0, 0), Vector3D(0, 10, 10), Vector3D(10, 0, 0)]
        result = strike_dip(points)
        assert result.dip == pytest.approx(45.0)
        assert result.strike == pytest.approx(90.0)

    def test_too_few_points(self):
        with pytest.raises(ValueError, match="three points"):
            strike_dip([Vector3D(0, 0, 0), Vector3D(1, 1, 1)])

    def test_collinear_points(self):
        with pytest.raises(ValueError, match="collinear"):
            strike_dip([Vector3D(0, 0, 0), Vector3D(1, 1, 1), Vector3D(2, 2, 2)])
