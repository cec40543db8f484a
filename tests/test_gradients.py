# -*- coding: utf-8 -*-
"""Tests for per-station color gradients."""

import pytest

from cavesurvey_lib.cave import CaveAggregator
from cavesurvey_lib.geometry import Color
from cavesurvey_lib.geometry import GradientStop
from cavesurvey_lib.gradients import DEFAULT_STOPS
from cavesurvey_lib.gradients import colors_by_depth
from cavesurvey_lib.gradients import colors_by_distance
from cavesurvey_lib.gradients import shot_colors
from cavesurvey_lib.graph import build_graph
from cavesurvey_lib.models import Cave
from cavesurvey_lib.models import Shot
from cavesurvey_lib.models import Survey

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
BLACK_TO_WHITE = [GradientStop(0.0, BLACK), GradientStop(100.0, WHITE)]


def _make_vertical_cave() -> Cave:
    """A at 0 m, B at -10 m, C at -20 m, D at -5 m."""
    shots = [
        Shot(id=0, from_station="A", to_station="B", length=10, azimuth=0, clino=-90),
        Shot(id=1, from_station="B", to_station="C", length=10, azimuth=0, clino=-90),
        Shot(id=2, from_station="A", to_station="D", length=5, azimuth=0, clino=-90),
    ]
    return Cave(name="Shaft", surveys=[Survey(name="S1", shots=shots)])


class TestColorsByDepth:
    """Tests for colors_by_depth."""

    def test_relative_depth(self):
        resolved = CaveAggregator().recalculate(_make_vertical_cave())
        colors = colors_by_depth(resolved, BLACK_TO_WHITE)
        assert colors["A"] == BLACK
        assert colors["C"] == WHITE
        assert colors["B"].as_tuple() == pytest.approx((0.5, 0.5, 0.5))
        assert colors["D"].as_tuple() == pytest.approx((0.25, 0.25, 0.25))

    def test_default_stops(self):
        resolved = CaveAggregator().recalculate(_make_vertical_cave())
        colors = colors_by_depth(resolved)
        assert colors["A"] == DEFAULT_STOPS[0].color
        assert colors["B"] == DEFAULT_STOPS[1].color
        assert colors["C"] == DEFAULT_STOPS[2].color

    def test_unsorted_stops_are_sorted(self):
        resolved = CaveAggregator().recalculate(_make_vertical_cave())
        colors = colors_by_depth(resolved, list(reversed(BLACK_TO_WHITE)))
        assert colors["A"] == BLACK

    def test_flat_cave(self, abc_cave):
        """Test that a cave without vertical extent gets the first color."""
        resolved = CaveAggregator().recalculate(abc_cave)
        colors = colors_by_depth(resolved, BLACK_TO_WHITE)
        assert set(colors) == {"A", "B", "C"}
        assert all(c == BLACK for c in colors.values())


class TestColorsByDistance:
    """Tests for colors_by_distance."""

    def test_relative_distance(self, abc_cave):
        resolved = CaveAggregator().recalculate(abc_cave)
        colors = colors_by_distance(build_graph(resolved), "A", BLACK_TO_WHITE)
        assert colors["A"] == BLACK
        assert colors["C"] == WHITE
        assert colors["B"].as_tuple() == pytest.approx((10 / 15, 10 / 15, 10 / 15))

    def test_unknown_start(self, abc_cave):
        resolved = CaveAggregator().recalculate(abc_cave)
        assert colors_by_distance(build_graph(resolved), "nope") == {}

    def test_unreachable_stations_left_out(self, abc_survey):
        isolated = Survey(
            name="S2",
            shots=[Shot(id=0, from_station="X", to_station="Y", length=3, azimuth=0)],
        )
        resolved = CaveAggregator().recalculate(
            Cave(name="C", surveys=[abc_survey, isolated])
        )
        colors = colors_by_distance(build_graph(resolved), "A", BLACK_TO_WHITE)
        assert set(colors) == {"A", "B", "C"}


class TestShotColors:
    def test_pairs(self, abc_cave):
        resolved = CaveAggregator().recalculate(abc_cave)
        station_colors = colors_by_distance(build_graph(resolved), "A", BLACK_TO_WHITE)
        pairs = shot_colors(resolved, station_colors)
        assert pairs[("S1", 0)][0] == BLACK
        assert pairs[("S1", 1)][1] == WHITE

    def test_uncolored_endpoint(self, abc_cave):
        resolved = CaveAggregator().recalculate(abc_cave)
        pairs = shot_colors(resolved, {"A": BLACK, "B": WHITE})
        assert list(pairs) == [("S1", 0)]
