# -*- coding: utf-8 -*-
"""Tests for the station graph and its queries."""

import math

import pytest

from cavesurvey_lib.cave import CaveAggregator
from cavesurvey_lib.config import RecalculationConfig
from cavesurvey_lib.geometry import Vector3D
from cavesurvey_lib.graph import GraphAnalyzer
from cavesurvey_lib.graph import StationGraph
from cavesurvey_lib.graph import build_graph
from cavesurvey_lib.graph import component
from cavesurvey_lib.graph import find_cycles
from cavesurvey_lib.graph import shortest_path
from cavesurvey_lib.graph import traverse_distances
from cavesurvey_lib.graph.models import Cycle
from cavesurvey_lib.graph.models import Section
from cavesurvey_lib.models import Cave
from cavesurvey_lib.models import Shot
from cavesurvey_lib.models import Survey


def _make_graph(edges) -> StationGraph:
    """Build a graph from ``(from, to, weight)`` triples."""
    graph = StationGraph()
    for from_station, to_station, _ in edges:
        for name in (from_station, to_station):
            if not graph.has_vertex(name):
                graph.add_vertex(name, Vector3D(0.0, 0.0, 0.0))
    for i, (from_station, to_station, weight) in enumerate(edges):
        graph.add_edge(from_station, to_station, weight, shot_id=i, survey="S1")
    return graph


def _check_cycle(cycle: Cycle, graph: StationGraph) -> None:
    assert cycle.path[0] == cycle.path[-1]
    interior = cycle.path[:-1]
    assert len(set(interior)) == len(interior)
    assert len(cycle.edges) == len(cycle.path) - 1
    for edge, (a, b) in zip(cycle.edges, zip(cycle.path, cycle.path[1:])):
        assert {edge.from_station, edge.to_station} == {a, b}
    assert cycle.distance == pytest.approx(sum(e.weight for e in cycle.edges))
    assert cycle.is_valid(graph.vertices)


# ---------------------------------------------------------------------------
# StationGraph
# ---------------------------------------------------------------------------


class TestStationGraph:
    """Tests for the graph structure."""

    def test_add_edge_unknown_vertex(self):
        graph = StationGraph()
        graph.add_vertex("A", Vector3D(0.0, 0.0, 0.0))
        with pytest.raises(KeyError, match="Unknown station"):
            graph.add_edge("A", "B", 1.0)

    def test_parallel_edges(self):
        graph = _make_graph([("A", "B", 1.0), ("A", "B", 1.5)])
        assert len(graph.edges_between("A", "B")) == 2
        assert graph.neighbours("A") == ["B", "B"]
        assert len(graph) == 2

    def test_other(self):
        graph = _make_graph([("A", "B", 1.0)])
        edge = graph.edges[0]
        assert edge.other("A") == "B"
        assert edge.other("B") == "A"


class TestBuildGraph:
    """Tests for building the graph of a resolved cave."""

    def test_loop_cave(self, loop_cave):
        graph = build_graph(CaveAggregator().recalculate(loop_cave))
        assert list(graph.vertices) == ["A", "B", "C"]
        assert len(graph.edges) == 3
        closing = graph.edges[2]
        assert (closing.from_station, closing.to_station) == ("C", "A")
        assert closing.weight == pytest.approx(math.sqrt(125.0))
        assert closing.shot_id == 2
        assert closing.survey == "S1"

    def test_splays(self):
        survey = Survey(
            name="S1",
            shots=[
                Shot(id=0, from_station="A", to_station="B", length=10, azimuth=90),
                Shot(id=1, type="splay", from_station="B", length=2, azimuth=0),
            ],
        )
        resolved = CaveAggregator().recalculate(Cave(name="C", surveys=[survey]))
        assert len(build_graph(resolved)) == 2
        with_splays = build_graph(resolved, include_splays=True)
        assert len(with_splays) == 3
        assert len(with_splays.edges) == 2

    def test_splays_from_config(self):
        """Test that the recalculation settings choose whether splays are kept."""
        survey = Survey(
            name="S1",
            shots=[
                Shot(id=0, from_station="A", to_station="B", length=10, azimuth=90),
                Shot(id=1, type="splay", from_station="B", length=2, azimuth=0),
            ],
        )
        config = RecalculationConfig(include_splays_in_graph=True)
        resolved = CaveAggregator(config).recalculate(Cave(name="C", surveys=[survey]))
        assert resolved.config is config
        assert len(build_graph(resolved)) == 3
        assert len(build_graph(resolved, include_splays=False)) == 2


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------


class TestCycles:
    """Tests for the fundamental cycle search."""

    def test_tree_has_no_cycles(self):
        graph = _make_graph([("A", "B", 1.0), ("B", "C", 1.0), ("B", "D", 1.0)])
        assert find_cycles(graph) == []

    def test_triangle(self, loop_cave):
        graph = build_graph(CaveAggregator().recalculate(loop_cave))
        (cycle,) = find_cycles(graph)
        assert cycle.path == ["A", "B", "C", "A"]
        assert [e.index for e in cycle.edges] == [0, 1, 2]
        assert cycle.distance == pytest.approx(10.0 + 5.0 + math.sqrt(125.0))
        _check_cycle(cycle, graph)

    def test_parallel_edges_form_a_cycle(self):
        graph = _make_graph([("A", "B", 1.0), ("A", "B", 1.5)])
        (cycle,) = find_cycles(graph)
        assert cycle.path == ["A", "B", "A"]
        assert cycle.distance == pytest.approx(2.5)

    def test_two_loops(self):
        """Test that each non-tree edge closes exactly one loop."""
        graph = _make_graph(
            [
                ("A", "B", 1.0),
                ("B", "C", 1.0),
                ("C", "A", 1.0),
                ("C", "D", 1.0),
                ("D", "E", 1.0),
                ("E", "C", 1.0),
            ]
        )
        cycles = find_cycles(graph)
        assert len(cycles) == len(graph.edges) - len(graph) + 1
        assert len({c.id for c in cycles}) == len(cycles)
        for cycle in cycles:
            _check_cycle(cycle, graph)

    def test_disconnected_parts(self):
        graph = _make_graph(
            [
                ("A", "B", 1.0),
                ("B", "C", 1.0),
                ("C", "A", 1.0),
                ("X", "Y", 1.0),
                ("Y", "Z", 1.0),
                ("Z", "X", 1.0),
            ]
        )
        cycles = find_cycles(graph)
        assert len(cycles) == 2
        parts = [set(c.path) for c in cycles]
        assert {"A", "B", "C"} in parts
        assert {"X", "Y", "Z"} in parts

    def test_deterministic(self, loop_cave):
        graph = build_graph(CaveAggregator().recalculate(loop_cave))
        first = [(c.id, c.path) for c in find_cycles(graph)]
        second = [(c.id, c.path) for c in find_cycles(graph)]
        assert first == second


# ---------------------------------------------------------------------------
# Shortest paths
# ---------------------------------------------------------------------------


class TestShortestPath:
    """Tests for Dijkstra shortest paths."""

    @pytest.fixture
    def diamond(self) -> StationGraph:
        return _make_graph(
            [
                ("A", "B", 1.0),
                ("B", "D", 5.0),
                ("A", "C", 2.0),
                ("C", "D", 1.0),
            ]
        )

    def test_shortest(self, diamond):
        section = shortest_path(diamond, "A", "D")
        assert section.path == ["A", "C", "D"]
        assert section.distance == pytest.approx(3.0)
        assert [e.index for e in section.edges] == [2, 3]
        assert section.is_valid(diamond.vertices)

    def test_undirected(self, diamond):
        section = shortest_path(diamond, "D", "A")
        assert section.path == ["D", "C", "A"]

    def test_triangle_inequality(self, diamond):
        ab = shortest_path(diamond, "A", "B").distance
        bd = shortest_path(diamond, "B", "D").distance
        ad = shortest_path(diamond, "A", "D").distance
        assert ad <= ab + bd

    def test_no_path(self):
        graph = _make_graph([("A", "B", 1.0), ("X", "Y", 1.0)])
        assert shortest_path(graph, "A", "Y") is None

    def test_unknown_station(self, diamond):
        assert shortest_path(diamond, "A", "nope") is None

    def test_traverse_distances(self, diamond):
        distances = traverse_distances(diamond, "A")
        assert distances == pytest.approx({"A": 0.0, "B": 1.0, "C": 2.0, "D": 3.0})
        assert traverse_distances(diamond, "nope") == {}


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


class TestComponent:
    """Tests for the bounded breadth-first search."""

    @pytest.fixture
    def chain(self) -> StationGraph:
        return _make_graph(
            [("A", "B", 1.0), ("B", "C", 2.0), ("C", "D", 3.0), ("B", "E", 4.0)]
        )

    def test_whole_graph(self, chain):
        result = component(chain, "A")
        assert result.path == ["A", "B", "C", "E", "D"]
        assert result.distance == pytest.approx(10.0)

    def test_terminations(self, chain):
        """Test that a termination is included but not expanded."""
        result = component(chain, "A", ["C"])
        assert result.path == ["A", "B", "C", "E"]
        assert "D" not in result
        assert result.distance == pytest.approx(7.0)
        assert result.terminations == ["C"]
        assert result.is_valid(chain.vertices)

    def test_start_is_expanded(self, chain):
        result = component(chain, "B", ["B", "A"])
        assert set(result.path) == {"A", "B", "C", "D", "E"}

    def test_unknown_start(self, chain):
        result = component(chain, "nope")
        assert result.is_empty
        assert result.edges == []


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------


class TestGraphAnalyzer:
    """Tests for the GraphAnalyzer facade."""

    def test_cycles_are_cached(self, loop_cave):
        analyzer = GraphAnalyzer(build_graph(CaveAggregator().recalculate(loop_cave)))
        assert analyzer.cycles is analyzer.cycles
        assert len(analyzer.cycles) == 1

    def test_queries(self, loop_cave):
        analyzer = GraphAnalyzer(build_graph(CaveAggregator().recalculate(loop_cave)))
        assert analyzer.shortest_path("A", "C").path == ["A", "C"]
        assert analyzer.component("A").path == ["A", "B", "C"]
        assert analyzer.traverse_distances("B")["B"] == 0.0


class TestValidation:
    """Tests for the validate() methods of the query results."""

    def test_cycle_not_closed(self):
        cycle = Cycle(id="c", path=["A", "B", "C"], distance=3.0)
        errors = cycle.validate({"A": 1, "B": 1, "C": 1})
        assert "Cycle does not end at its first station" in errors

    def test_cycle_unknown_station(self):
        cycle = Cycle(id="c", path=["A", "Z", "A"], distance=3.0)
        assert "Station 'Z' does not exist" in cycle.validate({"A": 1})

    def test_section_same_endpoints(self):
        section = Section(from_station="A", to_station="A", path=["A"], distance=1.0)
        errors = section.validate({"A": 1})
        assert "From and to station are the same: 'A'" in errors

    def test_zero_distance(self):
        section = Section(from_station="A", to_station="B", path=["A", "B"], distance=0.0)
        assert "Distance must be greater than zero" in section.validate({"A": 1, "B": 1})
