# -*- coding: utf-8 -*-
"""Station graph of a resolved cave and the queries run against it.

Usage::

    from cavesurvey_lib.graph import GraphAnalyzer, build_graph

    analyzer = GraphAnalyzer(build_graph(resolved))
    for cycle in analyzer.cycles:
        print(cycle.id, cycle.path, cycle.distance)

    section = analyzer.shortest_path("A", "C")
"""

from cavesurvey_lib.graph.analyzer import GraphAnalyzer
from cavesurvey_lib.graph.analyzer import component
from cavesurvey_lib.graph.analyzer import find_cycles
from cavesurvey_lib.graph.analyzer import shortest_path
from cavesurvey_lib.graph.analyzer import traverse_distances
from cavesurvey_lib.graph.builder import build_graph
from cavesurvey_lib.graph.models import Component
from cavesurvey_lib.graph.models import Cycle
from cavesurvey_lib.graph.models import Edge
from cavesurvey_lib.graph.models import Section
from cavesurvey_lib.graph.models import StationGraph

__all__ = [
    "Component",
    "Cycle",
    "Edge",
    "GraphAnalyzer",
    "Section",
    "StationGraph",
    "build_graph",
    "component",
    "find_cycles",
    "shortest_path",
    "traverse_distances",
]
