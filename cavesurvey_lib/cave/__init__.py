# -*- coding: utf-8 -*-
"""Merging of the surveys of a cave into one station map."""

from cavesurvey_lib.cave.aggregator import CaveAggregator
from cavesurvey_lib.cave.aggregator import recalculate
from cavesurvey_lib.cave.models import CaveRecalculated
from cavesurvey_lib.cave.models import CaveStats
from cavesurvey_lib.cave.models import ResolvedCave
from cavesurvey_lib.cave.models import TraversedShot

__all__ = [
    "CaveAggregator",
    "CaveRecalculated",
    "CaveStats",
    "ResolvedCave",
    "TraversedShot",
    "recalculate",
]
