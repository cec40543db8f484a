# -*- coding: utf-8 -*-
"""Pytest configuration and fixtures.

This module provides small, hand-built caves shared by the test modules.
"""

from __future__ import annotations

import logging
import math

import pytest

from cavesurvey_lib.config import RecalculationConfig
from cavesurvey_lib.models import Cave
from cavesurvey_lib.models import CoordinateSystem
from cavesurvey_lib.models import EOVCoordinate
from cavesurvey_lib.models import FixPoint
from cavesurvey_lib.models import GeoData
from cavesurvey_lib.models import Shot
from cavesurvey_lib.models import Survey

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


# =============================================================================
# Constants
# =============================================================================

#: EOV coordinate of the entrance of Láci-barlang
LACI_EOV = (644741.0, 255551.0)

#: Bearing from C (10, 5) back to A (0, 0)
C_TO_A_AZIMUTH = math.degrees(math.atan2(-10.0, -5.0)) % 360.0


# =============================================================================
# Builders
# =============================================================================


def _shot(shot_id, from_station, to_station, length, azimuth, clino=0.0, **kwargs):
    return Shot(
        id=shot_id,
        from_station=from_station,
        to_station=to_station,
        length=length,
        azimuth=azimuth,
        clino=clino,
        **kwargs,
    )


def _survey(name, shots, start=None, **kwargs):
    return Survey(
        name=name,
        start=start,
        shots=[_shot(i, *s) for i, s in enumerate(shots)],
        **kwargs,
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def no_geo_config() -> RecalculationConfig:
    """Config that applies neither declination nor convergence."""
    return RecalculationConfig(apply_declination=False, apply_convergence=False)


@pytest.fixture
def abc_survey() -> Survey:
    """A -> B 10 m east, B -> C 5 m north."""
    return _survey("S1", [("A", "B", 10, 90), ("B", "C", 5, 0)], start="A")


@pytest.fixture
def loop_survey() -> Survey:
    """The A -> B -> C survey closed by a C -> A shot."""
    return _survey(
        "S1",
        [("A", "B", 10, 90), ("B", "C", 5, 0), ("C", "A", 11.18, 225)],
        start="A",
    )


@pytest.fixture
def short_loop_survey() -> Survey:
    """A loop whose closing shot is measured 18 cm too short."""
    return _survey(
        "S1",
        [("A", "B", 10, 90), ("B", "C", 5, 0), ("C", "A", 11.0, C_TO_A_AZIMUTH)],
        start="A",
    )


@pytest.fixture
def abc_cave(abc_survey) -> Cave:
    return Cave(name="Test cave", surveys=[abc_survey])


@pytest.fixture
def loop_cave(loop_survey) -> Cave:
    return Cave(name="Loop cave", surveys=[loop_survey])


@pytest.fixture
def eov_geo_data() -> GeoData:
    return GeoData(
        coordinate_system=CoordinateSystem.eov(),
        fix_points=[
            FixPoint(
                station="A",
                coordinate=EOVCoordinate(y=LACI_EOV[0], x=LACI_EOV[1], elevation=300.0),
            )
        ],
    )


@pytest.fixture
def geo_cave(abc_survey, eov_geo_data) -> Cave:
    return Cave(name="Láci-barlang", surveys=[abc_survey], geo_data=eov_geo_data)
