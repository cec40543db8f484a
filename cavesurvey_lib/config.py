# -*- coding: utf-8 -*-
"""Recalculation settings.

A :class:`RecalculationConfig` is an immutable snapshot handed to each
recalculation call.  Changing a setting means building a new snapshot and
recalculating; the library never watches or mutates configuration.
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from cavesurvey_lib.constants import LOOP_DEVIATION_TOLERANCE
from cavesurvey_lib.constants import SPLAY_NAME_TEMPLATE
from cavesurvey_lib.geometry import ZERO
from cavesurvey_lib.geometry import Vector3D


class RecalculationConfig(BaseModel):
    """Settings of a cave recalculation.

    Attributes:
        apply_declination: Add each survey's magnetic declination to its
            azimuths
        apply_convergence: Add the meridian convergence computed at the
            cave's anchor to azimuths of surveys without an explicit value
        origin: Local position of the first survey's start station, also
            used as the fallback origin of isolated surveys
        splay_name_template: Name of splay leaf stations, formatted with
            ``id`` and ``survey``
        include_splays_in_graph: Keep splay shots in the analysis graph
        loop_deviation_tolerance: Per-shot loop closure correction (metres)
            above which a shot is reported as deviating
    """

    model_config = ConfigDict(frozen=True)

    apply_declination: bool = True
    apply_convergence: bool = True
    origin: Vector3D = ZERO
    splay_name_template: str = Field(default=SPLAY_NAME_TEMPLATE, min_length=1)
    include_splays_in_graph: bool = False
    loop_deviation_tolerance: float = Field(default=LOOP_DEVIATION_TOLERANCE, ge=0)

    def with_changes(self, **changes) -> RecalculationConfig:
        """Return a validated copy with ``changes`` applied."""
        return self.model_validate({**self.model_dump(), **changes})


DEFAULT_CONFIG = RecalculationConfig()
