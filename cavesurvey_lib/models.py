# -*- coding: utf-8 -*-
"""Input data models for cave surveys.

This module contains the Pydantic models produced by importers and editors:

- Shot: A single measurement between two stations
- Survey: An ordered list of shots with its metadata
- SurveyAlias: Alternate name of a station (connection between surveys)
- EOVCoordinate / UTMCoordinate: Projected coordinates
- GeoData: Coordinate system and fix points tying a cave to the map
- Cave: The surveys, aliases and geo-reference of a single cave

All models are immutable.  Resolution never writes back into them; the
resolved geometry lives in :mod:`cavesurvey_lib.survey.models` and
:mod:`cavesurvey_lib.cave.models`.
"""

from __future__ import annotations

import datetime  # noqa: TC003
import math
from typing import Annotated
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator

from cavesurvey_lib.constants import EOV_MAX_X
from cavesurvey_lib.constants import EOV_MAX_Y
from cavesurvey_lib.constants import EOV_MIN_X
from cavesurvey_lib.constants import EOV_MIN_Y
from cavesurvey_lib.constants import MAX_AZIMUTH
from cavesurvey_lib.constants import MAX_CLINO
from cavesurvey_lib.constants import MIN_AZIMUTH
from cavesurvey_lib.constants import MIN_CLINO
from cavesurvey_lib.constants import UTM_MAX_EASTING
from cavesurvey_lib.constants import UTM_MAX_NORTHING
from cavesurvey_lib.constants import UTM_MIN_EASTING
from cavesurvey_lib.constants import UTM_MIN_NORTHING
from cavesurvey_lib.enums import CoordinateSystemType
from cavesurvey_lib.enums import ShotType
from cavesurvey_lib.geometry import Vector3D

# -----------------------------------------------------------------------------
# Shots
# -----------------------------------------------------------------------------


class Shot(BaseModel):
    """A single survey shot between two stations.

    Lengths are in metres, angles in degrees.  Non-finite values are accepted
    so that broken measurements can be carried around and reported; use
    :meth:`validate_shot` / :meth:`is_valid` before using the numbers.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int
    type: ShotType = ShotType.CENTER
    from_station: str = Field(alias="from")
    to_station: str | None = Field(default=None, alias="to")
    length: float
    azimuth: float
    clino: float = 0.0

    @field_validator("length", "azimuth", "clino", mode="before")
    @classmethod
    def missing_as_nan(cls, value: float | None) -> float:
        """Missing measurements (``null`` in JSON) are stored as NaN."""
        return math.nan if value is None else value

    def validate_shot(self) -> list[str]:
        """Return the list of problems with this shot (empty when valid)."""
        errors: list[str] = []

        for name in ("length", "azimuth", "clino"):
            value = getattr(self, name)
            if not math.isfinite(value):
                errors.append(f"{name} '{value}' is not a finite number")

        if math.isfinite(self.length) and self.length < 0:
            errors.append(f"length '{self.length}' is negative")

        if math.isfinite(self.clino) and not MIN_CLINO <= self.clino <= MAX_CLINO:
            errors.append(
                f"clino '{self.clino}' is out of range [{MIN_CLINO}, {MAX_CLINO}]"
            )

        if math.isfinite(self.azimuth) and not (
            MIN_AZIMUTH <= self.azimuth <= MAX_AZIMUTH
        ):
            errors.append(
                f"azimuth '{self.azimuth}' is out of range "
                f"[{MIN_AZIMUTH}, {MAX_AZIMUTH}]"
            )

        if not self.from_station:
            errors.append("from station is empty")

        if self.type != ShotType.SPLAY and not self.to_station:
            errors.append("to station is empty")

        if self.to_station and self.from_station == self.to_station:
            errors.append(f"from and to station are the same: '{self.from_station}'")

        return errors

    def is_valid(self) -> bool:
        return len(self.validate_shot()) == 0


# -----------------------------------------------------------------------------
# Surveys
# -----------------------------------------------------------------------------


class SurveyTeamMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    role: str | None = None


class SurveyTeam(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    members: list[SurveyTeamMember] = Field(default_factory=list)


class SurveyInstrument(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str | None = None


class SurveyMetadata(BaseModel):
    """Metadata of a survey.

    Attributes:
        date: Day the survey was made, used for declination lookups
        declination: Magnetic declination in degrees (positive = east)
        convergence: Meridian convergence in degrees. When missing, the
            cave-level convergence computed from the geo-reference is used.
        team: The survey team
        instruments: Instruments used
        comment: Free text
    """

    model_config = ConfigDict(frozen=True)

    date: datetime.date | None = None
    declination: float | None = None
    convergence: float | None = None
    team: SurveyTeam | None = None
    instruments: list[SurveyInstrument] = Field(default_factory=list)
    comment: str | None = None


class Survey(BaseModel):
    """An ordered list of shots measured in one go."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    start: str | None = None
    shots: list[Shot] = Field(default_factory=list)
    metadata: SurveyMetadata = Field(default_factory=SurveyMetadata)

    @model_validator(mode="after")
    def unique_shot_ids(self) -> Survey:
        seen: set[int] = set()
        for shot in self.shots:
            if shot.id in seen:
                raise ValueError(
                    f"Duplicate shot id {shot.id} in survey '{self.name}'"
                )
            seen.add(shot.id)
        return self

    @property
    def valid_shots(self) -> list[Shot]:
        return [shot for shot in self.shots if shot.is_valid()]

    @property
    def invalid_shot_ids(self) -> set[int]:
        return {shot.id for shot in self.shots if not shot.is_valid()}

    @property
    def implicit_start(self) -> str | None:
        """Start station: ``start`` or the first valid shot's ``from``."""
        if self.start:
            return self.start
        for shot in self.shots:
            if shot.is_valid():
                return shot.from_station
        return None


class SurveyAlias(BaseModel):
    """Declares ``from_station`` an alternate name of ``to_station``.

    Aliases connect surveys that named the same physical point differently.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_station: str = Field(alias="from", min_length=1)
    to_station: str = Field(alias="to", min_length=1)

    def contains(self, name: str) -> bool:
        return name in (self.from_station, self.to_station)

    def get_pair(self, name: str) -> str | None:
        """Return the other side of the alias, ``None`` if not involved."""
        if name == self.from_station:
            return self.to_station
        if name == self.to_station:
            return self.from_station
        return None


# -----------------------------------------------------------------------------
# Projected coordinates
# -----------------------------------------------------------------------------


class EOVCoordinate(BaseModel):
    """Hungarian national grid (EOV) coordinate.

    EOV names its axes the other way around: ``y`` is the easting and ``x``
    is the northing.

    Attributes:
        y: Easting in metres
        x: Northing in metres
        elevation: Elevation above the Baltic sea level in metres
    """

    model_config = ConfigDict(frozen=True)

    system: Literal["eov"] = "eov"
    y: float
    x: float
    elevation: float = 0.0

    @property
    def easting(self) -> float:
        return self.y

    @property
    def northing(self) -> float:
        return self.x

    def add_vector(self, v: Vector3D) -> EOVCoordinate:
        return EOVCoordinate(y=self.y + v.x, x=self.x + v.y, elevation=self.elevation + v.z)

    def difference(self, other: EOVCoordinate) -> Vector3D:
        """Vector pointing from ``other`` to ``self``."""
        return Vector3D(self.y - other.y, self.x - other.x, self.elevation - other.elevation)

    def validate_coordinate(self) -> list[str]:
        errors: list[str] = []
        for name in ("y", "x", "elevation"):
            value = getattr(self, name)
            if not math.isfinite(value):
                errors.append(f"{name} '{value}' is not a finite number")
        if errors:
            return errors

        if not EOV_MIN_X <= self.x <= EOV_MAX_X:
            errors.append(f"X coordinate '{self.x}' is out of bounds")
        if not EOV_MIN_Y <= self.y <= EOV_MAX_Y:
            errors.append(f"Y coordinate '{self.y}' is out of bounds")
        return errors


class UTMCoordinate(BaseModel):
    """UTM coordinate on the WGS84 ellipsoid."""

    model_config = ConfigDict(frozen=True)

    system: Literal["utm"] = "utm"
    easting: float
    northing: float
    elevation: float = 0.0
    zone: Annotated[int, Field(ge=1, le=60, description="UTM zone number")]
    northern: bool = True

    def add_vector(self, v: Vector3D) -> UTMCoordinate:
        return self.model_copy(
            update={
                "easting": self.easting + v.x,
                "northing": self.northing + v.y,
                "elevation": self.elevation + v.z,
            }
        )

    def difference(self, other: UTMCoordinate) -> Vector3D:
        """Vector pointing from ``other`` to ``self``."""
        return Vector3D(
            self.easting - other.easting,
            self.northing - other.northing,
            self.elevation - other.elevation,
        )

    def validate_coordinate(self) -> list[str]:
        errors: list[str] = []
        for name in ("easting", "northing", "elevation"):
            value = getattr(self, name)
            if not math.isfinite(value):
                errors.append(f"{name} '{value}' is not a finite number")
        if errors:
            return errors

        if not UTM_MIN_EASTING <= self.easting <= UTM_MAX_EASTING:
            errors.append(f"Easting '{self.easting}' is out of bounds")
        if not UTM_MIN_NORTHING <= self.northing <= UTM_MAX_NORTHING:
            errors.append(f"Northing '{self.northing}' is out of bounds")
        return errors


ProjectedCoordinate = Annotated[
    EOVCoordinate | UTMCoordinate, Field(discriminator="system")
]


class CoordinateSystem(BaseModel):
    """The projected coordinate system a cave is referenced in."""

    model_config = ConfigDict(frozen=True)

    type: CoordinateSystemType
    zone: Annotated[int | None, Field(default=None, ge=1, le=60)]
    northern: bool = True

    @model_validator(mode="after")
    def zone_required_for_utm(self) -> CoordinateSystem:
        if self.type == CoordinateSystemType.UTM and self.zone is None:
            raise ValueError("A UTM coordinate system requires a zone")
        return self

    @classmethod
    def eov(cls) -> CoordinateSystem:
        return cls(type=CoordinateSystemType.EOV)

    @classmethod
    def utm(cls, zone: int, northern: bool = True) -> CoordinateSystem:
        return cls(type=CoordinateSystemType.UTM, zone=zone, northern=northern)

    def accepts(self, coordinate: EOVCoordinate | UTMCoordinate) -> bool:
        """Whether ``coordinate`` is expressed in this system."""
        if isinstance(coordinate, EOVCoordinate):
            return self.type == CoordinateSystemType.EOV
        return (
            self.type == CoordinateSystemType.UTM
            and coordinate.zone == self.zone
            and coordinate.northern == self.northern
        )

    def __str__(self) -> str:
        if self.type == CoordinateSystemType.EOV:
            return "EOV"
        return f"UTM {self.zone}{'N' if self.northern else 'S'}"


class FixPoint(BaseModel):
    """A station with a known projected coordinate."""

    model_config = ConfigDict(frozen=True)

    station: str = Field(min_length=1)
    coordinate: ProjectedCoordinate

    @model_validator(mode="after")
    def coordinate_in_bounds(self) -> FixPoint:
        errors = self.coordinate.validate_coordinate()
        if errors:
            raise ValueError(
                f"Invalid coordinate for fix point '{self.station}': "
                + "; ".join(errors)
            )
        return self


class GeoData(BaseModel):
    """Geo-reference of a cave."""

    model_config = ConfigDict(frozen=True)

    coordinate_system: CoordinateSystem | None = None
    fix_points: list[FixPoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def fix_points_match_system(self) -> GeoData:
        if self.coordinate_system is None:
            return self
        for fix in self.fix_points:
            if not self.coordinate_system.accepts(fix.coordinate):
                raise ValueError(
                    f"Fix point '{fix.station}' is not expressed in "
                    f"{self.coordinate_system}"
                )
        return self

    def fix_point_for(self, station: str) -> FixPoint | None:
        return next((f for f in self.fix_points if f.station == station), None)


# -----------------------------------------------------------------------------
# Cave
# -----------------------------------------------------------------------------


class CaveMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: str | None = None
    region: str | None = None
    settlement: str | None = None
    cataster_code: str | None = None
    date: datetime.date | None = None
    creator: str | None = None


class Cave(BaseModel):
    """A cave: ordered surveys, station aliases and an optional geo-reference."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    surveys: list[Survey] = Field(default_factory=list)
    aliases: list[SurveyAlias] = Field(default_factory=list)
    geo_data: GeoData | None = None
    metadata: CaveMetadata | None = None

    @model_validator(mode="after")
    def unique_survey_names(self) -> Cave:
        seen: set[str] = set()
        for survey in self.surveys:
            if survey.name in seen:
                raise ValueError(
                    f"Duplicate survey name '{survey.name}' in cave '{self.name}'"
                )
            seen.add(survey.name)
        return self

    def get_survey(self, name: str) -> Survey | None:
        return next((s for s in self.surveys if s.name == name), None)
