# -*- coding: utf-8 -*-
"""WGS84 locations and magnetic declination lookups."""

from __future__ import annotations

import datetime
import logging
from typing import Protocol

import pyIGRF14 as pyIGRF
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic_extra_types.coordinate import Latitude  # noqa: TC002
from pydantic_extra_types.coordinate import Longitude  # noqa: TC002

from cavesurvey_lib.constants import DECLINATION_CACHE_PRECISION
from cavesurvey_lib.constants import DECLINATION_PRECISION
from cavesurvey_lib.constants import GEOJSON_COORDINATE_PRECISION

logger = logging.getLogger(__name__)


class GeoLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: Latitude
    longitude: Longitude

    def as_tuple(self) -> tuple[float, float]:
        """Return the longitude and latitude as a tuple.
        # RFC 7946: (longitude, latitude)
        """
        return (
            round(self.longitude, GEOJSON_COORDINATE_PRECISION),
            round(self.latitude, GEOJSON_COORDINATE_PRECISION),
        )


def decimal_year(dt: datetime.datetime | datetime.date) -> float:
    if not isinstance(dt, datetime.datetime):
        dt = datetime.datetime(dt.year, dt.month, dt.day)  # noqa: DTZ001
    dt_start = datetime.datetime(  # noqa: DTZ001
        year=dt.year, month=1, day=1, hour=0, minute=0, second=0
    )
    dt_end = datetime.datetime(  # noqa: DTZ001
        year=dt.year + 1, month=1, day=1, hour=0, minute=0, second=0
    )
    return round(
        dt.year + (dt - dt_start).total_seconds() / (dt_end - dt_start).total_seconds(),
        ndigits=2,
    )


def get_declination(
    location: GeoLocation, dt: datetime.datetime | datetime.date
) -> float:
    declination, _, _, _, _, _, _ = pyIGRF.igrf_value(
        location.latitude,
        location.longitude,
        alt=0.0,
        year=decimal_year(dt),
    )
    return round(declination, DECLINATION_PRECISION)


# -----------------------------------------------------------------------------
# Declination providers
# -----------------------------------------------------------------------------


class DeclinationProvider(Protocol):
    """Looks up the magnetic declination for a place and a date.

    Implementations may perform I/O.  They are called before a
    recalculation, never during one.
    """

    def declination(self, location: GeoLocation, date: datetime.date) -> float: ...


class IGRFDeclinationProvider:
    """Declination from the International Geomagnetic Reference Field model."""

    def declination(self, location: GeoLocation, date: datetime.date) -> float:
        return get_declination(location, date)


class DeclinationCache:
    """Memoizes a :class:`DeclinationProvider`.

    Declination changes slowly, so lookups are keyed on the location rounded
    to two decimals (about a kilometre) and on the year and month.
    """

    def __init__(self, provider: DeclinationProvider | None = None):
        self.provider = provider or IGRFDeclinationProvider()
        self._cache: dict[tuple[float, float, int, int], float] = {}

    @staticmethod
    def cache_key(
        location: GeoLocation, date: datetime.date
    ) -> tuple[float, float, int, int]:
        return (
            round(float(location.latitude), DECLINATION_CACHE_PRECISION),
            round(float(location.longitude), DECLINATION_CACHE_PRECISION),
            date.year,
            date.month,
        )

    def declination(self, location: GeoLocation, date: datetime.date) -> float:
        key = self.cache_key(location, date)
        if (value := self._cache.get(key)) is not None:
            return value

        value = self.provider.declination(location, date)
        logger.debug("Declination at %s for %s: %.2f°", key[:2], date, value)
        self._cache[key] = value
        return value

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()
