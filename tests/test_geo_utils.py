# -*- coding: utf-8 -*-
"""Tests for WGS84 locations and declination lookups."""

import datetime

import pytest
from pydantic import ValidationError

from cavesurvey_lib.geo_utils import DeclinationCache
from cavesurvey_lib.geo_utils import GeoLocation
from cavesurvey_lib.geo_utils import IGRFDeclinationProvider
from cavesurvey_lib.geo_utils import decimal_year
from cavesurvey_lib.geo_utils import get_declination


class CountingProvider:
    """Declination provider returning the latitude and counting its calls."""

    def __init__(self):
        self.calls = 0

    def declination(self, location, date):
        self.calls += 1
        return float(location.latitude) / 10.0


@pytest.fixture
def cache():
    return DeclinationCache(CountingProvider())


class TestGeoLocation:
    def test_as_tuple_is_lon_lat(self):
        location = GeoLocation(latitude=47.12345671, longitude=18.76543211)
        assert location.as_tuple() == (18.7654321, 47.1234567)

    @pytest.mark.parametrize(
        ("latitude", "longitude"), [(91.0, 0.0), (-91.0, 0.0), (0.0, 181.0)]
    )
    def test_out_of_range(self, latitude, longitude):
        with pytest.raises(ValidationError):
            GeoLocation(latitude=latitude, longitude=longitude)


class TestDecimalYear:
    @pytest.mark.parametrize(
        ("dt", "expected"),
        [
            (datetime.date(2024, 1, 1), 2024.0),
            (datetime.datetime(2023, 7, 2, 12), 2023.5),  # noqa: DTZ001
            (datetime.date(2025, 12, 31), 2026.0),
        ],
    )
    def test_decimal_year(self, dt, expected):
        assert decimal_year(dt) == expected


class TestDeclinationCache:
    def test_cached(self, cache):
        location = GeoLocation(latitude=47.5, longitude=19.0)
        first = cache.declination(location, datetime.date(2024, 5, 1))
        second = cache.declination(location, datetime.date(2024, 5, 20))
        assert first == second == pytest.approx(4.75)
        assert cache.provider.calls == 1
        assert len(cache) == 1

    def test_nearby_location_shares_entry(self, cache):
        date = datetime.date(2024, 5, 1)
        cache.declination(GeoLocation(latitude=47.501, longitude=19.001), date)
        cache.declination(GeoLocation(latitude=47.502, longitude=19.002), date)
        assert cache.provider.calls == 1

    def test_new_month_and_place(self, cache):
        location = GeoLocation(latitude=47.5, longitude=19.0)
        cache.declination(location, datetime.date(2024, 5, 1))
        cache.declination(location, datetime.date(2024, 6, 1))
        cache.declination(
            GeoLocation(latitude=46.0, longitude=19.0), datetime.date(2024, 6, 1)
        )
        assert cache.provider.calls == 3
        assert len(cache) == 3

    def test_cache_key(self):
        key = DeclinationCache.cache_key(
            GeoLocation(latitude=47.4567, longitude=-3.2111), datetime.date(2020, 2, 29)
        )
        assert key == (47.46, -3.21, 2020, 2)

    def test_clear(self, cache):
        location = GeoLocation(latitude=47.5, longitude=19.0)
        cache.declination(location, datetime.date(2024, 5, 1))
        cache.clear()
        assert len(cache) == 0
        cache.declination(location, datetime.date(2024, 5, 1))
        assert cache.provider.calls == 2


class TestIGRF:
    def test_budapest(self):
        """Declination in central Hungary is a few degrees east."""
        location = GeoLocation(latitude=47.5, longitude=19.0)
        declination = get_declination(location, datetime.date(2024, 1, 1))
        assert 4.0 < declination < 7.5
        assert round(declination, 2) == declination

    def test_provider(self):
        location = GeoLocation(latitude=47.5, longitude=19.0)
        date = datetime.date(2024, 1, 1)
        assert IGRFDeclinationProvider().declination(location, date) == (
            get_declination(location, date)
        )
