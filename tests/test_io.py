# -*- coding: utf-8 -*-
"""Tests for JSON persistence."""

import math

import orjson
import pytest
from pydantic import ValidationError

from cavesurvey_lib.cave import CaveAggregator
from cavesurvey_lib.io import diagnostics_summary
from cavesurvey_lib.io import load_cave
from cavesurvey_lib.io import save_cave
from cavesurvey_lib.io import save_resolved
from cavesurvey_lib.io import station_map
from cavesurvey_lib.models import Cave
from cavesurvey_lib.models import Shot
from cavesurvey_lib.models import Survey


def _make_broken_cave(abc_survey) -> Cave:
    """The A -> B -> C survey plus an invalid shot, an orphan and an isolated survey."""
    broken = Survey(
        name="S2",
        shots=[
            Shot(id=0, from_station="X", to_station="Y", length=3, azimuth=0),
            Shot(id=1, from_station="Y", to_station="Z", length=None, azimuth=0),
            Shot(id=2, from_station="P", to_station="Q", length=1, azimuth=0),
        ],
    )
    return Cave(name="Broken", surveys=[abc_survey, broken])


class TestCaveFiles:
    """Tests for load_cave and save_cave."""

    def test_roundtrip(self, geo_cave, tmp_path):
        path = tmp_path / "cave.json"
        save_cave(geo_cave, path)
        assert load_cave(path) == geo_cave

    def test_aliases_written(self, abc_cave, tmp_path):
        path = tmp_path / "cave.json"
        save_cave(abc_cave, path)
        shot = orjson.loads(path.read_bytes())["surveys"][0]["shots"][0]
        assert shot["from"] == "A"
        assert shot["to"] == "B"
        assert "from_station" not in shot

    def test_missing_measurement_written_as_null(self, abc_survey, tmp_path):
        path = tmp_path / "cave.json"
        save_cave(_make_broken_cave(abc_survey), path)
        shot = orjson.loads(path.read_bytes())["surveys"][1]["shots"][1]
        assert shot["length"] is None

        loaded = load_cave(path)
        assert math.isnan(loaded.surveys[1].shots[1].length)

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "cave.json"
        path.write_text('{"surveys": []}', encoding="utf-8")
        with pytest.raises(ValidationError):
            load_cave(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_cave(tmp_path / "nope.json")


class TestResolvedExport:
    """Tests for the station map and diagnostics summary."""

    def test_station_map(self, abc_cave, no_geo_config):
        resolved = CaveAggregator(no_geo_config).recalculate(abc_cave)
        stations = station_map(resolved)
        assert list(stations) == list(resolved.stations)
        assert stations["A"] == {
            "position": [0.0, 0.0, 0.0],
            "type": "center",
            "surveyName": "S1",
        }
        assert stations["C"]["position"] == pytest.approx([10.0, 5.0, 0.0], abs=1e-9)

    def test_station_map_geo_referenced(self, geo_cave, no_geo_config):
        resolved = CaveAggregator(no_geo_config).recalculate(geo_cave)
        station = station_map(resolved)["A"]
        assert station["wgs84"]["latitude"] == pytest.approx(47.643785, abs=1e-3)
        assert station["wgs84"]["longitude"] == pytest.approx(18.977448, abs=1e-3)
        assert "projected" in station

    def test_diagnostics_summary(self, abc_survey, no_geo_config):
        resolved = CaveAggregator(no_geo_config).recalculate(
            _make_broken_cave(abc_survey)
        )
        summary = diagnostics_summary(resolved)
        assert summary["orphanShotIds"] == {"S2": [2]}
        assert summary["invalidShotIds"] == {"S2": [1]}
        assert summary["isolatedSurveyNames"] == ["S2"]
        assert len(summary["diagnostics"]) == 3
        assert all(isinstance(d, str) for d in summary["diagnostics"])

    def test_clean_summary(self, abc_cave):
        summary = diagnostics_summary(CaveAggregator().recalculate(abc_cave))
        assert summary == {
            "orphanShotIds": {},
            "invalidShotIds": {},
            "isolatedSurveyNames": [],
            "diagnostics": [],
        }

    def test_save_resolved(self, abc_cave, tmp_path):
        resolved = CaveAggregator().recalculate(abc_cave)
        path = tmp_path / "resolved.json"
        text = save_resolved(resolved, path)
        assert path.read_text(encoding="utf-8") == text
        data = orjson.loads(text)
        assert data["name"] == "Test cave"
        assert set(data["stations"]) == {"A", "B", "C"}
        assert data["diagnostics"]["diagnostics"] == []
        assert "\n" not in save_resolved(resolved, path, minify=True)
