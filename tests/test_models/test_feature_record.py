"""
Tests for wildfire_risk/models/features.py and models/prediction.py.

What we test
------------
- FeatureRecord clamps every bounded field instead of raising.
- FeatureRecord is frozen.
- FeatureRecord fills missing and non-finite values: climate-average
  temperature / humidity, an estimated drought index, the current month.
- Raw payload models parse OpenWeather JSON (aliases, missing blocks).
- PredictionResponse serialises with the agreed field names and rejects
  out-of-range probabilities.
"""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from wildfire_risk.models.features import (
    AirPollutionData,
    FeatureRecord,
    WeatherData,
    calculate_drought_index,
    clamp,
    is_missing,
)
from wildfire_risk.models.prediction import PredictionResponse, PredictionResult
from wildfire_risk.utils.time_utils import current_month


def _record(**overrides) -> FeatureRecord:
    values = dict(temperature=20.0, humidity=50.0, drought_index=30.0)
    values.update(overrides)
    return FeatureRecord(**values)


class TestClamp:
    def test_inside(self):
        assert clamp(5.0, 0.0, 10.0) == 5.0

    def test_edges(self):
        assert clamp(-1.0, 0.0, 10.0) == 0.0
        assert clamp(11.0, 0.0, 10.0) == 10.0


class TestFeatureRecordClamping:
    @pytest.mark.parametrize(
        "field, raw, expected",
        [
            ("temperature", 75.0, 60.0),
            ("temperature", -80.0, -50.0),
            ("humidity", 120.0, 100.0),
            ("humidity", -5.0, 0.0),
            ("drought_index", 150.0, 100.0),
            ("air_quality_index", 9.0, 5.0),
            ("air_quality_index", 0.0, 1.0),
            ("pm2_5", 5000.0, 1000.0),
            ("pm2_5", -3.0, 0.0),
            ("month", 14, 12),
            ("month", 0, 1),
            ("ndvi", 1.7, 1.0),
            ("evi", -2.0, -1.0),
            ("forest_percent", 130.0, 100.0),
            ("grassland_percent", -10.0, 0.0),
        ],
    )
    def test_out_of_range_clamped(self, field, raw, expected):
        assert getattr(_record(**{field: raw}), field) == expected

    def test_in_range_unchanged(self):
        record = _record(ndvi=0.4, forest_percent=55.0, month=6)
        assert (record.ndvi, record.forest_percent, record.month) == (0.4, 55.0, 6)

    def test_unbounded_fields_pass_through(self):
        record = _record(co2_level=9999.0, latitude=-89.0, longitude=179.0)
        assert record.co2_level == 9999.0
        assert record.latitude == -89.0

    def test_defaults(self):
        record = _record()
        assert record.air_quality_index == 1.0
        assert record.pm2_5 == 0.0
        assert record.ndvi is None

    def test_frozen(self):
        record = _record()
        with pytest.raises(ValidationError):
            record.temperature = 40.0  # type: ignore[misc]

    def test_non_numeric_still_rejected(self):
        with pytest.raises(ValidationError):
            FeatureRecord(temperature="hot", humidity=50.0)


class TestFeatureRecordMissingValues:
    def test_drought_estimated_when_absent(self):
        record = FeatureRecord(temperature=25.0, humidity=50.0)
        assert record.drought_index == 50.0

    def test_drought_estimate_uses_clamped_inputs(self):
        record = FeatureRecord(temperature=80.0, humidity=-10.0)
        assert record.drought_index == 100.0

    def test_month_defaults_to_current_month(self):
        assert FeatureRecord(temperature=20.0, humidity=50.0).month == current_month()

    def test_empty_record(self):
        record = FeatureRecord()
        assert record.temperature == 15.0
        assert record.humidity == 60.0
        assert record.drought_index == calculate_drought_index(15.0, 60.0)
        assert 1 <= record.month <= 12

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_treated_as_missing(self, bad):
        record = FeatureRecord(
            temperature=bad, humidity=bad, drought_index=bad,
            air_quality_index=bad, pm2_5=bad, latitude=bad, ndvi=bad,
        )
        assert record.temperature == 15.0
        assert record.humidity == 60.0
        assert record.drought_index == 16.0
        assert record.air_quality_index == 1.0
        assert record.pm2_5 == 0.0
        assert record.latitude == 0.0
        assert record.ndvi is None

    def test_nan_drought_with_real_weather(self):
        record = FeatureRecord(temperature=35.0, humidity=0.0, drought_index=math.nan)
        assert record.drought_index == 100.0

    def test_none_month_uses_current_month(self):
        assert _record(month=None).month == current_month()


class TestIsMissing:
    @pytest.mark.parametrize("value", [None, math.nan, math.inf, -math.inf])
    def test_missing(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize("value", [0.0, -1.5, 7, "12"])
    def test_present(self, value):
        assert not is_missing(value)


class TestPayloadModels:
    def test_weather_parses_rain_alias(self):
        weather = WeatherData.model_validate({
            "main": {"temp": 12.0, "humidity": 80.0},
            "rain": {"1h": 0.6},
            "name": "Seattle",
            "visibility": 10000,
        })
        assert weather.rain is not None
        assert weather.rain.one_hour == 0.6
        assert weather.name == "Seattle"

    def test_weather_missing_blocks(self):
        weather = WeatherData.model_validate({})
        assert weather.main.temp is None
        assert weather.wind is None

    def test_air_pollution_latest(self):
        air = AirPollutionData.model_validate({
            "list": [{"main": {"aqi": 4}, "components": {"pm2_5": 55.0}}],
        })
        assert air.latest.main.aqi == 4
        assert air.latest.components.pm2_5 == 55.0

    def test_air_pollution_empty_list(self):
        air = AirPollutionData.model_validate({"list": []})
        assert air.latest.main.aqi == 1.0
        assert air.latest.components.co == 0.0


class TestPredictionModels:
    def _response(self, **overrides) -> PredictionResponse:
        values = dict(
            location="Fresno",
            latitude=36.7,
            longitude=-119.8,
            probability=64.2,
            co2_level=48.3,
            temperature=33.0,
            humidity=25.0,
            drought_index=70.0,
            air_quality_index=2.0,
            pm2_5=14.0,
            feature_importance={"temperature": 1.0},
        )
        values.update(overrides)
        return PredictionResponse(**values)

    def test_serialised_field_names(self):
        data = self._response().model_dump(mode="json")
        assert data["model_type"] == "random_forest"
        assert data["probability"] == 64.2
        assert data["drought_index"] == 70.0
        assert data["vegetation_index"] is None

    @pytest.mark.parametrize("probability", [-0.1, 100.1])
    def test_probability_range(self, probability):
        with pytest.raises(ValidationError):
            self._response(probability=probability)

    def test_prediction_result_frozen(self):
        result = PredictionResult(probability=12.0, feature_importance={})
        with pytest.raises(Exception):
            result.probability = 13.0  # type: ignore[misc]
