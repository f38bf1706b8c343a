"""
Tests for wildfire_risk/features/preparation.py.

What we test
------------
- calculate_drought_index(): formula, anchor points, clamping.
- convert_co_to_co2_equivalent(): scale and one-decimal rounding.
- build_feature_record(): fallbacks for missing or non-finite values,
  warning on fallback, drought estimated when absent, None optionals dropped.
- prepare_input_data(): maps OpenWeather payloads onto FeatureRecord,
  informational fields, optional drought adjustment.
"""

from __future__ import annotations

import logging
import math

import pytest

from wildfire_risk.features import preparation
from wildfire_risk.features.preparation import (
    FALLBACK_HUMIDITY,
    FALLBACK_TEMPERATURE,
    build_feature_record,
    calculate_drought_index,
    convert_co_to_co2_equivalent,
    prepare_input_data,
)
from wildfire_risk.models.features import (
    AirPollutionData,
    LandCover,
    VegetationIndex,
    WeatherData,
)


@pytest.fixture
def weather() -> WeatherData:
    return WeatherData.model_validate({
        "main": {"temp": 31.0, "humidity": 22.0, "temp_min": 18.0, "temp_max": 43.0},
        "wind": {"speed": 6.5},
        "coord": {"lat": 34.05, "lon": -118.24},
        "name": "Los Angeles",
    })


@pytest.fixture
def air() -> AirPollutionData:
    return AirPollutionData.model_validate({
        "list": [{
            "main": {"aqi": 3},
            "components": {"co": 250.34, "pm2_5": 18.2, "pm10": 27.0},
        }],
    })


class TestDroughtIndex:
    @pytest.mark.parametrize(
        "temperature, humidity, expected",
        [
            (35.0, 0.0, 100.0),
            (15.0, 100.0, 0.0),
            (25.0, 50.0, 50.0),
            (10.0, 100.0, 0.0),
            (60.0, 0.0, 100.0),
        ],
    )
    def test_anchor_points(self, temperature, humidity, expected):
        assert calculate_drought_index(temperature, humidity) == expected

    def test_rounded_to_integer(self):
        # (5/20·0.6 + 0.55·0.4)·100 = 37.0; (4/20·0.6 + 0.55·0.4)·100 = 34.0
        assert calculate_drought_index(20.0, 45.0) == 37.0
        assert calculate_drought_index(19.0, 45.0) == 34.0

    def test_monotonic(self):
        assert calculate_drought_index(30.0, 40.0) > calculate_drought_index(20.0, 40.0)
        assert calculate_drought_index(25.0, 20.0) > calculate_drought_index(25.0, 60.0)


class TestCoConversion:
    def test_scale(self):
        assert convert_co_to_co2_equivalent(250.34) == 50.1

    def test_zero(self):
        assert convert_co_to_co2_equivalent(0.0) == 0.0


class TestBuildFeatureRecord:
    def test_all_present(self):
        record = build_feature_record(
            temperature=30.0, humidity=20.0, drought_index=70.0,
            air_quality_index=2.0, pm2_5=12.0, co2_level=40.0,
            latitude=36.0, longitude=-120.0, month=7,
        )
        assert record.temperature == 30.0
        assert record.drought_index == 70.0
        assert record.month == 7

    def test_missing_temperature_and_humidity_use_fallbacks(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wildfire_risk.features.preparation"):
            record = build_feature_record(month=3)
        assert record.temperature == FALLBACK_TEMPERATURE
        assert record.humidity == FALLBACK_HUMIDITY
        assert record.drought_index == calculate_drought_index(15.0, 60.0)
        assert "Missing critical data" in caplog.text

    def test_non_finite_values_use_fallbacks(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wildfire_risk.features.preparation"):
            record = build_feature_record(
                temperature=math.nan, humidity=math.inf, drought_index=math.nan,
                pm2_5=math.nan, latitude=math.nan, month=3,
            )
        assert record.temperature == FALLBACK_TEMPERATURE
        assert record.humidity == FALLBACK_HUMIDITY
        assert record.drought_index == 16.0
        assert record.pm2_5 == 0.0
        assert record.latitude == 0.0
        assert "temperature, humidity, drought_index" in caplog.text

    def test_custom_fallbacks(self):
        record = build_feature_record(
            month=3, fallback_temperature=20.0, fallback_humidity=50.0,
        )
        assert record.temperature == 20.0
        assert record.humidity == 50.0

    def test_drought_estimated_when_missing(self):
        record = build_feature_record(temperature=25.0, humidity=50.0, month=3)
        assert record.drought_index == 50.0

    def test_drought_estimate_uses_clamped_inputs(self):
        record = build_feature_record(temperature=80.0, humidity=-10.0, month=3)
        assert record.temperature == 60.0
        assert record.humidity == 0.0
        assert record.drought_index == 100.0

    def test_no_warning_when_complete(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wildfire_risk.features.preparation"):
            build_feature_record(temperature=20.0, humidity=40.0, drought_index=30.0, month=3)
        assert caplog.text == ""

    def test_defaults_for_air_quality(self):
        record = build_feature_record(temperature=20.0, humidity=40.0, month=3)
        assert record.air_quality_index == 1.0
        assert record.pm2_5 == 0.0
        assert record.co2_level == 0.0

    def test_month_defaults_to_now(self, monkeypatch):
        monkeypatch.setattr(preparation, "current_month", lambda: 11)
        assert build_feature_record(temperature=20.0, humidity=40.0).month == 11

    def test_nan_month_uses_current_month(self, monkeypatch):
        monkeypatch.setattr(preparation, "current_month", lambda: 8)
        assert build_feature_record(temperature=20.0, humidity=40.0, month=math.nan).month == 8

    def test_none_optionals_dropped(self):
        record = build_feature_record(
            temperature=20.0, humidity=40.0, month=3, ndvi=None, forest_percent=55.0,
        )
        assert record.ndvi is None
        assert record.forest_percent == 55.0


class TestPrepareInputData:
    def test_maps_payloads(self, weather, air):
        record = prepare_input_data(
            weather, air, drought_index=None, co2_level=50.1,
            lat=34.05, lon=-118.24, month=8,
        )
        assert record.temperature == 31.0
        assert record.humidity == 22.0
        assert record.drought_index == calculate_drought_index(31.0, 22.0)
        assert record.air_quality_index == 3.0
        assert record.pm2_5 == 18.2
        assert record.co2_level == 50.1
        assert record.latitude == 34.05
        assert record.month == 8

    def test_informational_fields(self, weather, air):
        record = prepare_input_data(weather, air, None, 0.0, 34.05, -118.24, month=8)
        assert record.pm10 == 27.0
        assert record.wind_speed == 6.5
        assert record.temp_range == 25.0

    def test_vegetation_and_land_cover(self, weather, air):
        record = prepare_input_data(
            weather, air, None, 0.0, 34.05, -118.24,
            vegetation=VegetationIndex(ndvi=0.31, evi=0.2),
            land_cover=LandCover(forest_percent=45.0, grassland_percent=30.0),
            month=8,
        )
        assert record.ndvi == 0.31
        assert record.evi == 0.2
        assert record.forest_percent == 45.0
        assert record.grassland_percent == 30.0

    def test_missing_vegetation_left_empty(self, weather, air):
        record = prepare_input_data(weather, air, None, 0.0, 34.05, -118.24, month=8)
        assert record.ndvi is None
        assert record.forest_percent is None

    def test_empty_payloads_fall_back(self):
        record = prepare_input_data(
            WeatherData(), AirPollutionData(), None, 0.0, 0.0, 0.0, month=5,
        )
        assert record.temperature == FALLBACK_TEMPERATURE
        assert record.humidity == FALLBACK_HUMIDITY
        assert record.air_quality_index == 1.0
        assert record.temp_range is None

    def test_supplied_drought_index_kept(self, weather, air):
        record = prepare_input_data(weather, air, 12.0, 0.0, 34.05, -118.24, month=8)
        assert record.drought_index == 12.0

    def test_drought_adjustment_wide_range_and_rain(self, air):
        weather = WeatherData.model_validate({
            "main": {"temp": 20.0, "humidity": 50.0, "temp_min": 5.0, "temp_max": 30.0},
            "rain": {"1h": 2.0},
        })
        record = prepare_input_data(
            weather, air, 50.0, 0.0, 0.0, 0.0, month=5, adjust_drought=True,
        )
        # +(25 − 15)·0.5 = +5, then −min(2·5, 30) = −10
        assert record.drought_index == 45.0

    def test_drought_adjustment_off_by_default(self, air):
        weather = WeatherData.model_validate({
            "main": {"temp": 20.0, "humidity": 50.0, "temp_min": 5.0, "temp_max": 30.0},
            "rain": {"1h": 2.0},
        })
        record = prepare_input_data(weather, air, 50.0, 0.0, 0.0, 0.0, month=5)
        assert record.drought_index == 50.0

    def test_heavy_rain_floors_at_zero(self, air):
        weather = WeatherData.model_validate({
            "main": {"temp": 20.0, "humidity": 50.0},
            "rain": {"1h": 40.0},
        })
        record = prepare_input_data(
            weather, air, 10.0, 0.0, 0.0, 0.0, month=5, adjust_drought=True,
        )
        assert record.drought_index == 0.0
