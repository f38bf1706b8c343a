"""
Feature Preparer: turn raw weather / air-quality / vegetation payloads into
a ``FeatureRecord``.

Nothing here fetches data or raises on numeric input.  Out-of-range values
are clamped by ``FeatureRecord``; missing required values are filled:

    temperature    → ``fallback_temperature`` (climate average, 15 °C)
    humidity       → ``fallback_humidity``    (climate average, 60 %)
    drought_index  → calculate_drought_index(temperature, humidity)
    month          → current UTC month

Drought index estimate
----------------------
    temp_factor     = max(0, T − 15) / 20         0 at 15 °C, 1 at 35 °C
    humidity_factor = max(0, 100 − H) / 100       0 at 100 %, 1 at 0 %
    drought_index   = round((temp_factor·0.6 + humidity_factor·0.4) · 100)

Optional weather adjustment (``adjust_drought=True``)
------------------------------------------------------
    daily range > 15 °C  → drought += (range − 15) · 0.5
    rain in last hour    → drought −= min(rain_mm · 5, 30)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from wildfire_risk.models.features import (
    FALLBACK_HUMIDITY,
    FALLBACK_TEMPERATURE,
    AirPollutionData,
    FeatureRecord,
    LandCover,
    VegetationIndex,
    WeatherData,
    calculate_drought_index,
    is_missing,
)
from wildfire_risk.utils.time_utils import current_month

logger = logging.getLogger(__name__)

__all__ = [
    "FALLBACK_HUMIDITY",
    "FALLBACK_TEMPERATURE",
    "build_feature_record",
    "calculate_drought_index",
    "convert_co_to_co2_equivalent",
    "prepare_input_data",
]

_CO_TO_CO2_SCALE = 0.2
_WIDE_RANGE_C = 15.0


def convert_co_to_co2_equivalent(co_value: float) -> float:
    """Scale a CO concentration (μg/m³) to the display CO2-equivalent unit."""
    return round(co_value * _CO_TO_CO2_SCALE, 1)


def build_feature_record(
    temperature: Optional[float] = None,
    humidity: Optional[float] = None,
    drought_index: Optional[float] = None,
    air_quality_index: Optional[float] = None,
    pm2_5: Optional[float] = None,
    co2_level: Optional[float] = None,
    latitude: float = 0.0,
    longitude: float = 0.0,
    month: Optional[int] = None,
    fallback_temperature: float = FALLBACK_TEMPERATURE,
    fallback_humidity: float = FALLBACK_HUMIDITY,
    **optional: Any,
) -> FeatureRecord:
    """Fill defaults for missing required values and build a ``FeatureRecord``.

    Shared by the live preparer, the ``score`` CLI command and batch scoring,
    so every entry point defaults identically.

    Args:
        temperature..co2_level: Raw values; ``None`` or a non-finite float
            (NaN, ±inf) means missing.
        latitude, longitude: Degrees.
        month: 1–12; ``None`` → current UTC month.
        fallback_temperature: Used when ``temperature`` is missing.
        fallback_humidity: Used when ``humidity`` is missing.
        **optional: Any of ``ndvi``, ``evi``, ``forest_percent``,
            ``grassland_percent``, ``pm10``, ``wind_speed``, ``temp_range``,
            ``urban_percent``, ``water_percent``, ``barren_percent``.
            Missing values are dropped.

    Returns:
        Clamped ``FeatureRecord``.
    """
    missing = [
        name for name, value in (
            ("temperature", temperature),
            ("humidity", humidity),
            ("drought_index", drought_index),
        )
        if is_missing(value)
    ]
    if missing:
        logger.warning(
            "Missing critical data for prediction (%s); using fallbacks.",
            ", ".join(missing),
        )

    # FeatureRecord drops the remaining missing values and estimates the
    # drought index from the (clamped) temperature and humidity.
    return FeatureRecord(
        temperature=fallback_temperature if is_missing(temperature) else temperature,
        humidity=fallback_humidity if is_missing(humidity) else humidity,
        drought_index=drought_index,
        air_quality_index=air_quality_index,
        pm2_5=pm2_5,
        co2_level=co2_level,
        latitude=latitude,
        longitude=longitude,
        month=current_month() if is_missing(month) else month,
        **optional,
    )


def prepare_input_data(
    weather: WeatherData,
    air_pollution: AirPollutionData,
    drought_index: Optional[float],
    co2_level: float,
    lat: float,
    lon: float,
    vegetation: Optional[VegetationIndex] = None,
    land_cover: Optional[LandCover] = None,
    month: Optional[int] = None,
    adjust_drought: bool = False,
    fallback_temperature: float = FALLBACK_TEMPERATURE,
    fallback_humidity: float = FALLBACK_HUMIDITY,
) -> FeatureRecord:
    """Build the scorer input from upstream payloads.

    Args:
        weather: Current-weather payload.
        air_pollution: Air-pollution payload; the first entry is used.
        drought_index: Previously computed drought index, or ``None``.
        co2_level: CO2-equivalent level (see ``convert_co_to_co2_equivalent``).
        lat, lon: Coordinates of the location.
        vegetation: Optional NDVI / EVI.
        land_cover: Optional land-cover shares.
        month: Override for the scoring month (defaults to now).
        adjust_drought: Apply the temperature-range / rain drought adjustment.
        fallback_temperature, fallback_humidity: Climate-average fallbacks.

    Returns:
        Clamped, fully-populated ``FeatureRecord``.
    """
    main = weather.main
    air = air_pollution.latest

    temp_range: Optional[float] = None
    if main.temp_min is not None and main.temp_max is not None:
        temp_range = main.temp_max - main.temp_min

    if adjust_drought and drought_index is not None:
        drought_index = _adjust_drought_for_weather(drought_index, temp_range, weather)

    vegetation = vegetation or VegetationIndex()
    land_cover = land_cover or LandCover()

    record = build_feature_record(
        temperature=main.temp,
        humidity=main.humidity,
        drought_index=drought_index,
        air_quality_index=air.main.aqi,
        pm2_5=air.components.pm2_5,
        co2_level=co2_level,
        latitude=lat,
        longitude=lon,
        month=month,
        fallback_temperature=fallback_temperature,
        fallback_humidity=fallback_humidity,
        ndvi=vegetation.ndvi,
        evi=vegetation.evi,
        forest_percent=land_cover.forest_percent,
        grassland_percent=land_cover.grassland_percent,
        urban_percent=land_cover.urban_percent,
        water_percent=land_cover.water_percent,
        barren_percent=land_cover.barren_percent,
        pm10=air.components.pm10,
        wind_speed=weather.wind.speed if weather.wind else None,
        temp_range=temp_range,
    )
    logger.debug("Prepared feature record: %s", record.model_dump(exclude_none=True))
    return record


def _adjust_drought_for_weather(
    drought_index: float,
    temp_range: Optional[float],
    weather: WeatherData,
) -> float:
    if temp_range is not None and temp_range > _WIDE_RANGE_C:
        drought_index = min(drought_index + (temp_range - _WIDE_RANGE_C) * 0.5, 100.0)
    rain = weather.rain.one_hour if weather.rain else None
    if rain:
        drought_index = max(drought_index - min(rain * 5.0, 30.0), 0.0)
    return drought_index
