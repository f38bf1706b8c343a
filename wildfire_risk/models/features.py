"""
Input models: raw upstream payloads and the validated ``FeatureRecord``.

Raw payload models mirror the JSON shapes returned by the upstream
collaborators (OpenWeather current weather / air pollution, the Earth
Engine function) and ignore any fields the scorer does not read.

``FeatureRecord`` is the scorer's only input.  It clamps every bounded
field on construction, so no construction path can hand the forest an
out-of-range value:

    temperature        [-50, 60]  °C
    humidity           [0, 100]   %
    drought_index      [0, 100]
    air_quality_index  [1, 5]     ordinal
    pm2_5              [0, 1000]  μg/m³
    ndvi, evi          [-1, 1]
    *_percent          [0, 100]
    month              [1, 12]

``co2_level``, ``latitude`` and ``longitude`` are passed through unclamped.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from wildfire_risk.utils.time_utils import current_month

# ── Raw payloads ──────────────────────────────────────────────────────────────


class WeatherMain(BaseModel):
    """``main`` block of an OpenWeather current-weather response."""

    model_config = ConfigDict(frozen=True)

    temp: Optional[float] = None
    humidity: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    feels_like: Optional[float] = None
    pressure: Optional[float] = None


class Wind(BaseModel):
    model_config = ConfigDict(frozen=True)

    speed: Optional[float] = None
    deg: Optional[float] = None


class Rain(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    one_hour: Optional[float] = Field(default=None, alias="1h")


class Coord(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class WeatherData(BaseModel):
    """OpenWeather current-weather payload (only the fields we use)."""

    model_config = ConfigDict(frozen=True)

    main: WeatherMain = WeatherMain()
    wind: Optional[Wind] = None
    rain: Optional[Rain] = None
    coord: Optional[Coord] = None
    name: Optional[str] = None


class AirQualityMain(BaseModel):
    model_config = ConfigDict(frozen=True)

    aqi: float = 1.0


class AirComponents(BaseModel):
    """Pollutant concentrations in μg/m³."""

    model_config = ConfigDict(frozen=True)

    co: float = 0.0
    no: float = 0.0
    no2: float = 0.0
    o3: float = 0.0
    so2: float = 0.0
    pm2_5: float = 0.0
    pm10: float = 0.0
    nh3: float = 0.0


class AirPollutionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    main: AirQualityMain = AirQualityMain()
    components: AirComponents = AirComponents()


class AirPollutionData(BaseModel):
    """OpenWeather air-pollution payload.

    The upstream API returns a list with one entry for "now"; ``latest``
    is that entry, or an all-defaults entry when the list is empty.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    entries: list[AirPollutionEntry] = Field(default_factory=list, alias="list")

    @property
    def latest(self) -> AirPollutionEntry:
        return self.entries[0] if self.entries else AirPollutionEntry()


class VegetationIndex(BaseModel):
    model_config = ConfigDict(frozen=True)

    ndvi: Optional[float] = None
    evi: Optional[float] = None


class LandCover(BaseModel):
    """Land-cover shares in percent of the surrounding area."""

    model_config = ConfigDict(frozen=True)

    forest_percent: Optional[float] = None
    grassland_percent: Optional[float] = None
    urban_percent: Optional[float] = None
    water_percent: Optional[float] = None
    barren_percent: Optional[float] = None


# ── Validated scorer input ────────────────────────────────────────────────────

FALLBACK_TEMPERATURE = 15.0     # climate-average °C
FALLBACK_HUMIDITY = 60.0        # climate-average %


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def is_missing(value: Any) -> bool:
    """True for ``None`` and for non-finite floats (NaN, ±inf)."""
    if value is None:
        return True
    return isinstance(value, float) and not math.isfinite(value)


def calculate_drought_index(temperature: float, humidity: float) -> float:
    """Estimate a 0–100 drought index from temperature (°C) and humidity (%).

        temp_factor     = max(0, T − 15) / 20         0 at 15 °C, 1 at 35 °C
        humidity_factor = max(0, 100 − H) / 100       0 at 100 %, 1 at 0 %
        drought_index   = round((temp_factor·0.6 + humidity_factor·0.4) · 100)
    """
    temp_factor = max(0.0, temperature - 15.0) / 20.0
    humidity_factor = max(0.0, 100.0 - humidity) / 100.0
    return clamp(float(round((temp_factor * 0.6 + humidity_factor * 0.4) * 100)), 0.0, 100.0)


class FeatureRecord(BaseModel):
    """Clamped, fully-populated input to the ensemble scorer.

    Missing or non-finite values never fail validation: temperature and
    humidity fall back to climate averages, ``drought_index`` is estimated
    from the (clamped) temperature and humidity, ``month`` is the current
    UTC month, and every other field takes its default.

    Attributes:
        temperature: Air temperature, °C.
        humidity: Relative humidity, %.
        drought_index: Unit-less 0–100 dryness proxy.
        air_quality_index: OpenWeather AQI ordinal, 1 (good) – 5 (very poor).
        pm2_5: Fine particulate concentration, μg/m³.
        co2_level: CO2-equivalent level derived from CO (informal "MT" unit).
        latitude: Degrees, positive north.
        longitude: Degrees, positive east.
        month: Calendar month used for the seasonal adjustment.
        ndvi: Normalized Difference Vegetation Index, or ``None``.
        evi: Enhanced Vegetation Index, or ``None``.
        forest_percent: Forest share of land cover, or ``None``.
        grassland_percent: Grassland share of land cover, or ``None``.
        pm10, wind_speed, temp_range, urban_percent, water_percent,
        barren_percent: Informational; carried for display, not scored.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float = FALLBACK_TEMPERATURE
    humidity: float = FALLBACK_HUMIDITY
    drought_index: float
    air_quality_index: float = 1.0
    pm2_5: float = 0.0
    co2_level: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0
    month: int = Field(default_factory=current_month)
    ndvi: Optional[float] = None
    evi: Optional[float] = None
    forest_percent: Optional[float] = None
    grassland_percent: Optional[float] = None

    pm10: Optional[float] = None
    wind_speed: Optional[float] = None
    temp_range: Optional[float] = None
    urban_percent: Optional[float] = None
    water_percent: Optional[float] = None
    barren_percent: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def fill_missing(cls, data: Any) -> Any:
        """Drop missing / non-finite values and estimate ``drought_index``."""
        if not isinstance(data, dict):
            return data
        values = {k: v for k, v in data.items() if not is_missing(v)}
        if "drought_index" not in values:
            try:
                temperature = float(values.get("temperature", FALLBACK_TEMPERATURE))
                humidity = float(values.get("humidity", FALLBACK_HUMIDITY))
            except (TypeError, ValueError):
                # Field validation reports the bad temperature / humidity.
                return values
            if not math.isfinite(temperature):
                temperature = FALLBACK_TEMPERATURE
            if not math.isfinite(humidity):
                humidity = FALLBACK_HUMIDITY
            values["drought_index"] = calculate_drought_index(
                clamp(temperature, -50.0, 60.0), clamp(humidity, 0.0, 100.0)
            )
        return values

    @field_validator("temperature")
    @classmethod
    def clamp_temperature(cls, v: float) -> float:
        return clamp(v, -50.0, 60.0)

    @field_validator("humidity", "drought_index")
    @classmethod
    def clamp_percent_scale(cls, v: float) -> float:
        return clamp(v, 0.0, 100.0)

    @field_validator("air_quality_index")
    @classmethod
    def clamp_aqi(cls, v: float) -> float:
        return clamp(v, 1.0, 5.0)

    @field_validator("pm2_5")
    @classmethod
    def clamp_pm25(cls, v: float) -> float:
        return clamp(v, 0.0, 1000.0)

    @field_validator("month")
    @classmethod
    def clamp_month(cls, v: int) -> int:
        return int(clamp(v, 1, 12))

    @field_validator("ndvi", "evi")
    @classmethod
    def clamp_vegetation(cls, v: Optional[float]) -> Optional[float]:
        return None if v is None else clamp(v, -1.0, 1.0)

    @field_validator(
        "forest_percent", "grassland_percent",
        "urban_percent", "water_percent", "barren_percent",
    )
    @classmethod
    def clamp_cover(cls, v: Optional[float]) -> Optional[float]:
        return None if v is None else clamp(v, 0.0, 100.0)
