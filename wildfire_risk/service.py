"""
Prediction service: location string → ``PredictionResponse``.

Flow (mirrors the HTTP handler)
-------------------------------
1. Geocode the location (OpenWeather).
2. Fetch current weather and air pollution (OpenWeather).
3. Fetch vegetation / land cover (Earth Engine function; optional).
4. Derive CO2-equivalent and drought index.
5. Prepare the ``FeatureRecord``, score it against the injected ``Forest``,
   attach the seasonally adjusted feature importance.

The service owns one ``Forest`` for its whole lifetime; build it once and
reuse the service across requests.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from wildfire_risk.config import AppConfig
from wildfire_risk.features.preparation import (
    calculate_drought_index,
    convert_co_to_co2_equivalent,
    prepare_input_data,
)
from wildfire_risk.forest.ensemble import Forest
from wildfire_risk.forest.explainer import explain_prediction
from wildfire_risk.ingestion.earth_engine_client import EarthEngineClient
from wildfire_risk.ingestion.openweather_client import OpenWeatherClient
from wildfire_risk.models.features import (
    AirPollutionData,
    LandCover,
    VegetationIndex,
    WeatherData,
)
from wildfire_risk.models.prediction import PredictionResponse

logger = logging.getLogger(__name__)

OPENWEATHER_API_KEY_ENV = "OPENWEATHER_API_KEY"


class MissingApiKeyError(RuntimeError):
    """Raised when a live prediction is requested without an OpenWeather key."""

    def __init__(self) -> None:
        super().__init__("No weather API keys are configured")


def generate_prediction(
    location: str,
    weather: WeatherData,
    air_pollution: AirPollutionData,
    lat: float,
    lon: float,
    forest: Forest,
    config: AppConfig,
    vegetation: Optional[VegetationIndex] = None,
    land_cover: Optional[LandCover] = None,
    month: Optional[int] = None,
) -> PredictionResponse:
    """Assemble the response for already-fetched upstream payloads.

    Pure with respect to I/O; exercised directly by tests and batch tools.
    """
    air = air_pollution.latest
    co2_level = convert_co_to_co2_equivalent(air.components.co)

    drought_index: Optional[float] = None
    if weather.main.temp is not None and weather.main.humidity is not None:
        drought_index = calculate_drought_index(weather.main.temp, weather.main.humidity)

    prep = config.preparation
    record = prepare_input_data(
        weather,
        air_pollution,
        drought_index,
        co2_level,
        lat,
        lon,
        vegetation=vegetation,
        land_cover=land_cover,
        month=month,
        adjust_drought=prep.adjust_drought_from_weather,
        fallback_temperature=prep.fallback_temperature,
        fallback_humidity=prep.fallback_humidity,
    )
    probability = forest.predict(record)

    return PredictionResponse(
        location=weather.name or location,
        latitude=lat,
        longitude=lon,
        probability=probability,
        co2_level=co2_level,
        temperature=record.temperature,
        humidity=record.humidity,
        drought_index=record.drought_index,
        air_quality_index=record.air_quality_index,
        pm2_5=record.pm2_5,
        pm10=record.pm10,
        vegetation_index=vegetation,
        land_cover=land_cover,
        feature_importance=explain_prediction(month=record.month),
    )


class PredictionService:
    """Long-lived service holding the forest and the upstream clients.

    Usage::

        service = PredictionService.from_config(config)
        response = service.predict_location("Boise, ID")

    Attributes:
        config: Application configuration.
        forest: The ensemble every request is scored against.
        weather_client: OpenWeather client, or ``None`` when no key is set.
        earth_engine_client: Optional vegetation / land-cover client.
    """

    def __init__(
        self,
        config: AppConfig,
        forest: Forest,
        weather_client: Optional[OpenWeatherClient] = None,
        earth_engine_client: Optional[EarthEngineClient] = None,
    ) -> None:
        self.config = config
        self.forest = forest
        self.weather_client = weather_client
        self.earth_engine_client = earth_engine_client

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        forest: Optional[Forest] = None,
    ) -> "PredictionService":
        """Build the forest and clients from ``config`` and the environment."""
        api = config.api
        api_key = os.environ.get(OPENWEATHER_API_KEY_ENV, "")

        weather_client: Optional[OpenWeatherClient] = None
        if api_key:
            weather_client = OpenWeatherClient(
                api_key=api_key,
                base_url=api.openweather_base_url,
                geocoding_base_url=api.geocoding_base_url,
                timeout=api.timeout_seconds,
            )
            logger.info("Using OpenWeather API key: %s", weather_client.masked_key)
        else:
            logger.error("OpenWeather API key is not configured.")

        earth_engine_client: Optional[EarthEngineClient] = None
        if api.earth_engine_url:
            earth_engine_client = EarthEngineClient(api.earth_engine_url, timeout=api.timeout_seconds)

        return cls(
            config=config,
            forest=forest or Forest.build(config.forest),
            weather_client=weather_client,
            earth_engine_client=earth_engine_client,
        )

    def close(self) -> None:
        if self.weather_client is not None:
            self.weather_client.close()
        if self.earth_engine_client is not None:
            self.earth_engine_client.close()

    def predict_location(
        self,
        location: str,
        authorization: Optional[str] = None,
    ) -> PredictionResponse:
        """Fetch everything for ``location`` and score it.

        Raises:
            MissingApiKeyError: If no OpenWeather client is configured.
            GeocodingError: If the location cannot be resolved.
            UpstreamDataError: If weather or air-pollution data is unavailable.
        """
        if self.weather_client is None:
            raise MissingApiKeyError()

        lat, lon = self.weather_client.get_coordinates(location)
        logger.info("Coordinates for %s: lat=%s, lon=%s", location, lat, lon)

        weather = self.weather_client.get_weather(lat, lon)
        logger.info("Weather data received for %s", location)

        air_pollution = self.weather_client.get_air_pollution(lat, lon)
        logger.info("Air pollution data received for %s", location)

        vegetation: Optional[VegetationIndex] = None
        land_cover: Optional[LandCover] = None
        if self.earth_engine_client is not None:
            vegetation, land_cover = self.earth_engine_client.fetch(lat, lon, authorization)

        response = generate_prediction(
            location,
            weather,
            air_pollution,
            lat,
            lon,
            forest=self.forest,
            config=self.config,
            vegetation=vegetation,
            land_cover=land_cover,
        )
        logger.info(
            "Prediction completed for %s: probability=%.1f%%", location, response.probability
        )
        return response
