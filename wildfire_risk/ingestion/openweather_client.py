"""
OpenWeather client — geocoding, current weather and air pollution.

API:   https://api.openweathermap.org
Docs:  https://openweathermap.org/api

Credential setup (.env, gitignored):
  OPENWEATHER_API_KEY=your_key_here

Endpoints::

    GET {geocoding_base_url}/direct?q={location}&limit=1&appid={key}
    GET {base_url}/weather?lat=..&lon=..&units=metric&appid={key}
    GET {base_url}/air_pollution?lat=..&lon=..&appid={key}

Geocoding tries the city part of "City, Region" first, then the full
string, since the direct-geocoding endpoint often misses qualified names.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from wildfire_risk.models.features import AirPollutionData, WeatherData

logger = logging.getLogger(__name__)

_LOCATION_HINT = (
    "Please try a different location name format "
    "(e.g. 'San Francisco' or 'Los Angeles, CA')."
)


class GeocodingError(RuntimeError):
    """Raised when a location string cannot be resolved to coordinates.

    Attributes:
        location: The location string as supplied by the caller.
    """

    def __init__(self, location: str, detail: str = "") -> None:
        self.location = location
        self.detail = detail
        super().__init__(f"Unable to find coordinates for this location. {_LOCATION_HINT}")


class UpstreamDataError(RuntimeError):
    """Raised when an upstream API fails or returns an incomplete payload.

    Attributes:
        source: Short name of the failing endpoint ("weather", "air_pollution").
        detail: Underlying error text, for logs and the ``details`` field.
    """

    def __init__(self, source: str, message: str, detail: str = "") -> None:
        self.source = source
        self.detail = detail
        super().__init__(message)


class OpenWeatherClient:
    """Synchronous OpenWeather client.

    Usage::

        client = OpenWeatherClient(api_key=os.environ["OPENWEATHER_API_KEY"])
        lat, lon = client.get_coordinates("Boise, ID")
        weather = client.get_weather(lat, lon)

    Attributes:
        api_key: OpenWeather ``appid``.
        base_url: Data API root (weather, air pollution).
        geocoding_base_url: Geocoding API root.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org/data/2.5",
        geocoding_base_url: str = "https://api.openweathermap.org/geo/1.0",
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.geocoding_base_url = geocoding_base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OpenWeatherClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def masked_key(self) -> str:
        """API key with all but the first and last four characters hidden."""
        if len(self.api_key) <= 8:
            return "****"
        return f"{self.api_key[:4]}...{self.api_key[-4:]}"

    # ── Geocoding ─────────────────────────────────────────────────────────────

    def get_coordinates(self, location: str) -> tuple[float, float]:
        """Resolve ``location`` to ``(lat, lon)``.

        Raises:
            GeocodingError: If no candidate matches or the API fails.
        """
        clean = location.strip().rstrip(",").strip()

        if "," in clean:
            city_only = clean.split(",")[0].strip()
            try:
                coords = self._geocode(city_only)
            except (httpx.HTTPError, ValueError) as exc:
                logger.info("City-only geocoding failed for %r (%s); trying full location.", city_only, exc)
                coords = None
            if coords is not None:
                logger.info("Found coordinates using city name: %s", city_only)
                return coords

        try:
            coords = self._geocode(clean)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Geocoding error for %r: %s", clean, exc)
            raise GeocodingError(location, str(exc)) from exc

        if coords is None:
            raise GeocodingError(location, "Location not found")
        logger.info("Found coordinates for %s: lat=%s, lon=%s", clean, *coords)
        return coords

    def _geocode(self, query: str) -> Optional[tuple[float, float]]:
        data = self._get(
            f"{self.geocoding_base_url}/direct",
            {"q": query, "limit": 1},
        )
        if not isinstance(data, list) or not data:
            return None
        try:
            return float(data[0]["lat"]), float(data[0]["lon"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Geocoding candidate for %r has no usable coordinates: %r", query, data[0])
            return None

    # ── Weather / air quality ─────────────────────────────────────────────────

    def get_weather(self, lat: float, lon: float) -> WeatherData:
        """Current weather in metric units.

        Raises:
            UpstreamDataError: On HTTP failure, a non-JSON body, or a payload
                without a valid ``main`` block.
        """
        try:
            data = self._get(
                f"{self.base_url}/weather",
                {"lat": lat, "lon": lon, "units": "metric"},
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Weather data error: %s", exc)
            raise UpstreamDataError(
                "weather", "Failed to retrieve weather data. Please try again later.", str(exc)
            ) from exc

        if not isinstance(data, dict) or not data.get("main"):
            raise UpstreamDataError(
                "weather",
                "Failed to retrieve weather data. Please try again later.",
                "Incomplete weather data received",
            )
        try:
            return WeatherData.model_validate(data)
        except ValidationError as exc:
            logger.error("Malformed weather data: %s", exc)
            raise UpstreamDataError(
                "weather", "Failed to retrieve weather data. Please try again later.", str(exc)
            ) from exc

    def get_air_pollution(self, lat: float, lon: float) -> AirPollutionData:
        """Current air-pollution reading.

        Raises:
            UpstreamDataError: On HTTP failure, a non-JSON body, or an empty or
                malformed ``list``.
        """
        try:
            data = self._get(f"{self.base_url}/air_pollution", {"lat": lat, "lon": lon})
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Air pollution data error: %s", exc)
            raise UpstreamDataError(
                "air_pollution",
                "Failed to retrieve air pollution data. Please try again later.",
                str(exc),
            ) from exc

        if not isinstance(data, dict) or not data.get("list"):
            raise UpstreamDataError(
                "air_pollution",
                "Failed to retrieve air pollution data. Please try again later.",
                "Incomplete air pollution data received",
            )
        try:
            return AirPollutionData.model_validate(data)
        except ValidationError as exc:
            logger.error("Malformed air pollution data: %s", exc)
            raise UpstreamDataError(
                "air_pollution",
                "Failed to retrieve air pollution data. Please try again later.",
                str(exc),
            ) from exc

    # ── Internals ─────────────────────────────────────────────────────────────

    def _get(self, url: str, params: dict[str, Any]) -> Any:
        resp = self._client.get(url, params={**params, "appid": self.api_key})
        resp.raise_for_status()
        return resp.json()
