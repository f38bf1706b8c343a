"""
Earth Engine function client — vegetation indices and land cover.

The function accepts ``POST {"latitude": .., "longitude": ..}`` and returns::

    {
      "vegetation_index": {"ndvi": 0.41, "evi": 0.28},
      "land_cover": {"forest_percent": 35.0, "grassland_percent": 20.0, ...}
    }

Both blocks are optional inputs to the scorer, so every failure here is
logged and reported as "no data" rather than raised.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from wildfire_risk.models.features import LandCover, VegetationIndex

logger = logging.getLogger(__name__)


class EarthEngineClient:
    """Client for the Earth Engine vegetation / land-cover function.

    Attributes:
        url: Full function URL.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch(
        self,
        lat: float,
        lon: float,
        authorization: Optional[str] = None,
    ) -> tuple[Optional[VegetationIndex], Optional[LandCover]]:
        """Return ``(vegetation, land_cover)``; either may be ``None``.

        Args:
            lat, lon: Coordinates to sample.
            authorization: Forwarded ``Authorization`` header, if any.
        """
        headers = {"Content-Type": "application/json"}
        if authorization:
            headers["Authorization"] = authorization

        try:
            resp = self._client.post(
                self.url, json={"latitude": lat, "longitude": lon}, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error("Error fetching Earth Engine data: %s", exc)
            return None, None

        if resp.is_error:
            logger.error("Failed to get Earth Engine data: %s %s", resp.status_code, resp.text)
            return None, None

        try:
            payload = resp.json()
            vegetation = payload.get("vegetation_index")
            land_cover = payload.get("land_cover")
            return (
                VegetationIndex.model_validate(vegetation) if vegetation else None,
                LandCover.model_validate(land_cover) if land_cover else None,
            )
        except (ValueError, AttributeError, ValidationError) as exc:
            logger.error("Malformed Earth Engine response: %s", exc)
            return None, None
