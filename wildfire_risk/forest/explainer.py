"""
Feature-importance explainer.

Base weights are static and sum to 1.0.  During summer, 0.05 of weight moves
from humidity to temperature (60 %) and drought (40 %).  Humidity never drops
below 0.15; the weights are re-normalised afterwards.
"""

from __future__ import annotations

from typing import Optional

from wildfire_risk.utils.time_utils import current_month, is_summer

BASE_FEATURE_IMPORTANCE: dict[str, float] = {
    "temperature":       0.25,
    "humidity":          0.20,
    "drought_index":     0.22,
    "air_quality_index": 0.06,
    "pm2_5":             0.07,
    "co2_level":         0.04,
    "latitude":          0.04,
    "longitude":         0.02,
    "ndvi":              0.06,
    "forest_percent":    0.03,
    "grassland_percent": 0.01,
}

SUMMER_SHIFT = 0.05
TEMPERATURE_SHARE = 0.6
DROUGHT_SHARE = 0.4
HUMIDITY_FLOOR = 0.15


def explain_prediction(
    month: Optional[int] = None,
    latitude: Optional[float] = None,
) -> dict[str, float]:
    """Return feature name → weight, summing to 1.0.

    Args:
        month: 1–12; defaults to the current UTC month.
        latitude: Restricts the summer check to one hemisphere.  Without it,
            June–August and December–February both count as summer.
    """
    if month is None:
        month = current_month()

    weights = dict(BASE_FEATURE_IMPORTANCE)
    if is_summer(month, latitude):
        shift = min(SUMMER_SHIFT, max(weights["humidity"] - HUMIDITY_FLOOR, 0.0))
        weights["humidity"] -= shift
        weights["temperature"] += shift * TEMPERATURE_SHARE
        weights["drought_index"] += shift * DROUGHT_SHARE

    total = sum(weights.values())
    return {name: weight / total for name, weight in weights.items()}
