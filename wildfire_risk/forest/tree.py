"""
Per-tree parameters and the latitude / season rules evaluated against them.

A ``TreeRule`` is plain data.  Latitude risk and the fire-season bonus are
pure functions of (tree, latitude[, month]).

Latitude risk bands (thresholds scaled by the tree's jitter ``j``)
-----------------------------------------------------------------
    FULL     30·j ≤ |lat| ≤ 50·j          mid-latitude fire belt
    PARTIAL  15 ≤ |lat| < 30·j  or  50·j < |lat| ≤ 60
    NONE     everything else (tropics, high latitudes)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from wildfire_risk.utils.time_utils import is_fire_season


class Specialization(IntEnum):
    """Regime a tree is most sensitive to; assigned as ``index mod 5``."""

    BALANCED = 0
    COOL_CLIMATE = 1    # lower temperature threshold
    HUMID_CLIMATE = 2   # higher humidity threshold
    VEGETATION = 3      # stronger NDVI / forest contributions
    DROUGHT = 4         # lower drought threshold, stronger drought contribution


class LatitudeRisk(Enum):
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


@dataclass(frozen=True)
class TreeRule:
    """Immutable parameters of one ensemble member.

    Thresholds are in the units of the feature they gate; contributions are
    probability points added (or, for humidity / drought below threshold,
    subtracted) by the scoring rules in ``scoring.score_tree``.
    """

    index: int
    specialization: Specialization
    jitter: float

    temp_threshold: float
    temp_contribution: float
    humidity_threshold: float
    humidity_contribution: float
    drought_threshold: float
    drought_contribution: float
    aqi_threshold: float
    aqi_contribution: float
    pm25_threshold: float
    pm25_contribution: float
    ndvi_low_threshold: float
    ndvi_high_threshold: float
    ndvi_contribution: float
    forest_band_low: float
    forest_band_high: float
    forest_contribution: float
    grassland_contribution: float
    latitude_band_low: float
    latitude_band_high: float
    partial_band_low: float
    partial_band_high: float
    latitude_contribution: float
    seasonal_bonus: float
    interaction_contribution: float


def latitude_risk(tree: TreeRule, latitude: float) -> LatitudeRisk:
    """Classify ``latitude`` against the tree's risk bands."""
    abs_lat = abs(latitude)
    if tree.latitude_band_low <= abs_lat <= tree.latitude_band_high:
        return LatitudeRisk.FULL
    if tree.partial_band_low <= abs_lat < tree.latitude_band_low:
        return LatitudeRisk.PARTIAL
    if tree.latitude_band_high < abs_lat <= tree.partial_band_high:
        return LatitudeRisk.PARTIAL
    return LatitudeRisk.NONE


def seasonal_adjustment(tree: TreeRule, latitude: float, month: int) -> float:
    """Fire-season bonus: May–Sep in the north, Nov–Mar in the south."""
    if is_fire_season(latitude, month):
        return tree.seasonal_bonus
    return 0.0
