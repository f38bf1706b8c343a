"""
Per-tree scoring: one ``TreeRule`` × one ``FeatureRecord`` → 0–97.

Rules, in order (``t`` = the tree, values in probability points)
-----------------------------------------------------------------
 1. start at ``base_probability`` (25)
 2. temperature  T > t.temp:      + C_t · (T / t.temp)^1.2
                 otherwise:       + C_t · 0.1 · max(T, 0) / t.temp
 3. humidity     H < t.hum:       + C_h · ((t.hum − H) / t.hum)^1.3
                 otherwise:       − C_h · 0.6 · (H − t.hum) / (100 − t.hum)
 4. drought      D > t.drought:   + C_d · (D / t.drought)^1.2
                 otherwise:       − C_d · 0.3 · (t.drought − D) / t.drought
 5. AQI          A > t.aqi:       + C_a · A / 5
 6. PM2.5        P > 2 · t.pm25:  + C_p
                 otherwise:       + C_p · 0.5 · min(P, 100) / 100
 7. NDVI         low ≤ N ≤ high:  + C_n
                 N < low:         + C_n · 0.6 · (1 − H / 100)   (sparse but dry)
                 N > high:        + C_n · 0.25                  (lush, wet)
 8. forest %     40 ≤ F ≤ 80:     + C_f
                 otherwise:       + C_f · F / 100
 9. grassland %                   + C_g · G / 100, × 1.5 when H < 50
10. latitude     FULL band:       + C_l,  PARTIAL band: + C_l / 2
11. season       fire season:     + t.seasonal_bonus
12. hot & dry    T > t.temp and H < t.hum:
                 + C_i · ((T − t.temp) / t.temp) · ((t.hum − H) / t.hum)
13. clamp to [0, max_probability]

Every rule is non-decreasing in temperature and non-increasing in humidity,
so hotter or drier inputs never lower a tree's score.
"""

from __future__ import annotations

from wildfire_risk.forest.tree import LatitudeRisk, TreeRule, latitude_risk, seasonal_adjustment
from wildfire_risk.models.features import FeatureRecord, clamp

BASE_PROBABILITY = 25.0
MAX_PROBABILITY = 97.0

_TEMP_EXPONENT = 1.2
_HUMIDITY_EXPONENT = 1.3
_DROUGHT_EXPONENT = 1.2

_COOL_TEMP_WEIGHT = 0.1
_HUMID_PENALTY_WEIGHT = 0.6
_WET_FUEL_PENALTY_WEIGHT = 0.3
_PM25_PARTIAL_WEIGHT = 0.5
_SPARSE_VEGETATION_WEIGHT = 0.6
_LUSH_VEGETATION_WEIGHT = 0.25
_DRY_GRASS_AMPLIFIER = 1.5
_DRY_GRASS_HUMIDITY = 50.0


def score_tree(
    tree: TreeRule,
    features: FeatureRecord,
    base_probability: float = BASE_PROBABILITY,
    max_probability: float = MAX_PROBABILITY,
) -> float:
    """Raw probability from a single tree, clamped to ``[0, max_probability]``."""
    temp = features.temperature
    hum = features.humidity
    probability = base_probability

    is_hot = temp > tree.temp_threshold
    if is_hot:
        probability += tree.temp_contribution * (temp / tree.temp_threshold) ** _TEMP_EXPONENT
    else:
        probability += (
            tree.temp_contribution * _COOL_TEMP_WEIGHT * max(temp, 0.0) / tree.temp_threshold
        )

    is_dry = hum < tree.humidity_threshold
    if is_dry:
        dryness = (tree.humidity_threshold - hum) / tree.humidity_threshold
        probability += tree.humidity_contribution * dryness ** _HUMIDITY_EXPONENT
    else:
        excess = (hum - tree.humidity_threshold) / max(100.0 - tree.humidity_threshold, 1.0)
        probability -= tree.humidity_contribution * _HUMID_PENALTY_WEIGHT * excess

    drought = features.drought_index
    if drought > tree.drought_threshold:
        probability += (
            tree.drought_contribution * (drought / tree.drought_threshold) ** _DROUGHT_EXPONENT
        )
    else:
        shortfall = (tree.drought_threshold - drought) / tree.drought_threshold
        probability -= tree.drought_contribution * _WET_FUEL_PENALTY_WEIGHT * shortfall

    if features.air_quality_index > tree.aqi_threshold:
        probability += tree.aqi_contribution * features.air_quality_index / 5.0

    if features.pm2_5 > 2.0 * tree.pm25_threshold:
        probability += tree.pm25_contribution
    else:
        probability += (
            tree.pm25_contribution * _PM25_PARTIAL_WEIGHT * min(features.pm2_5, 100.0) / 100.0
        )

    probability += _vegetation_term(tree, features)
    probability += _land_cover_term(tree, features)

    risk = latitude_risk(tree, features.latitude)
    if risk is LatitudeRisk.FULL:
        probability += tree.latitude_contribution
    elif risk is LatitudeRisk.PARTIAL:
        probability += tree.latitude_contribution / 2.0

    probability += seasonal_adjustment(tree, features.latitude, features.month)

    # Compounding hot + dry regime.
    if is_hot and is_dry:
        heat_excess = (temp - tree.temp_threshold) / tree.temp_threshold
        dry_excess = (tree.humidity_threshold - hum) / tree.humidity_threshold
        probability += tree.interaction_contribution * heat_excess * dry_excess

    return clamp(probability, 0.0, max_probability)


def _vegetation_term(tree: TreeRule, features: FeatureRecord) -> float:
    ndvi = features.ndvi
    if ndvi is None:
        return 0.0
    if tree.ndvi_low_threshold <= ndvi <= tree.ndvi_high_threshold:
        return tree.ndvi_contribution
    if ndvi < tree.ndvi_low_threshold:
        return tree.ndvi_contribution * _SPARSE_VEGETATION_WEIGHT * (1.0 - features.humidity / 100.0)
    return tree.ndvi_contribution * _LUSH_VEGETATION_WEIGHT


def _land_cover_term(tree: TreeRule, features: FeatureRecord) -> float:
    total = 0.0
    forest = features.forest_percent
    if forest is not None:
        if tree.forest_band_low <= forest <= tree.forest_band_high:
            total += tree.forest_contribution
        else:
            total += tree.forest_contribution * forest / 100.0

    grassland = features.grassland_percent
    if grassland is not None:
        term = tree.grassland_contribution * grassland / 100.0
        if features.humidity < _DRY_GRASS_HUMIDITY:
            term *= _DRY_GRASS_AMPLIFIER
        total += term
    return total
