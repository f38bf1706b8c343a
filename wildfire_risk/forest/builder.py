"""
Ensemble construction.

Each tree ``i`` gets:
  - a jitter factor ``j ~ U(jitter_min, jitter_max)`` (default 0.95–1.05)
    that scales every threshold, so trees disagree slightly without the
    ensemble losing coherence;
  - a specialization ``i mod specialization_count`` that moves two or three
    thresholds / contributions toward one regime;
  - contributions drawn from narrow uniform bands around fixed bases.

Base thresholds (before jitter and specialization)
--------------------------------------------------
    temperature    25 °C     (COOL_CLIMATE: 20 °C)
    humidity       40 %      (HUMID_CLIMATE: 55 %)
    drought        60        (DROUGHT: 50, contribution × 1.2)
    AQI            3
    PM2.5          30 μg/m³
    NDVI band      0.20–0.55 (VEGETATION: NDVI × 1.5, forest × 1.25)
    forest band    40–80 %   (not jittered)
    latitude band  30–50°    (partial: 15° and 60°, not jittered)

Randomness
----------
``seed=None`` draws from an unseeded generator, so ensembles differ between
processes.  With an integer seed each tree's generator is seeded from
``(seed, index)``: tree ``i`` is identical across restarts and regardless of
how many trees are built.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from wildfire_risk.config import ForestConfig
from wildfire_risk.forest.tree import Specialization, TreeRule

logger = logging.getLogger(__name__)

# (base, spread): contribution ~ base + U(0, spread)
_CONTRIBUTIONS: dict[str, tuple[float, float]] = {
    "temp":        (12.0, 4.0),
    "humidity":    (18.0, 4.0),
    "drought":     (14.0, 4.0),
    "aqi":         (5.0, 2.0),
    "pm25":        (6.0, 3.0),
    "ndvi":        (7.0, 2.0),
    "forest":      (4.5, 1.0),
    "grassland":   (4.0, 2.0),
    "latitude":    (3.5, 1.0),
    "seasonal":    (7.0, 2.0),
    "interaction": (14.0, 4.0),
}

_TEMP_THRESHOLD = 25.0
_COOL_TEMP_THRESHOLD = 20.0
_HUMIDITY_THRESHOLD = 40.0
_HUMID_HUMIDITY_THRESHOLD = 55.0
_DROUGHT_THRESHOLD = 60.0
_DROUGHT_SPECIALIST_THRESHOLD = 50.0
_AQI_THRESHOLD = 3.0
_PM25_THRESHOLD = 30.0
_NDVI_LOW = 0.20
_NDVI_HIGH = 0.55
_FOREST_BAND = (40.0, 80.0)
_LATITUDE_BAND = (30.0, 50.0)
_PARTIAL_BAND = (15.0, 60.0)


def _tree_rng(seed: Optional[int], index: int) -> random.Random:
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{index}")


def build_tree(index: int, config: ForestConfig) -> TreeRule:
    """Generate the parameters of tree ``index``."""
    rng = _tree_rng(config.seed, index)
    jitter = rng.uniform(config.jitter_min, config.jitter_max)
    specialization = Specialization(index % config.specialization_count)

    def draw(name: str) -> float:
        base, spread = _CONTRIBUTIONS[name]
        return base + rng.uniform(0.0, spread)

    temp_contribution = draw("temp")
    humidity_contribution = draw("humidity")
    drought_contribution = draw("drought")
    aqi_contribution = draw("aqi")
    pm25_contribution = draw("pm25")
    ndvi_contribution = draw("ndvi")
    forest_contribution = draw("forest")
    grassland_contribution = draw("grassland")
    latitude_contribution = draw("latitude")
    seasonal_bonus = draw("seasonal")
    interaction_contribution = draw("interaction")

    temp_threshold = _TEMP_THRESHOLD
    humidity_threshold = _HUMIDITY_THRESHOLD
    drought_threshold = _DROUGHT_THRESHOLD

    if specialization is Specialization.COOL_CLIMATE:
        temp_threshold = _COOL_TEMP_THRESHOLD
    elif specialization is Specialization.HUMID_CLIMATE:
        humidity_threshold = _HUMID_HUMIDITY_THRESHOLD
    elif specialization is Specialization.VEGETATION:
        ndvi_contribution *= 1.5
        forest_contribution *= 1.25
    elif specialization is Specialization.DROUGHT:
        drought_threshold = _DROUGHT_SPECIALIST_THRESHOLD
        drought_contribution *= 1.2

    return TreeRule(
        index=index,
        specialization=specialization,
        jitter=jitter,
        temp_threshold=temp_threshold * jitter,
        temp_contribution=temp_contribution,
        humidity_threshold=humidity_threshold * jitter,
        humidity_contribution=humidity_contribution,
        drought_threshold=drought_threshold * jitter,
        drought_contribution=drought_contribution,
        aqi_threshold=_AQI_THRESHOLD * jitter,
        aqi_contribution=aqi_contribution,
        pm25_threshold=_PM25_THRESHOLD * jitter,
        pm25_contribution=pm25_contribution,
        ndvi_low_threshold=_NDVI_LOW * jitter,
        ndvi_high_threshold=_NDVI_HIGH * jitter,
        ndvi_contribution=ndvi_contribution,
        forest_band_low=_FOREST_BAND[0],
        forest_band_high=_FOREST_BAND[1],
        forest_contribution=forest_contribution,
        grassland_contribution=grassland_contribution,
        latitude_band_low=_LATITUDE_BAND[0] * jitter,
        latitude_band_high=_LATITUDE_BAND[1] * jitter,
        partial_band_low=_PARTIAL_BAND[0],
        partial_band_high=_PARTIAL_BAND[1],
        latitude_contribution=latitude_contribution,
        seasonal_bonus=seasonal_bonus,
        interaction_contribution=interaction_contribution,
    )


def build_trees(config: ForestConfig) -> tuple[TreeRule, ...]:
    """Generate exactly ``config.num_trees`` trees, in index order."""
    trees = tuple(build_tree(i, config) for i in range(config.num_trees))
    logger.info(
        "Built forest: %d trees (%s).",
        len(trees),
        f"seed={config.seed}" if config.seed is not None else "unseeded",
    )
    return trees
