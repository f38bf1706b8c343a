"""
Ensemble aggregation.

Prediction flow
---------------
1. Applicable subset: drop COOL_CLIMATE trees when T > 30 °C and
   HUMID_CLIMATE trees when H < 30 %.  If fewer than 70 % of trees remain,
   score the full ensemble instead.
2. Score every tree in the chosen subset.
3. Sort; trim the lowest and highest 10 % (at least one score survives).
4. Mean of the survivors.
5. Calibrate: × 1.05 above 70, × 0.95 below 30, unchanged between.
6. Round to one decimal; clamp to [0, 97].

A ``Forest`` is built once and never mutated afterwards, so a single
instance can serve concurrent requests without locking.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from wildfire_risk.config import ForestConfig
from wildfire_risk.forest.builder import build_trees
from wildfire_risk.forest.explainer import BASE_FEATURE_IMPORTANCE, explain_prediction
from wildfire_risk.forest.scoring import score_tree
from wildfire_risk.forest.tree import Specialization, TreeRule
from wildfire_risk.models.features import FeatureRecord, clamp

logger = logging.getLogger(__name__)


# ── Pure aggregation helpers ──────────────────────────────────────────────────


def applicable_trees(
    trees: Sequence[TreeRule],
    features: FeatureRecord,
    config: ForestConfig,
) -> tuple[TreeRule, ...]:
    """Trees relevant to the current conditions (never mutates ``trees``).

    Falls back to all of ``trees`` when filtering would leave fewer than
    ``config.min_applicable_fraction`` of them.
    """
    hot = features.temperature > config.hot_filter_temperature
    dry = features.humidity < config.dry_filter_humidity

    subset = tuple(
        t for t in trees
        if not (hot and t.specialization is Specialization.COOL_CLIMATE)
        and not (dry and t.specialization is Specialization.HUMID_CLIMATE)
    )
    if len(subset) < config.min_applicable_fraction * len(trees):
        logger.debug(
            "Applicable subset too small (%d of %d); using full ensemble.",
            len(subset), len(trees),
        )
        return tuple(trees)
    return subset


def trimmed_mean(scores: Sequence[float], trim_fraction: float) -> float:
    """Mean after dropping ``trim_fraction`` of scores from each end.

    Raises:
        ValueError: If ``scores`` is empty.
    """
    if not scores:
        raise ValueError("trimmed_mean() requires at least one score.")
    ordered = sorted(scores)
    n = len(ordered)
    k = math.floor(n * trim_fraction)
    if n - 2 * k < 1:
        k = (n - 1) // 2
    kept = ordered[k:n - k]
    return sum(kept) / len(kept)


def calibrate(average: float, config: ForestConfig) -> float:
    """Correct the aggregated score at the probability extremes."""
    if average > config.calibration_high_threshold:
        return average * config.calibration_high_factor
    if average < config.calibration_low_threshold:
        return average * config.calibration_low_factor
    return average


def aggregate_scores(scores: Sequence[float], config: ForestConfig) -> float:
    """Trim, average, calibrate, round and clamp a list of tree scores."""
    average = trimmed_mean(scores, config.trim_fraction)
    calibrated = calibrate(average, config)
    return clamp(round(calibrated, 1), 0.0, config.max_probability)


# ── Forest ────────────────────────────────────────────────────────────────────


class Forest:
    """Fixed, read-only ensemble of ``TreeRule`` objects.

    Usage::

        forest = Forest.build(config.forest)
        probability = forest.predict(record)

    Attributes:
        config: Aggregation constants used by ``predict()``.
        trees: The ensemble, in index order.
    """

    def __init__(
        self,
        trees: Sequence[TreeRule],
        config: Optional[ForestConfig] = None,
    ) -> None:
        if not trees:
            raise ValueError("A Forest needs at least one tree.")
        self.config = config or ForestConfig()
        self._trees: tuple[TreeRule, ...] = tuple(trees)

    @classmethod
    def build(cls, config: Optional[ForestConfig] = None) -> "Forest":
        """Generate ``config.num_trees`` trees and wrap them."""
        config = config or ForestConfig()
        return cls(build_trees(config), config)

    @property
    def trees(self) -> tuple[TreeRule, ...]:
        return self._trees

    @property
    def feature_importance(self) -> dict[str, float]:
        """Static base weights (copy); see ``explain()`` for the seasonal view."""
        return dict(BASE_FEATURE_IMPORTANCE)

    def __len__(self) -> int:
        return len(self._trees)

    def applicable_trees(self, features: FeatureRecord) -> tuple[TreeRule, ...]:
        return applicable_trees(self._trees, features, self.config)

    def tree_scores(self, features: FeatureRecord) -> list[float]:
        """Raw scores of the applicable trees, in tree order."""
        return [
            score_tree(
                tree,
                features,
                base_probability=self.config.base_probability,
                max_probability=self.config.max_probability,
            )
            for tree in self.applicable_trees(features)
        ]

    def predict(self, features: FeatureRecord) -> float:
        """Calibrated wildfire probability in ``[0, max_probability]``."""
        probability = aggregate_scores(self.tree_scores(features), self.config)
        logger.debug("Forest prediction: %.1f%%", probability)
        return probability

    def explain(
        self,
        month: Optional[int] = None,
        latitude: Optional[float] = None,
    ) -> dict[str, float]:
        return explain_prediction(month=month, latitude=latitude)
