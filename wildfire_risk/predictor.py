"""
Function-call boundary used by the service layer and the CLI.

    prepare_input_data(...)            → FeatureRecord
    predict_wildfire_probability(rec)  → float in [0, 97], one decimal
    explain_prediction()               → {feature: weight}, sums to 1.0

Callers that own a ``Forest`` (the HTTP app, batch scoring, tests) pass it
in explicitly.  Otherwise the process-wide forest from ``get_forest()`` is
used; it is built on first use and shared read-only afterwards.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from wildfire_risk.config import ForestConfig
from wildfire_risk.features.preparation import prepare_input_data
from wildfire_risk.forest.ensemble import Forest
from wildfire_risk.forest.explainer import explain_prediction
from wildfire_risk.models.features import FeatureRecord

logger = logging.getLogger(__name__)

__all__ = [
    "explain_prediction",
    "get_forest",
    "predict_wildfire_probability",
    "prepare_input_data",
    "reset_forest",
]

_forest: Optional[Forest] = None
_forest_lock = threading.Lock()


def get_forest(config: Optional[ForestConfig] = None) -> Forest:
    """Return the process-wide forest, building it on first call.

    ``config`` only matters on the first call; later calls return the
    existing instance unchanged.
    """
    global _forest
    if _forest is None:
        with _forest_lock:
            if _forest is None:
                _forest = Forest.build(config)
    return _forest


def reset_forest() -> None:
    """Discard the process-wide forest (next ``get_forest()`` rebuilds)."""
    global _forest
    with _forest_lock:
        _forest = None


def predict_wildfire_probability(
    features: FeatureRecord,
    forest: Optional[Forest] = None,
) -> float:
    """Score ``features`` against ``forest`` (or the process-wide forest)."""
    forest = forest or get_forest()
    probability = forest.predict(features)
    logger.debug("Wildfire probability: %.1f%%", probability)
    return probability
