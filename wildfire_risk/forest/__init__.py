"""
Ensemble wildfire-probability scorer.

Modules
-------
tree      : TreeRule (immutable per-tree parameters) + the shared latitude
            and seasonal rules evaluated against it.
builder   : build_trees() — generates the ensemble once, with bounded jitter.
scoring   : score_tree() — one tree's 0–97 raw probability.
ensemble  : Forest — applicable-subset filter, trimming, calibration.
explainer : explain_prediction() — seasonally adjusted importance weights.
"""

from wildfire_risk.forest.ensemble import Forest
from wildfire_risk.forest.explainer import explain_prediction

__all__ = ["Forest", "explain_prediction"]
