"""
Output models.

``PredictionResult`` pairs the calibrated probability with the importance
map for one request.  ``PredictionResponse`` is the JSON body returned by
``POST /predict`` and ``wildfire-risk predict --json``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from wildfire_risk.models.features import LandCover, VegetationIndex


@dataclass(frozen=True)
class PredictionResult:
    """Probability in [0, 97] (one decimal) plus feature-importance weights."""

    probability: float
    feature_importance: dict[str, float] = field(default_factory=dict)


class PredictionResponse(BaseModel):
    """Wire shape of a location prediction.

    Optional vegetation / land-cover blocks are ``None`` when the Earth
    Engine collaborator is not configured or failed.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    location: str
    latitude: float
    longitude: float
    probability: float
    co2_level: float
    temperature: float
    humidity: float
    drought_index: float
    air_quality_index: Optional[float] = None
    pm2_5: Optional[float] = None
    pm10: Optional[float] = None
    vegetation_index: Optional[VegetationIndex] = None
    land_cover: Optional[LandCover] = None
    model_type: Literal["random_forest"] = "random_forest"
    feature_importance: dict[str, float] = {}

    @field_validator("probability")
    @classmethod
    def validate_probability(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"probability must be in [0, 100], got {v}.")
        return v
