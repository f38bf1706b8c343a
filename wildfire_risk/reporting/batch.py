"""
Batch scoring of feature tables.

Input is a CSV or Parquet table with any subset of these columns::

    temperature, humidity, drought_index, air_quality_index, pm2_5,
    co2_level, latitude, longitude, month, ndvi, evi,
    forest_percent, grassland_percent

Blank cells, nulls and non-finite numbers (NaN, ±inf) are treated as missing and go through the same
defaults and clamps as live predictions (``build_feature_record``).  Each
output row is the input row plus ``probability``.  Unknown columns are
carried through untouched, so ids and labels survive the round trip.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Optional

from wildfire_risk.config import PreparationConfig
from wildfire_risk.features.preparation import build_feature_record
from wildfire_risk.forest.ensemble import Forest
from wildfire_risk.models.features import is_missing

logger = logging.getLogger(__name__)

FEATURE_COLUMNS: tuple[str, ...] = (
    "temperature", "humidity", "drought_index", "air_quality_index", "pm2_5",
    "co2_level", "latitude", "longitude", "month", "ndvi", "evi",
    "forest_percent", "grassland_percent",
)
_OPTIONAL_COLUMNS = ("ndvi", "evi", "forest_percent", "grassland_percent")


def read_feature_table(path: Path) -> list[dict[str, Any]]:
    """Load rows from ``.csv`` or ``.parquet``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the suffix is unsupported.
    """
    if not path.exists():
        raise FileNotFoundError(f"Feature table not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        with path.open(newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))
    if suffix == ".parquet":
        import pyarrow.parquet as pq

        return pq.read_table(str(path)).to_pylist()
    raise ValueError(f"Unsupported input format '{suffix}'. Expected .csv or .parquet.")


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    number = float(value)
    return None if is_missing(number) else number


def score_rows(
    rows: list[dict[str, Any]],
    forest: Forest,
    preparation: Optional[PreparationConfig] = None,
) -> list[dict[str, Any]]:
    """Score each row; returns new dicts with a ``probability`` column.

    Raises:
        ValueError: If a feature cell is present but not numeric.  The
            message names the 1-based row number.
    """
    preparation = preparation or PreparationConfig()
    scored: list[dict[str, Any]] = []

    for row_num, row in enumerate(rows, start=1):
        try:
            values = {col: _to_float(row.get(col)) for col in FEATURE_COLUMNS}
            month = int(values["month"]) if values["month"] is not None else None
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Row {row_num}: non-numeric feature value ({exc}).") from exc

        record = build_feature_record(
            temperature=values["temperature"],
            humidity=values["humidity"],
            drought_index=values["drought_index"],
            air_quality_index=values["air_quality_index"],
            pm2_5=values["pm2_5"],
            co2_level=values["co2_level"],
            latitude=values["latitude"] or 0.0,
            longitude=values["longitude"] or 0.0,
            month=month,
            fallback_temperature=preparation.fallback_temperature,
            fallback_humidity=preparation.fallback_humidity,
            **{col: values[col] for col in _OPTIONAL_COLUMNS},
        )
        scored.append({**row, "probability": forest.predict(record)})

    logger.info("Scored %d rows.", len(scored))
    return scored
