"""
Shared pytest fixtures for the wildfire risk test suite.

Provides:
  - ``forest_config`` / ``seeded_forest``: a reproducible 50-tree ensemble.
  - ``death_valley_record`` / ``coastal_winter_record``: the two reference
    scenarios (hot desert in August, mild wet coast in January).
  - ``restore_logging``: autouse guard that undoes ``configure_logging``
    calls made by CLI tests.
"""

from __future__ import annotations

import logging
from typing import Generator

import pytest

from wildfire_risk.config import AppConfig, ForestConfig
from wildfire_risk.forest.ensemble import Forest
from wildfire_risk.models.features import FeatureRecord


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def forest_config() -> ForestConfig:
    return ForestConfig(seed=42)


@pytest.fixture
def app_config(forest_config: ForestConfig) -> AppConfig:
    return AppConfig(forest=forest_config)


@pytest.fixture
def seeded_forest(forest_config: ForestConfig) -> Forest:
    return Forest.build(forest_config)


@pytest.fixture
def death_valley_record() -> FeatureRecord:
    return FeatureRecord(
        temperature=45.0,
        humidity=10.0,
        drought_index=90.0,
        air_quality_index=3.0,
        pm2_5=30.0,
        latitude=36.5,
        longitude=-117.0,
        month=8,
        ndvi=0.05,
        forest_percent=0.0,
    )


@pytest.fixture
def coastal_winter_record() -> FeatureRecord:
    return FeatureRecord(
        temperature=8.0,
        humidity=85.0,
        drought_index=5.0,
        air_quality_index=1.0,
        pm2_5=5.0,
        latitude=45.0,
        longitude=-122.0,
        month=1,
        ndvi=0.6,
        forest_percent=50.0,
    )
