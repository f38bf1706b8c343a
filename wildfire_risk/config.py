"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``WILDFIRE_RISK_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

API keys never live in TOML.  ``OPENWEATHER_API_KEY`` is read from the
environment (after ``.env`` is loaded) by ``PredictionService.from_config()``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class ForestConfig(BaseModel):
    """Ensemble construction and aggregation constants.

    Every value here is a tunable, but the defaults reproduce the deployed
    scorer exactly; changing them shifts every probability it returns.
    """

    model_config = ConfigDict(frozen=True)

    num_trees: int = 50
    base_probability: float = 25.0
    jitter_min: float = 0.95
    jitter_max: float = 1.05
    specialization_count: int = 5
    trim_fraction: float = 0.10
    min_applicable_fraction: float = 0.70
    hot_filter_temperature: float = 30.0   # °C above which cool-tuned trees drop out
    dry_filter_humidity: float = 30.0      # % below which humid-tuned trees drop out
    calibration_high_threshold: float = 70.0
    calibration_high_factor: float = 1.05
    calibration_low_threshold: float = 30.0
    calibration_low_factor: float = 0.95
    max_probability: float = 97.0
    seed: Optional[int] = None             # None → unseeded, differs per process

    @field_validator("num_trees")
    @classmethod
    def validate_num_trees(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"num_trees must be >= 1, got {v}.")
        return v

    @field_validator("specialization_count")
    @classmethod
    def validate_specialization_count(cls, v: int) -> int:
        if not 1 <= v <= 5:
            raise ValueError(f"specialization_count must be in [1, 5], got {v}.")
        return v

    @field_validator("trim_fraction")
    @classmethod
    def validate_trim(cls, v: float) -> float:
        if not 0.0 <= v < 0.5:
            raise ValueError(f"trim_fraction must be in [0.0, 0.5), got {v}.")
        return v

    @field_validator("min_applicable_fraction")
    @classmethod
    def validate_applicable(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"min_applicable_fraction must be in (0.0, 1.0], got {v}.")
        return v

    @model_validator(mode="after")
    def validate_bands(self) -> "ForestConfig":
        if not self.jitter_min <= 1.0 <= self.jitter_max:
            raise ValueError(
                f"jitter band [{self.jitter_min}, {self.jitter_max}] must contain 1.0."
            )
        if self.calibration_low_threshold > self.calibration_high_threshold:
            raise ValueError(
                "calibration_low_threshold must be <= calibration_high_threshold."
            )
        if not 0.0 < self.max_probability <= 100.0:
            raise ValueError(f"max_probability must be in (0, 100], got {self.max_probability}.")
        return self


class PreparationConfig(BaseModel):
    """Feature preparation defaults applied before scoring."""

    model_config = ConfigDict(frozen=True)

    fallback_temperature: float = 15.0     # climate-average °C
    fallback_humidity: float = 60.0        # climate-average %
    adjust_drought_from_weather: bool = False


class ApiConfig(BaseModel):
    """Upstream HTTP collaborators and CORS policy."""

    model_config = ConfigDict(frozen=True)

    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    geocoding_base_url: str = "https://api.openweathermap.org/geo/1.0"
    earth_engine_url: Optional[str] = None
    timeout_seconds: float = 15.0
    cors_allow_origins: list[str] = ["*"]

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class ServerConfig(BaseModel):
    """Bind address for ``wildfire-risk serve``."""

    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = 8000


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    The CLI, the HTTP app and the batch scorer all receive an ``AppConfig``
    instance built by ``load_config()``.
    """

    model_config = ConfigDict(frozen=True)

    forest: ForestConfig = ForestConfig()
    preparation: PreparationConfig = PreparationConfig()
    api: ApiConfig = ApiConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply WILDFIRE_RISK_* env vars to the raw config dict.

    Supported overrides:
      WILDFIRE_RISK_LOG_LEVEL    → raw["logging"]["level"]
      WILDFIRE_RISK_FOREST_SEED  → raw["forest"]["seed"]
      WILDFIRE_RISK_NUM_TREES    → raw["forest"]["num_trees"]
      WILDFIRE_RISK_DEBUG        → raw["debug"]
    """
    if log_level := os.environ.get("WILDFIRE_RISK_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if seed := os.environ.get("WILDFIRE_RISK_FOREST_SEED"):
        raw.setdefault("forest", {})["seed"] = int(seed)

    if num_trees := os.environ.get("WILDFIRE_RISK_NUM_TREES"):
        raw.setdefault("forest", {})["num_trees"] = int(num_trees)

    if debug := os.environ.get("WILDFIRE_RISK_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        forest=ForestConfig(**raw.get("forest", {})),
        preparation=PreparationConfig(**raw.get("preparation", {})),
        api=ApiConfig(**raw.get("api", {})),
        server=ServerConfig(**raw.get("server", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
