"""
Wildfire Risk — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute (score, explain, fetch-and-predict, serve).
  5. Report result to stdout.

Install and run::

    pip install -e .
    wildfire-risk --help
    wildfire-risk validate-config
    wildfire-risk score --temperature 38 --humidity 12 --latitude 36.5 --month 8
    wildfire-risk explain --month 7
    wildfire-risk predict --location "Boise, ID"
    wildfire-risk score-batch --input data/features.csv --output data/scored.parquet
    wildfire-risk serve --port 8000
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="wildfire-risk",
    help="Wildfire probability scoring — ensemble scorer, explainer and API.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from pydantic import ValidationError

    from wildfire_risk.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from wildfire_risk.utils.logging import configure_logging
    configure_logging(config.logging)


def _echo_importance(weights: dict[str, float]) -> None:
    for name, weight in sorted(weights.items(), key=lambda kv: kv[1], reverse=True):
        typer.echo(f"  {name:<18} {weight:.3f}")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file (default: config/default.toml)."
    ),
    show_full: bool = typer.Option(
        False, "--full", help="Print full config including all fields."
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)
    forest = config.forest

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Trees:             {forest.num_trees}")
    typer.echo(f"  Seed:              {forest.seed if forest.seed is not None else 'unseeded'}")
    typer.echo(f"  Trim fraction:     {forest.trim_fraction}")
    typer.echo(f"  Max probability:   {forest.max_probability}")
    typer.echo(f"  Earth Engine URL:  {config.api.earth_engine_url or '(not configured)'}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("score")
def score(
    temperature: Optional[float] = typer.Option(None, help="Air temperature, °C."),
    humidity: Optional[float] = typer.Option(None, help="Relative humidity, %."),
    drought_index: Optional[float] = typer.Option(
        None, "--drought-index", help="0–100; estimated from temperature/humidity if omitted."
    ),
    air_quality_index: float = typer.Option(1.0, "--aqi", help="AQI ordinal 1–5."),
    pm2_5: float = typer.Option(0.0, "--pm25", help="PM2.5, μg/m³."),
    co2_level: float = typer.Option(0.0, "--co2", help="CO2-equivalent level."),
    latitude: float = typer.Option(0.0, help="Latitude, degrees."),
    longitude: float = typer.Option(0.0, help="Longitude, degrees."),
    month: Optional[int] = typer.Option(None, min=1, max=12, help="Month 1–12 (default: now)."),
    ndvi: Optional[float] = typer.Option(None, help="NDVI, -1 to 1."),
    evi: Optional[float] = typer.Option(None, help="EVI, -1 to 1."),
    forest_percent: Optional[float] = typer.Option(None, "--forest-percent"),
    grassland_percent: Optional[float] = typer.Option(None, "--grassland-percent"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Score one set of feature values offline (no network calls)."""
    from wildfire_risk.features.preparation import build_feature_record
    from wildfire_risk.forest.ensemble import Forest
    from wildfire_risk.forest.explainer import explain_prediction

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    record = build_feature_record(
        temperature=temperature,
        humidity=humidity,
        drought_index=drought_index,
        air_quality_index=air_quality_index,
        pm2_5=pm2_5,
        co2_level=co2_level,
        latitude=latitude,
        longitude=longitude,
        month=month,
        fallback_temperature=config.preparation.fallback_temperature,
        fallback_humidity=config.preparation.fallback_humidity,
        ndvi=ndvi,
        evi=evi,
        forest_percent=forest_percent,
        grassland_percent=grassland_percent,
    )
    forest = Forest.build(config.forest)
    probability = forest.predict(record)
    importance = explain_prediction(month=record.month, latitude=record.latitude)

    if as_json:
        typer.echo(json.dumps({
            "probability": probability,
            "features": record.model_dump(exclude_none=True),
            "feature_importance": importance,
        }, indent=2))
        return

    typer.echo(f"Wildfire probability: {probability:.1f}%")
    typer.echo(f"  Drought index used: {record.drought_index:.0f}")
    typer.echo("Feature importance:")
    _echo_importance(importance)


@app.command("explain")
def explain(
    month: Optional[int] = typer.Option(None, min=1, max=12, help="Month 1–12 (default: now)."),
    latitude: Optional[float] = typer.Option(
        None, help="Restrict the summer check to this latitude's hemisphere."
    ),
) -> None:
    """Print the feature-importance weights for a month."""
    from wildfire_risk.forest.explainer import explain_prediction

    _echo_importance(explain_prediction(month=month, latitude=latitude))


@app.command("predict")
def predict(
    location: str = typer.Option(..., "--location", "-l", help="Place name, e.g. 'Boise, ID'."),
    as_json: bool = typer.Option(False, "--json", help="Print the full JSON response."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Fetch live data for a location and print its wildfire probability.

    Requires OPENWEATHER_API_KEY in the environment or .env.
    """
    from wildfire_risk.ingestion.openweather_client import GeocodingError, UpstreamDataError
    from wildfire_risk.service import MissingApiKeyError, PredictionService

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    service = PredictionService.from_config(config)
    try:
        response = service.predict_location(location)
    except (MissingApiKeyError, GeocodingError, UpstreamDataError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    finally:
        service.close()

    if as_json:
        typer.echo(json.dumps(response.model_dump(mode="json"), indent=2))
        return

    typer.echo(f"{response.location} ({response.latitude:.4f}, {response.longitude:.4f})")
    typer.echo(f"  Wildfire probability: {response.probability:.1f}%")
    typer.echo(f"  Temperature:          {response.temperature:.1f} °C")
    typer.echo(f"  Humidity:             {response.humidity:.0f} %")
    typer.echo(f"  Drought index:        {response.drought_index:.0f}")
    typer.echo(f"  Air quality index:    {response.air_quality_index}")


@app.command("score-batch")
def score_batch(
    input_path: str = typer.Option(..., "--input", "-i", help="CSV or Parquet feature table."),
    output_path: str = typer.Option(
        ..., "--output", "-o", help="Destination (.csv, .json or .parquet)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Score every row of a feature table against one forest."""
    from wildfire_risk.forest.ensemble import Forest
    from wildfire_risk.reporting.batch import read_feature_table, score_rows
    from wildfire_risk.reporting.export import export_records

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        rows = read_feature_table(Path(input_path))
        scored = score_rows(rows, Forest.build(config.forest), config.preparation)
        written = export_records(scored, Path(output_path))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Scored {len(scored)} rows → {written}")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host (default from config)."),
    port: Optional[int] = typer.Option(None, help="Bind port (default from config)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from wildfire_risk.api import create_app

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    app()
