"""
HTTP surface (FastAPI).

Endpoints
---------
POST /predict   {"location": "Boise, ID"} → PredictionResponse JSON
GET  /explain   ?month=N&latitude=X       → {feature: weight}
GET  /health                              → {"status": "ok", "trees": N}

Error bodies are ``{"error": message}`` or ``{"error": message,
"details": text}``:
    400  location missing or blank
    500  no OpenWeather key, geocoding failure, upstream data failure,
         any other error ("Failed to process prediction")

Run with ``wildfire-risk serve`` or ``uvicorn wildfire_risk.api:create_app --factory``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from wildfire_risk import __version__
from wildfire_risk.config import AppConfig, load_config
from wildfire_risk.forest.explainer import explain_prediction
from wildfire_risk.ingestion.openweather_client import GeocodingError, UpstreamDataError
from wildfire_risk.service import MissingApiKeyError, PredictionService

logger = logging.getLogger(__name__)


class PredictRequest(BaseModel):
    location: Optional[str] = None


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = {"error": error}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def create_app(
    config: Optional[AppConfig] = None,
    service: Optional[PredictionService] = None,
) -> FastAPI:
    """Build the FastAPI app around one long-lived ``PredictionService``.

    Args:
        config: Defaults to ``load_config()``.
        service: Pre-built service (tests inject one with mock transports).
            Defaults to ``PredictionService.from_config(config)``.
    """
    if config is None:
        config = service.config if service is not None else load_config()
    if service is None:
        service = PredictionService.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        service.close()

    app = FastAPI(title="Wildfire Risk API", version=__version__, lifespan=lifespan)
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.api.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.post("/predict")
    def predict(request: Request, body: Optional[PredictRequest] = None):
        if body is None or not body.location or not body.location.strip():
            return _error(400, "Location is required")

        try:
            response = service.predict_location(
                body.location, authorization=request.headers.get("authorization")
            )
        except MissingApiKeyError as exc:
            return _error(500, str(exc))
        except GeocodingError as exc:
            logger.error("Error processing prediction for %r: %s", body.location, exc.detail)
            return _error(500, str(exc), exc.detail)
        except UpstreamDataError as exc:
            logger.error("Error processing prediction for %r: %s", body.location, exc.detail)
            return _error(500, str(exc), exc.detail)
        except Exception as exc:
            logger.exception("Error processing prediction for %r", body.location)
            return _error(500, "Failed to process prediction", str(exc))

        return response.model_dump(mode="json")

    @app.get("/explain")
    def explain(
        month: Optional[int] = Query(default=None, ge=1, le=12),
        latitude: Optional[float] = Query(default=None, ge=-90, le=90),
    ) -> dict[str, float]:
        return explain_prediction(month=month, latitude=latitude)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "trees": len(service.forest)}

    return app
