from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from weather_narrator.config import get_narration_config, get_settings
from weather_narrator.errors import ConfigurationError, InputValidationError, UpstreamDataError
from weather_narrator.schemas import ForecastReportResponse
from weather_narrator.services.forecaster import get_weather_for_date
from weather_narrator.services.weather_client import WeatherClient


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("weather_narrator.api")

settings = get_settings()
narration_config = get_narration_config()
weather_client = WeatherClient(settings=settings)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await weather_client.close()


@app.get("/api/health")
async def health() -> dict:
    return {
        "status": "ok",
        "service": settings.app_name,
        "timestamp_utc": datetime.now(tz=timezone.utc).isoformat(),
    }


@app.get("/api/forecast/narrative", response_model=ForecastReportResponse)
async def forecast_narrative(
    date: str | None = Query(default=None, max_length=64, description="Any date string; defaults to today."),
) -> dict:
    try:
        return await get_weather_for_date(
            date,
            settings=settings,
            client=weather_client,
            config=narration_config,
        )
    except ConfigurationError as exc:
        logger.error("Narration service is misconfigured: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except InputValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UpstreamDataError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
