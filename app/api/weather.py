from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.config import Settings, get_settings
from app.models.schemas import WeatherForecast
from app.observability.logging import get_api_logger
from app.observability.performance import log_execution_time, track_performance
from app.services.forecast_service import generate_forecasts

router = APIRouter(tags=["weather"])


@router.get("/weatherforecast", response_model=list[WeatherForecast], name="GetWeatherForecast")
def get_weather_forecast(
    logger: Any = Depends(get_api_logger),
    settings: Settings = Depends(get_settings),
) -> list[WeatherForecast]:
    with track_performance(logger):
        logger.info("Generating weather forecast", days=settings.forecast_days)
        return log_execution_time(
            logger,
            lambda: generate_forecasts(days=settings.forecast_days),
            "generate_forecasts",
        )
