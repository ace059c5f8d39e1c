from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from app.config import get_settings
from app.models.schemas import WeatherForecast
from app.observability.metrics import WeatherMetrics, get_weather_metrics
from app.services.forecast_service import generate_forecasts, simulate_latency

router = APIRouter(tags=["weather"])

logger = structlog.get_logger("weather")


@router.get("/weatherforecast", response_model=list[WeatherForecast], name="GetWeatherForecast")
async def get_weather_forecast(
    weather_metrics: WeatherMetrics = Depends(get_weather_metrics),
) -> list[WeatherForecast]:
    settings = get_settings()
    with weather_metrics.measure_request_duration():
        delay_ms = await simulate_latency(settings.forecast_min_delay_ms, settings.forecast_max_delay_ms)
        forecast = generate_forecasts(days=settings.forecast_days)
        weather_metrics.increment_request_count()

    logger.debug("weather_forecast_generated", days=len(forecast), simulated_delay_ms=delay_ms)
    return forecast
