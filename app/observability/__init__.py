"""Observability for the weather API.

structlog request context + JSON logs, the weather request instruments, and the
OpenTelemetry bootstrap (metrics, traces and logs exported over OTLP).
"""

from __future__ import annotations

from app.observability.logging import configure_logging
from app.observability.metrics import WeatherMetrics, get_weather_metrics, set_weather_metrics


__all__ = ["WeatherMetrics", "configure_logging", "get_weather_metrics", "set_weather_metrics"]
