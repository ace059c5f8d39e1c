from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable
from typing import Any

# Must be set before app.main is imported: telemetry and the docs routes are configured at import time.
os.environ.setdefault("OTEL_INSTRUMENT_SYSTEM_METRICS", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ["APP_ENVIRONMENT"] = "development"

import pytest
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from app.config import get_settings
from app.main import app
from app.observability.metrics import WeatherMetrics, set_weather_metrics
from app.services.health_service import build_default_registry, set_health_registry


def find_metric(reader: InMemoryMetricReader, name: str) -> Any | None:
    """Return the exported metric called ``name``, or None if nothing was recorded."""
    data = reader.get_metrics_data()
    if data is None:
        return None
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                if metric.name == name:
                    return metric
    return None


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def read_metric(metric_reader: InMemoryMetricReader) -> Callable[[str], Any | None]:
    return lambda name: find_metric(metric_reader, name)


@pytest.fixture
def meter_provider(metric_reader: InMemoryMetricReader):
    provider = MeterProvider(metric_readers=[metric_reader])
    yield provider
    provider.shutdown()


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, meter_provider: MeterProvider):
    monkeypatch.setenv("APP_ENVIRONMENT", "development")
    monkeypatch.setenv("FORECAST_MIN_DELAY_MS", "5")
    monkeypatch.setenv("FORECAST_MAX_DELAY_MS", "100")
    get_settings.cache_clear()

    set_weather_metrics(WeatherMetrics(meter_provider))
    set_health_registry(build_default_registry())

    yield

    set_weather_metrics(None)
    set_health_registry(None)
    get_settings.cache_clear()


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
