import structlog
from fastapi import FastAPI

from app.api.health import router as health_router
from app.api.weather import router as weather_router
from app.config import get_settings
from app.observability import WeatherMetrics, configure_logging, set_weather_metrics
from app.observability.middleware import RequestContextMiddleware
from app.observability.telemetry import configure_telemetry, instrument_app


settings = get_settings()
telemetry = configure_telemetry(settings)
configure_logging(settings.log_level, json_logs=settings.log_json, extra_handlers=telemetry.log_handlers)
set_weather_metrics(WeatherMetrics(telemetry.meter_provider))

app = FastAPI(
    title="WeatherApp.Api",
    version=settings.service_version,
    docs_url="/swagger" if settings.is_development else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.is_development else None,
)
app.add_middleware(RequestContextMiddleware)
app.include_router(health_router)
app.include_router(weather_router)
instrument_app(app, telemetry)


@app.on_event("startup")
def _startup() -> None:
    structlog.get_logger("telemetry").info(
        "telemetry_configured",
        service=settings.service_name,
        environment=settings.environment,
        otlp_endpoint=settings.otlp_endpoint or None,
        console_exporter=settings.console_exporter,
        sampler=telemetry.tracer_provider.sampler.get_description(),
    )


@app.on_event("shutdown")
def _shutdown() -> None:
    telemetry.shutdown()
