from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: Literal["development", "staging", "production"] = Field(
        default="development", alias="APP_ENVIRONMENT"
    )
    service_name: str = Field(default="WeatherApp.Api", alias="SERVICE_NAME")
    service_version: str = Field(default="0.1.0", alias="SERVICE_VERSION")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    otlp_endpoint: str = Field(default="", alias="OTEL_EXPORTER_OTLP_ENDPOINT")
    otlp_insecure: bool = Field(default=True, alias="OTEL_EXPORTER_OTLP_INSECURE")
    console_exporter: bool = Field(default=False, alias="OTEL_CONSOLE_EXPORTER")
    metric_export_interval_ms: int = Field(default=60_000, gt=0, alias="OTEL_METRIC_EXPORT_INTERVAL_MS")
    traces_sampler_ratio: float = Field(default=1.0, ge=0.0, le=1.0, alias="OTEL_TRACES_SAMPLER_RATIO")
    instrument_system_metrics: bool = Field(default=True, alias="OTEL_INSTRUMENT_SYSTEM_METRICS")

    forecast_days: int = Field(default=5, gt=0, alias="FORECAST_DAYS")
    forecast_min_delay_ms: int = Field(default=5, ge=0, alias="FORECAST_MIN_DELAY_MS")
    forecast_max_delay_ms: int = Field(default=100, gt=0, alias="FORECAST_MAX_DELAY_MS")

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def otlp_enabled(self) -> bool:
        return bool(self.otlp_endpoint.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
