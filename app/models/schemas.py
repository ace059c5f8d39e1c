from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class WeatherForecast(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    date: datetime.date
    temperature_c: int
    summary: str | None = None

    @computed_field(alias="temperatureF")  # type: ignore[prop-decorator]
    @property
    def temperature_f(self) -> int:
        # int() truncates toward zero.
        return 32 + int(self.temperature_c / 0.5556)


class HealthCheckEntry(BaseModel):
    status: HealthStatus
    description: str | None = None
    duration_ms: float
    tags: list[str] = Field(default_factory=list)


class HealthReport(BaseModel):
    status: HealthStatus
    total_duration_ms: float
    checks: dict[str, HealthCheckEntry] = Field(default_factory=dict)
