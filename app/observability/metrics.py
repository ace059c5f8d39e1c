from __future__ import annotations

from time import perf_counter
from types import TracebackType

from opentelemetry import metrics
from opentelemetry.metrics import Histogram, MeterProvider


METER_NAME = "WeatherApp.Api"
REQUEST_COUNT_METRIC = "weatherapp.api.weather_requests.count"
REQUEST_DURATION_METRIC = "weatherapp.api.weather_requests.duration"


class TrackedRequestDuration:
    """Records the time between construction and release into a histogram.

    Meant to be used as a context manager so the sample is recorded on every
    exit path of the ``with`` block. Only the first ``release()`` records.
    """

    def __init__(self, histogram: Histogram) -> None:
        self._histogram = histogram
        self._start = perf_counter()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        elapsed_ms = (perf_counter() - self._start) * 1000.0
        self._histogram.record(elapsed_ms)

    def __enter__(self) -> TrackedRequestDuration:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


class WeatherMetrics:
    """Weather endpoint instruments, grouped under the ``WeatherApp.Api`` meter."""

    def __init__(self, meter_provider: MeterProvider | None = None) -> None:
        provider = meter_provider or metrics.get_meter_provider()
        meter = provider.get_meter(METER_NAME)
        self._request_counter = meter.create_counter(
            REQUEST_COUNT_METRIC,
            description="Number of weather forecast requests served",
        )
        self._request_duration = meter.create_histogram(
            REQUEST_DURATION_METRIC,
            unit="ms",
            description="Duration of weather forecast requests",
        )

    def increment_request_count(self) -> None:
        self._request_counter.add(1)

    def measure_request_duration(self) -> TrackedRequestDuration:
        return TrackedRequestDuration(self._request_duration)


_METRICS: WeatherMetrics | None = None


def set_weather_metrics(weather_metrics: WeatherMetrics | None) -> None:
    global _METRICS
    _METRICS = weather_metrics


def get_weather_metrics() -> WeatherMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = WeatherMetrics()
    return _METRICS
