"""OpenTelemetry bootstrap for metrics, traces and logs.

Builds the SDK providers from ``Settings``, attaches OTLP (gRPC) and/or console
exporters, and optionally installs the providers globally. Call once at startup,
before the FastAPI app is created; failures propagate and abort startup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON, ParentBased, Sampler, TraceIdRatioBased

from app.config import Settings


# Health probes are polled constantly; keep them out of server spans and metrics.
EXCLUDED_URLS = "health,alive"


@dataclass
class Telemetry:
    resource: Resource
    meter_provider: MeterProvider
    tracer_provider: TracerProvider
    logger_provider: LoggerProvider | None = None
    log_handlers: list[logging.Handler] = field(default_factory=list)
    system_metrics: SystemMetricsInstrumentor | None = None

    def shutdown(self) -> None:
        """Flush pending telemetry and stop every provider."""

        if self.system_metrics is not None:
            self.system_metrics.uninstrument()
            self.system_metrics = None
        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()
        if self.logger_provider is not None:
            self.logger_provider.shutdown()


def build_resource(settings: Settings) -> Resource:
    return Resource.create(
        {
            "service.name": settings.service_name,
            "service.version": settings.service_version,
            "deployment.environment": settings.environment,
        }
    )


def build_sampler(settings: Settings) -> Sampler:
    """Sample everything in development, otherwise honour the parent and a trace-id ratio."""

    if settings.is_development:
        return ALWAYS_ON
    return ParentBased(root=TraceIdRatioBased(settings.traces_sampler_ratio))


def _metric_readers(settings: Settings) -> list[MetricReader]:
    readers: list[MetricReader] = []
    if settings.otlp_enabled:
        readers.append(
            PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=settings.otlp_endpoint, insecure=settings.otlp_insecure),
                export_interval_millis=settings.metric_export_interval_ms,
            )
        )
    if settings.console_exporter:
        readers.append(
            PeriodicExportingMetricReader(
                ConsoleMetricExporter(),
                export_interval_millis=settings.metric_export_interval_ms,
            )
        )
    return readers


def _tracer_provider(settings: Settings, resource: Resource) -> TracerProvider:
    provider = TracerProvider(resource=resource, sampler=build_sampler(settings))
    if settings.otlp_enabled:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=settings.otlp_insecure))
        )
    if settings.console_exporter:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    return provider


def configure_telemetry(
    settings: Settings,
    *,
    extra_metric_readers: Sequence[MetricReader] = (),
    install_global: bool = True,
) -> Telemetry:
    """Create the meter, tracer and (with OTLP) logger providers for this process."""

    resource = build_resource(settings)

    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[*_metric_readers(settings), *extra_metric_readers],
    )
    tracer_provider = _tracer_provider(settings, resource)

    logger_provider: LoggerProvider | None = None
    log_handlers: list[logging.Handler] = []
    if settings.otlp_enabled:
        logger_provider = LoggerProvider(resource=resource)
        logger_provider.add_log_record_processor(
            BatchLogRecordProcessor(OTLPLogExporter(endpoint=settings.otlp_endpoint, insecure=settings.otlp_insecure))
        )
        log_handlers.append(LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider))

    if install_global:
        metrics.set_meter_provider(meter_provider)
        trace.set_tracer_provider(tracer_provider)
        if logger_provider is not None:
            set_logger_provider(logger_provider)

    system_metrics: SystemMetricsInstrumentor | None = None
    if settings.instrument_system_metrics:
        system_metrics = SystemMetricsInstrumentor()
        system_metrics.instrument(meter_provider=meter_provider)

    return Telemetry(
        resource=resource,
        meter_provider=meter_provider,
        tracer_provider=tracer_provider,
        logger_provider=logger_provider,
        log_handlers=log_handlers,
        system_metrics=system_metrics,
    )


def instrument_app(app: Any, telemetry: Telemetry) -> None:
    """Add OpenTelemetry server spans and HTTP metrics to a FastAPI app."""

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=telemetry.tracer_provider,
        meter_provider=telemetry.meter_provider,
        excluded_urls=EXCLUDED_URLS,
    )
