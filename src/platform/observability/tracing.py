"""
OpenTelemetry tracing for the reservation service

Use cases open their own spans (`use_case.create_reservation`, `use_case.buy_listing`, ...)
through `trace.get_tracer(__name__)`. Until `setup()` installs a provider those
spans are no-ops, which is what unit tests rely on.
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from src.platform.config.core_setting import settings


# Liveness probes and metric scrapes are not traced
_UNTRACED_URLS = 'health,metrics'


class TracingConfig:
    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        console_export: bool | None = None,
        sample_ratio: float | None = None,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT
        self.console_export = (
            settings.OTEL_CONSOLE_EXPORT if console_export is None else console_export
        )
        self.sample_ratio = settings.OTEL_SAMPLE_RATIO if sample_ratio is None else sample_ratio
        self._provider: TracerProvider | None = None

    def _exporters(self) -> list[SpanExporter]:
        exporters: list[SpanExporter] = []
        if self.otlp_endpoint:
            exporters.append(OTLPSpanExporter(endpoint=self.otlp_endpoint))
        if self.console_export:
            exporters.append(ConsoleSpanExporter())
        return exporters

    def setup(self) -> None:
        """Install the global tracer provider. Call once, at startup."""
        self._provider = TracerProvider(
            resource=Resource(
                attributes={SERVICE_NAME: self.service_name, SERVICE_VERSION: settings.VERSION}
            ),
            # Children inherit the parent's sampling decision
            sampler=ParentBased(root=TraceIdRatioBased(self.sample_ratio)),
        )
        for exporter in self._exporters():
            self._provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any) -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=_UNTRACED_URLS)

    def instrument_sqlalchemy(self, *, engine: Any) -> None:
        # AsyncEngine wraps a sync core; the instrumentor hooks the core's events
        SQLAlchemyInstrumentor().instrument(engine=getattr(engine, 'sync_engine', engine))

    def shutdown(self) -> None:
        """Flush pending spans."""
        if self._provider is not None:
            self._provider.shutdown()
