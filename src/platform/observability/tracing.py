"""
OpenTelemetry tracing for the API process and its job runner.

Spans are exported over OTLP when OTEL_EXPORTER_OTLP_ENDPOINT is set and to
the console when OTEL_CONSOLE_EXPORT is on; otherwise they are only used for
log correlation (the trace id on every log line).

A durable job outlives the request that scheduled it, so the scheduling
span's W3C context is stored in the job payload under TRACE_PAYLOAD_KEY and
restored by the runner: a seat-hold release thirty minutes later still
shows up under the create-booking trace.
"""

from typing import Any, Mapping, Optional

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.propagate import extract, inject
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from sqlalchemy.ext.asyncio import AsyncEngine

from src.platform.config.core_setting import settings


TRACE_PAYLOAD_KEY = '_trace'

# Probes and scrapes would drown the request traces
UNTRACED_URLS = 'health,metrics'


class TracingConfig:
    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: Optional[str] = None,
        enable_console: Optional[bool] = None,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT
        self.enable_console = (
            settings.OTEL_CONSOLE_EXPORT if enable_console is None else enable_console
        )
        self._provider: Optional[TracerProvider] = None

    def setup(self) -> None:
        """Install the global tracer provider; once per process."""
        self._provider = TracerProvider(
            resource=Resource(attributes={SERVICE_NAME: self.service_name}),
            sampler=ALWAYS_ON,
        )
        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )
        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any) -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=UNTRACED_URLS)

    def instrument_sqlalchemy(self, *, engine: AsyncEngine) -> None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()


def inject_trace_context(*, carrier: Optional[dict[str, str]] = None) -> dict[str, str]:
    """Current span context as a `traceparent` carrier (empty when no span is active)."""
    carrier = carrier if carrier is not None else {}
    inject(carrier)
    return carrier


def extract_trace_context(*, carrier: Optional[Mapping[str, Any]] = None) -> Optional[Context]:
    if not carrier:
        return None
    return extract({str(k): str(v) for k, v in carrier.items()})
