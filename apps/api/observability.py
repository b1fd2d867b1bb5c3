from __future__ import annotations

import contextlib
import os
import sys
from typing import Any, Iterator, Optional

try:
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
except Exception:  # pragma: no cover - optional dependency resolution
    trace = None
    Resource = None
    TracerProvider = None
    BatchSpanProcessor = None
    OTLPSpanExporter = None


SERVICE_NAME = "breaktime"


def init_observability(service_name: str = SERVICE_NAME) -> None:
    if "pytest" in sys.modules:
        return
    if trace is None or TracerProvider is None:
        return
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return

    # traces only leave the process when an OTLP collector is configured
    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not otlp_endpoint or OTLPSpanExporter is None or BatchSpanProcessor is None:
        return

    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)


@contextlib.contextmanager
def tick_span(**attributes: Any) -> Iterator[Optional[Any]]:
    """Wrap one scheduler tick in a span when tracing is installed."""
    if trace is None:
        yield None
        return
    tracer = trace.get_tracer(SERVICE_NAME)
    with tracer.start_as_current_span("breaktime.tick") as span:
        for key, value in attributes.items():
            span.set_attribute(f"breaktime.{key}", value)
        yield span
