"""OpenTelemetry tracing: spans around every Alertmanager call, exported over OTLP when configured."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

SERVICE_NAME = "mcp-alertmanager"
SERVICE_VERSION = "0.3.0"


def service_resource(transport: str = "") -> Resource:
    attributes = {
        "service.name": SERVICE_NAME,
        "service.version": SERVICE_VERSION,
    }
    if transport:
        attributes["mcp.transport"] = transport
    return Resource.create(attributes)


def setup_tracing(otlp_endpoint: str, transport: str = "") -> TracerProvider:
    """Install a global tracer provider. Call ``shutdown()`` on it before exit to flush spans."""
    provider = TracerProvider(resource=service_resource(transport))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
    trace.set_tracer_provider(provider)
    return provider
