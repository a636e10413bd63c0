"""Prometheus metrics definitions."""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

backend_request_duration = Histogram(
    "alertmanager_request_duration_seconds",
    "Duration of Alertmanager API requests in seconds",
    labelnames=["method", "endpoint", "status_code"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

tool_calls_total = Counter(
    "mcp_tool_calls_total",
    "Total number of MCP tool calls",
    labelnames=["tool", "outcome"],
)


def get_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
