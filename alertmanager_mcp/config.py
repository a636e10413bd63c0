"""Server configuration: connection knobs, transport mode and telemetry."""

from typing import Literal

from pydantic_settings import BaseSettings

StrategyName = Literal["url", "proxy", "service", "route"]

DEFAULT_NAMESPACE = "openshift-monitoring"
DEFAULT_SERVICE = "alertmanager-operated"
DEFAULT_SERVICE_PORT = "9093"
DEFAULT_SERVICE_SCHEME = "https"
DEFAULT_ROUTE = "alertmanager-main"


class Settings(BaseSettings):
    model_config = {"env_prefix": "ALERTMANAGER_"}

    # Direct connection (ALERTMANAGER_URL)
    url: str = ""

    # Kubernetes auto-detect; empty namespace means "detect".
    # Service links for a Service named "alertmanager" inject ALERTMANAGER_SERVICE_PORT
    # and friends into pods; run with enableServiceLinks: false or pass the flags.
    kubeconfig: str = ""
    namespace: str = ""
    service: str = DEFAULT_SERVICE
    service_port: str = DEFAULT_SERVICE_PORT
    service_scheme: str = DEFAULT_SERVICE_SCHEME
    route: str = DEFAULT_ROUTE
    strategies: list[StrategyName] = ["url", "proxy"]

    # Backend calls
    request_timeout_seconds: float = 30.0

    # MCP server; no port means stdio transport
    http_host: str = "0.0.0.0"
    http_port: int | None = None
    log_level: int = 0

    # Telemetry export
    otlp_endpoint: str = ""
