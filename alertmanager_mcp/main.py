"""mcp-alertmanager: MCP server entry point."""

import asyncio
import logging
import signal
from typing import List, Optional

import pydantic
import typer
import uvicorn
from mcp.server.fastmcp import FastMCP

from alertmanager_mcp.alertmanager.client import AlertmanagerClient
from alertmanager_mcp.config import Settings
from alertmanager_mcp.connection.resolver import resolve_connection
from alertmanager_mcp.errors import ConfigurationError
from alertmanager_mcp.server.app import create_http_app, create_mcp_server
from alertmanager_mcp.telemetry.logging import LoggingConfig, setup_logging
from alertmanager_mcp.telemetry.tracing import SERVICE_NAME, SERVICE_VERSION, setup_tracing

app = typer.Typer(help="MCP server for Prometheus Alertmanager", add_completion=False)
logger = logging.getLogger("alertmanager_mcp")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{SERVICE_NAME} {SERVICE_VERSION}")
        raise typer.Exit()


def build_settings(**overrides) -> Settings:
    """Flags that were given override the environment; the rest fall through to it."""
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


async def serve_stdio(mcp: FastMCP, client: AlertmanagerClient) -> None:
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(mcp.run_stdio_async())
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, task.cancel)

    try:
        await task
    except asyncio.CancelledError:
        logger.info("Shutdown signal received, stopping MCP server")
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await client.close()


@app.command()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print version and exit",
    ),
    log_level: Optional[int] = typer.Option(
        None,
        "--log-level",
        min=0,
        max=9,
        help="Log verbosity 0-9 (0 = warnings only, 4+ = debug)",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        help="Serve streamable HTTP on this port instead of stdio",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        help="Alertmanager URL (e.g. http://localhost:9093)",
    ),
    namespace: Optional[str] = typer.Option(
        None,
        "--namespace",
        help="Kubernetes namespace of Alertmanager (default: detected, else openshift-monitoring)",
    ),
    service: Optional[str] = typer.Option(
        None,
        "--service",
        help="Alertmanager service name (default: alertmanager-operated)",
    ),
    service_port: Optional[str] = typer.Option(
        None,
        "--service-port",
        help=(
            "Alertmanager service port (default: 9093). Kubernetes service links for a Service "
            "named alertmanager set ALERTMANAGER_SERVICE_PORT; disable them with enableServiceLinks: false"
        ),
    ),
    service_scheme: Optional[str] = typer.Option(
        None,
        "--service-scheme",
        help="Alertmanager service scheme (default: https)",
    ),
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        help="Path to kubeconfig (default: in-cluster, then ~/.kube/config)",
    ),
    route: Optional[str] = typer.Option(
        None,
        "--route",
        help="OpenShift route name for the route strategy (default: alertmanager-main)",
    ),
    strategy: Optional[List[str]] = typer.Option(
        None,
        "--strategy",
        help="Connection strategy to try, in order: url, proxy, service, route. Repeatable (default: url, proxy)",
    ),
):
    """Serve Alertmanager tools over MCP (stdio by default, streamable HTTP with --port).

    Examples:

      # Direct URL
      mcp-alertmanager --url http://localhost:9093

      # Kubernetes auto-detect through the API server proxy
      mcp-alertmanager --namespace openshift-monitoring

      # HTTP mode with debug logging
      mcp-alertmanager --url http://localhost:9093 --port 8080 --log-level 5
    """
    try:
        settings = build_settings(
            log_level=log_level,
            http_port=port,
            url=url,
            namespace=namespace,
            service=service,
            service_port=service_port,
            service_scheme=service_scheme,
            kubeconfig=kubeconfig,
            route=route,
            strategies=strategy or None,
        )
    except pydantic.ValidationError as exc:
        typer.echo(f"Error: invalid configuration: {exc}", err=True)
        raise typer.Exit(1)
    http_mode = settings.http_port is not None

    setup_logging(LoggingConfig.for_transport(http_mode, settings.log_level, settings.otlp_endpoint))
    tracer_provider = None
    if settings.otlp_endpoint:
        tracer_provider = setup_tracing(settings.otlp_endpoint, transport="http" if http_mode else "stdio")

    try:
        connection = resolve_connection(settings)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    logger.info("Using Alertmanager at %s (%s)", connection.base_url, connection.method)
    client = AlertmanagerClient(connection, timeout=settings.request_timeout_seconds)
    mcp = create_mcp_server(client, host=settings.http_host, port=settings.http_port or 8000)

    try:
        if http_mode:
            logger.info("Starting streamable HTTP server on %s:%d", settings.http_host, settings.http_port)
            uvicorn.run(
                create_http_app(mcp, client),
                host=settings.http_host,
                port=settings.http_port,
                log_config=None,
            )
        else:
            asyncio.run(serve_stdio(mcp, client))
    finally:
        if tracer_provider is not None:
            tracer_provider.shutdown()


if __name__ == "__main__":
    app()
