"""Server assembly: the FastMCP instance and, for HTTP mode, the FastAPI app around it."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI
from mcp.server.fastmcp import FastMCP
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from starlette.responses import Response

from alertmanager_mcp.alertmanager.client import AlertmanagerClient
from alertmanager_mcp.server.tools import register_tools
from alertmanager_mcp.telemetry.metrics import get_metrics
from alertmanager_mcp.telemetry.tracing import SERVICE_NAME, SERVICE_VERSION

logger = logging.getLogger("alertmanager_mcp.server")

INSTRUCTIONS = """\
Tools for Prometheus Alertmanager: list and summarize alerts, manage silences,
inspect server status and receivers, and investigate or correlate firing alerts.
Silences always match a single alert name exactly."""


def create_mcp_server(client: AlertmanagerClient, host: str = "0.0.0.0", port: int = 8000) -> FastMCP:
    mcp = FastMCP(SERVICE_NAME, instructions=INSTRUCTIONS, host=host, port=port)
    register_tools(mcp, client)
    return mcp


def _ops_router(alertmanager_url: str) -> APIRouter:
    router = APIRouter()
    started = datetime.now(timezone.utc)

    @router.get("/health")
    async def health():
        now = datetime.now(timezone.utc)
        return {
            "status": "healthy",
            "alertmanager": alertmanager_url,
            "uptime_seconds": round((now - started).total_seconds(), 2),
            "timestamp": now.isoformat(),
            "version": SERVICE_VERSION,
        }

    @router.get("/metrics", include_in_schema=False)
    async def metrics():
        body, content_type = get_metrics()
        return Response(content=body, media_type=content_type)

    return router


def create_http_app(mcp: FastMCP, client: AlertmanagerClient) -> FastAPI:
    """FastAPI app serving /health and /metrics, with the streamable MCP endpoint at /mcp.

    The backend client is closed when the app shuts down.
    """
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with mcp.session_manager.run():
            logger.info("MCP streamable HTTP endpoint ready at /mcp")
            yield
        await client.close()
        logger.info("MCP HTTP server stopped")

    app = FastAPI(
        title=SERVICE_NAME,
        description="MCP server for Prometheus Alertmanager",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.include_router(_ops_router(client.base_url))
    app.mount("/", mcp_app)

    FastAPIInstrumentor.instrument_app(app, excluded_urls="health,metrics")
    return app
