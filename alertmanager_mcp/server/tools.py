"""MCP tool registration.

Every tool takes string arguments only and returns text. Failures never leave a
tool as a Python exception: they are logged, counted and re-raised as
``ToolError`` so the client receives an error-flagged result.
"""

import functools
import logging
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import Field

from alertmanager_mcp.alertmanager.client import AlertmanagerClient
from alertmanager_mcp.errors import AlertmanagerMCPError, ValidationError
from alertmanager_mcp.server import operations
from alertmanager_mcp.telemetry.metrics import tool_calls_total

logger = logging.getLogger("alertmanager_mcp.server")

AlertName = Annotated[str, Field(description="Alert name (exact match on the alertname label)")]


def _read_only(title: str) -> ToolAnnotations:
    return ToolAnnotations(title=title, readOnlyHint=True)


def _guarded(tool: str, action: str):
    """Turn AlertmanagerMCPError into ToolError("Failed to <action>: <cause>")."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                result = await func(*args, **kwargs)
            except ValidationError as exc:
                tool_calls_total.labels(tool=tool, outcome="invalid").inc()
                logger.warning("Tool %s rejected input: %s", tool, exc)
                raise ToolError(str(exc)) from exc
            except AlertmanagerMCPError as exc:
                tool_calls_total.labels(tool=tool, outcome="error").inc()
                logger.warning("Tool %s failed: %s", tool, exc)
                raise ToolError(f"Failed to {action}: {exc}") from exc
            tool_calls_total.labels(tool=tool, outcome="success").inc()
            return result

        return wrapper

    return decorator


def register_tools(mcp: FastMCP, client: AlertmanagerClient) -> None:
    # ── Alerts ────────────────────────────────────────────────────

    @mcp.tool(
        name="getAlerts",
        description=(
            "Get alerts from Alertmanager. Returns active alerts by default. "
            "Filter by: active, silenced, inhibited, or label (e.g., 'severity=critical')."
        ),
        annotations=_read_only("Alerts: Get Alerts"),
    )
    @_guarded("getAlerts", "get alerts")
    async def get_alerts(
        active: Annotated[str, Field(description="Include active alerts (true/false)")] = "",
        silenced: Annotated[str, Field(description="Include silenced alerts (true/false)")] = "",
        inhibited: Annotated[str, Field(description="Include inhibited alerts (true/false)")] = "",
        filterLabel: Annotated[str, Field(description="Label filter: 'key=value'")] = "",
    ) -> str:
        return await operations.get_alerts(client, active, silenced, inhibited, filterLabel)

    @mcp.tool(
        name="getAlertGroups",
        description="Get alerts grouped by routing labels. Shows how alerts are batched for notifications.",
        annotations=_read_only("Alerts: Get Alert Groups"),
    )
    @_guarded("getAlertGroups", "get alert groups")
    async def get_alert_groups() -> str:
        return await operations.get_alert_groups(client)

    @mcp.tool(
        name="getCriticalAlerts",
        description="Get critical severity alerts only. Prioritized for incident response.",
        annotations=_read_only("Alerts: Get Critical Alerts"),
    )
    @_guarded("getCriticalAlerts", "get critical alerts")
    async def get_critical_alerts() -> str:
        return await operations.get_critical_alerts(client)

    @mcp.tool(
        name="getAlertingSummary",
        description="Get alerting summary: counts by severity, top alerts, affected namespaces.",
        annotations=_read_only("Alerts: Get Alerting Summary"),
    )
    @_guarded("getAlertingSummary", "get alerts")
    async def get_alerting_summary() -> str:
        return await operations.get_alerting_summary(client)

    # ── Silences ──────────────────────────────────────────────────

    @mcp.tool(
        name="getSilences",
        description="List silences. Filter by state: 'active', 'pending', 'expired', or omit for all.",
        annotations=_read_only("Silences: Get Silences"),
    )
    @_guarded("getSilences", "get silences")
    async def get_silences(
        state: Annotated[str, Field(description="State: 'active', 'pending', 'expired'")] = "",
    ) -> str:
        return await operations.get_silences(client, state)

    @mcp.tool(
        name="createSilence",
        description="Create a silence for an alert. Duration format: '30m', '2h', '1d'. Max 30 days.",
        annotations=ToolAnnotations(title="Silences: Create Silence", readOnlyHint=False, destructiveHint=False),
    )
    @_guarded("createSilence", "create silence")
    async def create_silence(
        alertName: Annotated[str, Field(description="Alert name to silence")],
        duration: Annotated[str, Field(description="Duration: '30m', '2h', '1d' (default: 2h)")] = "",
        comment: Annotated[str, Field(description="Reason for silence (default: 'Silenced via MCP')")] = "",
        createdBy: Annotated[str, Field(description="Creator name (default: 'mcp-alertmanager')")] = "",
    ) -> str:
        return await operations.create_silence(client, alertName, duration, comment, createdBy)

    @mcp.tool(
        name="deleteSilence",
        description="Delete a silence by ID. Get ID from getSilences output.",
        annotations=ToolAnnotations(title="Silences: Delete Silence", readOnlyHint=False, destructiveHint=True),
    )
    @_guarded("deleteSilence", "delete silence")
    async def delete_silence(
        silenceId: Annotated[str, Field(description="Silence UUID")],
    ) -> str:
        return await operations.delete_silence(client, silenceId)

    # ── Status ────────────────────────────────────────────────────

    @mcp.tool(
        name="getAlertmanagerStatus",
        description="Get Alertmanager server status: version, uptime, cluster info.",
        annotations=_read_only("Status: Get Alertmanager Status"),
    )
    @_guarded("getAlertmanagerStatus", "get status")
    async def get_alertmanager_status() -> str:
        return await operations.get_alertmanager_status(client)

    @mcp.tool(
        name="getReceivers",
        description="List configured notification receivers (Slack, email, PagerDuty, etc.).",
        annotations=_read_only("Status: Get Receivers"),
    )
    @_guarded("getReceivers", "get receivers")
    async def get_receivers() -> str:
        return await operations.get_receivers(client)

    # ── Troubleshooting ───────────────────────────────────────────

    @mcp.tool(
        name="investigateAlert",
        description="Investigate an alert: all instances, duration, labels, silences and inhibitions.",
        annotations=_read_only("Troubleshooting: Investigate Alert"),
    )
    @_guarded("investigateAlert", "get alerts")
    async def investigate_alert(alertName: AlertName) -> str:
        return await operations.investigate_alert(client, alertName)

    @mcp.tool(
        name="getAlertHistory",
        description=(
            "Get alert history for a specific alert. "
            "Shows current/recent instances and guidance for historical analysis."
        ),
        annotations=_read_only("Troubleshooting: Get Alert History"),
    )
    @_guarded("getAlertHistory", "get alerts")
    async def get_alert_history(alertName: AlertName) -> str:
        return await operations.get_alert_history(client, alertName)

    @mcp.tool(
        name="correlateAlerts",
        description=(
            "Find correlated alerts that share common labels (namespace, pod, node, service, job, instance). "
            "Helps identify related issues during incidents."
        ),
        annotations=_read_only("Troubleshooting: Correlate Alerts"),
    )
    @_guarded("correlateAlerts", "get alerts")
    async def correlate_alerts() -> str:
        return await operations.correlate_alerts(client)

    logger.info("Registered Alertmanager tools on %s", mcp.name)
