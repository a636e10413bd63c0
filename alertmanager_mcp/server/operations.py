"""Tool operations: one coroutine per MCP tool, each returning the result text.

Arguments arrive as strings; an empty string means "not given". Errors are
raised as AlertmanagerMCPError subclasses and turned into error results by the
tool layer.
"""

from __future__ import annotations

from datetime import datetime

from alertmanager_mcp.alertmanager.client import AlertmanagerClient
from alertmanager_mcp.alertmanager.silences import (
    DEFAULT_COMMENT,
    DEFAULT_CREATOR,
    DEFAULT_DURATION,
    build_silence,
)
from alertmanager_mcp.analysis.correlator import correlate, render_correlation
from alertmanager_mcp.analysis.investigation import find_instances, render_history, render_investigation
from alertmanager_mcp.analysis.summary import render_summary, summarize
from alertmanager_mcp.errors import ValidationError

CRITICAL_FILTER = 'severity="critical"'


def _require(value: str, name: str) -> str:
    value = value.strip()
    if not value:
        raise ValidationError(f"{name} parameter is required")
    return value


async def get_alerts(
    client: AlertmanagerClient,
    active: str = "",
    silenced: str = "",
    inhibited: str = "",
    filter_label: str = "",
) -> str:
    return await client.get_alerts(active, silenced, inhibited, filter_label)


async def get_alert_groups(client: AlertmanagerClient) -> str:
    return await client.get_alert_groups()


async def get_critical_alerts(client: AlertmanagerClient) -> str:
    return await client.get_alerts(active="true", filter_label=CRITICAL_FILTER)


async def get_alerting_summary(client: AlertmanagerClient) -> str:
    alerts = await client.list_alerts(active="true")
    return render_summary(summarize(alerts))


async def get_silences(client: AlertmanagerClient, state: str = "") -> str:
    return await client.get_silences(state)


async def create_silence(
    client: AlertmanagerClient,
    alert_name: str,
    duration: str = "",
    comment: str = "",
    created_by: str = "",
    now: datetime | None = None,
) -> str:
    silence = build_silence(
        _require(alert_name, "alertName"),
        duration=duration or DEFAULT_DURATION,
        comment=comment or DEFAULT_COMMENT,
        created_by=created_by or DEFAULT_CREATOR,
        now=now,
    )
    result = await client.create_silence(silence)
    return f"Silence created successfully:\n{result}"


async def delete_silence(client: AlertmanagerClient, silence_id: str) -> str:
    silence_id = _require(silence_id, "silenceId")
    await client.delete_silence(silence_id)
    return f"Silence {silence_id} deleted successfully"


async def get_alertmanager_status(client: AlertmanagerClient) -> str:
    return await client.get_status()


async def get_receivers(client: AlertmanagerClient) -> str:
    return await client.get_receivers()


async def investigate_alert(client: AlertmanagerClient, alert_name: str, now: datetime | None = None) -> str:
    alert_name = _require(alert_name, "alertName")
    alerts = await client.list_alerts(active="true", silenced="true", inhibited="true")
    return render_investigation(alert_name, find_instances(alerts, alert_name, now))


async def get_alert_history(client: AlertmanagerClient, alert_name: str, now: datetime | None = None) -> str:
    alert_name = _require(alert_name, "alertName")
    alerts = await client.list_alerts(active="true", silenced="true", inhibited="true")
    return render_history(alert_name, find_instances(alerts, alert_name, now))


async def correlate_alerts(client: AlertmanagerClient) -> str:
    alerts = await client.list_alerts(active="true")
    return render_correlation(alerts, correlate(alerts))
