"""Tests for the MCP tool surface, the tool operations and the HTTP app."""

from __future__ import annotations

import json
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from mcp.server.fastmcp.exceptions import ToolError
from prometheus_client import REGISTRY

from alertmanager_mcp.server import operations
from alertmanager_mcp.server.app import create_http_app, create_mcp_server
from alertmanager_mcp.errors import ValidationError
from tests.conftest import NOW, RecordingBackend, alerts_json, make_alert, make_client

TOOL_NAMES = {
    "getAlerts",
    "getAlertGroups",
    "getCriticalAlerts",
    "getAlertingSummary",
    "getSilences",
    "createSilence",
    "deleteSilence",
    "getAlertmanagerStatus",
    "getReceivers",
    "investigateAlert",
    "getAlertHistory",
    "correlateAlerts",
}


def text_of(result) -> str:
    """Text of a call_tool result, whether or not structured output came with it."""
    if isinstance(result, tuple):
        result = result[0]
    return "".join(block.text for block in result)


def tool_calls(tool: str, outcome: str) -> float:
    return REGISTRY.get_sample_value("mcp_tool_calls_total", {"tool": tool, "outcome": outcome}) or 0.0


def alerts_backend(alerts) -> RecordingBackend:
    return RecordingBackend({("GET", "/api/v2/alerts"): httpx.Response(200, json=alerts_json(alerts))})


# ═══════════════════════════════════════════════════════════════════════════
#  Registration
# ═══════════════════════════════════════════════════════════════════════════

class TestRegistration:
    @pytest.mark.asyncio
    async def test_all_tools_registered(self):
        mcp = create_mcp_server(make_client(RecordingBackend()))
        tools = await mcp.list_tools()
        assert {t.name for t in tools} == TOOL_NAMES

    @pytest.mark.asyncio
    async def test_annotations(self):
        mcp = create_mcp_server(make_client(RecordingBackend()))
        tools = {t.name: t for t in await mcp.list_tools()}

        for name in TOOL_NAMES - {"createSilence", "deleteSilence"}:
            assert tools[name].annotations.readOnlyHint is True, name

        create = tools["createSilence"].annotations
        assert create.readOnlyHint is False
        assert create.destructiveHint is False

        delete = tools["deleteSilence"].annotations
        assert delete.readOnlyHint is False
        assert delete.destructiveHint is True

    @pytest.mark.asyncio
    async def test_arguments_are_strings(self):
        mcp = create_mcp_server(make_client(RecordingBackend()))
        tools = {t.name: t for t in await mcp.list_tools()}

        schema = tools["createSilence"].inputSchema
        assert set(schema["properties"]) == {"alertName", "duration", "comment", "createdBy"}
        assert schema["required"] == ["alertName"]
        for prop in schema["properties"].values():
            assert prop["type"] == "string"

        assert set(tools["getAlerts"].inputSchema["properties"]) == {
            "active", "silenced", "inhibited", "filterLabel",
        }


# ═══════════════════════════════════════════════════════════════════════════
#  Calls through the MCP server
# ═══════════════════════════════════════════════════════════════════════════

class TestToolCalls:
    @pytest.mark.asyncio
    async def test_summary_tool(self):
        alerts = [
            make_alert(name="A", severity="critical"),
            make_alert(name="A", severity="critical"),
            make_alert(name="B", severity="warning"),
        ]
        backend = alerts_backend(alerts)
        mcp = create_mcp_server(make_client(backend))

        text = text_of(await mcp.call_tool("getAlertingSummary", {}))

        assert "Total Active Alerts: 3" in text
        assert "  critical: 2" in text
        assert backend.last.url.params["active"] == "true"

    @pytest.mark.asyncio
    async def test_backend_error_becomes_tool_error(self):
        backend = RecordingBackend({("GET", "/api/v2/receivers"): httpx.Response(500, text="boom")})
        mcp = create_mcp_server(make_client(backend))
        before = tool_calls("getReceivers", "error")

        with pytest.raises(ToolError, match="Failed to get receivers: API returned status 500: boom"):
            await mcp.call_tool("getReceivers", {})

        assert tool_calls("getReceivers", "error") == before + 1

    @pytest.mark.asyncio
    async def test_invalid_duration_never_reaches_backend(self):
        backend = RecordingBackend()
        mcp = create_mcp_server(make_client(backend))

        with pytest.raises(ToolError, match="unknown duration unit"):
            await mcp.call_tool("createSilence", {"alertName": "HighCPU", "duration": "5w"})

        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_oversized_duration_is_a_validation_error(self):
        backend = RecordingBackend()
        mcp = create_mcp_server(make_client(backend))
        before = tool_calls("createSilence", "invalid")

        with pytest.raises(ToolError, match="Duration cannot exceed 30 days"):
            await mcp.call_tool("createSilence", {"alertName": "HighCPU", "duration": "9999999999d"})

        assert backend.requests == []
        assert tool_calls("createSilence", "invalid") == before + 1

    @pytest.mark.asyncio
    async def test_missing_alert_name(self):
        mcp = create_mcp_server(make_client(RecordingBackend()))

        with pytest.raises(ToolError, match="alertName parameter is required"):
            await mcp.call_tool("investigateAlert", {"alertName": "  "})

    @pytest.mark.asyncio
    async def test_success_counted(self):
        backend = RecordingBackend({("GET", "/api/v2/status"): httpx.Response(200, json={"uptime": "x"})})
        mcp = create_mcp_server(make_client(backend))
        before = tool_calls("getAlertmanagerStatus", "success")

        text = text_of(await mcp.call_tool("getAlertmanagerStatus", {}))

        assert json.loads(text) == {"uptime": "x"}
        assert tool_calls("getAlertmanagerStatus", "success") == before + 1


# ═══════════════════════════════════════════════════════════════════════════
#  Operations
# ═══════════════════════════════════════════════════════════════════════════

class TestOperations:
    @pytest.mark.asyncio
    async def test_critical_alerts_filter(self):
        backend = RecordingBackend({("GET", "/api/v2/alerts"): httpx.Response(200, json=[])})
        client = make_client(backend)

        await operations.get_critical_alerts(client)
        await client.close()

        assert backend.last.url.params["active"] == "true"
        assert backend.last.url.params["filter"] == 'severity="critical"'

    @pytest.mark.asyncio
    async def test_create_silence_defaults(self):
        def echo(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=request.content)

        client = make_client(echo)
        text = await operations.create_silence(client, "HighCPU", now=NOW)
        await client.close()

        assert text.startswith("Silence created successfully:\n")
        sent = json.loads(text.split("\n", 1)[1])
        assert sent["comment"] == "Silenced via MCP"
        assert sent["createdBy"] == "mcp-alertmanager"
        assert sent["matchers"] == [{"name": "alertname", "value": "HighCPU", "isRegex": False, "isEqual": True}]

    @pytest.mark.asyncio
    async def test_delete_silence_message(self):
        backend = RecordingBackend({("DELETE", "/api/v2/silence/abc"): httpx.Response(200)})
        client = make_client(backend)

        assert await operations.delete_silence(client, "abc") == "Silence abc deleted successfully"
        await client.close()

    @pytest.mark.asyncio
    async def test_delete_requires_id(self):
        client = make_client(RecordingBackend())
        with pytest.raises(ValidationError, match="silenceId parameter is required"):
            await operations.delete_silence(client, "")
        await client.close()

    @pytest.mark.asyncio
    async def test_investigate_queries_all_states(self):
        alerts = [make_alert(name="HighCPU", started=NOW - timedelta(minutes=5))]
        backend = alerts_backend(alerts)
        client = make_client(backend)

        text = await operations.investigate_alert(client, "HighCPU", now=NOW)
        await client.close()

        assert "Duration: 5m0s" in text
        assert dict(backend.last.url.params) == {"active": "true", "silenced": "true", "inhibited": "true"}

    @pytest.mark.asyncio
    async def test_investigate_no_instances_is_normal(self):
        client = make_client(alerts_backend([]))
        text = await operations.investigate_alert(client, "Ghost", now=NOW)
        await client.close()

        assert "No instances found for this alert." in text

    @pytest.mark.asyncio
    async def test_correlate(self):
        alerts = [
            make_alert(name="A", labels={"namespace": "x"}),
            make_alert(name="B", labels={"namespace": "x"}),
        ]
        client = make_client(alerts_backend(alerts))
        text = await operations.correlate_alerts(client)
        await client.close()

        assert "--- namespace=x (2 alerts) ---" in text

    @pytest.mark.asyncio
    async def test_history(self):
        client = make_client(alerts_backend([]))
        text = await operations.get_alert_history(client, "DiskFull", now=NOW)
        await client.close()

        assert text.startswith("=== Alert History: DiskFull ===")


# ═══════════════════════════════════════════════════════════════════════════
#  HTTP mode
# ═══════════════════════════════════════════════════════════════════════════

class TestHTTPApp:
    def test_health_and_metrics(self):
        client = make_client(RecordingBackend())
        app = create_http_app(create_mcp_server(client), client)
        http = TestClient(app)

        health = http.get("/health")
        assert health.status_code == 200
        assert health.json()["status"] == "healthy"
        assert health.json()["alertmanager"] == "http://alertmanager.test:9093"

        metrics = http.get("/metrics")
        assert metrics.status_code == 200
        assert "mcp_tool_calls_total" in metrics.text
