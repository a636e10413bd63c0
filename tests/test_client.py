"""Tests for the Alertmanager HTTP client."""

from __future__ import annotations

import json

import httpx
import pytest

from alertmanager_mcp.alertmanager.client import format_json
from alertmanager_mcp.alertmanager.models import Silence
from alertmanager_mcp.alertmanager.silences import build_silence
from alertmanager_mcp.errors import BackendAPIError, ResponseDecodeError, TransportError
from tests.conftest import NOW, RecordingBackend, alerts_json, make_alert, make_client


class TestFormatJSON:
    def test_pretty_prints(self):
        assert format_json(b'{"a":[1,2]}') == '{\n  "a": [\n    1,\n    2\n  ]\n}'

    def test_non_json_passthrough(self):
        assert format_json(b"plain text body") == "plain text body"

    def test_keeps_unicode(self):
        assert format_json('{"comment":"café"}') == '{\n  "comment": "café"\n}'


class TestReads:
    @pytest.mark.asyncio
    async def test_get_alerts_query_params(self):
        backend = RecordingBackend({("GET", "/api/v2/alerts"): httpx.Response(200, json=[])})
        client = make_client(backend)

        result = await client.get_alerts(active="true", filter_label='severity="critical"')
        await client.close()

        assert result == "[]"
        params = backend.last.url.params
        assert params["active"] == "true"
        assert params["filter"] == 'severity="critical"'
        assert "silenced" not in params
        assert "inhibited" not in params

    @pytest.mark.asyncio
    async def test_no_params_when_unset(self):
        backend = RecordingBackend({("GET", "/api/v2/alerts"): httpx.Response(200, json=[])})
        client = make_client(backend)

        await client.get_alerts()
        await client.close()

        assert backend.last.url.query == b""

    @pytest.mark.asyncio
    async def test_silences_state_filter(self):
        backend = RecordingBackend({("GET", "/api/v2/silences"): httpx.Response(200, json=[])})
        client = make_client(backend)

        await client.get_silences("expired")
        await client.close()

        assert backend.last.url.params["state"] == "expired"

    @pytest.mark.asyncio
    async def test_status_and_receivers_are_pretty(self):
        backend = RecordingBackend({
            ("GET", "/api/v2/status"): httpx.Response(200, json={"versionInfo": {"version": "0.27.0"}}),
            ("GET", "/api/v2/receivers"): httpx.Response(200, json=[{"name": "slack"}]),
            ("GET", "/api/v2/alerts/groups"): httpx.Response(200, json=[]),
        })
        client = make_client(backend)

        status = await client.get_status()
        receivers = await client.get_receivers()
        groups = await client.get_alert_groups()
        await client.close()

        assert json.loads(status) == {"versionInfo": {"version": "0.27.0"}}
        assert '\n  "versionInfo"' in status
        assert json.loads(receivers) == [{"name": "slack"}]
        assert groups == "[]"

    @pytest.mark.asyncio
    async def test_non_json_body_returned_raw(self):
        backend = RecordingBackend({("GET", "/api/v2/status"): httpx.Response(200, text="OK")})
        client = make_client(backend)

        assert await client.get_status() == "OK"
        await client.close()

    @pytest.mark.asyncio
    async def test_list_alerts_decodes_records(self):
        alerts = [make_alert(name="A", severity="critical", namespace="prod")]
        backend = RecordingBackend({("GET", "/api/v2/alerts"): httpx.Response(200, json=alerts_json(alerts))})
        client = make_client(backend)

        decoded = await client.list_alerts(active="true", silenced="true", inhibited="true")
        await client.close()

        assert [a.name for a in decoded] == ["A"]
        assert decoded[0].labels["namespace"] == "prod"
        assert decoded[0].status.state == "active"
        assert dict(backend.last.url.params) == {"active": "true", "silenced": "true", "inhibited": "true"}

    @pytest.mark.asyncio
    async def test_list_alerts_bad_shape(self):
        backend = RecordingBackend({("GET", "/api/v2/alerts"): httpx.Response(200, json={"not": "a list"})})
        client = make_client(backend)

        with pytest.raises(ResponseDecodeError):
            await client.list_alerts()
        await client.close()


class TestErrors:
    @pytest.mark.asyncio
    async def test_non_success_status(self):
        backend = RecordingBackend({("GET", "/api/v2/alerts"): httpx.Response(503, text="upstream down")})
        client = make_client(backend)

        with pytest.raises(BackendAPIError) as excinfo:
            await client.get_alerts()
        await client.close()

        assert excinfo.value.status_code == 503
        assert excinfo.value.body == "upstream down"
        assert str(excinfo.value) == "API returned status 503: upstream down"

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(refuse)
        with pytest.raises(TransportError, match="connection refused"):
            await client.get_receivers()
        await client.close()


class TestSilences:
    @pytest.mark.asyncio
    async def test_create_round_trips_fields(self):
        def echo(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            return httpx.Response(200, json={**body, "id": "abc-123", "status": {"state": "active"}})

        client = make_client(echo)
        silence = build_silence("HighCPU", duration="1h", comment="deploy", created_by="ops", now=NOW)

        result = await client.create_silence(silence)
        await client.close()

        stored = Silence.model_validate_json(result)
        assert stored.id == "abc-123"
        assert stored.matchers == silence.matchers
        assert stored.comment == "deploy"
        assert stored.created_by == "ops"
        assert stored.ends_at == silence.ends_at

    @pytest.mark.asyncio
    async def test_create_posts_payload(self):
        backend = RecordingBackend({
            ("POST", "/api/v2/silences"): httpx.Response(200, json={"silenceID": "abc-123"}),
        })
        client = make_client(backend)

        result = await client.create_silence(build_silence("HighCPU", now=NOW))
        await client.close()

        sent = json.loads(backend.last.content)
        assert sent["matchers"][0]["name"] == "alertname"
        assert json.loads(result) == {"silenceID": "abc-123"}

    @pytest.mark.asyncio
    async def test_delete_path(self):
        backend = RecordingBackend({
            ("DELETE", "/api/v2/silence/abc-123"): httpx.Response(200),
        })
        client = make_client(backend)

        await client.delete_silence("abc-123")
        await client.close()

        assert backend.last.method == "DELETE"

    @pytest.mark.asyncio
    async def test_delete_failure_propagates(self):
        backend = RecordingBackend({
            ("DELETE", "/api/v2/silence/missing"): httpx.Response(404, text="silence not found"),
        })
        client = make_client(backend)

        with pytest.raises(BackendAPIError) as excinfo:
            await client.delete_silence("missing")
        await client.close()

        assert excinfo.value.status_code == 404
        assert "silence not found" in str(excinfo.value)
