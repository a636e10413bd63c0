"""Alertmanager client: talks to the Alertmanager v2 HTTP API over the resolved transport."""

from __future__ import annotations

import json
import logging
import time
from urllib.parse import quote

import httpx
import pydantic
from opentelemetry import trace

from alertmanager_mcp.alertmanager.models import Alert, PostableSilence
from alertmanager_mcp.connection.transport import Connection
from alertmanager_mcp.errors import BackendAPIError, ResponseDecodeError, TransportError
from alertmanager_mcp.telemetry.metrics import backend_request_duration

logger = logging.getLogger("alertmanager_mcp.client")
tracer = trace.get_tracer(__name__)

DEFAULT_TIMEOUT = 30.0

_alert_list = pydantic.TypeAdapter(list[Alert])


def format_json(body: bytes | str) -> str:
    """Pretty-print a JSON body; return it unchanged if it isn't JSON."""
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except ValueError:
        return text


def _filter_params(**filters: str) -> dict[str, str]:
    return {key: value for key, value in filters.items() if value}


class AlertmanagerClient:
    def __init__(self, connection: Connection, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = connection.base_url
        self._http = httpx.AsyncClient(
            base_url=connection.base_url,
            transport=connection.transport,
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        payload: dict | None = None,
        endpoint: str | None = None,
    ) -> httpx.Response:
        endpoint = endpoint or path
        start = time.perf_counter()
        with tracer.start_as_current_span(f"alertmanager.{method}") as span:
            span.set_attribute("http.route", endpoint)
            try:
                resp = await self._http.request(method, path, params=params or None, json=payload)
            except httpx.HTTPError as exc:
                backend_request_duration.labels(method=method, endpoint=endpoint, status_code="error").observe(
                    time.perf_counter() - start
                )
                logger.warning("Alertmanager %s %s failed: %s", method, path, exc)
                raise TransportError(f"request failed: {exc}") from exc

            span.set_attribute("http.status_code", resp.status_code)

        backend_request_duration.labels(method=method, endpoint=endpoint, status_code=str(resp.status_code)).observe(
            time.perf_counter() - start
        )
        if not resp.is_success:
            logger.warning("Alertmanager %s %s returned %d", method, path, resp.status_code)
            raise BackendAPIError(resp.status_code, resp.text)
        return resp

    async def get_alerts(
        self,
        active: str = "",
        silenced: str = "",
        inhibited: str = "",
        filter_label: str = "",
    ) -> str:
        """Alerts, pretty-printed. Flags are passed through as ``true``/``false`` strings."""
        params = _filter_params(active=active, silenced=silenced, inhibited=inhibited, filter=filter_label)
        resp = await self._request("GET", "/api/v2/alerts", params=params)
        return format_json(resp.content)

    async def list_alerts(self, active: str = "", silenced: str = "", inhibited: str = "") -> list[Alert]:
        """Alerts decoded into records, for aggregation."""
        params = _filter_params(active=active, silenced=silenced, inhibited=inhibited)
        resp = await self._request("GET", "/api/v2/alerts", params=params)
        try:
            return _alert_list.validate_json(resp.content)
        except pydantic.ValidationError as exc:
            raise ResponseDecodeError(f"parsing alerts: {exc}") from exc

    async def get_alert_groups(self) -> str:
        resp = await self._request("GET", "/api/v2/alerts/groups")
        return format_json(resp.content)

    async def get_silences(self, state: str = "") -> str:
        resp = await self._request("GET", "/api/v2/silences", params=_filter_params(state=state))
        return format_json(resp.content)

    async def create_silence(self, silence: PostableSilence) -> str:
        resp = await self._request("POST", "/api/v2/silences", payload=silence.to_payload())
        return format_json(resp.content)

    async def delete_silence(self, silence_id: str) -> None:
        await self._request(
            "DELETE", f"/api/v2/silence/{quote(silence_id, safe='')}", endpoint="/api/v2/silence/{id}",
        )

    async def get_status(self) -> str:
        resp = await self._request("GET", "/api/v2/status")
        return format_json(resp.content)

    async def get_receivers(self) -> str:
        resp = await self._request("GET", "/api/v2/receivers")
        return format_json(resp.content)
