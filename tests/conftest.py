"""Shared fixtures for mcp-alertmanager tests."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from alertmanager_mcp.alertmanager.client import AlertmanagerClient
from alertmanager_mcp.alertmanager.models import Alert
from alertmanager_mcp.config import Settings
from alertmanager_mcp.connection.transport import Connection

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

# ── Helper: create Alert with sensible defaults ─────────────────────────


def make_alert(
    *,
    name: str = "KubePodCrashLooping",
    severity: str | None = "warning",
    namespace: str | None = None,
    labels: dict[str, str] | None = None,
    annotations: dict[str, str] | None = None,
    state: str = "active",
    silenced_by: list[str] | None = None,
    inhibited_by: list[str] | None = None,
    started: datetime | None = None,
    fingerprint: str = "",
) -> Alert:
    all_labels = {"alertname": name}
    if severity is not None:
        all_labels["severity"] = severity
    if namespace is not None:
        all_labels["namespace"] = namespace
    all_labels.update(labels or {})
    return Alert(
        fingerprint=fingerprint or f"fp-{name}-{len(all_labels)}",
        labels=all_labels,
        annotations=annotations or {},
        status={
            "state": state,
            "silencedBy": silenced_by or [],
            "inhibitedBy": inhibited_by or [],
        },
        startsAt=started or NOW - timedelta(hours=1),
    )


def alerts_json(alerts: list[Alert]) -> list[dict]:
    """Wire form of alerts, as Alertmanager would return them."""
    return [json.loads(a.model_dump_json(by_alias=True)) for a in alerts]


def make_client(handler) -> AlertmanagerClient:
    """Client whose requests are answered by ``handler(request) -> httpx.Response``."""
    connection = Connection(
        base_url="http://alertmanager.test:9093",
        method="url",
        transport=httpx.MockTransport(handler),
    )
    return AlertmanagerClient(connection, timeout=5.0)


class RecordingBackend:
    """Canned Alertmanager that records every request it receives."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response] | None = None) -> None:
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, text=f"no route for {request.method} {request.url.path}")
        return self.routes[key]

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings isolated from any ALERTMANAGER_* variables in the environment."""
    for name in Settings.model_fields:
        monkeypatch.delenv(f"ALERTMANAGER_{name.upper()}", raising=False)
    return Settings()
