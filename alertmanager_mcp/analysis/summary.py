"""Alerting summary: tallies by severity, alert name and namespace."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from alertmanager_mcp.alertmanager.models import Alert

TOP_ALERTS_LIMIT = 10


def _ranked(counts: Counter[str]) -> list[tuple[str, int]]:
    """Highest count first; equal counts in name order."""
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


@dataclass
class AlertSummary:
    total: int = 0
    by_severity: Counter[str] = field(default_factory=Counter)
    by_name: Counter[str] = field(default_factory=Counter)
    by_namespace: Counter[str] = field(default_factory=Counter)

    def top_alerts(self, limit: int = TOP_ALERTS_LIMIT) -> list[tuple[str, int]]:
        return _ranked(self.by_name)[:limit]

    def namespaces(self) -> list[tuple[str, int]]:
        return _ranked(self.by_namespace)


def summarize(alerts: list[Alert]) -> AlertSummary:
    summary = AlertSummary(total=len(alerts))
    for alert in alerts:
        summary.by_severity[alert.severity or "unknown"] += 1
        summary.by_name[alert.name] += 1
        namespace = alert.labels.get("namespace", "")
        if namespace:
            summary.by_namespace[namespace] += 1
    return summary


def render_summary(summary: AlertSummary) -> str:
    lines = [
        "=== Alerting Summary ===",
        f"Total Active Alerts: {summary.total}",
        "",
        "--- By Severity ---",
    ]
    lines += [f"  {severity}: {count}" for severity, count in _ranked(summary.by_severity)]

    lines += ["", "--- Top Alerts ---"]
    lines += [f"  {name}: {count} instances" for name, count in summary.top_alerts()]

    lines += ["", "--- Affected Namespaces ---"]
    lines += [f"  {namespace}: {count} alerts" for namespace, count in summary.namespaces()]

    return "\n".join(lines) + "\n"
