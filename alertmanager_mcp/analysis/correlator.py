"""Alert correlation: group alerts that share a namespace, pod, node, service, job or instance."""

from __future__ import annotations

from dataclasses import dataclass, field

from alertmanager_mcp.alertmanager.models import Alert

CORRELATION_LABELS = ("namespace", "pod", "node", "service", "job", "instance")


@dataclass
class CorrelationGroup:
    label: str
    value: str
    alerts: list[Alert] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.label}={self.value}"

    def __len__(self) -> int:
        return len(self.alerts)


def correlate(
    alerts: list[Alert],
    labels: tuple[str, ...] = CORRELATION_LABELS,
    min_size: int = 2,
) -> list[CorrelationGroup]:
    """Group alerts by each correlation label they carry.

    An alert joins one group per label it has, so it can show up in several
    groups. Groups smaller than ``min_size`` are dropped; the rest are ordered
    largest first, then by key.
    """
    groups: dict[tuple[str, str], CorrelationGroup] = {}
    for alert in alerts:
        for label in labels:
            value = alert.labels.get(label, "")
            if not value:
                continue
            group = groups.setdefault((label, value), CorrelationGroup(label, value))
            group.alerts.append(alert)

    correlated = [g for g in groups.values() if len(g) >= min_size]
    correlated.sort(key=lambda g: (-len(g), g.key))
    return correlated


def render_correlation(alerts: list[Alert], groups: list[CorrelationGroup]) -> str:
    if not alerts:
        return "No active alerts to correlate.\n"

    lines = ["=== Alert Correlation ===", f"Total Active Alerts: {len(alerts)}", ""]
    if not groups:
        lines.append("No correlated alerts found (no shared labels between alerts).")
        return "\n".join(lines) + "\n"

    for group in groups:
        lines.append(f"--- {group.key} ({len(group)} alerts) ---")
        for alert in group.alerts:
            lines.append(f"  - {alert.name} [{alert.severity}] ({alert.status.state})")
        lines.append("")
    return "\n".join(lines)
