"""Per-alert investigation and history views over an alert snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from alertmanager_mcp.alertmanager.models import Alert


@dataclass(frozen=True)
class AlertInstance:
    alert: Alert
    active_for: timedelta


def format_duration(duration: timedelta) -> str:
    """Compact duration, e.g. ``2h5m0s`` or ``45s``."""
    seconds = int(duration.total_seconds())
    sign = "-" if seconds < 0 else ""
    hours, rest = divmod(abs(seconds), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def find_instances(alerts: list[Alert], alert_name: str, now: datetime | None = None) -> list[AlertInstance]:
    """Alerts whose ``alertname`` label equals ``alert_name``, with whole-second active time."""
    now = now or datetime.now(timezone.utc)
    instances = []
    for alert in alerts:
        if alert.name != alert_name:
            continue
        elapsed = now - alert.starts_at
        instances.append(AlertInstance(alert, timedelta(seconds=int(elapsed.total_seconds()))))
    return instances


def _timestamp(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def render_investigation(alert_name: str, instances: list[AlertInstance]) -> str:
    lines = [f"=== Investigation: {alert_name} ===", ""]
    if not instances:
        lines.append("No instances found for this alert.")
        return "\n".join(lines) + "\n"

    lines += [f"Active Instances: {len(instances)}", ""]
    for i, instance in enumerate(instances, start=1):
        alert = instance.alert
        lines += [
            f"--- Instance {i} ---",
            f"  State: {alert.status.state}",
            f"  Started: {_timestamp(alert.starts_at)}",
            f"  Duration: {format_duration(instance.active_for)}",
            "  Labels:",
        ]
        lines += [f"    {k}: {v}" for k, v in sorted(alert.labels.items())]
        if alert.annotations:
            lines.append("  Annotations:")
            lines += [f"    {k}: {v}" for k, v in sorted(alert.annotations.items())]
        if alert.status.silenced_by:
            lines.append(f"  Silenced by: {', '.join(alert.status.silenced_by)}")
        if alert.status.inhibited_by:
            lines.append(f"  Inhibited by: {', '.join(alert.status.inhibited_by)}")
        lines.append("")
    return "\n".join(lines)


def render_history(alert_name: str, instances: list[AlertInstance]) -> str:
    """Current instances plus pointers to Prometheus, since Alertmanager keeps no history."""
    lines = [f"=== Alert History: {alert_name} ===", ""]
    if not instances:
        lines += ["No current instances found.", ""]
    else:
        lines += [f"Current Instances: {len(instances)}", ""]
        for i, instance in enumerate(instances, start=1):
            alert = instance.alert
            lines += [
                f"Instance {i}:",
                f"  State: {alert.status.state}",
                f"  Started: {_timestamp(alert.starts_at)}",
                f"  Duration: {format_duration(instance.active_for)}",
                f"  Severity: {alert.severity}",
            ]
            namespace = alert.labels.get("namespace", "")
            if namespace:
                lines.append(f"  Namespace: {namespace}")
            lines.append("")

    lines += [
        "--- Historical Analysis Guidance ---",
        "Alertmanager only stores current/active alerts.",
        "For historical alert data, query Prometheus with:",
        f'  ALERTS{{alertname="{alert_name}"}}',
        f'  ALERTS_FOR_STATE{{alertname="{alert_name}"}}',
    ]
    return "\n".join(lines) + "\n"
