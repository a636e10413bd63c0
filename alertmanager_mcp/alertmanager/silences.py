"""Silence construction: duration parsing and the exact-match alertname matcher."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from alertmanager_mcp.alertmanager.models import Matcher, PostableSilence
from alertmanager_mcp.errors import (
    DurationFormatError,
    DurationLimitError,
    DurationUnitError,
    DurationValueError,
)

MAX_SILENCE_DURATION = timedelta(days=30)
DEFAULT_DURATION = "2h"
DEFAULT_COMMENT = "Silenced via MCP"
DEFAULT_CREATOR = "mcp-alertmanager"

_UNITS = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


def parse_duration(token: str) -> timedelta:
    """Parse ``<integer><unit>`` where unit is m, h or d (e.g. ``30m``, ``2h``, ``1d``)."""
    token = token.strip()
    if len(token) < 2:
        raise DurationFormatError(f"invalid duration: {token!r} (expected e.g. 30m, 2h, 1d)")

    value, unit = token[:-1], token[-1]
    if not (value.isascii() and value.isdigit()):
        raise DurationValueError(f"invalid duration value: {token!r}")
    if unit not in _UNITS:
        raise DurationUnitError(f"unknown duration unit: {unit!r} (use m, h or d)")

    amount = int(value)
    if amount == 0:
        raise DurationValueError(f"duration must be positive: {token!r}")
    if amount * _UNITS[unit].total_seconds() > MAX_SILENCE_DURATION.total_seconds():
        raise DurationLimitError("Duration cannot exceed 30 days")
    return amount * _UNITS[unit]


def check_duration(duration: timedelta) -> timedelta:
    if duration > MAX_SILENCE_DURATION:
        raise DurationLimitError("Duration cannot exceed 30 days")
    return duration


def build_silence(
    alert_name: str,
    duration: str = DEFAULT_DURATION,
    comment: str = DEFAULT_COMMENT,
    created_by: str = DEFAULT_CREATOR,
    now: datetime | None = None,
) -> PostableSilence:
    """Silence every alert named ``alert_name`` from now for ``duration``."""
    length = check_duration(parse_duration(duration))
    start = now or datetime.now(timezone.utc)
    return PostableSilence(
        matchers=[Matcher(name="alertname", value=alert_name, is_regex=False, is_equal=True)],
        comment=comment,
        created_by=created_by,
        starts_at=start,
        ends_at=start + length,
    )
