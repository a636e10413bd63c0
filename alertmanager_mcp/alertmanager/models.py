"""Alertmanager v2 API records."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AlertState(str, Enum):
    ACTIVE = "active"
    SUPPRESSED = "suppressed"
    UNPROCESSED = "unprocessed"


class SilenceState(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Receiver(_APIModel):
    name: str


class AlertStatus(_APIModel):
    state: str = AlertState.UNPROCESSED.value
    silenced_by: list[str] = Field(alias="silencedBy", default=[])
    inhibited_by: list[str] = Field(alias="inhibitedBy", default=[])


class Alert(_APIModel):
    """One alert as returned by GET /api/v2/alerts. Never modified locally."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    fingerprint: str = ""
    labels: dict[str, str] = {}
    annotations: dict[str, str] = {}
    status: AlertStatus = Field(default_factory=AlertStatus)
    starts_at: datetime = Field(alias="startsAt")
    ends_at: datetime | None = Field(alias="endsAt", default=None)
    updated_at: datetime | None = Field(alias="updatedAt", default=None)
    generator_url: str = Field(alias="generatorURL", default="")
    receivers: list[Receiver] = []

    @property
    def name(self) -> str:
        return self.labels.get("alertname", "")

    @property
    def severity(self) -> str:
        return self.labels.get("severity", "")


class Matcher(_APIModel):
    name: str
    value: str
    is_regex: bool = Field(alias="isRegex", default=False)
    is_equal: bool = Field(alias="isEqual", default=True)


class PostableSilence(_APIModel):
    """Payload for POST /api/v2/silences. ``id`` stays empty for new silences."""

    id: str | None = None
    matchers: list[Matcher]
    comment: str
    created_by: str = Field(alias="createdBy")
    starts_at: datetime = Field(alias="startsAt")
    ends_at: datetime = Field(alias="endsAt")

    @model_validator(mode="after")
    def _ends_after_start(self) -> PostableSilence:
        if self.ends_at <= self.starts_at:
            raise ValueError("endsAt must be after startsAt")
        return self

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SilenceStatus(_APIModel):
    state: SilenceState


class Silence(PostableSilence):
    """A silence as stored by Alertmanager."""

    id: str
    status: SilenceStatus | None = None
    updated_at: datetime | None = Field(alias="updatedAt", default=None)
