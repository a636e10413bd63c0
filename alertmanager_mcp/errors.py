"""Error taxonomy shared by the resolver, the client and the tool layer."""

from __future__ import annotations


class AlertmanagerMCPError(Exception):
    """Base class for every error this server raises on purpose."""


class ConfigurationError(AlertmanagerMCPError):
    """No usable Alertmanager connection. Fatal at startup."""

    def __init__(self, message: str, attempts: list[tuple[str, str]] | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts or []

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.attempts]


class NotApplicable(AlertmanagerMCPError):
    """A connection strategy's preconditions are not met."""


class StrategyFailed(AlertmanagerMCPError):
    """A connection strategy applied but could not build a connection."""


class TransportError(AlertmanagerMCPError):
    """Alertmanager could not be reached."""


class BackendAPIError(AlertmanagerMCPError):
    """Alertmanager answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"API returned status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ResponseDecodeError(AlertmanagerMCPError):
    """Alertmanager answered with a body that does not match the expected shape."""


class ValidationError(AlertmanagerMCPError):
    """Caller input rejected before reaching Alertmanager."""


class DurationFormatError(ValidationError):
    pass


class DurationValueError(ValidationError):
    pass


class DurationUnitError(ValidationError):
    pass


class DurationLimitError(ValidationError):
    pass
