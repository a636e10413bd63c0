"""Structured JSON logging, configured once from an explicit LoggingConfig."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Literal

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor

from alertmanager_mcp.telemetry.tracing import service_resource

ROOT_LOGGER = "alertmanager_mcp"

_JSON_FORMAT = (
    '{"timestamp":"%(asctime)s","level":"%(levelname)s",'
    '"logger":"%(name)s","message":"%(message)s",'
    '"trace_id":"%(trace_id)s","span_id":"%(span_id)s"}'
)

Destination = Literal["stdout", "stderr"]


class _TraceContextFormatter(logging.Formatter):
    """Adds the active span's trace and span ids; "0" outside a span."""

    def format(self, record: logging.LogRecord) -> str:
        context = trace.get_current_span().get_span_context()
        record.trace_id = format(context.trace_id, "032x") if context.is_valid else "0"
        record.span_id = format(context.span_id, "016x") if context.is_valid else "0"
        return super().format(record)


@dataclass(frozen=True)
class LoggingConfig:
    verbosity: int = 0
    destination: Destination | None = None
    otlp_endpoint: str = ""

    @classmethod
    def for_transport(cls, http_mode: bool, verbosity: int, otlp_endpoint: str = "") -> LoggingConfig:
        """stdio mode owns stdout for the protocol, so local log output is switched off."""
        return cls(
            verbosity=verbosity,
            destination="stdout" if http_mode else None,
            otlp_endpoint=otlp_endpoint,
        )

    @property
    def level(self) -> int:
        if self.verbosity >= 4:
            return logging.DEBUG
        if self.verbosity >= 1:
            return logging.INFO
        return logging.WARNING


def setup_logging(config: LoggingConfig) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(config.level)
    logger.propagate = False
    logger.handlers.clear()

    if config.destination is not None:
        stream = sys.stdout if config.destination == "stdout" else sys.stderr
        stream_handler = logging.StreamHandler(stream)
        stream_handler.setFormatter(_TraceContextFormatter(_JSON_FORMAT))
        logger.addHandler(stream_handler)

        logging.getLogger("uvicorn.access").handlers = [stream_handler]
        logging.getLogger("uvicorn.error").handlers = [stream_handler]

    if config.otlp_endpoint:
        log_provider = LoggerProvider(resource=service_resource())
        otlp_exporter = OTLPLogExporter(endpoint=config.otlp_endpoint, insecure=True)
        log_provider.add_log_record_processor(BatchLogRecordProcessor(otlp_exporter))
        logger.addHandler(LoggingHandler(level=config.level, logger_provider=log_provider))

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger
