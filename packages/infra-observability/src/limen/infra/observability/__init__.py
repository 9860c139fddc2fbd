"""Limen Infra Observability — structlog logging and OpenTelemetry tracing."""

from limen.infra.observability.instrumentation import start_span, traced_operation
from limen.infra.observability.lifespan import lifespan_contribution
from limen.infra.observability.logging import (
    LoggingSettings,
    configure_logging,
    get_logger,
)
from limen.infra.observability.tracing import (
    TracingSettings,
    configure_tracing,
    shutdown_tracing,
)

__all__ = [
    "LoggingSettings",
    "TracingSettings",
    "configure_logging",
    "configure_tracing",
    "get_logger",
    "lifespan_contribution",
    "shutdown_tracing",
    "start_span",
    "traced_operation",
]
