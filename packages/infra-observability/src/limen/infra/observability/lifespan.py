"""Observability lifespan hook.

Priority 50 starts before persistence so the database probe and the record
table creation are already traced. Tracing is optional: a collector that
cannot be reached must not stop tenants from being provisioned.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from limen.foundation.application.contributions import (
    LIFESPAN_PRIORITY_OBSERVABILITY,
    LifespanContribution,
)
from limen.infra.observability.logging import configure_logging
from limen.infra.observability.tracing import configure_tracing, shutdown_tracing

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _observability_lifespan(app: Any) -> AsyncIterator[None]:
    """Configure structlog, then OpenTelemetry; flush spans on shutdown."""
    configure_logging()
    try:
        configure_tracing(app)
    except Exception:
        logger.exception("tracing_configuration_failed")
        shutdown_tracing()
        raise
    try:
        yield
    finally:
        shutdown_tracing()


lifespan_contribution = LifespanContribution(
    hook=_observability_lifespan,
    priority=LIFESPAN_PRIORITY_OBSERVABILITY,
    name="observability",
    required=False,
)
