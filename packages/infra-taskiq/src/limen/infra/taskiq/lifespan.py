"""TaskIQ lifespan hook for broker startup/shutdown.

Runs after persistence so that tasks enqueued during startup can rely on
the database.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from limen.foundation.application import LIFESPAN_PRIORITY_TASKIQ, LifespanContribution
from limen.infra.taskiq.broker import get_broker
from limen.infra.taskiq.errors import TaskIQBrokerError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _taskiq_lifespan(app: Any) -> AsyncIterator[None]:
    """Start the broker on startup and shut it down on exit.

    Raises:
        TaskIQBrokerError: If the broker cannot start.
    """
    _broker = get_broker()
    try:
        await _broker.startup()
    except Exception as exc:
        logger.exception("taskiq_broker_startup_failed")
        raise TaskIQBrokerError(f"TaskIQ broker failed to start: {exc}") from exc
    logger.info("taskiq_broker_started")

    try:
        yield
    finally:
        await _broker.shutdown()
        logger.info("taskiq_broker_shut_down")


lifespan_contribution = LifespanContribution(
    hook=_taskiq_lifespan,
    priority=LIFESPAN_PRIORITY_TASKIQ,
)
