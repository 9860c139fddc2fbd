"""Persistence lifespan hook for startup/shutdown resource management.

Handles:
- Database health check on startup (SELECT 1)
- Connection budget warning
- Engine disposal on shutdown

Priority 75 ensures persistence starts AFTER observability (50)
but BEFORE the task broker (150) and delivery services (200).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from limen.foundation.application import LIFESPAN_PRIORITY_PERSISTENCE, LifespanContribution
from limen.infra.persistence.database import get_database_manager

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

# 80% of PostgreSQL's default max_connections=100
CONNECTION_BUDGET_WARNING = 80


@asynccontextmanager
async def _persistence_lifespan(app: Any) -> AsyncIterator[None]:
    """Manage persistence resources across the application lifecycle.

    Startup:
        1. Execute ``SELECT 1`` health check on async engine.
        2. Warn when the combined pool budget is too large.

    Shutdown:
        Dispose database engines and connection pools.

    Args:
        app: The application instance (unused but required by protocol).
    """
    manager = get_database_manager()

    engine = manager.get_engine()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("persistence_lifespan: database health check passed")

    total_budget = manager.settings.connection_budget
    if total_budget > CONNECTION_BUDGET_WARNING:
        logger.warning(
            "persistence_lifespan: total connection budget %d exceeds %d. "
            "Consider tuning pool sizes.",
            total_budget,
            CONNECTION_BUDGET_WARNING,
        )
    else:
        logger.info("persistence_lifespan: total connection budget %d", total_budget)

    try:
        yield
    finally:
        await manager.dispose()
        logger.info("persistence_lifespan: database engines disposed")


lifespan_contribution = LifespanContribution(
    hook=_persistence_lifespan,
    priority=LIFESPAN_PRIORITY_PERSISTENCE,
)
