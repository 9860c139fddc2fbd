"""Delivery lifespan hook.

Priority 200 runs after persistence (75) so the record table can be
created on a healthy database. The hook is optional: if the table cannot be
created the API still starts and record store failures surface per request
as provider errors. DNS configuration problems are only logged, since DNS
automation degrades to a no-op.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from limen.foundation.application import LIFESPAN_PRIORITY_DELIVERY, LifespanContribution

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _delivery_lifespan(app: Any) -> AsyncIterator[None]:
    """Create the record table and report the DNS configuration.

    Args:
        app: The application instance (unused but required by protocol).
    """
    from limen.domain.delivery.wiring import get_delivery_services

    services = get_delivery_services()
    ensure_schema = getattr(services.records, "ensure_schema", None)
    if ensure_schema is not None:
        await asyncio.to_thread(ensure_schema)
        logger.info("delivery_record_schema_ready")

    if services.dns.enabled:
        report = await asyncio.to_thread(services.dns.validate_configuration)
        if report.valid:
            logger.info(
                "dns_configuration_valid",
                extra={"hosted_zone_id": report.hosted_zone_id, "domain": report.domain},
            )
        else:
            logger.warning(
                "dns_configuration_invalid",
                extra={"errors": list(report.errors), "warnings": list(report.warnings)},
            )

    yield


lifespan_contribution = LifespanContribution(
    hook=_delivery_lifespan,
    priority=LIFESPAN_PRIORITY_DELIVERY,
    name="delivery",
    required=False,
)
