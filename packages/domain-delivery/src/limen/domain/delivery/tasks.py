"""Background jobs for tenant distribution provisioning.

The delivery services block on boto3 calls, so every task runs them in a
worker thread. Tasks are safe to redeliver: provisioning is idempotent and
teardown is best-effort.

Run a worker with::

    taskiq worker limen.infra.taskiq.broker:broker limen.domain.delivery.tasks
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from limen.domain.delivery.settings import get_delivery_settings
from limen.domain.delivery.wiring import get_delivery_services
from limen.foundation.domain.identifiers import TenantId
from limen.infra.taskiq import TaskIQSerializationError, broker

logger = logging.getLogger(__name__)


def _tenant(tenant_id: str) -> str:
    """Validate a tenant id taken from a task message."""
    try:
        return TenantId(tenant_id).value
    except (TypeError, ValueError) as exc:
        raise TaskIQSerializationError(f"Invalid tenant id in task message: {exc}") from exc


@broker.task(task_name="delivery.provision_tenant_distribution")
async def provision_tenant_distribution(tenant_id: str) -> dict[str, Any]:
    """Get or create the tenant's distribution and return its summary."""
    tenant = _tenant(tenant_id)
    services = get_delivery_services()
    record = await asyncio.to_thread(services.provisioner.get_or_create, tenant)
    logger.info(
        "provision_task_completed",
        extra={"tenant_id": tenant, "distribution_id": record.distribution_id},
    )
    return record.to_summary()


@broker.task(task_name="delivery.invalidate_tenant_cache")
async def invalidate_tenant_cache(tenant_id: str, build_id: str | None = None) -> str | None:
    """Invalidate cached deployment paths after a deploy."""
    tenant = _tenant(tenant_id)
    services = get_delivery_services()
    return await asyncio.to_thread(services.provisioner.invalidate_cache, tenant, build_id)


@broker.task(task_name="delivery.teardown_tenant_distribution")
async def teardown_tenant_distribution(tenant_id: str, *, purge: bool = False) -> bool:
    """Disable the tenant's distribution, or delete it for good when ``purge``.

    A purge only succeeds once the distribution is disabled and deployed;
    until then it returns False and the message can be retried later.
    """
    tenant = _tenant(tenant_id)
    services = get_delivery_services()
    operation = services.provisioner.purge if purge else services.provisioner.delete
    done = await asyncio.to_thread(operation, tenant)
    logger.info(
        "teardown_task_completed", extra={"tenant_id": tenant, "purge": purge, "done": done}
    )
    return done


@broker.task(task_name="delivery.wait_for_dns_propagation")
async def wait_for_dns_propagation(
    change_ref: str, timeout_seconds: float | None = None
) -> bool:
    """Block until a DNS change is INSYNC or the timeout expires."""
    if not isinstance(change_ref, str) or not change_ref:
        raise TaskIQSerializationError("DNS change reference must be a non-empty string")
    timeout = (
        timeout_seconds
        if timeout_seconds is not None
        else get_delivery_settings().propagation_timeout
    )
    services = get_delivery_services()
    return await asyncio.to_thread(services.dns.wait_for_propagation, change_ref, timeout)
