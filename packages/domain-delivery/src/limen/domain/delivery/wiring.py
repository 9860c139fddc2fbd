"""Composition root for the delivery services.

Provider clients are created once per process and injected into the
component instances built here. Tests build services from in-memory ports
with ``build_delivery_services``; the HTTP router and background tasks use
the process-wide ``get_delivery_services``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from limen.domain.delivery.conflict_resolver import ConflictResolver
from limen.domain.delivery.creation_strategies import DistributionCreator
from limen.domain.delivery.distribution_provisioner import DistributionProvisioner
from limen.domain.delivery.dns_orchestrator import DNSOrchestrator
from limen.domain.delivery.settings import get_delivery_settings

if TYPE_CHECKING:
    from limen.domain.delivery.infrastructure.record_repository import (
        DistributionRecordRepository,
    )
    from limen.domain.delivery.settings import DeliverySettings
    from limen.foundation.domain.ports import (
        CDNControlPlanePort,
        DistributionRecordStorePort,
        DNSControlPlanePort,
    )


@dataclass(frozen=True, slots=True)
class DeliveryServices:
    """The delivery components sharing one set of provider clients."""

    provisioner: DistributionProvisioner
    dns: DNSOrchestrator
    resolver: ConflictResolver
    records: DistributionRecordStorePort


def build_delivery_services(
    settings: DeliverySettings,
    *,
    cdn: CDNControlPlanePort,
    dns: DNSControlPlanePort,
    records: DistributionRecordStorePort,
) -> DeliveryServices:
    """Assemble the delivery components around the given ports."""
    orchestrator = DNSOrchestrator.from_settings(dns, settings)
    resolver = ConflictResolver(cdn)
    creator = DistributionCreator(
        cdn,
        orchestrator,
        origin_bucket=settings.origin_bucket,
        price_class=settings.price_class,
        certificate_arn=settings.certificate_arn,
    )
    provisioner = DistributionProvisioner(
        cdn=cdn,
        records=records,
        resolver=resolver,
        dns=orchestrator,
        creator=creator,
        custom_domain_enabled=settings.custom_domain_enabled,
        base_domain=settings.base_domain,
    )
    return DeliveryServices(
        provisioner=provisioner,
        dns=orchestrator,
        resolver=resolver,
        records=records,
    )


def _record_repository() -> DistributionRecordRepository:
    from limen.domain.delivery.infrastructure.record_repository import (
        DistributionRecordRepository,
    )
    from limen.infra.persistence import get_sync_session_factory

    return DistributionRecordRepository(get_sync_session_factory())


@lru_cache(maxsize=1)
def get_delivery_services() -> DeliveryServices:
    """Process-wide delivery services backed by boto3 and PostgreSQL.

    Clear cache with ``get_delivery_services.cache_clear()`` for testing.
    """
    from limen.infra.aws import (
        CloudFrontControlPlane,
        Route53ControlPlane,
        get_cloudfront_client,
        get_route53_client,
    )

    return build_delivery_services(
        get_delivery_settings(),
        cdn=CloudFrontControlPlane(get_cloudfront_client()),
        dns=Route53ControlPlane(get_route53_client()),
        records=_record_repository(),
    )
