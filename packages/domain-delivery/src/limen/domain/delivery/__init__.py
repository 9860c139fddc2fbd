"""Limen Domain Delivery — per-tenant CDN distributions, alias DNS and edge routing."""

from limen.domain.delivery.conflict_resolver import ConflictResolver
from limen.domain.delivery.creation_strategies import (
    MAX_CREATION_ATTEMPTS,
    CreationOutcome,
    CreationStrategyName,
    DistributionCreator,
    OutcomeKind,
)
from limen.domain.delivery.distribution_provisioner import DistributionProvisioner
from limen.domain.delivery.dns_orchestrator import DNSOrchestrator
from limen.domain.delivery.edge_router import (
    RoutingDecision,
    handle_viewer_request,
    route_request,
)
from limen.domain.delivery.settings import DeliverySettings, get_delivery_settings
from limen.domain.delivery.wiring import (
    DeliveryServices,
    build_delivery_services,
    get_delivery_services,
)

__all__ = [
    "MAX_CREATION_ATTEMPTS",
    "ConflictResolver",
    "CreationOutcome",
    "CreationStrategyName",
    "DNSOrchestrator",
    "DeliveryServices",
    "DeliverySettings",
    "DistributionCreator",
    "DistributionProvisioner",
    "OutcomeKind",
    "RoutingDecision",
    "build_delivery_services",
    "get_delivery_services",
    "get_delivery_settings",
    "handle_viewer_request",
    "route_request",
]
