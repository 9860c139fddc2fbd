"""Limen Foundation Domain -- pure Python domain primitives.

This package provides the foundational domain building blocks for tenant
edge delivery: identifiers, exceptions, value objects and the port
interfaces implemented by infrastructure adapters.
"""

from limen.foundation.domain.delivery_value_objects import (
    AliasConflict,
    Distribution,
    DistributionStatus,
    DNSChange,
    DNSChangeAction,
    DNSRecord,
    DnsValidationReport,
    ResolutionDecision,
    ResolutionStrategy,
    TenantDistributionRecord,
)
from limen.foundation.domain.exceptions import (
    AliasRejectedError,
    DomainError,
    NotFoundError,
    ProviderError,
    ProvisioningError,
    ValidationError,
)
from limen.foundation.domain.identifiers import TenantId
from limen.foundation.domain.ports import (
    CDNControlPlanePort,
    DistributionRecordStorePort,
    DNSControlPlanePort,
)

__all__ = [
    "AliasConflict",
    "AliasRejectedError",
    "CDNControlPlanePort",
    "DNSChange",
    "DNSChangeAction",
    "DNSControlPlanePort",
    "DNSRecord",
    "Distribution",
    "DistributionRecordStorePort",
    "DistributionStatus",
    "DnsValidationReport",
    "DomainError",
    "NotFoundError",
    "ProviderError",
    "ProvisioningError",
    "ResolutionDecision",
    "ResolutionStrategy",
    "TenantDistributionRecord",
    "TenantId",
    "ValidationError",
]
